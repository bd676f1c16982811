# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Extension-based file classification."""

from pathlib import PurePosixPath

from docdrift.model import FileCategory

CODE_EXTENSIONS: frozenset[str] = frozenset(
    {
        ".ts",
        ".tsx",
        ".js",
        ".jsx",
        ".py",
        ".java",
        ".go",
        ".rs",
        ".cs",
        ".php",
        ".rb",
        ".swift",
        ".kt",
    }
)
DOC_EXTENSIONS: frozenset[str] = frozenset({".md", ".txt", ".rst", ".adoc"})
CONFIG_EXTENSIONS: frozenset[str] = frozenset(
    {".json", ".yaml", ".yml", ".toml", ".ini", ".cfg", ".conf", ".env", ".xml"}
)
ASSET_EXTENSIONS: frozenset[str] = frozenset(
    {
        ".png",
        ".jpg",
        ".jpeg",
        ".gif",
        ".svg",
        ".ico",
        ".webp",
        ".css",
        ".scss",
        ".woff",
        ".woff2",
        ".ttf",
        ".mp3",
        ".mp4",
        ".pdf",
    }
)

_LANGUAGE_BY_EXTENSION: dict[str, str] = {
    ".ts": "typescript",
    ".tsx": "typescript",
    ".js": "javascript",
    ".jsx": "javascript",
    ".py": "python",
    ".java": "java",
    ".go": "go",
    ".rs": "rust",
    ".cs": "csharp",
    ".php": "php",
    ".rb": "ruby",
    ".swift": "swift",
    ".kt": "kotlin",
}


def file_extension(file_path: str) -> str:
    """Return the lower-cased extension of a path, including the dot."""
    return PurePosixPath(file_path).suffix.lower()


def classify_file(file_path: str) -> FileCategory:
    """Assign a category to a file from its extension.

    Args:
        file_path: Workspace-relative or absolute file path.

    Returns:
        The file category; ``other`` when the extension is unknown or absent.
    """
    extension = file_extension(file_path)
    if extension in CODE_EXTENSIONS:
        return "code"
    if extension in DOC_EXTENSIONS:
        return "documentation"
    if extension in CONFIG_EXTENSIONS:
        return "configuration"
    if extension in ASSET_EXTENSIONS:
        return "asset"
    return "other"


def language_for(file_path: str) -> str | None:
    """Return the detector language hint for a code file, if any."""
    return _LANGUAGE_BY_EXTENSION.get(file_extension(file_path))
