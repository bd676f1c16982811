# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Runtime settings for workspace analysis and change tracking."""

from dataclasses import dataclass, field
from pathlib import Path

DEFAULT_STORAGE_KEY: str = "docdrift-changes"
STATE_DIR_NAME: str = ".docdrift"
DEFAULT_DB_FILENAME: str = "changes.sqlite"

DEFAULT_EXCLUDED_DIRS: frozenset[str] = frozenset(
    {
        "node_modules",
        ".git",
        ".venv",
        "venv",
        "__pycache__",
        "dist",
        "build",
        "vendor",
        "target",
        STATE_DIR_NAME,
    }
)


@dataclass(frozen=True)
class AnalysisSettings:
    """Describe tunables for one analysis session.

    Attributes:
        excluded_dirs: Directory names never descended into.
        respect_gitignore: Whether ``.gitignore`` patterns exclude paths.
        docs_dir: Secondary documentation directory, relative to the root.
        doc_comment_window: Lines scanned above a construct for doc comments.
        min_doc_length: Documentation shorter than this is considered stale.
    """

    excluded_dirs: frozenset[str] = field(default=DEFAULT_EXCLUDED_DIRS)
    respect_gitignore: bool = True
    docs_dir: str = "docs"
    doc_comment_window: int = 10
    min_doc_length: int = 50

    def __post_init__(self) -> None:
        if self.doc_comment_window <= 0:
            raise ValueError("doc_comment_window must be > 0")
        if self.min_doc_length < 0:
            raise ValueError("min_doc_length must be >= 0")
        if not self.docs_dir.strip() or Path(self.docs_dir).is_absolute():
            raise ValueError("docs_dir must be a non-empty relative path")


def default_db_path(root_path: Path) -> Path:
    """Return the default change database location for a workspace root."""
    return root_path / STATE_DIR_NAME / DEFAULT_DB_FILENAME
