# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Workspace file enumeration with vendor and ignore-file exclusion."""

import logging
import os
from collections import deque
from pathlib import Path

import pathspec

from docdrift.config import AnalysisSettings
from docdrift.errors import NoWorkspaceError

logger = logging.getLogger(__name__)


class IgnoreMatcher:
    """Match workspace paths against .gitignore patterns."""

    def __init__(self, spec: pathspec.GitIgnoreSpec) -> None:
        """Initialize matcher.

        Args:
            spec: Compiled gitignore matcher.
        """
        self._spec = spec

    @classmethod
    def empty(cls) -> "IgnoreMatcher":
        """Build a matcher that ignores nothing."""
        return cls(spec=pathspec.GitIgnoreSpec.from_lines([]))

    @classmethod
    def from_workspace_root(
        cls, root_path: Path, excluded_dirs: frozenset[str] = frozenset()
    ) -> "IgnoreMatcher":
        """Build matcher from root and nested .gitignore files.

        Unreadable ignore files are skipped with a warning.

        Args:
            root_path: Workspace root.
            excluded_dirs: Directory names whose ignore files are not collected.

        Returns:
            Configured ignore matcher.
        """
        patterns: list[str] = []
        for ignore_path in sorted(root_path.rglob(".gitignore")):
            relative_parent = ignore_path.parent.relative_to(root_path)
            if any(part in excluded_dirs for part in relative_parent.parts):
                continue
            base = relative_parent.as_posix()
            if base == ".":
                base = ""
            try:
                lines = ignore_path.read_text(encoding="utf-8").splitlines()
            except (OSError, UnicodeDecodeError) as exc:
                logger.warning(
                    f"Skipping unreadable ignore file (file_path={ignore_path} error={exc})"
                )
                continue
            for line in lines:
                patterns.append(_translate_gitignore_line(line=line, base=base))
        return cls(spec=pathspec.GitIgnoreSpec.from_lines(patterns))

    def matches(self, relative_path: str, is_dir: bool) -> bool:
        """Check whether a path should be ignored.

        Args:
            relative_path: Workspace-relative POSIX path.
            is_dir: Whether the path is a directory.

        Returns:
            True when path should be ignored.
        """
        normalized = relative_path.replace(os.sep, "/").strip("/")
        if not normalized:
            return False
        if self._spec.match_file(normalized):
            return True
        if is_dir and self._spec.match_file(f"{normalized}/"):
            return True
        return False


def resolve_workspace_root(root_path: Path | str | None) -> Path:
    """Validate a workspace root.

    Args:
        root_path: Candidate root directory, or ``None`` if none is open.

    Returns:
        The absolute root path.

    Raises:
        NoWorkspaceError: If no root is given or it is not a directory.
    """
    if root_path is None:
        raise NoWorkspaceError("No workspace folder is open.")
    resolved = Path(root_path).resolve()
    if not resolved.is_dir():
        raise NoWorkspaceError(f"Workspace folder does not exist: {resolved}")
    return resolved


def list_workspace_files(root_path: Path, settings: AnalysisSettings) -> list[str]:
    """Enumerate workspace files as sorted root-relative POSIX paths.

    Directories named in ``settings.excluded_dirs`` are never entered, and
    ``.gitignore`` patterns are honoured when enabled. Symbolic links are not
    followed.

    Args:
        root_path: Workspace root directory.
        settings: Analysis settings.

    Returns:
        Relative file paths.
    """
    matcher = (
        IgnoreMatcher.from_workspace_root(root_path, settings.excluded_dirs)
        if settings.respect_gitignore
        else IgnoreMatcher.empty()
    )
    files: list[str] = []
    queue: deque[Path] = deque([root_path])
    while queue:
        current = queue.popleft()
        try:
            children = sorted(current.iterdir(), key=lambda item: item.name)
        except OSError as exc:
            logger.warning(f"Skipping unreadable directory (path={current} error={exc})")
            continue
        for child in children:
            relative_text = child.relative_to(root_path).as_posix()
            if child.is_symlink():
                continue
            is_dir = child.is_dir()
            if is_dir and child.name in settings.excluded_dirs:
                continue
            if matcher.matches(relative_path=relative_text, is_dir=is_dir):
                continue
            if is_dir:
                queue.append(child)
            elif child.is_file():
                files.append(relative_text)
    return sorted(files)


def _translate_gitignore_line(line: str, base: str) -> str:
    """Translate one .gitignore line to a root-relative pattern.

    Args:
        line: Original .gitignore line.
        base: Parent directory relative to the workspace root.

    Returns:
        Root-relative pattern line.
    """
    if not base:
        return line
    if not line:
        return line
    if line.lstrip().startswith("#"):
        return line
    if line.startswith(r"\!") or line.startswith(r"\#"):
        return line
    is_negation = line.startswith("!")
    pattern = line[1:] if is_negation else line
    anchored = pattern.startswith("/")
    normalized_pattern = pattern[1:] if anchored else pattern
    prefixed = f"{base}/{normalized_pattern}" if normalized_pattern else base
    if anchored:
        prefixed = f"/{prefixed}"
    if is_negation:
        return f"!{prefixed}"
    return prefixed
