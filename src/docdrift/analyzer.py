# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Workspace analysis orchestration."""

import logging
from pathlib import Path

from docdrift.classifier import classify_file, file_extension, language_for
from docdrift.config import AnalysisSettings
from docdrift.detector import scan_source
from docdrift.domains import DomainClusterer
from docdrift.errors import UnreadableSourceFileError
from docdrift.model import (
    CODE_ITEM_KINDS,
    FILE_CATEGORIES,
    PRIORITIES,
    AnalyzerError,
    CodeItem,
    ProjectStructure,
    WorkspaceAnalysis,
)
from docdrift.profiler import ProjectProfiler
from docdrift.tasks import DocTaskGenerator
from docdrift.workspace import list_workspace_files, resolve_workspace_root

logger = logging.getLogger(__name__)


def compute_coverage(doc_files: int, total_files: int) -> int:
    """Return documentation files as a percentage of all files.

    Halves round up, so 1 of 8 files reports 13.
    """
    if total_files <= 0:
        return 0
    return (200 * doc_files + total_files) // (2 * total_files)


def empty_analysis() -> WorkspaceAnalysis:
    """Return the zero-valued analysis used for an empty workspace."""
    return WorkspaceAnalysis(
        project_structure=ProjectStructure(
            framework="Unknown",
            architecture="Monolithic",
            has_frontend=False,
            has_backend=False,
            has_database=False,
            has_tests=False,
            domains=[],
            total_files=0,
            code_files=0,
            doc_files=0,
            coverage=0,
        ),
        code_items=[],
        missing_docs=[],
        by_priority={priority: [] for priority in PRIORITIES},
        by_type={kind: [] for kind in CODE_ITEM_KINDS},
        file_types={category: 0 for category in FILE_CATEGORIES},
        extensions={},
        doc_tasks=[],
        errors=[],
        total_files=0,
        doc_files=0,
        code_files=0,
        doc_coverage=0,
    )


def read_source(root_path: Path, relative_path: str) -> str:
    """Read one workspace file as UTF-8 text.

    Raises:
        UnreadableSourceFileError: If the file cannot be read or decoded.
    """
    try:
        return (root_path / relative_path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise UnreadableSourceFileError(relative_path, str(exc)) from exc


class WorkspaceAnalyzer:
    """Scan a workspace and build a documentation analysis snapshot."""

    def __init__(self, settings: AnalysisSettings | None = None) -> None:
        """Initialize the analyzer and its collaborators.

        Args:
            settings: Analysis settings; defaults apply when omitted.
        """
        self._settings = settings or AnalysisSettings()
        self._clusterer = DomainClusterer()
        self._profiler = ProjectProfiler()
        self._task_generator = DocTaskGenerator(self._settings)

    def analyze(self, root_path: Path | str | None) -> WorkspaceAnalysis:
        """Analyze every file beneath a workspace root.

        Files are processed sequentially. Unreadable code files are skipped
        and reported in ``errors``.

        Args:
            root_path: Workspace root directory, or ``None`` if none is open.

        Returns:
            The analysis snapshot.

        Raises:
            NoWorkspaceError: If the root is missing or not a directory.
        """
        root = resolve_workspace_root(root_path)
        files = list_workspace_files(root, self._settings)
        if not files:
            logger.info(f"Workspace is empty (path={root})")
            return empty_analysis()

        file_types = {category: 0 for category in FILE_CATEGORIES}
        extensions: dict[str, int] = {}
        code_files: list[str] = []
        for file_path in files:
            category = classify_file(file_path)
            file_types[category] += 1
            extension = file_extension(file_path).lstrip(".")
            if extension:
                extensions[extension] = extensions.get(extension, 0) + 1
            if category == "code":
                code_files.append(file_path)

        items_by_file: dict[str, list[CodeItem]] = {}
        contents: dict[str, str] = {}
        errors: list[AnalyzerError] = []
        for file_path in code_files:
            try:
                text = read_source(root, file_path)
            except UnreadableSourceFileError as exc:
                logger.warning(
                    f"Skipping file due to read failure (file_path={file_path} error={exc})"
                )
                errors.append(AnalyzerError(file_path=file_path, message=str(exc)))
                continue
            contents[file_path] = text
            items_by_file[file_path] = scan_source(
                file_path,
                text,
                language_for(file_path),
                doc_window=self._settings.doc_comment_window,
            )

        code_items = [item for path in code_files for item in items_by_file.get(path, [])]
        domains = self._clusterer.cluster(code_files, items_by_file)
        profile = self._profiler.profile(files, contents)
        doc_tasks = self._task_generator.generate(root, domains)

        total_files = len(files)
        doc_files = file_types["documentation"]
        coverage = compute_coverage(doc_files, total_files)
        logger.info(
            f"Workspace analysis completed (path={root} files={total_files} "
            f"items={len(code_items)} tasks={len(doc_tasks)} errors={len(errors)})"
        )
        return WorkspaceAnalysis(
            project_structure=ProjectStructure(
                framework=profile.framework,
                architecture=profile.architecture,
                has_frontend=profile.has_frontend,
                has_backend=profile.has_backend,
                has_database=profile.has_database,
                has_tests=profile.has_tests,
                domains=domains,
                total_files=total_files,
                code_files=len(code_files),
                doc_files=doc_files,
                coverage=coverage,
            ),
            code_items=code_items,
            missing_docs=[item for item in code_items if not item.has_documentation],
            by_priority={
                priority: [item for item in code_items if item.priority == priority]
                for priority in PRIORITIES
            },
            by_type={
                kind: [item for item in code_items if item.kind == kind]
                for kind in CODE_ITEM_KINDS
            },
            file_types=file_types,
            extensions=extensions,
            doc_tasks=doc_tasks,
            errors=errors,
            total_files=total_files,
            doc_files=doc_files,
            code_files=len(code_files),
            doc_coverage=coverage,
        )
