# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Documentation task generation from the expected-artifact catalog."""

import logging
from dataclasses import dataclass
from pathlib import Path

from docdrift.config import AnalysisSettings
from docdrift.model import PRIORITIES, DocTask, Priority, ProjectDomain

logger = logging.getLogger(__name__)

_STALE_MARKERS: tuple[str, ...] = ("todo", "fixme", "xxx")
_PLACEHOLDER_MARKERS: tuple[str, ...] = ("placeholder", "coming soon", "tbd")


@dataclass(frozen=True)
class CatalogEntry:
    """Describe one expected documentation artifact."""

    name: str
    doc_type: str
    priority: Priority
    description: str
    in_root: bool


DOC_CATALOG: tuple[CatalogEntry, ...] = (
    CatalogEntry(
        name="README.md",
        doc_type="readme",
        priority="high",
        description="Project overview, setup instructions, and getting started guide",
        in_root=True,
    ),
    CatalogEntry(
        name="API.md",
        doc_type="api",
        priority="high",
        description="API documentation with endpoints, parameters, and examples",
        in_root=False,
    ),
    CatalogEntry(
        name="ARCHITECTURE.md",
        doc_type="architecture",
        priority="medium",
        description="System architecture, components, and design decisions",
        in_root=False,
    ),
    CatalogEntry(
        name="SETUP.md",
        doc_type="setup",
        priority="medium",
        description="Development environment setup and configuration",
        in_root=False,
    ),
    CatalogEntry(
        name="CHANGELOG.md",
        doc_type="changelog",
        priority="low",
        description="Version history and release notes",
        in_root=True,
    ),
    CatalogEntry(
        name="CONTRIBUTING.md",
        doc_type="contributing",
        priority="low",
        description="Guidelines for contributing to the project",
        in_root=False,
    ),
)

_API_KEYWORDS: tuple[str, ...] = ("endpoint", "api", "documentation")
_README_KEYWORDS: tuple[str, ...] = ("installation", "setup", "overview")


def domain_doc_name(domain_name: str) -> str:
    """Return the documentation file name for a domain."""
    return f"{domain_name.upper().replace(' ', '_')}.md"


def is_documentation_outdated(
    content: str, doc_name: str, min_length: int = 50
) -> bool:
    """Guess whether an existing document is stale.

    The checks run in a fixed order and the first decisive one wins: marker
    words, placeholder phrases, very short content, then per-document keyword
    requirements for README.md and API.md. Content that passes those checks is
    never reported as outdated, whatever its length or keywords.

    Args:
        content: Document text.
        doc_name: Document file name, e.g. ``README.md``.
        min_length: Stripped content shorter than this is stale.

    Returns:
        True when the document looks outdated.
    """
    lowered = content.lower()
    if any(marker in lowered for marker in _STALE_MARKERS):
        return True
    if any(marker in lowered for marker in _PLACEHOLDER_MARKERS):
        return True
    if len(content.strip()) < min_length:
        return True
    if doc_name == "README.md" and not any(
        keyword in lowered for keyword in _README_KEYWORDS
    ):
        return True
    if doc_name == "API.md" and not any(
        keyword in lowered for keyword in _API_KEYWORDS
    ):
        return True
    return False


class DocTaskGenerator:
    """Compare the expected-artifact catalog against files on disk."""

    def __init__(self, settings: AnalysisSettings | None = None) -> None:
        self._settings = settings or AnalysisSettings()

    def catalog_path(self, entry: CatalogEntry) -> str:
        """Return the workspace-relative path of a catalog entry."""
        if entry.in_root:
            return entry.name
        return f"{self._settings.docs_dir}/{entry.name}"

    def generate(self, root_path: Path, domains: list[ProjectDomain]) -> list[DocTask]:
        """Build a priority-ranked task list.

        Args:
            root_path: Workspace root directory.
            domains: Domains from the current analysis.

        Returns:
            Tasks ordered high, medium, low; catalog order within a priority.
        """
        tasks: list[DocTask] = []
        for entry in DOC_CATALOG:
            task = self._check(
                root_path=root_path,
                relative_path=self.catalog_path(entry),
                doc_name=entry.name,
                doc_type=entry.doc_type,
                description=entry.description,
                priority=entry.priority,
            )
            if task is not None:
                tasks.append(task)

        for domain in domains:
            if domain.priority != "high":
                continue
            doc_name = domain_doc_name(domain.name)
            task = self._check(
                root_path=root_path,
                relative_path=f"{self._settings.docs_dir}/{doc_name}",
                doc_name=doc_name,
                doc_type="domain",
                description=(
                    f"Documentation for {domain.name} domain with "
                    f"{len(domain.files)} files"
                ),
                priority="medium",
            )
            if task is not None:
                tasks.append(task)

        return sorted(tasks, key=lambda task: PRIORITIES.index(task.priority))

    def _check(
        self,
        root_path: Path,
        relative_path: str,
        doc_name: str,
        doc_type: str,
        description: str,
        priority: Priority,
    ) -> DocTask | None:
        target = root_path / relative_path
        if not target.is_file():
            logger.debug(f"Expected document is missing (file_path={relative_path})")
            return DocTask(
                type="missing",
                title=f"Create {doc_name}",
                description=description,
                priority=priority,
                suggested_action=f"Generate {doc_name}",
                file_path=relative_path,
                doc_type=doc_type,
            )
        try:
            content = target.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning(
                f"Skipping staleness check for unreadable document "
                f"(file_path={relative_path} error={exc})"
            )
            return None
        if not is_documentation_outdated(
            content, doc_name, min_length=self._settings.min_doc_length
        ):
            return None
        return DocTask(
            type="outdated",
            title=f"Update {doc_name}",
            description=f"{description} - Content appears outdated",
            priority=priority,
            suggested_action=f"Update {doc_name}",
            file_path=relative_path,
            doc_type=doc_type,
        )
