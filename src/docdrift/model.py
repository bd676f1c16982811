# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Domain models for workspace analysis artifacts."""

from dataclasses import dataclass, field
from typing import Literal

Priority = Literal["high", "medium", "low"]
CodeItemKind = Literal[
    "function", "class", "interface", "api-route", "config", "component"
]
DomainType = Literal["api", "service", "component", "utility", "config"]
FileCategory = Literal["code", "documentation", "configuration", "asset", "other"]
DocTaskType = Literal["missing", "outdated"]

PRIORITIES: tuple[Priority, ...] = ("high", "medium", "low")
CODE_ITEM_KINDS: tuple[CodeItemKind, ...] = (
    "function",
    "class",
    "interface",
    "api-route",
    "config",
    "component",
)
FILE_CATEGORIES: tuple[FileCategory, ...] = (
    "code",
    "documentation",
    "configuration",
    "asset",
    "other",
)


@dataclass(frozen=True)
class Parameter:
    """Represent one parameter parsed from a declaration line."""

    name: str
    type: str | None = None


@dataclass(frozen=True)
class CodeItem:
    """Represent one detected construct.

    Attributes:
        kind: Construct kind.
        name: Construct name; ``"VERB /path"`` for API routes.
        file_path: Workspace-relative POSIX path of the originating file.
        line_number: 1-based line of the declaration.
        signature: Stripped declaration line.
        priority: Documentation priority.
        has_documentation: Whether a doc comment precedes the declaration.
        suggested_doc_path: Suggested documentation file for this construct.
        parameters: Parameters parsed from the signature, when any.
        return_type: Return annotation parsed from the signature, when any.
    """

    kind: CodeItemKind
    name: str
    file_path: str
    line_number: int
    signature: str
    priority: Priority
    has_documentation: bool
    suggested_doc_path: str
    parameters: tuple[Parameter, ...] = ()
    return_type: str | None = None


@dataclass
class ProjectDomain:
    """Represent a cluster of code files sharing a path keyword."""

    name: str
    type: DomainType
    description: str
    priority: Priority
    files: list[str] = field(default_factory=list)
    endpoints: list[CodeItem] = field(default_factory=list)
    classes: list[CodeItem] = field(default_factory=list)
    functions: list[CodeItem] = field(default_factory=list)


@dataclass(frozen=True)
class ProjectProfile:
    """Represent framework, architecture and layer guesses for a file set."""

    framework: str = "Unknown"
    architecture: str = "Monolithic"
    has_frontend: bool = False
    has_backend: bool = False
    has_database: bool = False
    has_tests: bool = False


@dataclass(frozen=True)
class ProjectStructure:
    """Represent the aggregate project profile for one analysis."""

    framework: str
    architecture: str
    has_frontend: bool
    has_backend: bool
    has_database: bool
    has_tests: bool
    domains: list[ProjectDomain]
    total_files: int
    code_files: int
    doc_files: int
    coverage: int


@dataclass(frozen=True)
class DocTask:
    """Represent one documentation work item.

    Attributes:
        type: ``missing`` when the file is absent, ``outdated`` when stale.
        title: Short human title, e.g. ``Create README.md``.
        description: What the document should cover.
        priority: Task priority.
        suggested_action: Action label for the caller.
        file_path: Workspace-relative target path of the document.
        doc_type: Catalog kind (readme, api, architecture, setup, changelog,
            contributing, domain).
    """

    type: DocTaskType
    title: str
    description: str
    priority: Priority
    suggested_action: str
    file_path: str
    doc_type: str


@dataclass(frozen=True)
class AnalyzerError:
    """Represent an unreadable file skipped during a scan."""

    file_path: str
    message: str


@dataclass(frozen=True)
class WorkspaceAnalysis:
    """Represent one complete workspace analysis snapshot."""

    project_structure: ProjectStructure
    code_items: list[CodeItem]
    missing_docs: list[CodeItem]
    by_priority: dict[str, list[CodeItem]]
    by_type: dict[str, list[CodeItem]]
    file_types: dict[str, int]
    extensions: dict[str, int]
    doc_tasks: list[DocTask]
    errors: list[AnalyzerError]
    total_files: int
    doc_files: int
    code_files: int
    doc_coverage: int

    @property
    def domains(self) -> list[ProjectDomain]:
        """Return the domains of the project structure."""
        return self.project_structure.domains
