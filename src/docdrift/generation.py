# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Batch generation of missing documentation with cooperative cancellation."""

import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Callable

from docdrift.domains import domain_name_for
from docdrift.llm_client import DocumentationDrafter, DraftGenerationError
from docdrift.model import DocTask, WorkspaceAnalysis
from docdrift.tasks import domain_doc_name
from docdrift.tracker import ChangeTracker

logger = logging.getLogger(__name__)

_MINUTES_BY_PRIORITY: dict[str, int] = {"high": 5, "medium": 3, "low": 2}
_HEADINGS: dict[str, str] = {
    "readme": "Project Overview",
    "api": "API Documentation",
    "architecture": "Architecture",
    "setup": "Setup Guide",
    "changelog": "Changelog",
    "contributing": "Contributing",
}


class CancellationToken:
    """Carry pause and cancel requests into a long-running batch.

    The batch checks the token between files, so a file is either fully
    written and tracked or not started when a request takes effect.
    """

    def __init__(self, poll_interval: float = 0.1) -> None:
        if poll_interval <= 0:
            raise ValueError("poll_interval must be > 0")
        self._poll_interval = poll_interval
        self._cancelled = threading.Event()
        self._paused = threading.Event()

    @property
    def is_cancelled(self) -> bool:
        return self._cancelled.is_set()

    @property
    def is_paused(self) -> bool:
        return self._paused.is_set()

    def pause(self) -> None:
        self._paused.set()

    def resume(self) -> None:
        self._paused.clear()

    def cancel(self) -> None:
        self._cancelled.set()

    def reset(self) -> None:
        """Clear pause and cancel requests before a new batch."""
        self._cancelled.clear()
        self._paused.clear()

    def wait_if_paused(self) -> None:
        """Sleep in short intervals while paused and not cancelled."""
        while self._paused.is_set() and not self._cancelled.is_set():
            time.sleep(self._poll_interval)


@dataclass(frozen=True)
class BatchProgress:
    """Represent the state after one batch step."""

    completed: int
    total: int
    file_path: str
    success: bool
    message: str


@dataclass
class BatchResult:
    """Represent the outcome of one documentation batch."""

    planned: list[str] = field(default_factory=list)
    generated: list[str] = field(default_factory=list)
    change_ids: list[str] = field(default_factory=list)
    failed: dict[str, str] = field(default_factory=dict)
    cancelled: bool = False

    @property
    def success(self) -> bool:
        return not self.failed and not self.cancelled


def estimate_time(tasks: list[DocTask]) -> str:
    """Estimate authoring time: 5, 3 and 2 minutes per high, medium, low task."""
    total_minutes = sum(_MINUTES_BY_PRIORITY[task.priority] for task in tasks)
    if total_minutes < 60:
        return f"{total_minutes} minutes"
    hours, minutes = divmod(total_minutes, 60)
    return f"{hours}h {minutes}m" if minutes else f"{hours}h"


def build_document_request(
    task: DocTask, analysis: WorkspaceAnalysis, project_name: str
) -> tuple[str, list[str]]:
    """Build the drafting prompt and context chunks for one task.

    Args:
        task: Documentation task to draft.
        analysis: Analysis the task was derived from.
        project_name: Display name of the project.

    Returns:
        The prompt and its context chunks.
    """
    structure = analysis.project_structure
    heading = _HEADINGS.get(task.doc_type, task.file_path)
    if task.doc_type == "readme":
        heading = project_name
    context: list[str] = []
    if task.doc_type == "domain":
        domain = next(
            (d for d in structure.domains if task.file_path.endswith(domain_doc_name(d.name))),
            None,
        )
        if domain is not None:
            heading = f"{domain.name} Domain"
            context.append(domain.description)
            context.extend(f"File: {path}" for path in domain.files)
            context.extend(
                f"{item.kind} {item.name} ({item.file_path}:{item.line_number})"
                for item in domain.endpoints + domain.classes + domain.functions
            )
    elif task.doc_type == "api":
        context.extend(
            f"{item.name} [{domain_name_for(item.file_path)}] "
            f"({item.file_path}:{item.line_number}): {item.signature}"
            for item in analysis.by_type.get("api-route", [])
        )
    elif task.doc_type in {"readme", "architecture"}:
        context.extend(f"{d.name}: {d.description}" for d in structure.domains)
    if task.doc_type in {"readme", "architecture", "setup", "contributing"}:
        context.append(
            f"Framework: {structure.framework}; architecture: {structure.architecture}; "
            f"frontend={structure.has_frontend} backend={structure.has_backend} "
            f"database={structure.has_database} tests={structure.has_tests}"
        )
    prompt = "\n".join([heading, task.description, f"Target file: {task.file_path}"])
    return prompt, context


class DocumentationBatch:
    """Generate missing documentation files one at a time."""

    def __init__(self, tracker: ChangeTracker, drafter: DocumentationDrafter) -> None:
        """Initialize the batch runner.

        Args:
            tracker: Change tracker that writes and records each file.
            drafter: Provider producing document text.
        """
        self._tracker = tracker
        self._drafter = drafter

    def generate_missing(
        self,
        analysis: WorkspaceAnalysis,
        project_name: str,
        token: CancellationToken | None = None,
        on_progress: Callable[[BatchProgress], None] | None = None,
    ) -> BatchResult:
        """Draft, write and track every ``missing`` task of an analysis.

        A failure drafting or writing one file is recorded and the batch
        moves on. Cancellation stops before the next file; files already
        written stay on disk with their change records.

        Args:
            analysis: Analysis holding the documentation tasks.
            project_name: Display name of the project.
            token: Optional pause/cancel token checked between files.
            on_progress: Optional callback invoked after each file.

        Returns:
            Batch outcome.
        """
        tasks = [task for task in analysis.doc_tasks if task.type == "missing"]
        result = BatchResult(planned=[task.file_path for task in tasks])
        logger.info(
            f"Documentation batch started (files={len(tasks)} "
            f"estimated_time={estimate_time(tasks)})"
        )
        for index, task in enumerate(tasks, start=1):
            if token is not None:
                token.wait_if_paused()
                if token.is_cancelled:
                    result.cancelled = True
                    logger.info(
                        f"Documentation batch cancelled (completed={index - 1} total={len(tasks)})"
                    )
                    break
            success, message = self._generate_one(task, analysis, project_name, result)
            self._log_progress(
                completed=index, total=len(tasks), failed=len(result.failed)
            )
            if on_progress is not None:
                on_progress(
                    BatchProgress(
                        completed=index,
                        total=len(tasks),
                        file_path=task.file_path,
                        success=success,
                        message=message,
                    )
                )
        return result

    def _generate_one(
        self,
        task: DocTask,
        analysis: WorkspaceAnalysis,
        project_name: str,
        result: BatchResult,
    ) -> tuple[bool, str]:
        prompt, context = build_document_request(task, analysis, project_name)
        try:
            content = self._drafter.draft(prompt, context)
        except DraftGenerationError as exc:
            logger.warning(
                f"Documentation drafting failed (file_path={task.file_path} error={exc})"
            )
            result.failed[task.file_path] = str(exc)
            return False, f"Failed to draft {task.file_path}: {exc}"
        outcome = self._tracker.write_document(
            task.file_path,
            content,
            doc_type=task.doc_type,
            metadata={"task_title": task.title},
        )
        if not outcome:
            result.failed[task.file_path] = outcome.message
            return False, outcome.message
        result.generated.append(task.file_path)
        if outcome.change_id is not None:
            result.change_ids.append(outcome.change_id)
        return True, outcome.message

    def _log_progress(self, completed: int, total: int, failed: int) -> None:
        percent = 100.0 if total == 0 else (completed / total) * 100.0
        logger.info(
            "documentation_batch_progress completed=%s total=%s failed=%s percent=%.2f",
            completed,
            total,
            failed,
            percent,
        )
