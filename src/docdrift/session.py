# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Per-session context that owns the engines and dispatches messages."""

import logging
from dataclasses import asdict
from pathlib import Path
from typing import Any, Callable, Mapping

from docdrift.analyzer import WorkspaceAnalyzer
from docdrift.changes import ActivityEntry, ChangeRecordStore, ChangeResult
from docdrift.config import DEFAULT_STORAGE_KEY, AnalysisSettings, default_db_path
from docdrift.database import SQLiteKeyValueStore
from docdrift.errors import NoWorkspaceError
from docdrift.generation import (
    BatchProgress,
    CancellationToken,
    DocumentationBatch,
    estimate_time,
)
from docdrift.llm import StubDrafter
from docdrift.llm_client import DocumentationDrafter
from docdrift.messages import (
    AnalyzeWorkspace,
    ApplyChange,
    CancelGeneration,
    ClearAllChanges,
    Command,
    FilterChanges,
    GenerateMissingDocs,
    GetActivities,
    GetChangeStats,
    InboundMessage,
    PauseGeneration,
    Response,
    ResumeGeneration,
    RevertChange,
    ViewDiff,
    parse_message,
)
from docdrift.model import WorkspaceAnalysis
from docdrift.persistence import KeyValueStore
from docdrift.tracker import ChangeTracker
from docdrift.workspace import resolve_workspace_root

logger = logging.getLogger(__name__)


def analysis_payload(analysis: WorkspaceAnalysis) -> dict[str, Any]:
    """Convert an analysis snapshot into a JSON-serializable mapping."""
    return asdict(analysis)


def activity_payload(entry: ActivityEntry) -> dict[str, Any]:
    """Convert an activity entry into a JSON-serializable mapping."""
    return {
        "id": entry.id,
        "type": entry.type,
        "status": entry.status,
        "title": entry.title,
        "when": entry.when,
        "desc": entry.desc,
        "change_record": entry.change_record.to_dict(),
    }


class Session:
    """Bundle the engines and state of one interactive session.

    A session is driven by one caller at a time. Only the pause and cancel
    requests may arrive from another thread while a batch is running.
    """

    def __init__(
        self,
        root_path: Path | None,
        store: ChangeRecordStore,
        drafter: DocumentationDrafter | None = None,
        settings: AnalysisSettings | None = None,
        on_progress: Callable[[BatchProgress], None] | None = None,
    ) -> None:
        """Initialize the session.

        Args:
            root_path: Workspace root, or ``None`` when no workspace is open.
            store: Change record store shared by all operations.
            drafter: Documentation provider; an offline stub when omitted.
            settings: Analysis settings; defaults apply when omitted.
            on_progress: Optional callback for batch progress.
        """
        self.root_path = root_path
        self.settings = settings or AnalysisSettings()
        self.store = store
        self.tracker = ChangeTracker(store, root_path)
        self.analyzer = WorkspaceAnalyzer(self.settings)
        self.drafter = drafter or StubDrafter()
        self.batch = DocumentationBatch(self.tracker, self.drafter)
        self.token = CancellationToken()
        self.last_analysis: WorkspaceAnalysis | None = None
        self._on_progress = on_progress

    @classmethod
    def open(
        cls,
        root_path: Path | str,
        db_path: Path | None = None,
        drafter: DocumentationDrafter | None = None,
        settings: AnalysisSettings | None = None,
        storage: KeyValueStore | None = None,
        storage_key: str = DEFAULT_STORAGE_KEY,
        on_progress: Callable[[BatchProgress], None] | None = None,
    ) -> "Session":
        """Open a session for a workspace backed by SQLite storage.

        Args:
            root_path: Workspace root directory.
            db_path: Change database path; defaults under the workspace root.
            drafter: Documentation provider.
            settings: Analysis settings.
            storage: Explicit key/value backend, overriding ``db_path``.
            storage_key: Key under which the change list is stored.
            on_progress: Optional callback for batch progress.

        Returns:
            Ready session.

        Raises:
            NoWorkspaceError: If the root is missing or not a directory.
        """
        root = resolve_workspace_root(root_path)
        backend = storage or SQLiteKeyValueStore(db_path or default_db_path(root))
        store = ChangeRecordStore(backend, storage_key=storage_key)
        logger.info(f"Session opened (path={root} changes={len(store.records)})")
        return cls(
            root_path=root,
            store=store,
            drafter=drafter,
            settings=settings,
            on_progress=on_progress,
        )

    def dispatch(self, raw: Mapping[str, Any]) -> Response:
        """Parse a raw message and handle it.

        Raises:
            UnknownCommandError: If the command tag is unrecognized.
            MessageValidationError: If a required field is missing or invalid.
        """
        return self.handle(parse_message(raw))

    def handle(self, message: InboundMessage) -> Response:
        """Run one inbound message and build its reply.

        Args:
            message: Typed inbound message.

        Returns:
            Outbound reply; failures are reported, never raised.
        """
        if isinstance(message, AnalyzeWorkspace):
            return self._analyze()
        if isinstance(message, GenerateMissingDocs):
            return self._generate()
        if isinstance(message, ApplyChange):
            return _from_result(message.command, self.tracker.apply_change(message.change_id))
        if isinstance(message, RevertChange):
            return _from_result(message.command, self.tracker.revert_change(message.change_id))
        if isinstance(message, ViewDiff):
            return _from_result(message.command, self.tracker.view_diff(message.change_id))
        if isinstance(message, GetActivities):
            activities = self.tracker.get_activities()
            return Response(
                command=message.command,
                success=True,
                message=f"{len(activities)} changes",
                payload={"activities": [activity_payload(entry) for entry in activities]},
            )
        if isinstance(message, FilterChanges):
            records = self.tracker.filter_changes(
                status=message.status,  # type: ignore[arg-type]
                origin=message.origin,  # type: ignore[arg-type]
                change_type=message.change_type,  # type: ignore[arg-type]
            )
            return Response(
                command=message.command,
                success=True,
                message=f"{len(records)} matching changes",
                payload={"changes": [record.to_dict() for record in records]},
            )
        if isinstance(message, GetChangeStats):
            return Response(
                command=message.command,
                success=True,
                message="Change statistics",
                payload=asdict(self.tracker.get_change_stats()),
            )
        if isinstance(message, ClearAllChanges):
            return _from_result(message.command, self.tracker.clear_all_changes())
        if isinstance(message, PauseGeneration):
            self.token.pause()
            return Response(command=message.command, success=True, message="Generation paused")
        if isinstance(message, ResumeGeneration):
            self.token.resume()
            return Response(command=message.command, success=True, message="Generation resumed")
        if isinstance(message, CancelGeneration):
            self.token.cancel()
            return Response(
                command=message.command, success=True, message="Generation cancelled"
            )
        raise TypeError(f"Unhandled message type: {type(message).__name__}")

    def _analyze(self) -> Response:
        try:
            analysis = self.analyzer.analyze(self.root_path)
        except NoWorkspaceError as exc:
            logger.warning(f"Analysis aborted (error={exc})")
            return Response(
                command=Command.ANALYZE_WORKSPACE,
                success=False,
                message=f"No workspace folder found: {exc}",
            )
        self.last_analysis = analysis
        return Response(
            command=Command.ANALYZE_WORKSPACE,
            success=True,
            message=(
                f"Analyzed {analysis.total_files} files "
                f"({analysis.doc_coverage}% documentation coverage)"
            ),
            payload=analysis_payload(analysis),
        )

    def _generate(self) -> Response:
        if self.root_path is None:
            logger.warning("Generation aborted (error=no workspace root)")
            return Response(
                command=Command.GENERATE_MISSING_DOCS,
                success=False,
                message="No workspace folder found",
            )
        analysis = self.last_analysis
        if analysis is None:
            try:
                analysis = self.analyzer.analyze(self.root_path)
            except NoWorkspaceError as exc:
                logger.warning(f"Generation aborted (error={exc})")
                return Response(
                    command=Command.GENERATE_MISSING_DOCS,
                    success=False,
                    message=f"No workspace folder found: {exc}",
                )
            self.last_analysis = analysis
        missing = [task for task in analysis.doc_tasks if task.type == "missing"]
        self.token.reset()
        result = self.batch.generate_missing(
            analysis,
            project_name=self.root_path.name,
            token=self.token,
            on_progress=self._on_progress,
        )
        # Generated files change the workspace; the next batch re-analyzes.
        self.last_analysis = None
        if result.cancelled:
            message = f"Generation cancelled after {len(result.generated)} files"
        else:
            message = (
                f"Generated {len(result.generated)} of {len(result.planned)} files"
            )
        return Response(
            command=Command.GENERATE_MISSING_DOCS,
            success=result.success,
            message=message,
            payload={
                "planned": result.planned,
                "generated": result.generated,
                "change_ids": result.change_ids,
                "failed": result.failed,
                "cancelled": result.cancelled,
                "estimated_time": estimate_time(missing),
            },
        )


def _from_result(command: Command, result: ChangeResult) -> Response:
    payload: dict[str, Any] = {}
    if result.change_id is not None:
        payload["change_id"] = result.change_id
    if result.document is not None:
        payload["document"] = result.document
    return Response(
        command=command, success=result.success, message=result.message, payload=payload
    )
