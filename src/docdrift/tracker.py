# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Change tracking engine: record, diff, apply and revert file changes."""

import json
import logging
import secrets
from datetime import datetime, timezone
from pathlib import Path, PurePosixPath
from typing import Any, Callable

from docdrift.changes import (
    CREATION_TYPES,
    ActivityEntry,
    ChangeOrigin,
    ChangeRecord,
    ChangeRecordStore,
    ChangeResult,
    ChangeStats,
    ChangeStatus,
    ChangeType,
    normalize_metadata,
)
from docdrift.diff import generate_diff, similarity_ratio
from docdrift.errors import FileSystemError, NoWorkspaceError, RecordNotFoundError
from docdrift.persistence import PersistenceError

logger = logging.getLogger(__name__)

GENERATED_BY: str = "docdrift"

_ORIGIN_LABELS: dict[str, str] = {"automatic": "Auto", "manual": "Manual"}
_STATUS_LABELS: dict[str, str] = {
    "applied": "Applied",
    "pending": "Pending",
    "reverted": "Reverted",
}


def _utc_now() -> datetime:
    return datetime.now(tz=timezone.utc)


def _new_change_id() -> str:
    return secrets.token_hex(8)


def format_time_ago(timestamp: datetime, now: datetime) -> str:
    """Render a timestamp relative to ``now`` (``just now``, ``5m ago``, ...)."""
    elapsed_minutes = int((now - timestamp).total_seconds() // 60)
    elapsed_hours = elapsed_minutes // 60
    elapsed_days = elapsed_hours // 24
    if elapsed_minutes < 1:
        return "just now"
    if elapsed_minutes < 60:
        return f"{elapsed_minutes}m ago"
    if elapsed_hours < 24:
        return f"{elapsed_hours}h ago"
    if elapsed_days < 7:
        return f"{elapsed_days}d ago"
    return timestamp.date().isoformat()


class ChangeTracker:
    """Record documentation file changes and drive their apply/revert lifecycle.

    Automatic records start ``applied`` because the file was already written;
    manual proposals start ``pending``. ``apply`` is valid from ``pending`` or
    ``reverted`` and ``revert`` only from ``applied``; other calls are no-ops
    that report why. All failures are returned as a failed ``ChangeResult``.
    """

    def __init__(
        self,
        store: ChangeRecordStore,
        root_path: Path | None,
        clock: Callable[[], datetime] = _utc_now,
        id_factory: Callable[[], str] = _new_change_id,
    ) -> None:
        """Initialize the tracker.

        Args:
            store: Change record store; the only writer of persisted history.
            root_path: Workspace root, or ``None`` when no workspace is open.
            clock: Source of timezone-aware timestamps.
            id_factory: Source of unique change ids.
        """
        self._store = store
        self._root_path = root_path
        self._clock = clock
        self._id_factory = id_factory

    def track_file_creation(
        self, file_path: str, content: str, metadata: dict[str, Any] | None = None
    ) -> ChangeRecord:
        """Record a generated file that now exists on disk."""
        name = _file_name(file_path)
        return self._record(
            change_type="created",
            origin="automatic",
            status="applied",
            title=f"Created {name}",
            description=f"Generated new documentation file: {name}",
            file_path=file_path,
            new_content=content,
            metadata={
                "generated_by": GENERATED_BY,
                "reason": "Documentation generation",
                **(metadata or {}),
            },
        )

    def track_file_modification(
        self,
        file_path: str,
        original_content: str,
        new_content: str,
        metadata: dict[str, Any] | None = None,
    ) -> ChangeRecord:
        """Record an edit already written to an existing file."""
        name = _file_name(file_path)
        return self._record(
            change_type="modified",
            origin="automatic",
            status="applied",
            title=f"Updated {name}",
            description=f"Modified documentation file: {name}",
            file_path=file_path,
            original_content=original_content,
            new_content=new_content,
            metadata={
                "generated_by": GENERATED_BY,
                "reason": "Documentation update",
                **(metadata or {}),
            },
        )

    def track_content_generation(
        self,
        doc_type: str,
        content: str,
        file_path: str,
        metadata: dict[str, Any] | None = None,
    ) -> ChangeRecord:
        """Record generated documentation content for a file."""
        return self._record(
            change_type="content-generated",
            origin="automatic",
            status="applied",
            title=f"Generated {doc_type} documentation",
            description=f"Generated {doc_type} documentation content",
            file_path=file_path,
            new_content=content,
            metadata={
                "generated_by": GENERATED_BY,
                "doc_type": doc_type,
                "reason": "Content generation",
                **(metadata or {}),
            },
        )

    def track_manual_action(
        self,
        title: str,
        description: str,
        file_path: str,
        original_content: str | None = None,
        new_content: str | None = None,
    ) -> ChangeRecord:
        """Record a manually proposed edit; it stays pending until applied."""
        is_modification = original_content is not None and new_content is not None
        return self._record(
            change_type="modified" if is_modification else "content-updated",
            origin="manual",
            status="pending",
            title=title,
            description=description,
            file_path=file_path,
            original_content=original_content,
            new_content=new_content,
            metadata={"generated_by": "User", "reason": "Manual action"},
        )

    def write_document(
        self,
        file_path: str,
        content: str,
        doc_type: str,
        metadata: dict[str, Any] | None = None,
    ) -> ChangeResult:
        """Write a documentation file and record the change.

        A new file is recorded as ``content-generated``; replacing an existing
        file is recorded as ``content-updated`` with its diff.

        Args:
            file_path: Target path relative to the workspace root.
            content: Full file content.
            doc_type: Documentation type for the record metadata.
            metadata: Extra metadata merged into the record.

        Returns:
            Operation result carrying the new change id on success.
        """
        try:
            target = self._resolve_target(file_path)
            original_content = _read_existing(target, file_path)
            _write_text(target, file_path, content)
        except (NoWorkspaceError, FileSystemError) as exc:
            logger.warning(f"Document write failed (file_path={file_path} error={exc})")
            return ChangeResult(success=False, message=f"Failed to write {file_path}: {exc}")

        extra = {"doc_type": doc_type, **(metadata or {})}
        if original_content is None:
            record = self.track_content_generation(
                doc_type=doc_type, content=content, file_path=file_path, metadata=extra
            )
        else:
            name = _file_name(file_path)
            record = self._record(
                change_type="content-updated",
                origin="automatic",
                status="applied",
                title=f"Updated {name}",
                description=f"Regenerated {doc_type} documentation content",
                file_path=file_path,
                original_content=original_content,
                new_content=content,
                metadata={
                    "generated_by": GENERATED_BY,
                    "reason": "Content update",
                    **extra,
                },
            )
        return ChangeResult(
            success=True, message=f"Wrote {file_path}", change_id=record.id
        )

    def apply_change(self, change_id: str) -> ChangeResult:
        """Materialize a pending or reverted change on disk.

        Args:
            change_id: Id of the change to apply.

        Returns:
            Operation result; a no-op failure when already applied.
        """
        try:
            record = self._require(change_id)
        except RecordNotFoundError as exc:
            return ChangeResult(success=False, message=str(exc), change_id=change_id)
        if record.status == "applied":
            return ChangeResult(
                success=False,
                message=f"Change is already applied: {record.title}",
                change_id=change_id,
            )
        try:
            target = self._resolve_target(record.file_path)
            if record.type == "deleted":
                _delete_file(target, record.file_path)
            elif record.new_content is None:
                return ChangeResult(
                    success=False,
                    message=f"Change {change_id} has no new content to apply",
                    change_id=change_id,
                )
            else:
                _write_text(target, record.file_path, record.new_content)
        except (NoWorkspaceError, FileSystemError) as exc:
            logger.warning(f"Apply failed (change_id={change_id} error={exc})")
            return ChangeResult(
                success=False,
                message=f"Failed to apply change: {exc}",
                change_id=change_id,
            )
        return self._transition(record, "applied", f"Applied change: {record.title}")

    def revert_change(self, change_id: str) -> ChangeResult:
        """Undo an applied change on disk.

        Creations are deleted (a missing file is fine); modifications and
        deletions restore the original content.

        Args:
            change_id: Id of the change to revert.

        Returns:
            Operation result; a no-op failure unless the change is applied.
        """
        try:
            record = self._require(change_id)
        except RecordNotFoundError as exc:
            return ChangeResult(success=False, message=str(exc), change_id=change_id)
        if record.status != "applied":
            return ChangeResult(
                success=False,
                message=f"Only applied changes can be reverted (status={record.status})",
                change_id=change_id,
            )
        try:
            target = self._resolve_target(record.file_path)
            if record.type in CREATION_TYPES:
                _delete_file(target, record.file_path)
            elif record.original_content is None:
                return ChangeResult(
                    success=False,
                    message=f"Change {change_id} has no original content to restore",
                    change_id=change_id,
                )
            else:
                _write_text(target, record.file_path, record.original_content)
        except (NoWorkspaceError, FileSystemError) as exc:
            logger.warning(f"Revert failed (change_id={change_id} error={exc})")
            return ChangeResult(
                success=False,
                message=f"Failed to revert change: {exc}",
                change_id=change_id,
            )
        return self._transition(record, "reverted", f"Reverted change: {record.title}")

    def view_diff(self, change_id: str) -> ChangeResult:
        """Render a change as a markdown review document.

        Args:
            change_id: Id of the change to render.

        Returns:
            Operation result with the rendered ``document`` on success.
        """
        try:
            record = self._require(change_id)
        except RecordNotFoundError as exc:
            return ChangeResult(success=False, message=str(exc), change_id=change_id)
        return ChangeResult(
            success=True,
            message=f"Diff for {record.title}",
            change_id=change_id,
            document=render_diff_document(record),
        )

    def get_change(self, change_id: str) -> ChangeRecord | None:
        return self._store.get(change_id)

    def get_activities(self) -> list[ActivityEntry]:
        """Project every record, newest first, into an activity entry."""
        now = self._clock()
        return [
            ActivityEntry(
                id=record.id,
                type=_ORIGIN_LABELS.get(record.origin, "Manual"),  # type: ignore[arg-type]
                status=_STATUS_LABELS.get(record.status, "Pending"),  # type: ignore[arg-type]
                title=record.title,
                when=format_time_ago(record.timestamp, now),
                desc=record.description,
                change_record=record,
            )
            for record in self._store.records
        ]

    def filter_changes(
        self,
        status: ChangeStatus | None = None,
        origin: ChangeOrigin | None = None,
        change_type: ChangeType | None = None,
    ) -> list[ChangeRecord]:
        """Return records matching every given criterion, newest first."""
        return [
            record
            for record in self._store.records
            if (status is None or record.status == status)
            and (origin is None or record.origin == origin)
            and (change_type is None or record.type == change_type)
        ]

    def get_change_stats(self) -> ChangeStats:
        records = self._store.records
        return ChangeStats(
            total=len(records),
            applied=sum(1 for record in records if record.status == "applied"),
            pending=sum(1 for record in records if record.status == "pending"),
            reverted=sum(1 for record in records if record.status == "reverted"),
        )

    def clear_all_changes(self) -> ChangeResult:
        """Remove all records from memory and durable storage."""
        try:
            self._store.clear()
        except PersistenceError as exc:
            logger.warning(f"Clearing change history was not persisted (error={exc})")
            return ChangeResult(
                success=False, message=f"Cleared changes but could not persist: {exc}"
            )
        return ChangeResult(success=True, message="Cleared all changes")

    def _record(
        self,
        change_type: ChangeType,
        origin: ChangeOrigin,
        status: ChangeStatus,
        title: str,
        description: str,
        file_path: str,
        metadata: dict[str, Any],
        original_content: str | None = None,
        new_content: str | None = None,
    ) -> ChangeRecord:
        diff = (
            generate_diff(original_content, new_content)
            if original_content is not None and new_content is not None
            else None
        )
        record = ChangeRecord(
            id=self._id_factory(),
            type=change_type,
            origin=origin,
            status=status,
            title=title,
            description=description,
            file_path=file_path,
            timestamp=self._clock(),
            original_content=original_content,
            new_content=new_content,
            diff=diff,
            metadata=normalize_metadata(metadata),
        )
        try:
            self._store.add(record)
        except PersistenceError as exc:
            logger.warning(
                f"Change recorded but not persisted (change_id={record.id} error={exc})"
            )
        logger.info(
            f"Tracked change (change_id={record.id} type={change_type} "
            f"status={status} file_path={file_path})"
        )
        return record

    def _transition(
        self, record: ChangeRecord, status: ChangeStatus, message: str
    ) -> ChangeResult:
        record.status = status
        try:
            self._store.save()
        except PersistenceError as exc:
            logger.warning(
                f"Status change not persisted (change_id={record.id} status={status} error={exc})"
            )
            message = f"{message} (history not saved: {exc})"
        logger.info(f"Change transitioned (change_id={record.id} status={status})")
        return ChangeResult(success=True, message=message, change_id=record.id)

    def _require(self, change_id: str) -> ChangeRecord:
        record = self._store.get(change_id)
        if record is None:
            logger.warning(f"Change not found (change_id={change_id})")
            raise RecordNotFoundError(change_id)
        return record

    def _resolve_target(self, file_path: str) -> Path:
        """Resolve a record path inside the workspace root.

        Absolute paths under the root are accepted and made relative.

        Raises:
            NoWorkspaceError: If no workspace root is available.
            FileSystemError: If the path escapes the workspace root.
        """
        if self._root_path is None:
            raise NoWorkspaceError("No workspace folder found")
        root = self._root_path.resolve()
        candidate = Path(file_path)
        target = (candidate if candidate.is_absolute() else root / candidate).resolve()
        if target != root and root not in target.parents:
            raise FileSystemError(file_path, "path is outside the workspace")
        return target


def render_diff_document(record: ChangeRecord) -> str:
    """Render one change record as a markdown review document."""
    sections = [
        f"# Diff: {record.title}",
        "",
        f"**File:** {record.file_path}",
        f"**Type:** {record.type}",
        f"**Origin:** {record.origin}",
        f"**Status:** {record.status}",
        f"**Timestamp:** {record.timestamp.isoformat()}",
    ]
    if record.original_content is not None and record.new_content is not None:
        ratio = similarity_ratio(record.original_content, record.new_content)
        sections.append(f"**Similarity:** {ratio:.0%}")
    sections.append("")
    if record.diff:
        sections.extend(["## Changes", "```diff", record.diff.rstrip("\n"), "```", ""])
    elif record.type in CREATION_TYPES:
        sections.extend(
            ["## New File Content", "```markdown", record.new_content or "N/A", "```", ""]
        )
    sections.extend(
        [
            "## Original Content",
            "```markdown",
            record.original_content or "N/A",
            "```",
            "",
            "## New Content",
            "```markdown",
            record.new_content or "N/A",
            "```",
            "",
            "## Metadata",
            json.dumps(record.metadata, indent=2, sort_keys=True)
            if record.metadata
            else "None",
        ]
    )
    return "\n".join(sections)


def _file_name(file_path: str) -> str:
    return PurePosixPath(file_path.replace("\\", "/")).name or file_path


def _read_existing(target: Path, file_path: str) -> str | None:
    if not target.exists():
        return None
    try:
        return target.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise FileSystemError(file_path, str(exc)) from exc


def _write_text(target: Path, file_path: str, content: str) -> None:
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")
    except OSError as exc:
        raise FileSystemError(file_path, str(exc)) from exc


def _delete_file(target: Path, file_path: str) -> None:
    try:
        target.unlink(missing_ok=True)
    except OSError as exc:
        raise FileSystemError(file_path, str(exc)) from exc
