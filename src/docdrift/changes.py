# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Change record models and the persistent change record store."""

import json
import logging
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any, Literal

from docdrift.config import DEFAULT_STORAGE_KEY
from docdrift.persistence import KeyValueStore, PersistenceError

logger = logging.getLogger(__name__)

ChangeType = Literal[
    "created", "modified", "deleted", "content-generated", "content-updated"
]
ChangeOrigin = Literal["automatic", "manual"]
ChangeStatus = Literal["pending", "applied", "reverted"]

CHANGE_TYPES: tuple[ChangeType, ...] = (
    "created",
    "modified",
    "deleted",
    "content-generated",
    "content-updated",
)
CHANGE_ORIGINS: tuple[ChangeOrigin, ...] = ("automatic", "manual")
CHANGE_STATUSES: tuple[ChangeStatus, ...] = ("pending", "applied", "reverted")
CREATION_TYPES: frozenset[str] = frozenset({"created", "content-generated"})


def normalize_metadata(metadata: dict[str, Any]) -> dict[str, Any]:
    """Return a JSON-compatible copy of caller-supplied metadata.

    Values without a JSON form, such as paths, are stored as their string
    representation.
    """
    try:
        return json.loads(json.dumps(metadata, default=str))
    except (TypeError, ValueError):
        return {str(key): str(value) for key, value in metadata.items()}


@dataclass
class ChangeRecord:
    """Represent one tracked documentation file change.

    Attributes:
        id: Unique change id.
        type: Kind of change.
        origin: ``automatic`` for generated changes, ``manual`` for proposals.
        status: Lifecycle status.
        title: Short human title.
        description: Human description.
        file_path: Target file, relative to the workspace root.
        timestamp: Creation time (timezone-aware, UTC).
        original_content: File content before the change, when known.
        new_content: File content after the change, when known.
        diff: Positional diff; present iff both contents are present.
        metadata: Free-form details (generated_by, reason, doc_type, ...).
    """

    id: str
    type: ChangeType
    origin: ChangeOrigin
    status: ChangeStatus
    title: str
    description: str
    file_path: str
    timestamp: datetime
    original_content: str | None = None
    new_content: str | None = None
    diff: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        payload = asdict(self)
        payload["timestamp"] = self.timestamp.isoformat()
        return payload

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "ChangeRecord":
        """Rebuild a record from its serialized form.

        Raises:
            KeyError: If a required field is missing.
            ValueError: If the timestamp cannot be parsed.
        """
        timestamp = datetime.fromisoformat(payload["timestamp"])
        if timestamp.tzinfo is None:
            timestamp = timestamp.replace(tzinfo=timezone.utc)
        return cls(
            id=str(payload["id"]),
            type=payload["type"],
            origin=payload["origin"],
            status=payload["status"],
            title=str(payload["title"]),
            description=str(payload.get("description", "")),
            file_path=str(payload["file_path"]),
            timestamp=timestamp,
            original_content=payload.get("original_content"),
            new_content=payload.get("new_content"),
            diff=payload.get("diff"),
            metadata=dict(payload.get("metadata") or {}),
        )


@dataclass(frozen=True)
class ActivityEntry:
    """Represent a display-friendly projection of a change record."""

    id: str
    type: Literal["Auto", "Manual"]
    status: Literal["Applied", "Pending", "Reverted"]
    title: str
    when: str
    desc: str
    change_record: ChangeRecord


@dataclass(frozen=True)
class ChangeStats:
    """Represent change counts by status."""

    total: int
    applied: int
    pending: int
    reverted: int


@dataclass(frozen=True)
class ChangeResult:
    """Represent the outcome of a change operation.

    The result is truthy when the operation succeeded.
    """

    success: bool
    message: str
    change_id: str | None = None
    document: str | None = None

    def __bool__(self) -> bool:
        return self.success


class ChangeRecordStore:
    """Own the newest-first change list and its durable copy."""

    def __init__(
        self, storage: KeyValueStore, storage_key: str = DEFAULT_STORAGE_KEY
    ) -> None:
        """Initialize the store and load persisted records.

        Args:
            storage: Durable key/value backend.
            storage_key: Key under which the serialized list is kept.
        """
        self._storage = storage
        self._storage_key = storage_key
        self._records: list[ChangeRecord] = self._load()

    @property
    def records(self) -> list[ChangeRecord]:
        """Return a snapshot of the records, newest first."""
        return list(self._records)

    def get(self, change_id: str) -> ChangeRecord | None:
        for record in self._records:
            if record.id == change_id:
                return record
        return None

    def add(self, record: ChangeRecord) -> None:
        """Prepend a record and persist the full list.

        A record that cannot be serialized is rejected before the in-memory
        list changes. A failed write keeps the record in memory.

        Raises:
            PersistenceError: If serialization or the write fails.
        """
        candidate = [record, *self._records]
        blob = self._serialize(candidate)
        self._records = candidate
        self._storage.set(self._storage_key, blob)

    def clear(self) -> None:
        """Remove every record and persist the empty list.

        Raises:
            PersistenceError: If the list cannot be written.
        """
        self._records = []
        self.save()

    def save(self) -> None:
        """Serialize and write the full list.

        Raises:
            PersistenceError: If serialization or the write fails.
        """
        self._storage.set(self._storage_key, self._serialize(self._records))

    def _serialize(self, records: list[ChangeRecord]) -> str:
        try:
            return json.dumps([record.to_dict() for record in records])
        except (TypeError, ValueError) as exc:
            logger.warning(
                f"Change list serialization failed (key={self._storage_key} error={exc})"
            )
            raise PersistenceError(str(exc)) from exc

    def _load(self) -> list[ChangeRecord]:
        try:
            blob = self._storage.get(self._storage_key)
        except PersistenceError as exc:
            logger.warning(
                f"Change history could not be read; starting empty "
                f"(key={self._storage_key} error={exc})"
            )
            return []
        if not blob:
            return []
        try:
            payload = json.loads(blob)
            if not isinstance(payload, list):
                raise ValueError("stored change history is not a list")
            records = [ChangeRecord.from_dict(item) for item in payload]
        except (KeyError, TypeError, ValueError) as exc:
            logger.warning(
                f"Change history is corrupt; starting empty "
                f"(key={self._storage_key} error={exc})"
            )
            return []
        logger.info(
            f"Loaded change history (key={self._storage_key} records={len(records)})"
        )
        return records
