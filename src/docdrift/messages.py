# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Inbound and outbound messages exchanged with a session host."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Union

from docdrift.changes import CHANGE_ORIGINS, CHANGE_STATUSES, CHANGE_TYPES
from docdrift.errors import MessageValidationError, UnknownCommandError


class Command(str, Enum):
    """Enumerate every command a session accepts."""

    ANALYZE_WORKSPACE = "analyze-workspace"
    GENERATE_MISSING_DOCS = "generate-missing-docs"
    APPLY_CHANGE = "apply-change"
    REVERT_CHANGE = "revert-change"
    VIEW_DIFF = "view-diff"
    GET_ACTIVITIES = "get-activities"
    FILTER_CHANGES = "filter-changes"
    GET_CHANGE_STATS = "get-change-stats"
    CLEAR_ALL_CHANGES = "clear-all-changes"
    PAUSE_GENERATION = "pause-generation"
    RESUME_GENERATION = "resume-generation"
    CANCEL_GENERATION = "cancel-generation"


@dataclass(frozen=True)
class AnalyzeWorkspace:
    command: Command = field(default=Command.ANALYZE_WORKSPACE, init=False)


@dataclass(frozen=True)
class GenerateMissingDocs:
    command: Command = field(default=Command.GENERATE_MISSING_DOCS, init=False)


@dataclass(frozen=True)
class ApplyChange:
    change_id: str
    command: Command = field(default=Command.APPLY_CHANGE, init=False)


@dataclass(frozen=True)
class RevertChange:
    change_id: str
    command: Command = field(default=Command.REVERT_CHANGE, init=False)


@dataclass(frozen=True)
class ViewDiff:
    change_id: str
    command: Command = field(default=Command.VIEW_DIFF, init=False)


@dataclass(frozen=True)
class GetActivities:
    command: Command = field(default=Command.GET_ACTIVITIES, init=False)


@dataclass(frozen=True)
class FilterChanges:
    status: str | None = None
    origin: str | None = None
    change_type: str | None = None
    command: Command = field(default=Command.FILTER_CHANGES, init=False)


@dataclass(frozen=True)
class GetChangeStats:
    command: Command = field(default=Command.GET_CHANGE_STATS, init=False)


@dataclass(frozen=True)
class ClearAllChanges:
    command: Command = field(default=Command.CLEAR_ALL_CHANGES, init=False)


@dataclass(frozen=True)
class PauseGeneration:
    command: Command = field(default=Command.PAUSE_GENERATION, init=False)


@dataclass(frozen=True)
class ResumeGeneration:
    command: Command = field(default=Command.RESUME_GENERATION, init=False)


@dataclass(frozen=True)
class CancelGeneration:
    command: Command = field(default=Command.CANCEL_GENERATION, init=False)


InboundMessage = Union[
    AnalyzeWorkspace,
    GenerateMissingDocs,
    ApplyChange,
    RevertChange,
    ViewDiff,
    GetActivities,
    FilterChanges,
    GetChangeStats,
    ClearAllChanges,
    PauseGeneration,
    ResumeGeneration,
    CancelGeneration,
]


@dataclass(frozen=True)
class Response:
    """Represent the outbound reply to one inbound message.

    Attributes:
        command: Command the reply answers.
        success: Whether the operation succeeded.
        message: Short human-readable outcome.
        payload: JSON-serializable operation data.
    """

    command: Command
    success: bool
    message: str
    payload: dict[str, Any] = field(default_factory=dict)


_NO_ARGUMENT_MESSAGES: dict[Command, type] = {
    Command.ANALYZE_WORKSPACE: AnalyzeWorkspace,
    Command.GENERATE_MISSING_DOCS: GenerateMissingDocs,
    Command.GET_ACTIVITIES: GetActivities,
    Command.GET_CHANGE_STATS: GetChangeStats,
    Command.CLEAR_ALL_CHANGES: ClearAllChanges,
    Command.PAUSE_GENERATION: PauseGeneration,
    Command.RESUME_GENERATION: ResumeGeneration,
    Command.CANCEL_GENERATION: CancelGeneration,
}
_CHANGE_ID_MESSAGES: dict[Command, type] = {
    Command.APPLY_CHANGE: ApplyChange,
    Command.REVERT_CHANGE: RevertChange,
    Command.VIEW_DIFF: ViewDiff,
}


def parse_message(raw: Mapping[str, Any]) -> InboundMessage:
    """Validate a raw inbound message and build its typed form.

    Args:
        raw: Decoded message object with a ``command`` tag.

    Returns:
        Typed inbound message.

    Raises:
        UnknownCommandError: If the command tag is missing or unrecognized.
        MessageValidationError: If a required field is missing or invalid.
    """
    if not isinstance(raw, Mapping):
        raise MessageValidationError("Message must be an object")
    tag = raw.get("command")
    try:
        command = Command(tag)
    except ValueError as exc:
        raise UnknownCommandError(f"Unknown command: {tag!r}") from exc

    if command in _NO_ARGUMENT_MESSAGES:
        return _NO_ARGUMENT_MESSAGES[command]()
    if command in _CHANGE_ID_MESSAGES:
        change_id = raw.get("change_id")
        if not isinstance(change_id, str) or not change_id.strip():
            raise MessageValidationError(
                f"Command {command.value} requires a non-empty change_id"
            )
        return _CHANGE_ID_MESSAGES[command](change_id=change_id.strip())
    return FilterChanges(
        status=_optional_choice(raw, "status", CHANGE_STATUSES),
        origin=_optional_choice(raw, "origin", CHANGE_ORIGINS),
        change_type=_optional_choice(raw, "change_type", CHANGE_TYPES),
    )


def _optional_choice(
    raw: Mapping[str, Any], key: str, allowed: tuple[str, ...]
) -> str | None:
    value = raw.get(key)
    if value is None:
        return None
    if value not in allowed:
        raise MessageValidationError(
            f"Invalid {key}: {value!r} (expected one of {', '.join(allowed)})"
        )
    return str(value)
