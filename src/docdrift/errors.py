# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Error types shared by the analysis and change tracking engines."""


class NoWorkspaceError(RuntimeError):
    """Represent a missing or unusable workspace root."""


class RecordNotFoundError(RuntimeError):
    """Represent a change id that does not resolve to a record."""

    def __init__(self, change_id: str) -> None:
        super().__init__(f"Change not found: {change_id}")
        self.change_id = change_id


class FileSystemError(RuntimeError):
    """Represent a read, write or delete failure for one file."""

    def __init__(self, file_path: str, message: str) -> None:
        super().__init__(f"{file_path}: {message}")
        self.file_path = file_path


class UnreadableSourceFileError(FileSystemError):
    """Represent a source file that could not be read during a scan."""


class MessageValidationError(ValueError):
    """Represent a malformed inbound message."""


class UnknownCommandError(MessageValidationError):
    """Represent an inbound message carrying an unrecognized command tag."""
