# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Database backends for change history persistence."""

from docdrift.database.sqlite import SQLiteKeyValueStore

__all__ = ["SQLiteKeyValueStore"]
