# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Key/value persistence backed by a SQLite database."""

import logging
import sqlite3

from datetime import datetime, timezone
from pathlib import Path

from docdrift.persistence import PersistenceError

logger = logging.getLogger(__name__)


class SQLiteKeyValueStore:
    """Persist string values by key in a SQLite database."""

    def __init__(self, db_path: Path) -> None:
        """Initialize persistence backend.

        Args:
            db_path: SQLite database file path. Parent directories are
                created on first write.
        """
        self._db_path = db_path

    def get(self, key: str) -> str | None:
        """Read the value stored under a key.

        Args:
            key: Storage key.

        Returns:
            Stored value, or ``None`` when the key or database is absent.

        Raises:
            PersistenceError: If the database cannot be read.
        """
        if not self._db_path.exists():
            return None
        connection = self._connect()
        try:
            self._ensure_schema(connection=connection)
            row = connection.execute(
                "SELECT value FROM kv_store WHERE key = ?", (key,)
            ).fetchone()
        except sqlite3.DatabaseError as exc:
            logger.warning(
                f"SQLite read failed (db_path={self._db_path} key={key} error={exc})"
            )
            raise PersistenceError(str(exc)) from exc
        finally:
            connection.close()
        if row is None:
            return None
        return str(row[0])

    def set(self, key: str, value: str) -> None:
        """Store a value under a key atomically.

        Args:
            key: Storage key.
            value: Serialized value.

        Raises:
            PersistenceError: If the database cannot be written.
        """
        connection = self._connect()
        try:
            self._ensure_schema(connection=connection)
            connection.execute("BEGIN")
            connection.execute(
                "INSERT INTO kv_store (key, value, updated_at) VALUES (?, ?, ?) "
                "ON CONFLICT(key) DO UPDATE SET value = excluded.value, "
                "updated_at = excluded.updated_at",
                (key, value, datetime.now(tz=timezone.utc).isoformat()),
            )
            connection.commit()
        except sqlite3.DatabaseError as exc:
            connection.rollback()
            logger.warning(
                f"SQLite write failed (db_path={self._db_path} key={key} error={exc})"
            )
            raise PersistenceError(str(exc)) from exc
        finally:
            connection.close()

    def _connect(self) -> sqlite3.Connection:
        try:
            self._db_path.parent.mkdir(parents=True, exist_ok=True)
            return sqlite3.connect(self._db_path, isolation_level=None)
        except (OSError, sqlite3.Error) as exc:
            logger.warning(
                f"SQLite connection failed (db_path={self._db_path} error={exc})"
            )
            raise PersistenceError(str(exc)) from exc

    def _ensure_schema(self, connection: sqlite3.Connection) -> None:
        """Create the key/value table when missing.

        Args:
            connection: Open SQLite connection.
        """
        connection.execute(
            "CREATE TABLE IF NOT EXISTS kv_store ("
            "key TEXT PRIMARY KEY, "
            "value TEXT NOT NULL, "
            "updated_at TEXT NOT NULL"
            ")"
        )
