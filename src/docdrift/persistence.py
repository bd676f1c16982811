# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Persistence contracts."""

import logging
from typing import Protocol

logger = logging.getLogger(__name__)


class PersistenceError(RuntimeError):
    """Represent a persistence read or write failure."""


class KeyValueStore(Protocol):
    """Define the durable key/value layer used for change history."""

    def get(self, key: str) -> str | None:
        """Return the stored value for a key, or ``None`` when absent.

        Raises:
            PersistenceError: If the backend cannot be read.
        """

    def set(self, key: str, value: str) -> None:
        """Store a value under a key, replacing any previous value.

        Raises:
            PersistenceError: If the backend cannot be written.
        """
