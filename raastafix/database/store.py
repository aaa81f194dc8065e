"""
Key-value store of JSON blobs
Single-writer access to named collections kept in the kv_store table.
"""

import json
import logging
import threading
from contextlib import contextmanager
from typing import Any, Callable, Generator, Optional

from .connection import DatabaseConnection
from .models import StoreEntry

logger = logging.getLogger(__name__)


class KeyValueStore:
    """
    JSON key-value store with atomic read-modify-write.

    Every write happens while holding one re-entrant lock, so two
    updates of the same key can never interleave and lose data.
    Callers that need several keys to change together wrap the
    calls in `locked()`.
    """

    def __init__(self, db: DatabaseConnection):
        """
        Initialize store.

        Args:
            db: Database connection holding the kv_store table
        """
        self.db = db
        self._lock = threading.RLock()

    @contextmanager
    def locked(self) -> Generator[None, None, None]:
        """Hold the writer lock across several store calls."""
        with self._lock:
            yield

    def get(self, key: str, default: Any = None) -> Any:
        """
        Read and decode a value.

        Args:
            key: Collection name
            default: Returned when the key is absent

        Returns:
            Decoded JSON value
        """
        with self._lock, self.db.get_session() as session:
            entry = session.get(StoreEntry, key)
            if entry is None:
                return default
            return json.loads(entry.value)

    def put(self, key: str, value: Any) -> None:
        """Encode and replace a value."""
        payload = json.dumps(value)
        with self._lock, self.db.get_session() as session:
            entry = session.get(StoreEntry, key)
            if entry is None:
                session.add(StoreEntry(key=key, value=payload))
            else:
                entry.value = payload
        logger.debug(f"Stored {key} ({len(payload)} bytes)")

    def delete(self, key: str) -> None:
        """Remove a key if present."""
        with self._lock, self.db.get_session() as session:
            entry = session.get(StoreEntry, key)
            if entry is not None:
                session.delete(entry)

    def update(
        self,
        key: str,
        fn: Callable[[Any], Any],
        default: Any = None
    ) -> Any:
        """
        Atomically transform a value.

        Args:
            key: Collection name
            fn: Receives the current value (or default), returns the new one
            default: Starting value when the key is absent

        Returns:
            The value written
        """
        with self._lock:
            current = self.get(key, default)
            updated = fn(current)
            self.put(key, updated)
            return updated


def create_store(database_url: Optional[str] = None) -> KeyValueStore:
    """
    Convenience function to open a store and make sure its table exists.

    Args:
        database_url: SQLAlchemy URL (settings default if not given)

    Returns:
        KeyValueStore instance
    """
    db = DatabaseConnection(database_url=database_url)
    db.create_tables()
    return KeyValueStore(db)
