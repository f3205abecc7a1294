"""
In-memory control storage for testing and single-process applications.

This backend stores all records in memory and is ideal for:
- Unit testing
- Applications running a single process against an embedded store
- Development and prototyping

Note: All data is lost when the process exits, and the lock only serializes
callers sharing this backend instance.
"""

import copy
import threading
from typing import Any

from pymigrate.storage.base import ControlStorageBackend


class InMemoryControlStorage(ControlStorageBackend):
    """
    Thread-safe in-memory control storage.

    Records are stored in a dictionary protected by a reentrant lock, which
    makes update_where() atomic across threads and coroutines.

    Example:
        >>> storage = InMemoryControlStorage()
        >>> pymigrate.configure(storage=storage)
    """

    def __init__(self, collection_name: str = "migrations") -> None:
        """Initialize empty storage."""
        self.collection_name = collection_name
        self._records: dict[str, dict[str, Any]] = {}
        self._lock = threading.RLock()
        # Number of writes (upsert/update_where/remove_all) applied, for tests
        self.write_count = 0

    async def find_one(self, record_id: str) -> dict[str, Any] | None:
        with self._lock:
            record = self._records.get(record_id)
            return copy.deepcopy(record) if record is not None else None

    async def update_where(
        self,
        record_id: str,
        match: dict[str, Any],
        values: dict[str, Any],
    ) -> int:
        with self._lock:
            self.write_count += 1
            record = self._records.get(record_id)
            if record is None:
                return 0
            if any(record.get(key) != value for key, value in match.items()):
                return 0
            record.update(values)
            return 1

    async def upsert(self, record_id: str, values: dict[str, Any]) -> None:
        with self._lock:
            self.write_count += 1
            self._records.setdefault(record_id, {}).update(values)

    async def remove_all(self) -> int:
        with self._lock:
            self.write_count += 1
            removed = len(self._records)
            self._records.clear()
            return removed

    # Utility methods

    def clear(self) -> None:
        """
        Clear all data from storage.

        Useful for testing to reset state between tests.
        """
        with self._lock:
            self._records.clear()
            self.write_count = 0

    def __len__(self) -> int:
        """Return number of stored records."""
        with self._lock:
            return len(self._records)

    def __repr__(self) -> str:
        with self._lock:
            return (
                f"InMemoryControlStorage("
                f"collection={self.collection_name!r}, "
                f"records={len(self._records)})"
            )
