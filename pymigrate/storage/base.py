"""
Abstract base class for control storage backends.

The migration engine needs only a handful of document operations from the
underlying store. Any store that can offer them (an in-memory dict, SQLite,
a document database) can hold the control record.
"""

from abc import ABC, abstractmethod
from typing import Any


class ControlStorageBackend(ABC):
    """
    Abstract base class for the store holding migration control records.

    Records are flat dicts addressed by a string identity. Backends are
    responsible for:
    - Finding a record by identity
    - Applying a conditional update atomically per record
    - Upserting fields of a record
    - Bulk removal (reset only)

    All methods are async to support both sync and async backends.
    """

    collection_name: str = "migrations"

    @abstractmethod
    async def find_one(self, record_id: str) -> dict[str, Any] | None:
        """
        Retrieve a record by identity.

        Args:
            record_id: Record identity

        Returns:
            A copy of the record's fields if found, None otherwise
        """
        pass

    @abstractmethod
    async def update_where(
        self,
        record_id: str,
        match: dict[str, Any],
        values: dict[str, Any],
    ) -> int:
        """
        Conditionally set fields on a record.

        The record is updated only if it exists and every field in `match`
        currently equals the given value. Checking and setting must happen as
        one atomic operation: concurrent callers racing on the same match
        condition must see exactly one success.

        Args:
            record_id: Record identity
            match: Field values the stored record must currently have
            values: Field values to set when the record matches

        Returns:
            Number of records updated (0 or 1)
        """
        pass

    @abstractmethod
    async def upsert(self, record_id: str, values: dict[str, Any]) -> None:
        """
        Set fields on a record, creating it if it does not exist.

        Fields not named in `values` are left untouched.

        Args:
            record_id: Record identity
            values: Field values to set
        """
        pass

    @abstractmethod
    async def remove_all(self) -> int:
        """
        Remove every record in the collection.

        Returns:
            Number of records removed
        """
        pass

    # Lifecycle

    async def connect(self) -> None:
        """
        Initialize connection to storage backend.

        Override if your backend requires explicit connection setup.
        """
        pass

    async def disconnect(self) -> None:
        """
        Close connection to storage backend.

        Override if your backend requires explicit cleanup.
        """
        pass

    async def health_check(self) -> bool:
        """
        Check if storage backend is healthy and accessible.

        Returns:
            True if healthy, False otherwise
        """
        try:
            await self.find_one("control")
            return True
        except Exception:
            return False
