"""
Access to the migration control record.

Every call round-trips through the storage backend; nothing is cached, so
version and lock changes made by other processes are always visible.
"""

from pymigrate.core.exceptions import InvalidControlRecord
from pymigrate.storage.base import ControlStorageBackend
from pymigrate.storage.schemas import CONTROL_ID, ControlRecord


class ControlStore:
    """Reads and writes the singleton control record."""

    def __init__(self, storage: ControlStorageBackend, record_id: str = CONTROL_ID) -> None:
        self.storage = storage
        self.record_id = record_id

    async def get_control(self) -> ControlRecord:
        """
        Get the control record, creating it at version 0 if it does not exist.

        Concurrent first reads all upsert the same initial values, so creation
        is idempotent.
        """
        data = await self.storage.find_one(self.record_id)
        if data is not None:
            return ControlRecord.from_dict(data)
        return await self.set_control(version=0, locked=False)

    async def set_control(self, version: int, locked: bool) -> ControlRecord:
        """
        Write version and lock flag to the control record.

        Raises:
            InvalidControlRecord: If version is not an int or locked is not a bool
        """
        if not isinstance(version, int) or isinstance(version, bool):
            raise InvalidControlRecord(f"Control version must be an int, got {version!r}")
        if not isinstance(locked, bool):
            raise InvalidControlRecord(f"Control locked must be a bool, got {locked!r}")

        await self.storage.upsert(self.record_id, {"version": version, "locked": locked})
        return ControlRecord(version=version, locked=locked)

    async def unlock(self) -> None:
        """Clear the lock flag, leaving the version untouched."""
        await self.storage.update_where(self.record_id, {}, {"locked": False})

    async def reset(self) -> None:
        """Remove the control record (and anything else in the collection)."""
        await self.storage.remove_all()
