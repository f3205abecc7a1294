"""
Mutual exclusion for migrations.

The lock is the `locked` flag of the control record. Taking it is a single
conditional update: set locked only where the stored record is unlocked.
The store applies that update atomically per record, so among any number of
simultaneous callers exactly one sees a match.

There is no lease or timeout. A process that dies while holding the lock
leaves it set until an operator calls unlock().
"""

from datetime import UTC, datetime

from pymigrate.engine.control import ControlStore


class Locker:
    """Acquires and releases the migration lock."""

    def __init__(self, control: ControlStore) -> None:
        self.control = control

    async def acquire(self) -> bool:
        """
        Try to take the lock.

        Returns:
            True if this call moved the record from unlocked to locked
        """
        updated = await self.control.storage.update_where(
            self.control.record_id,
            {"locked": False},
            {"locked": True, "locked_at": datetime.now(UTC)},
        )
        return updated == 1

    async def release(self, version: int) -> None:
        """Release the lock, recording the version reached. Only call while holding it."""
        await self.control.set_control(version=version, locked=False)
