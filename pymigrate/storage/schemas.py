"""
Data model for the migration control record.

The control record is the only durable state of the migration engine: the
currently applied version and the lock flag that serializes migrations across
processes.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any

CONTROL_ID = "control"


@dataclass
class ControlRecord:
    """
    Migration control record.

    Attributes:
        version: Currently applied migration version (>= 0)
        locked: Whether a process is currently migrating
        locked_at: When the lock was last taken (informational only)
    """

    version: int = 0
    locked: bool = False
    locked_at: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "version": self.version,
            "locked": self.locked,
            "locked_at": self.locked_at.isoformat() if self.locked_at else None,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ControlRecord":
        """Create from a stored record."""
        locked_at = data.get("locked_at")
        if isinstance(locked_at, str):
            locked_at = datetime.fromisoformat(locked_at)
        return cls(
            version=int(data.get("version", 0)),
            locked=bool(data.get("locked", False)),
            locked_at=locked_at,
        )
