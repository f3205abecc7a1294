"""Migration engine: control record access, locking and the runner."""

from pymigrate.engine.control import ControlStore
from pymigrate.engine.locker import Locker
from pymigrate.engine.runner import MigrationResult, MigrationRunner, MigrationStatus

__all__ = [
    "ControlStore",
    "Locker",
    "MigrationRunner",
    "MigrationResult",
    "MigrationStatus",
]
