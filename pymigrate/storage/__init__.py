"""
Control storage backends for PyMigrate.

Provides the store contract the migration engine relies on and the bundled
implementations.
"""

from pymigrate.storage.base import ControlStorageBackend
from pymigrate.storage.config import config_to_storage, storage_to_config
from pymigrate.storage.memory import InMemoryControlStorage
from pymigrate.storage.schemas import CONTROL_ID, ControlRecord
from pymigrate.storage.sqlite import SQLiteControlStorage

__all__ = [
    "ControlStorageBackend",
    "InMemoryControlStorage",
    "SQLiteControlStorage",
    "ControlRecord",
    "CONTROL_ID",
    # Config utilities
    "storage_to_config",
    "config_to_storage",
]
