"""
Storage backend configuration utilities.

Serializes control storage backends to configuration dicts and recreates them
from configuration dicts (YAML config file, CLI flags).
"""

from typing import Any

from pymigrate.core.exceptions import ConfigurationError
from pymigrate.storage.base import ControlStorageBackend


def storage_to_config(storage: ControlStorageBackend | None) -> dict[str, Any] | None:
    """
    Serialize storage backend to configuration dict.

    Example:
        >>> storage = SQLiteControlStorage(db_path="./app.db")
        >>> storage_to_config(storage)
        {'type': 'sqlite', 'path': './app.db', 'collection_name': 'migrations'}
    """
    if storage is None:
        return None

    # Use class name to avoid import cycles
    class_name = storage.__class__.__name__

    if class_name == "SQLiteControlStorage":
        return {
            "type": "sqlite",
            "path": str(getattr(storage, "db_path", "./pymigrate.db")),
            "collection_name": storage.collection_name,
        }
    elif class_name == "InMemoryControlStorage":
        return {"type": "memory", "collection_name": storage.collection_name}
    else:
        return {"type": "unknown"}


def config_to_storage(config: dict[str, Any] | None = None) -> ControlStorageBackend:
    """
    Create storage backend from configuration dict.

    Args:
        config: Configuration dict with 'type' (or 'backend') and backend-specific
            params. If None, returns an InMemoryControlStorage.

    Raises:
        ConfigurationError: If storage type is unknown
    """
    if not config:
        from pymigrate.storage.memory import InMemoryControlStorage

        return InMemoryControlStorage()

    storage_type = config.get("type") or config.get("backend") or "memory"
    collection_name = config.get("collection_name", "migrations")

    if storage_type == "memory":
        from pymigrate.storage.memory import InMemoryControlStorage

        return InMemoryControlStorage(collection_name=collection_name)

    elif storage_type == "sqlite":
        from pymigrate.storage.sqlite import SQLiteControlStorage

        return SQLiteControlStorage(
            db_path=config.get("path") or "./pymigrate.db",
            collection_name=collection_name,
        )

    else:
        raise ConfigurationError(f"Unknown storage type: {storage_type}")
