"""Control storage factory for the CLI."""

from typing import Any, Dict, Optional

from loguru import logger

from pymigrate import ControlStorageBackend, InMemoryControlStorage, SQLiteControlStorage


def create_storage(
    backend_type: Optional[str] = None,
    path: Optional[str] = None,
    config: Optional[Dict[str, Any]] = None,
    collection_name: Optional[str] = None,
) -> ControlStorageBackend:
    """
    Create control storage from configuration.

    Configuration priority:
    1. CLI flags (backend_type, path arguments)
    2. Environment variables (handled by Click)
    3. Config file (config dict)
    4. Default (sqlite backend at ./pymigrate.db)

    Args:
        backend_type: Storage backend type ("sqlite", "memory")
        path: Database path (sqlite backend)
        config: Configuration dict from pymigrate.config.yaml
        collection_name: Control collection name

    Raises:
        ValueError: If backend type is unsupported
    """
    storage_config = (config or {}).get("storage", {}) or {}

    backend = (
        backend_type
        or storage_config.get("type")
        or storage_config.get("backend")
        or "sqlite"
    )
    collection = (
        collection_name or (config or {}).get("collection_name") or "migrations"
    )

    logger.debug(f"Creating storage backend: {backend}")

    if backend == "memory":
        logger.info("Using InMemoryControlStorage")
        return InMemoryControlStorage(collection_name=collection)

    elif backend == "sqlite":
        db_path = path or storage_config.get("path") or "./pymigrate.db"
        logger.info(f"Using SQLiteControlStorage with path: {db_path}")
        return SQLiteControlStorage(db_path=db_path, collection_name=collection)

    else:
        raise ValueError(
            f"Unsupported storage backend: {backend}. Supported backends: sqlite, memory"
        )
