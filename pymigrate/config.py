"""
PyMigrate configuration system.

Provides global configuration for logging, control storage and the startup
driver.

Configuration is loaded in this priority order:
1. Values set via pymigrate.configure() (highest priority)
2. Values from pymigrate.config.yaml in current directory
3. Default values

Usage:
    >>> import pymigrate
    >>> pymigrate.configure(
    ...     log_if_latest=False,
    ...     storage=SQLiteControlStorage(db_path="./app.db"),
    ... )
"""

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable, Dict, Optional

import yaml
from loguru import logger

from pymigrate.core.exceptions import ConfigurationError

if TYPE_CHECKING:
    from pymigrate.storage.base import ControlStorageBackend

CONFIG_FILENAME = "pymigrate.config.yaml"


def load_yaml_file(config_path: Path) -> Dict[str, Any]:
    """
    Read a PyMigrate YAML config file.

    Unreadable files, invalid YAML and documents whose top level is not a
    mapping are ignored with a warning.

    Returns:
        Configuration dictionary, empty dict if the file is absent or ignored
    """
    if not config_path.exists():
        return {}

    try:
        with open(config_path) as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        logger.warning(f"Ignoring unreadable {config_path.name}: {e}")
        return {}

    if data is None:
        return {}
    if not isinstance(data, dict):
        logger.warning(
            f"Ignoring {config_path.name}: expected a mapping at the top level, "
            f"got {type(data).__name__}"
        )
        return {}
    return data


def _load_yaml_config() -> Dict[str, Any]:
    """
    Load configuration from pymigrate.config.yaml in current directory.

    Returns:
        Configuration dictionary, empty dict if file not found
    """
    return load_yaml_file(Path.cwd() / CONFIG_FILENAME)


def _create_storage_from_config(
    storage_config: Dict[str, Any], collection_name: str
) -> Optional["ControlStorageBackend"]:
    """Create a storage backend from config dictionary."""
    if not storage_config:
        return None

    from pymigrate.storage.config import config_to_storage

    return config_to_storage({"collection_name": collection_name, **storage_config})


@dataclass
class MigrationsConfig:
    """
    Global configuration for PyMigrate.

    Attributes:
        log: False disables migration logging entirely
        logger: Optional callable receiving {"level", "message", "tag"} dicts
            instead of the loguru sink
        log_if_latest: Log "already at version" when there is nothing to do
        collection_name: Name of the collection/table holding the control record
        storage: Control storage backend instance
        env_var: Environment variable read by the startup driver
    """

    log: bool = True
    logger: Optional[Callable[[Dict[str, str]], Any]] = None
    log_if_latest: bool = True
    collection_name: str = "migrations"

    # Infrastructure (app-level only)
    storage: Optional["ControlStorageBackend"] = None
    env_var: str = "MIGRATE"


def _config_from_yaml() -> MigrationsConfig:
    """Create a MigrationsConfig from YAML file settings."""
    yaml_config = _load_yaml_config()

    if not yaml_config:
        return MigrationsConfig()

    collection_name = yaml_config.get("collection_name", "migrations")

    return MigrationsConfig(
        log=bool(yaml_config.get("log", True)),
        log_if_latest=bool(yaml_config.get("log_if_latest", True)),
        collection_name=collection_name,
        storage=_create_storage_from_config(yaml_config.get("storage", {}), collection_name),
        env_var=yaml_config.get("env_var", "MIGRATE"),
    )


# Global singleton
_config: Optional[MigrationsConfig] = None
_default_storage: Optional["ControlStorageBackend"] = None


def configure(**kwargs: Any) -> None:
    """
    Configure PyMigrate defaults.

    Args:
        log: False disables migration logging
        logger: Callable receiving log dicts
        log_if_latest: Log when already at the requested version
        collection_name: Control collection name (a changed name also replaces
            the fallback in-memory backend on the next get_storage() call)
        storage: Control storage backend instance
        env_var: Environment variable read at startup

    Raises:
        ConfigurationError: If an unknown option is passed

    Example:
        >>> import pymigrate
        >>> pymigrate.configure(log_if_latest=False, storage=InMemoryControlStorage())
    """
    global _config, _default_storage
    if _config is None:
        _config = get_config()

    for key, value in kwargs.items():
        if hasattr(_config, key):
            if key == "collection_name" and value != _config.collection_name:
                # The fallback backend is bound to the old collection
                _default_storage = None
            setattr(_config, key, value)
        else:
            valid_keys = [f for f in MigrationsConfig.__dataclass_fields__.keys()]
            raise ConfigurationError(
                f"Unknown config option: {key}. Valid options: {', '.join(valid_keys)}"
            )


def get_config() -> MigrationsConfig:
    """
    Get the current configuration.

    If not yet configured, loads from pymigrate.config.yaml if present,
    otherwise creates default configuration.
    """
    global _config
    if _config is None:
        _config = _config_from_yaml()
    return _config


def get_storage() -> "ControlStorageBackend":
    """
    Get the configured control storage.

    Falls back to a process-wide in-memory backend when none is configured.
    """
    global _default_storage
    config = get_config()
    if config.storage is not None:
        return config.storage

    if _default_storage is None:
        from pymigrate.storage.memory import InMemoryControlStorage

        _default_storage = InMemoryControlStorage(collection_name=config.collection_name)
    return _default_storage


def reset_config() -> None:
    """
    Reset configuration to defaults.

    Primarily used for testing.
    """
    global _config, _default_storage
    _config = None
    _default_storage = None
