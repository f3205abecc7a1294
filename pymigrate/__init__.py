"""
PyMigrate - Versioned, fleet-safe migrations for Python applications

Applies an ordered sequence of reversible migrations to bring a persistent
store to the version the running code expects. A lock held in a single
control record guarantees that only one process of a fleet migrates at a time.

Quick Start:
    >>> import pymigrate
    >>>
    >>> pymigrate.add({"version": 1, "up": create_users, "down": drop_users})
    >>> pymigrate.add({"version": 2, "up": add_email_column, "name": "email"})
    >>>
    >>> # Migrate to the highest registered version
    >>> await pymigrate.migrate_to("latest")
    >>> await pymigrate.get_version()
    2
    >>>
    >>> # Or let the MIGRATE environment variable drive it at startup
    >>> await pymigrate.migrate_from_env()
"""

__version__ = "0.1.0"

from collections.abc import Mapping
from typing import Any

# Configuration
from pymigrate.config import configure, get_config, get_storage, reset_config

# Core types and exceptions
from pymigrate.core.command import MigrateCommand, parse_command
from pymigrate.core.exceptions import (
    ConfigurationError,
    InvalidCommand,
    InvalidControlRecord,
    InvalidMigrationDefinition,
    MigrationError,
    MissingDirectionFunction,
    UnknownVersion,
)
from pymigrate.core.migration import Direction, Migration
from pymigrate.core.registry import MigrationRegistry, get_global_registry, register_migration

# Engine
from pymigrate.engine.runner import MigrationResult, MigrationRunner, MigrationStatus

# Storage backends
from pymigrate.storage.base import ControlStorageBackend
from pymigrate.storage.memory import InMemoryControlStorage
from pymigrate.storage.schemas import ControlRecord
from pymigrate.storage.sqlite import SQLiteControlStorage

# Logging
from pymigrate.observability.logging import configure_logging, get_logger

# Startup driver
from pymigrate.startup import migrate_from_env, run_startup_migrations


def _default_runner() -> MigrationRunner:
    return MigrationRunner(get_global_registry(), get_storage())


def add(migration: Migration | Mapping[str, Any]) -> Migration:
    """Register a migration in the global registry."""
    return get_global_registry().add(migration)


async def migrate_to(command: int | str | MigrateCommand | None) -> MigrationResult:
    """Migrate the configured store using the global registry."""
    return await _default_runner().migrate_to(command)


async def get_version() -> int:
    """Return the version stored in the configured store."""
    return await _default_runner().get_version()


async def unlock() -> None:
    """Force-clear the lock of the configured store."""
    await _default_runner().unlock()


async def reset() -> None:
    """Reset the global registry and wipe the control record. Mainly for tests."""
    await _default_runner().reset()


__all__ = [
    # Version
    "__version__",
    # Configuration
    "configure",
    "get_config",
    "get_storage",
    "reset_config",
    # Facade
    "add",
    "migrate_to",
    "get_version",
    "unlock",
    "reset",
    "migrate_from_env",
    "run_startup_migrations",
    # Core
    "Migration",
    "Direction",
    "MigrationRegistry",
    "get_global_registry",
    "register_migration",
    "MigrateCommand",
    "parse_command",
    # Engine
    "MigrationRunner",
    "MigrationResult",
    "MigrationStatus",
    # Exceptions
    "MigrationError",
    "InvalidMigrationDefinition",
    "InvalidCommand",
    "UnknownVersion",
    "MissingDirectionFunction",
    "InvalidControlRecord",
    "ConfigurationError",
    # Storage
    "ControlStorageBackend",
    "InMemoryControlStorage",
    "SQLiteControlStorage",
    "ControlRecord",
    # Logging
    "configure_logging",
    "get_logger",
]
