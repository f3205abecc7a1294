"""Core migration types: Migration, registry, command parsing and errors."""

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
from pymigrate.core.migration import Direction, Migration, Step
from pymigrate.core.registry import MigrationRegistry, get_global_registry, register_migration

__all__ = [
    "Migration",
    "Direction",
    "Step",
    "MigrationRegistry",
    "get_global_registry",
    "register_migration",
    "MigrateCommand",
    "parse_command",
    "MigrationError",
    "InvalidMigrationDefinition",
    "InvalidCommand",
    "UnknownVersion",
    "MissingDirectionFunction",
    "InvalidControlRecord",
    "ConfigurationError",
]
