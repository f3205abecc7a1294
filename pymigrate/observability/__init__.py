"""
Observability for PyMigrate.

Logging:
    - configure_logging(): Configure loguru-based logging
    - configure_logging_from_env(): Configure from environment variables
    - get_logger(): Get a logger instance
    - migration_logging_context(): Context manager binding the running step
    - create_logger(): Build the migration log channel from configuration

Tracing (requires `pip install pymigrate[tracing]`):
    - TracingConfig, configure_tracing(), is_tracing_enabled()
    - trace_migration(), trace_step(): spans around runs and steps
"""

from pymigrate.observability.logging import (
    MigrationLogger,
    configure_logging,
    configure_logging_from_env,
    create_logger,
    get_logger,
    migration_logging_context,
)
from pymigrate.observability.tracing import (
    TracingConfig,
    configure_tracing,
    is_tracing_enabled,
    trace_migration,
    trace_step,
)

__all__ = [
    # Logging
    "configure_logging",
    "configure_logging_from_env",
    "get_logger",
    "migration_logging_context",
    "create_logger",
    "MigrationLogger",
    # Tracing
    "TracingConfig",
    "configure_tracing",
    "is_tracing_enabled",
    "trace_migration",
    "trace_step",
]
