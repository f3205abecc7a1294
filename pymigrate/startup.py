"""
Startup driver: migrate from an environment variable when the host boots.

Set MIGRATE (or the configured env_var) to a migrate command:

    MIGRATE="latest" python -m myapp           # migrate, then keep running
    MIGRATE="latest,exit" python -m myapp      # migrate, then exit
    MIGRATE="2,exit" python -m myapp           # migrate to version 2 and exit

Only this driver terminates the process for the "exit" modifier; the runner
itself just reports it in MigrationResult.exit_requested.
"""

import asyncio
import os
import sys
from typing import TYPE_CHECKING

from loguru import logger

from pymigrate.config import get_config

if TYPE_CHECKING:
    from pymigrate.engine.runner import MigrationResult, MigrationRunner


async def migrate_from_env(
    runner: "MigrationRunner | None" = None, env_var: str | None = None
) -> "MigrationResult | None":
    """
    Run migrate_to() with the command found in the environment.

    Args:
        runner: MigrationRunner to use (defaults to the global registry and
            configured storage)
        env_var: Variable to read (defaults to the configured env_var)

    Returns:
        The MigrationResult, or None when the variable is not set
    """
    from pymigrate.engine.runner import MigrationRunner

    name = env_var or get_config().env_var
    command = os.getenv(name)
    if not command:
        logger.debug(f"{name} not set, skipping startup migrations")
        return None

    if runner is None:
        runner = MigrationRunner()

    result = await runner.migrate_to(command)

    if result.exit_requested:
        logger.info(f"Exiting after migrating ({name}={command})")
        sys.exit(0)
    return result


def run_startup_migrations(
    runner: "MigrationRunner | None" = None, env_var: str | None = None
) -> "MigrationResult | None":
    """Synchronous wrapper around migrate_from_env() for hosts without a loop."""
    return asyncio.run(migrate_from_env(runner, env_var))
