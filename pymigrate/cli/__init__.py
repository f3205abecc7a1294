"""PyMigrate CLI - Run and inspect migrations."""

from typing import Optional

import click
from loguru import logger

from pymigrate import __version__
from pymigrate.cli.utils.config import load_config
from pymigrate.cli.utils.discovery import discover_migrations


@click.group()
@click.version_option(version=__version__, prog_name="pymigrate")
@click.option(
    "--module",
    envvar="PYMIGRATE_MODULE",
    help="Python module to import for migration discovery",
)
@click.option(
    "--storage",
    type=click.Choice(["sqlite", "memory"], case_sensitive=False),
    envvar="PYMIGRATE_STORAGE_BACKEND",
    help="Control storage backend type (default: sqlite)",
)
@click.option(
    "--storage-path",
    envvar="PYMIGRATE_STORAGE_PATH",
    help="Database path for the sqlite backend (default: ./pymigrate.db)",
)
@click.option(
    "--collection",
    envvar="PYMIGRATE_COLLECTION",
    help="Name of the collection holding the control record (default: migrations)",
)
@click.option(
    "--output",
    type=click.Choice(["table", "json", "plain"], case_sensitive=False),
    default="table",
    help="Output format (default: table)",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose logging",
)
@click.pass_context
def main(
    ctx: click.Context,
    module: Optional[str],
    storage: Optional[str],
    storage_path: Optional[str],
    collection: Optional[str],
    output: str,
    verbose: bool,
) -> None:
    """
    PyMigrate CLI - Run and inspect migrations.

    Examples:

        # Migrate to the latest version
        pymigrate --module myapp.migrations migrate latest

        # Show stored version and lock state
        pymigrate status

        # Clear the lock after a failed migration
        pymigrate unlock

    Configuration:

        - CLI flags (highest priority)
        - Environment variables (PYMIGRATE_MODULE, PYMIGRATE_STORAGE_BACKEND, etc.)
        - Config file (pymigrate.config.yaml)
    """
    if verbose:
        logger.enable("pymigrate")
        logger.info("Verbose logging enabled")
    else:
        logger.disable("pymigrate")

    config = load_config()
    discover_migrations(module, config)

    ctx.ensure_object(dict)
    ctx.obj["module"] = module
    ctx.obj["storage_type"] = storage
    ctx.obj["storage_path"] = storage_path
    ctx.obj["collection"] = collection
    ctx.obj["output"] = output
    ctx.obj["config"] = config
    ctx.obj["verbose"] = verbose


from pymigrate.cli.commands.migrations import list_migrations, migrate, status, unlock  # noqa: E402

main.add_command(migrate)
main.add_command(status)
main.add_command(unlock)
main.add_command(list_migrations)


__all__ = ["main"]
