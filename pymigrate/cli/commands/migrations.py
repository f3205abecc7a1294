"""Migration commands: migrate, status, unlock, list."""

import sys

import click

from pymigrate import MigrationError, MigrationRunner, get_global_registry
from pymigrate.cli.output.formatters import (
    format_json,
    format_key_value,
    format_plain,
    format_table,
    print_error,
    print_info,
    print_success,
    print_warning,
)
from pymigrate.cli.utils.async_helpers import async_command
from pymigrate.cli.utils.storage import create_storage
from pymigrate.engine.runner import MigrationStatus


def _runner(ctx: click.Context) -> MigrationRunner:
    storage = create_storage(
        ctx.obj["storage_type"],
        ctx.obj["storage_path"],
        ctx.obj["config"],
        ctx.obj["collection"],
    )
    return MigrationRunner(get_global_registry(), storage)


@click.command(name="migrate")
@click.argument("command")
@click.pass_context
@async_command
async def migrate(ctx: click.Context, command: str) -> None:
    """
    Migrate the store to a version.

    COMMAND is a version number or "latest", optionally followed by ",rerun"
    to re-run the up step at that version, or ",exit".

    Examples:

        # Migrate to the highest registered version
        pymigrate --module myapp.migrations migrate latest

        # Migrate down to version 2
        pymigrate --module myapp.migrations migrate 2

        # Re-run version 3
        pymigrate --module myapp.migrations migrate 3,rerun
    """
    runner = _runner(ctx)
    try:
        result = await runner.migrate_to(command)
    except MigrationError as e:
        print_error(str(e))
        sys.exit(1)
    finally:
        await runner.control.storage.disconnect()

    if ctx.obj["output"] == "json":
        format_json(
            {
                "status": result.status.value,
                "from_version": result.from_version,
                "to_version": result.to_version,
                "steps_run": result.steps_run,
            }
        )
        return

    if result.status is MigrationStatus.LOCKED:
        print_warning("Control is locked, another process is migrating")
    elif result.status is MigrationStatus.ALREADY_AT_VERSION:
        print_info(f"Already at version {result.to_version}")
    elif result.status is MigrationStatus.RERUN:
        print_success(f"Re-ran version {result.steps_run[0]}")
    else:
        print_success(f"Migrated from version {result.from_version} to {result.to_version}")


@click.command(name="status")
@click.pass_context
@async_command
async def status(ctx: click.Context) -> None:
    """
    Show the stored version and lock state.

    Examples:

        pymigrate status
        pymigrate --output json status
    """
    runner = _runner(ctx)
    try:
        control = await runner.get_control()
    finally:
        await runner.control.storage.disconnect()

    data = {
        "version": control.version,
        "locked": control.locked,
        "locked_at": control.locked_at,
        "latest": runner.registry.latest_version,
    }

    output = ctx.obj["output"]
    if output == "json":
        format_json(data)
    elif output == "plain":
        format_plain([str(control.version)])
    else:
        format_key_value(data, title="Migration Control")


@click.command(name="unlock")
@click.pass_context
@async_command
async def unlock(ctx: click.Context) -> None:
    """
    Force-clear the migration lock.

    Only use this after inspecting the store following a failed migration.
    """
    runner = _runner(ctx)
    try:
        await runner.unlock()
    finally:
        await runner.control.storage.disconnect()
    print_success("Control unlocked")


@click.command(name="list")
@click.pass_context
@async_command
async def list_migrations(ctx: click.Context) -> None:
    """
    List registered migrations.

    Examples:

        pymigrate --module myapp.migrations list
    """
    runner = _runner(ctx)
    try:
        current = await runner.get_version()
    finally:
        await runner.control.storage.disconnect()

    rows = [
        {
            "version": m.version,
            "name": m.name or "",
            "down": "yes" if m.down is not None else "no",
            "async": "yes" if m.is_async else "no",
            "applied": "✓" if m.version <= current else "",
        }
        for m in runner.registry
    ]

    output = ctx.obj["output"]
    if output == "json":
        format_json(rows)
    elif output == "plain":
        format_plain([str(row["version"]) for row in rows])
    else:
        format_table(rows, ["version", "name", "down", "async", "applied"], title="Migrations")
