"""
Migration runner.

Walks the registry from the stored version to a target version, one step at a
time, under the control lock:

1. resolve the target ("latest" is the highest registered version)
2. read the control record
3. return early when already at the target (no lock taken)
4. take the lock; if another process holds it, return without migrating.
   Re-read the version once locked, since it may have moved in between
5. for a rerun, run the up step at the target again and release
6. otherwise run up steps (forward) or down steps (backward) between the two
   registry indices, checkpointing the version after every step
7. release the lock at the final version

A step that raises, or a missing step, stops the walk with the lock still held.
The stored version then points at the last completed step, and an operator
must inspect the store and unlock it. Only an unknown version releases the
lock before raising, since nothing has run at that point.
"""

import inspect
from dataclasses import dataclass, field, replace
from enum import Enum

from pymigrate.config import get_config, get_storage
from pymigrate.core.command import MigrateCommand, parse_command
from pymigrate.core.exceptions import InvalidCommand, MissingDirectionFunction, UnknownVersion
from pymigrate.core.migration import Direction, Migration
from pymigrate.core.registry import MigrationRegistry, get_global_registry
from pymigrate.engine.control import ControlStore
from pymigrate.engine.locker import Locker
from pymigrate.observability.logging import (
    MigrationLogger,
    create_logger,
    migration_logging_context,
)
from pymigrate.observability.tracing import trace_migration, trace_step
from pymigrate.storage.base import ControlStorageBackend
from pymigrate.storage.schemas import ControlRecord


class MigrationStatus(Enum):
    """Outcome of a migrate_to() call."""

    MIGRATED = "migrated"
    RERUN = "rerun"
    ALREADY_AT_VERSION = "already_at_version"
    LOCKED = "locked"


@dataclass
class MigrationResult:
    """
    What a migrate_to() call did.

    Attributes:
        status: Outcome of the call
        from_version: Stored version when the call started
        to_version: Stored version when the call finished
        steps_run: Versions whose step was invoked, in order
        exit_requested: The command carried the "exit" modifier
    """

    status: MigrationStatus
    from_version: int
    to_version: int
    steps_run: list[int] = field(default_factory=list)
    exit_requested: bool = False

    @property
    def migrated(self) -> bool:
        return self.status in (MigrationStatus.MIGRATED, MigrationStatus.RERUN)


class MigrationRunner:
    """
    Applies registered migrations against a control storage backend.

    Example:
        >>> registry = MigrationRegistry()
        >>> registry.add(Migration(version=1, up=create_users, down=drop_users))
        >>> runner = MigrationRunner(registry, storage=SQLiteControlStorage("app.db"))
        >>> await runner.migrate_to("latest")
    """

    def __init__(
        self,
        registry: MigrationRegistry | None = None,
        storage: ControlStorageBackend | None = None,
        log: MigrationLogger | None = None,
        log_if_latest: bool | None = None,
    ) -> None:
        """
        Initialize the migration runner.

        Args:
            registry: Migration registry (defaults to the global registry)
            storage: Control storage (defaults to the configured storage)
            log: Log channel (defaults to one built from configuration)
            log_if_latest: Override the configured log_if_latest option
        """
        self.registry = registry if registry is not None else get_global_registry()
        self.control = ControlStore(storage if storage is not None else get_storage())
        self.locker = Locker(self.control)
        self.log = log if log is not None else create_logger("Migrations")
        self._log_if_latest = log_if_latest

    @property
    def log_if_latest(self) -> bool:
        if self._log_if_latest is not None:
            return self._log_if_latest
        return get_config().log_if_latest

    def add(self, migration: Migration) -> Migration:
        """Register a migration with this runner's registry."""
        return self.registry.add(migration)

    async def migrate_to(self, command: int | str | MigrateCommand | None) -> MigrationResult:
        """
        Migrate the store to the version named by a command.

        Args:
            command: Target version, "latest", optionally with ",rerun" or ",exit"

        Returns:
            MigrationResult describing what happened

        Raises:
            InvalidCommand: If the command is invalid or nothing is registered
            UnknownVersion: If the stored or target version is not registered
            MissingDirectionFunction: If a step is missing for the direction
        """
        if len(self.registry) == 0:
            raise InvalidCommand(command, "no migrations registered")
        parsed = parse_command(command)

        target = self.registry.latest_version if parsed.is_latest else int(parsed.target)
        result = await self._migrate(target, rerun=parsed.rerun)
        return replace(result, exit_requested=parsed.exit)

    async def _migrate(self, version: int, rerun: bool = False) -> MigrationResult:
        control = await self.control.get_control()
        current = control.version

        # Avoid locking when there is nothing to do
        if not rerun and current == version:
            if self.log_if_latest:
                self.log.info(f"Not migrating, already at version {version}")
            return MigrationResult(MigrationStatus.ALREADY_AT_VERSION, current, current)

        if not await self.locker.acquire():
            self.log.info("Not migrating, control is locked.")
            return MigrationResult(MigrationStatus.LOCKED, current, current)

        # Another process may have finished a migration between the read and the lock
        control = await self.control.get_control()
        if control.version != current:
            current = control.version
            if not rerun and current == version:
                await self.locker.release(current)
                return MigrationResult(MigrationStatus.ALREADY_AT_VERSION, current, current)

        if rerun:
            self.log.info(f"Rerunning version {version}")
            idx = await self._index_or_release(version, current)
            await self._run_step(Direction.UP, idx)
            await self.locker.release(current)
            self.log.info("Finished migrating.")
            return MigrationResult(MigrationStatus.RERUN, current, current, [version])

        start_idx = await self._index_or_release(current, current)
        end_idx = await self._index_or_release(version, current)

        self.log.info(
            f"Migrating from version {self.registry[start_idx].version} "
            f"-> {self.registry[end_idx].version}"
        )

        from_version = current
        steps_run: list[int] = []

        with trace_migration(from_version, version):
            if current < version:
                for i in range(start_idx, end_idx):
                    migration = await self._run_step(Direction.UP, i + 1)
                    steps_run.append(migration.version)
                    current = migration.version
                    await self.control.set_control(version=current, locked=True)
            else:
                for i in range(start_idx, end_idx, -1):
                    migration = await self._run_step(Direction.DOWN, i)
                    steps_run.append(migration.version)
                    current = self.registry[i - 1].version
                    await self.control.set_control(version=current, locked=True)

        await self.locker.release(current)
        self.log.info("Finished migrating.")
        return MigrationResult(MigrationStatus.MIGRATED, from_version, current, steps_run)

    async def _index_or_release(self, version: int, current: int) -> int:
        """Look up a registry index, releasing the lock if the version is unknown."""
        try:
            return self.registry.index_of_version(version)
        except UnknownVersion:
            await self.locker.release(current)
            raise

    async def _run_step(self, direction: Direction, idx: int) -> Migration:
        migration = self.registry[idx]
        step = migration.step_for(direction)

        if step is None:
            raise MissingDirectionFunction(direction.value, migration.version)

        self.log.info(f"Running {direction.value}() on version {migration.display_name}")

        with migration_logging_context(migration.version, direction.value, migration.name):
            with trace_step(migration.version, direction.value, migration.name):
                try:
                    result = step(migration)
                    if inspect.isawaitable(result):
                        await result
                except Exception as e:
                    self.log.error(
                        f"{direction.value}() on version {migration.version} failed: {e}"
                    )
                    raise

        return migration

    async def get_version(self) -> int:
        """Return the stored version."""
        control = await self.control.get_control()
        return control.version

    async def get_control(self) -> ControlRecord:
        """Return the full control record."""
        return await self.control.get_control()

    async def unlock(self) -> None:
        """Force-clear the lock. For operators recovering from a failed migration."""
        await self.control.unlock()

    async def reset(self) -> None:
        """
        Clear the registry back to the baseline and wipe the control record.

        Mainly intended for tests.
        """
        self.registry.reset()
        await self.control.reset()
