"""
Migration registry.

Holds the version-sorted list of migrations the runner walks. The list always
starts with the baseline migration at version 0 so that a fresh store (at
version 0) has a well-defined starting index.

Registries are plain objects owned by the host application. A process-wide
registry is also provided for the module-level facade in pymigrate.
"""

from collections.abc import Iterator, Mapping
from typing import Any, Callable

from pymigrate.core.exceptions import InvalidMigrationDefinition, UnknownVersion
from pymigrate.core.migration import Migration, Step, baseline_migration


def _coerce(migration: Migration | Mapping[str, Any]) -> Migration:
    """Build a Migration from a definition mapping, validating as we go."""
    if isinstance(migration, Migration):
        up, down, version = migration.up, migration.down, migration.version
    elif isinstance(migration, Mapping):
        up = migration.get("up")
        down = migration.get("down")
        version = migration.get("version")
    else:
        raise InvalidMigrationDefinition(
            f"Migration must be a Migration or a mapping, got {type(migration).__name__}"
        )

    if not callable(up):
        raise InvalidMigrationDefinition("Migration must supply an up function.")
    if down is not None and not callable(down):
        raise InvalidMigrationDefinition("Migration down must be a function if supplied.")
    # bool is an int subclass; True is not a version number
    if not isinstance(version, int) or isinstance(version, bool):
        raise InvalidMigrationDefinition("Migration must supply a version number.")
    if version <= 0:
        raise InvalidMigrationDefinition("Migration version must be greater than 0")

    if isinstance(migration, Migration):
        return migration

    return Migration(
        version=version,
        up=up,
        down=down,
        name=migration.get("name"),
        is_async=bool(migration.get("is_async", migration.get("async", False))),
    )


class MigrationRegistry:
    """
    Ordered registry of migrations.

    Migrations are kept sorted ascending by version. Versions are unique:
    registering a version twice raises InvalidMigrationDefinition.

    Example:
        >>> registry = MigrationRegistry()
        >>> registry.add(Migration(version=1, up=create_users))
        >>> registry.add({"version": 2, "up": add_email, "down": drop_email})
        >>> registry.versions()
        [0, 1, 2]
    """

    def __init__(self) -> None:
        self._migrations: list[Migration] = [baseline_migration()]

    def add(self, migration: Migration | Mapping[str, Any]) -> Migration:
        """
        Register a migration.

        Args:
            migration: Migration instance or a mapping with the keys
                up, version and optionally down, name, async

        Returns:
            The registered (frozen) Migration

        Raises:
            InvalidMigrationDefinition: If the definition is invalid or the
                version is already registered
        """
        registered = _coerce(migration)
        if any(m.version == registered.version for m in self._migrations):
            raise InvalidMigrationDefinition(
                f"Migration version {registered.version} already registered"
            )

        self._migrations.append(registered)
        self._migrations.sort(key=lambda m: m.version)
        return registered

    def index_of_version(self, version: int) -> int:
        """
        Find the position of a version in the registry.

        Raises:
            UnknownVersion: If no migration has this version
        """
        for idx, migration in enumerate(self._migrations):
            if migration.version == version:
                return idx
        raise UnknownVersion(version)

    def get(self, version: int) -> Migration | None:
        """Get a migration by version, or None."""
        for migration in self._migrations:
            if migration.version == version:
                return migration
        return None

    @property
    def latest_version(self) -> int:
        """Highest registered version (0 when only the baseline exists)."""
        return self._migrations[-1].version

    def versions(self) -> list[int]:
        return [m.version for m in self._migrations]

    def reset(self) -> None:
        """Drop every migration except the baseline."""
        self._migrations = [baseline_migration()]

    def __getitem__(self, index: int) -> Migration:
        return self._migrations[index]

    def __iter__(self) -> Iterator[Migration]:
        return iter(list(self._migrations))

    def __len__(self) -> int:
        return len(self._migrations)

    def __repr__(self) -> str:
        return f"MigrationRegistry(versions={self.versions()})"


# Global migration registry used by the pymigrate facade
_global_registry = MigrationRegistry()


def get_global_registry() -> MigrationRegistry:
    """Get the global migration registry."""
    return _global_registry


def register_migration(
    version: int,
    down: Step | None = None,
    name: str | None = None,
    registry: MigrationRegistry | None = None,
) -> Callable[[Step], Step]:
    """
    Decorator registering the decorated function as the up step of a migration.

    Example:
        @register_migration(3, down=drop_orders_index, name="index orders")
        async def index_orders(migration):
            ...
    """
    target = registry if registry is not None else _global_registry

    def decorator(func: Step) -> Step:
        target.add(Migration(version=version, up=func, down=down, name=name))
        return func

    return decorator
