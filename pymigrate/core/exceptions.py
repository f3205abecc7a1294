"""
Exception hierarchy for PyMigrate.

All errors raised by the migration engine derive from MigrationError so that
host applications can catch them with a single except clause at startup.

Lock contention is not an error: a process that fails to acquire the control
lock gets a MigrationResult with status LOCKED.
"""


class MigrationError(Exception):
    """Base exception for all migration errors."""

    pass


class InvalidMigrationDefinition(MigrationError):
    """
    Raised when a migration is rejected at registration time.

    Examples:
        - the up step is missing or not callable
        - the version is not an integer or is <= 0
        - the version is already registered
    """

    pass


class InvalidCommand(MigrationError):
    """
    Raised when migrate_to() receives a command it cannot parse.

    Also raised when the registry has no migrations to resolve against.
    """

    def __init__(self, command: object, reason: str | None = None) -> None:
        self.command = command
        self.reason = reason
        message = f"Cannot migrate using invalid command: {command!r}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class UnknownVersion(MigrationError):
    """Raised when a version is not present in the registry."""

    def __init__(self, version: int) -> None:
        self.version = version
        super().__init__(f"Can't find migration version {version}")


class MissingDirectionFunction(MigrationError):
    """
    Raised when a migration has no step for the requested direction.

    The control lock is left held when this is raised mid-walk; the store must
    be inspected and unlocked manually.
    """

    def __init__(self, direction: str, version: int) -> None:
        self.direction = direction
        self.version = version
        super().__init__(f"Cannot migrate {direction} on version {version}")


class InvalidControlRecord(MigrationError, TypeError):
    """Raised when the control record would be written with wrongly typed fields."""

    pass


class ConfigurationError(MigrationError):
    """Raised for unknown configuration options or storage types."""

    pass
