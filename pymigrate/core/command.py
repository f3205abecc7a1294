"""
Parser for migrate commands.

Grammar:

    <version | "latest">[,"rerun" | ,"exit"]

An int is accepted as a bare target version. Examples: 2, "latest",
"latest,exit", "3,rerun".
"""

from dataclasses import dataclass

from pymigrate.core.exceptions import InvalidCommand

LATEST = "latest"
RERUN = "rerun"
EXIT = "exit"


@dataclass(frozen=True)
class MigrateCommand:
    """
    A parsed migrate command.

    Attributes:
        target: Target version, or "latest"
        rerun: Re-run the up step at the target without changing the version
        exit: Ask the host process to exit once migrating finishes
    """

    target: int | str
    rerun: bool = False
    exit: bool = False

    @property
    def is_latest(self) -> bool:
        return self.target == LATEST


def parse_command(command: int | str | MigrateCommand | None) -> MigrateCommand:
    """
    Parse a migrate command.

    Raises:
        InvalidCommand: If the command is empty, the target is not an integer
            or "latest", or the modifier is unknown
    """
    if isinstance(command, MigrateCommand):
        return command
    if command is None or isinstance(command, bool):
        raise InvalidCommand(command)
    if isinstance(command, int):
        return MigrateCommand(target=command)
    if not isinstance(command, str) or not command.strip():
        raise InvalidCommand(command)

    parts = [part.strip() for part in command.split(",")]
    if len(parts) > 2:
        raise InvalidCommand(command, "at most one modifier is allowed")

    version = parts[0]
    modifier = parts[1] if len(parts) == 2 else None
    if modifier not in (None, RERUN, EXIT):
        raise InvalidCommand(command, f"unknown modifier {modifier!r}")

    if version == LATEST:
        target: int | str = LATEST
    else:
        try:
            target = int(version)
        except ValueError:
            raise InvalidCommand(command, f"{version!r} is not a version number") from None

    return MigrateCommand(target=target, rerun=modifier == RERUN, exit=modifier == EXIT)
