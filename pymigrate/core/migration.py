"""
The Migration value type.

A migration is a versioned pair of steps. Steps receive the migration itself
as their only argument and may be plain functions or coroutine functions:

    async def add_index(migration: Migration) -> None:
        ...

    Migration(version=3, up=add_index, down=drop_index, name="add index")

Instances are frozen; once registered their fields never change.
"""

import inspect
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable

Step = Callable[["Migration"], Any]


class Direction(Enum):
    """Direction of travel through the registry."""

    UP = "up"
    DOWN = "down"


def _noop(migration: "Migration") -> None:
    return None


@dataclass(frozen=True)
class Migration:
    """
    A single versioned migration.

    Attributes:
        version: Positive integer identifying the migration order (0 is reserved
            for the baseline)
        up: Step run when migrating forward onto this version
        down: Optional step run when migrating backward off this version
        name: Optional display name used in log messages
        is_async: True when a step may suspend; inferred from coroutine steps
    """

    version: int
    up: Step
    down: Step | None = None
    name: str | None = None
    is_async: bool = False

    def __post_init__(self) -> None:
        if not self.is_async and any(
            inspect.iscoroutinefunction(step) for step in (self.up, self.down) if step
        ):
            object.__setattr__(self, "is_async", True)

    def step_for(self, direction: Direction) -> Step | None:
        """Return the step for a direction, or None if the migration has none."""
        if direction is Direction.UP:
            return self.up
        return self.down

    @property
    def display_name(self) -> str:
        """Version plus optional name, for logs."""
        if self.name:
            return f"{self.version} ({self.name})"
        return str(self.version)

    def __repr__(self) -> str:
        return f"<Migration {self.display_name}>"


def baseline_migration() -> Migration:
    """The synthetic version 0 entry every registry starts with."""
    return Migration(version=0, up=_noop)
