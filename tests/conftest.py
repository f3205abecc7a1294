"""Shared fixtures for the PyMigrate test suite."""

import pytest
from loguru import logger

from pymigrate import (
    InMemoryControlStorage,
    Migration,
    MigrationRegistry,
    MigrationRunner,
    get_global_registry,
    reset_config,
)


@pytest.fixture(autouse=True)
def clean_state():
    """Reset global configuration and the global registry around every test."""
    reset_config()
    get_global_registry().reset()
    logger.enable("pymigrate")
    yield
    reset_config()
    get_global_registry().reset()
    logger.enable("pymigrate")


@pytest.fixture
def storage():
    return InMemoryControlStorage()


@pytest.fixture
def calls():
    """Ordered record of step invocations, e.g. ["up:1", "up:2", "down:2"]."""
    return []


@pytest.fixture
def registry(calls):
    """Registry with versions 0..3, each with up and down steps that record calls."""

    def make(version):
        def up(migration):
            calls.append(f"up:{migration.version}")

        def down(migration):
            calls.append(f"down:{migration.version}")

        return Migration(version=version, up=up, down=down, name=f"v{version}")

    registry = MigrationRegistry()
    for version in (1, 2, 3):
        registry.add(make(version))
    return registry


@pytest.fixture
def runner(registry, storage):
    return MigrationRunner(registry, storage)
