"""Migration discovery utilities."""

import importlib
import os
import sys
from pathlib import Path
from typing import Any

import click
from loguru import logger


def _find_project_root() -> Path | None:
    """
    Find the project root by looking for common project markers.

    Searches upward from the current directory for pyproject.toml, setup.py
    or a .git directory.
    """
    current = Path.cwd()

    for path in [current] + list(current.parents):
        if (path / "pyproject.toml").exists():
            return path
        if (path / "setup.py").exists():
            return path
        if (path / ".git").exists():
            return path

    return None


def _ensure_project_in_path() -> None:
    """Add the project root and current directory to sys.path if not already present."""
    cwd = str(Path.cwd())
    if cwd not in sys.path:
        sys.path.insert(0, cwd)
        logger.debug(f"Added current directory to path: {cwd}")

    project_root = _find_project_root()
    if project_root:
        root_str = str(project_root)
        if root_str not in sys.path:
            sys.path.insert(0, root_str)
            logger.debug(f"Added project root to path: {root_str}")


def _import_module(module_path: str) -> bool:
    """
    Import a single module to trigger migration registration.

    Returns:
        True if import succeeded, False otherwise
    """
    try:
        importlib.import_module(module_path)
        logger.info(f"Imported module: {module_path}")
        return True
    except ImportError as e:
        logger.error(f"Failed to import module '{module_path}': {e}")
        return False


def discover_migrations(
    module_path: str | None = None,
    config: dict[str, Any] | None = None,
) -> None:
    """
    Import Python modules to register migrations in the global registry.

    Migrations are registered when their module is imported (pymigrate.add()
    or @register_migration at module level).

    Priority:
    1. Explicit module_path argument (from --module flag)
    2. PYMIGRATE_DISCOVER environment variable (comma separated)
    3. `module` / `modules` keys of pymigrate.config.yaml

    Raises:
        click.ClickException: If a module cannot be imported
    """
    _ensure_project_in_path()

    if module_path:
        logger.debug(f"Discovering from --module: {module_path}")
        if not _import_module(module_path):
            raise click.ClickException(
                f"Cannot import module '{module_path}'. "
                f"Make sure the module exists and is in your Python path."
            )
        return

    modules: list[str] = []
    source = ""

    env_modules = os.getenv("PYMIGRATE_DISCOVER", "")
    if env_modules:
        modules = [m.strip() for m in env_modules.split(",") if m.strip()]
        source = "PYMIGRATE_DISCOVER"
    elif config:
        if "module" in config:
            modules.append(config["module"])
        if "modules" in config:
            modules.extend(config["modules"])
        source = "pymigrate.config.yaml"

    if not modules:
        logger.debug("No migration module specified")
        return

    logger.debug(f"Discovering from {source}: {modules}")
    failed = [module for module in modules if not _import_module(module)]
    if failed:
        raise click.ClickException(
            f"Cannot import modules from {source}: {', '.join(failed)}. "
            f"Make sure the modules exist and are in your Python path.\n"
            f"  Current directory: {Path.cwd()}\n"
            f"  Project root: {_find_project_root() or 'not found'}"
        )
