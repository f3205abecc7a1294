"""Rich styles and themes for CLI output."""

from rich.theme import Theme

# Custom theme for PyMigrate CLI
PYMIGRATE_THEME = Theme({
    "info": "cyan",
    "warning": "yellow",
    "error": "bold red",
    "success": "bold green",
    "status.migrated": "green",
    "status.rerun": "blue",
    "status.already_at_version": "cyan",
    "status.locked": "yellow",
})
