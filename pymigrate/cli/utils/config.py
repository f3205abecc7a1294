"""CLI configuration file loading."""

from pathlib import Path
from typing import Any

from loguru import logger

from pymigrate.config import CONFIG_FILENAME, load_yaml_file


def load_config(path: Path | None = None) -> dict[str, Any]:
    """
    Load pymigrate.config.yaml as a raw dict.

    A file the library would ignore (invalid YAML, or not a mapping) is
    ignored here too.

    Returns:
        Configuration dictionary, empty dict if the file is absent or ignored
    """
    config_path = path or Path.cwd() / CONFIG_FILENAME
    config = load_yaml_file(config_path)
    if config:
        logger.info(f"Loaded config from: {config_path}")
    return config
