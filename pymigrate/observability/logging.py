"""
Loguru logging configuration for PyMigrate.

Provides structured logging with migration context (version, direction) and
the migration log channel used by the runner.

Features:
- Environment variable configuration for production deployments
- Standard JSON schema compatible with ELK/Loki/Datadog
- Context manager binding the running migration to every record
- Pluggable logger callable for hosts with their own logging pipeline
"""

import json
import os
import sys
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Generator

from loguru import logger

LOG_LEVELS = ("info", "warn", "error", "debug")

# Migration channel level -> loguru level
_LOGURU_LEVELS = {
    "info": "INFO",
    "warn": "WARNING",
    "error": "ERROR",
    "debug": "DEBUG",
}


def configure_logging(
    level: str = "INFO",
    log_file: str | None = None,
    json_logs: bool = False,
    show_context: bool = True,
) -> None:
    """
    Configure PyMigrate logging with loguru.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional file path for log output
        json_logs: If True, output logs in JSON format (useful for production)
        show_context: If True, include migration context in log messages

    Examples:
        # Basic configuration (console output only)
        configure_logging()

        # Production mode with JSON logs
        configure_logging(level="INFO", log_file="migrations.log", json_logs=True)
    """
    logger.remove()

    if json_logs:
        logger.add(
            sys.stderr,
            format="{message}",
            level=level,
            colorize=False,
            serialize=False,
            filter=_create_json_filter(show_context),
        )
    else:
        console_format = (
            "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
            "<level>{message}</level>"
        )

        def format_with_context(record: dict[str, Any]) -> bool:
            """Add migration context fields to the record."""
            extra_str = ""
            if show_context and record["extra"]:
                context_parts = []
                if "version" in record["extra"]:
                    context_parts.append(f"version={record['extra']['version']}")
                if "direction" in record["extra"]:
                    context_parts.append(f"direction={record['extra']['direction']}")
                if context_parts:
                    extra_str = " | " + " ".join(context_parts)
            record["extra"]["_context"] = extra_str
            return True

        logger.add(
            sys.stderr,
            format=console_format + "{extra[_context]}",
            level=level,
            colorize=True,
            filter=format_with_context,  # type: ignore[arg-type]
        )

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)

        if json_logs:
            logger.add(
                log_file,
                format="{message}",
                level=level,
                rotation="100 MB",
                retention="30 days",
                compression="gz",
                serialize=False,
                filter=_create_json_filter(show_context),
            )
        else:
            logger.add(
                log_file,
                format=(
                    "{time:YYYY-MM-DD HH:mm:ss.SSS} | "
                    "{level: <8} | "
                    "{name}:{function}:{line} | "
                    "{message} | "
                    "{extra}"
                ),
                level=level,
                rotation="100 MB",
                retention="30 days",
                compression="gz",
            )

    logger.debug(f"PyMigrate logging configured at level {level}")


def _create_json_filter(show_context: bool) -> Any:
    """Create a filter function that formats logs as JSON."""

    def json_filter(record: dict[str, Any]) -> bool:
        record["message"] = _format_for_json(record, show_context)
        return True

    return json_filter


def _format_for_json(record: dict[str, Any], show_context: bool = True) -> str:
    """Format log record as JSON compatible with log aggregators.

    Args:
        record: Loguru log record.
        show_context: Whether to include context fields.

    Returns:
        JSON string representation of the log.
    """
    context_keys = {"version", "direction", "migration_name", "tag"}

    context = {}
    extra = {}

    for key, value in record["extra"].items():
        if key.startswith("_"):
            continue
        if key in context_keys:
            context[key] = value
        else:
            extra[key] = _safe_serialize(value)

    log_obj: dict[str, Any] = {
        "timestamp": record["time"].isoformat(),
        "level": record["level"].name,
        "message": record["message"],
        "logger": record["name"],
        "function": record["function"],
        "line": record["line"],
    }

    if show_context and context:
        log_obj["context"] = context

    if extra:
        log_obj["extra"] = extra

    if record["exception"] is not None:
        log_obj["exception"] = {
            "type": record["exception"].type.__name__ if record["exception"].type else None,
            "value": str(record["exception"].value) if record["exception"].value else None,
            "traceback": record["exception"].traceback is not None,
        }

    return json.dumps(log_obj, default=str)


def _safe_serialize(value: Any) -> Any:
    """Safely serialize a value for JSON output."""
    if isinstance(value, (str, int, float, bool, type(None))):
        return value
    if isinstance(value, (list, tuple)):
        return [_safe_serialize(v) for v in value]
    if isinstance(value, dict):
        return {str(k): _safe_serialize(v) for k, v in value.items()}
    if isinstance(value, datetime):
        return value.isoformat()
    return str(value)


def configure_logging_from_env() -> None:
    """Configure logging from environment variables.

    Environment variables:
        PYMIGRATE_LOG_LEVEL: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        PYMIGRATE_LOG_FORMAT: Log format ("json" or "console")
        PYMIGRATE_LOG_FILE: Optional file path for log output
        PYMIGRATE_LOG_CONTEXT: Whether to show context ("true" or "false")
    """
    level = os.getenv("PYMIGRATE_LOG_LEVEL", "INFO").upper()
    format_type = os.getenv("PYMIGRATE_LOG_FORMAT", "console").lower()
    log_file = os.getenv("PYMIGRATE_LOG_FILE")
    show_context = os.getenv("PYMIGRATE_LOG_CONTEXT", "true").lower() in ("true", "1", "yes")

    configure_logging(
        level=level,
        log_file=log_file,
        json_logs=(format_type == "json"),
        show_context=show_context,
    )


def get_logger(name: str | None = None) -> Any:
    """
    Get a logger instance.

    Examples:
        log = get_logger(__name__)
        log.info("Checking control record")
    """
    if name:
        return logger.bind(module=name)
    return logger


@contextmanager
def migration_logging_context(
    version: int, direction: str, name: str | None = None
) -> Generator[None, None, None]:
    """Context manager binding the running migration to all logs within scope.

    Records emitted by migration steps themselves (through loguru) carry the
    version and direction, which ties them to the step in log aggregators.

    Example:
        with migration_logging_context(3, "up", "add index"):
            logger.info("Creating index")  # Includes version=3 direction=up
    """
    with logger.contextualize(version=version, direction=direction, migration_name=name):
        yield


class MigrationLogger:
    """
    The log channel used by the migration runner.

    Messages are routed to the configured `logger` callable when there is one,
    otherwise to loguru prefixed with the channel tag. A disabled channel
    drops everything.
    """

    def __init__(
        self,
        prefix: str,
        enabled: bool = True,
        sink: Callable[[dict[str, str]], Any] | None = None,
    ) -> None:
        if not isinstance(prefix, str):
            raise TypeError("Logger prefix must be a string")
        self.prefix = prefix
        self.enabled = enabled
        self.sink = sink

    def __call__(self, level: str, message: str) -> None:
        self._emit(level, message)

    def _emit(self, level: str, message: str) -> None:
        # Every public entry point calls this directly: the caller is two frames up
        if not self.enabled:
            return
        if level not in LOG_LEVELS:
            raise ValueError(f"Invalid log level {level!r}, expected one of {LOG_LEVELS}")
        if not isinstance(message, str):
            raise TypeError("Log message must be a string")

        if self.sink is not None:
            self.sink({"level": level, "message": message, "tag": self.prefix})
        else:
            logger.opt(depth=2).bind(tag=self.prefix).log(
                _LOGURU_LEVELS[level], f"{self.prefix}: {message}"
            )

    def info(self, message: str) -> None:
        self._emit("info", message)

    def warn(self, message: str) -> None:
        self._emit("warn", message)

    def error(self, message: str) -> None:
        self._emit("error", message)

    def debug(self, message: str) -> None:
        self._emit("debug", message)


def create_logger(prefix: str) -> MigrationLogger:
    """
    Build the migration log channel from the current configuration.

    Honours `log` (False gives a silent channel) and `logger` (callable sink).
    """
    from pymigrate.config import get_config

    config = get_config()
    return MigrationLogger(prefix, enabled=config.log is not False, sink=config.logger)


# Hosts opt in to env-driven configuration; otherwise loguru's defaults stand
if os.getenv("PYMIGRATE_LOG_LEVEL") or os.getenv("PYMIGRATE_LOG_FORMAT"):
    configure_logging_from_env()
