"""
OpenTelemetry tracing integration for PyMigrate.

Provides optional spans around a migration run and each migration step.
Tracing is disabled by default and must be explicitly enabled via
configure_tracing().

OpenTelemetry is an optional dependency: when it is not installed, enabling
tracing logs a warning and leaves tracing disabled.

Example:
    >>> from pymigrate.observability import TracingConfig, configure_tracing
    >>> configure_tracing(TracingConfig(enabled=True, exporter="console"))
"""

from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Generator

from loguru import logger

from pymigrate import __version__

_tracing_enabled: bool = False
_tracer: Any = None


@dataclass
class TracingConfig:
    """Configuration for OpenTelemetry tracing.

    Attributes:
        enabled: Whether tracing is enabled.
        service_name: Service name for traces.
        endpoint: OTLP endpoint URL.
        exporter: Exporter type ("otlp", "console").
        sample_rate: Sampling rate (0.0 to 1.0).
    """

    enabled: bool = False
    service_name: str = "pymigrate"
    endpoint: str | None = None
    exporter: str = "otlp"
    sample_rate: float = 1.0


def configure_tracing(config: TracingConfig) -> None:
    """Configure and initialize OpenTelemetry tracing.

    Note:
        Install tracing dependencies with: pip install pymigrate[tracing]
    """
    global _tracing_enabled, _tracer

    if not config.enabled:
        _tracing_enabled = False
        _tracer = None
        logger.debug("Tracing is disabled")
        return

    try:
        from opentelemetry import trace
        from opentelemetry.sdk.resources import Resource
        from opentelemetry.sdk.trace import TracerProvider
        from opentelemetry.sdk.trace.sampling import TraceIdRatioBased
    except ImportError as e:
        logger.warning(
            f"OpenTelemetry not installed, tracing disabled: {e}. "
            "Install with: pip install pymigrate[tracing]"
        )
        _tracing_enabled = False
        _tracer = None
        return

    resource = Resource.create(
        {"service.name": config.service_name, "service.version": __version__}
    )
    provider = TracerProvider(resource=resource, sampler=TraceIdRatioBased(config.sample_rate))
    trace.set_tracer_provider(provider)
    _configure_exporter(provider, config)

    _tracer = trace.get_tracer("pymigrate", __version__)
    _tracing_enabled = True

    logger.info(
        f"Tracing configured: service={config.service_name}, "
        f"exporter={config.exporter}, sample_rate={config.sample_rate}"
    )


def _configure_exporter(provider: Any, config: TracingConfig) -> None:
    """Attach the configured span exporter to the provider."""
    if config.exporter == "otlp":
        if not config.endpoint:
            return
        try:
            from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import (
                OTLPSpanExporter,
            )
            from opentelemetry.sdk.trace.export import BatchSpanProcessor
        except ImportError:
            logger.warning("OTLP exporter not installed: pip install opentelemetry-exporter-otlp")
            return

        provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter(endpoint=config.endpoint)))
        logger.debug(f"OTLP exporter configured for {config.endpoint}")

    elif config.exporter == "console":
        from opentelemetry.sdk.trace.export import ConsoleSpanExporter, SimpleSpanProcessor

        provider.add_span_processor(SimpleSpanProcessor(ConsoleSpanExporter()))
        logger.debug("Console exporter configured")


def is_tracing_enabled() -> bool:
    """Check if tracing is currently enabled."""
    return _tracing_enabled


@contextmanager
def _span(name: str, attributes: dict[str, Any]) -> Generator[Any, None, None]:
    from opentelemetry import trace
    from opentelemetry.trace import Status, StatusCode

    with _tracer.start_as_current_span(name, kind=trace.SpanKind.INTERNAL) as span:
        for key, value in attributes.items():
            if value is not None:
                span.set_attribute(f"pymigrate.{key}", value)
        try:
            yield span
            span.set_status(Status(StatusCode.OK))
        except Exception as e:
            span.set_status(Status(StatusCode.ERROR, str(e)))
            span.record_exception(e)
            span.set_attribute("pymigrate.error_type", type(e).__name__)
            raise


@contextmanager
def trace_migration(from_version: int, to_version: int) -> Generator[Any, None, None]:
    """Span covering a whole migrate_to() walk.

    Yields None without any overhead when tracing is disabled.
    """
    if not _tracing_enabled or _tracer is None:
        yield None
        return

    with _span(
        f"migrate:{from_version}->{to_version}",
        {"from_version": from_version, "to_version": to_version, "type": "migration"},
    ) as span:
        yield span


@contextmanager
def trace_step(
    version: int, direction: str, name: str | None = None
) -> Generator[Any, None, None]:
    """Span covering a single migration step."""
    if not _tracing_enabled or _tracer is None:
        yield None
        return

    with _span(
        f"step:{direction}:{version}",
        {"version": version, "direction": direction, "name": name, "type": "step"},
    ) as span:
        yield span
