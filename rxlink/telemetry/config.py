"""OTel provider configuration for rxlink components.

Provides :func:`configure_telemetry` (tracer + logger providers) and
:func:`get_default_providers` (lazy singleton with console output).
"""

from opentelemetry.sdk._logs import LoggerProvider
from opentelemetry.sdk._logs.export import (
    BatchLogRecordProcessor,
    LogRecordExporter,
    SimpleLogRecordProcessor,
)
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, SpanExporter

from .exporters import ConsoleLogRecordExporter


def configure_telemetry(
    service_name: str = "rxlink",
    service_version: str = "",
    span_exporter: SpanExporter | None = None,
    log_exporter: LogRecordExporter | None = None,
    batch_logs: bool = True,
) -> tuple[TracerProvider, LoggerProvider]:
    """
    Configure OTel providers for rxlink components.

    Returns the providers for explicit injection into components -- does
    NOT set global providers.

    Args:
        service_name: Service identifier for resource attributes.
        service_version: Service version for resource attributes.
        span_exporter: Optional span exporter.
        log_exporter: Optional log exporter.
        batch_logs: If True, use BatchLogRecordProcessor. If False, use
            SimpleLogRecordProcessor (immediate, better for console).

    Returns:
        Tuple of (TracerProvider, LoggerProvider).

    Example:
        >>> tracer_provider, logger_provider = configure_telemetry(
        ...     service_name="dispenser",
        ...     log_exporter=ConsoleLogRecordExporter(),
        ...     batch_logs=False,
        ... )
        >>> link = LinkManager(RfcommTransport(), logger_provider=logger_provider)
    """
    resource = Resource.create(
        {
            "service.name": service_name,
            "service.version": service_version,
        }
    )

    tracer_provider = TracerProvider(resource=resource)
    if span_exporter:
        tracer_provider.add_span_processor(BatchSpanProcessor(span_exporter))

    logger_provider = LoggerProvider(resource=resource)
    if log_exporter:
        if batch_logs:
            logger_provider.add_log_record_processor(
                BatchLogRecordProcessor(log_exporter)
            )
        else:
            logger_provider.add_log_record_processor(
                SimpleLogRecordProcessor(log_exporter)
            )

    return tracer_provider, logger_provider


_default_tracer_provider: TracerProvider | None = None
_default_logger_provider: LoggerProvider | None = None


def get_default_providers(
    service_name: str = "rxlink",
) -> tuple[TracerProvider, LoggerProvider]:
    """Get or create default providers with console output.

    Lazily initializes the providers on first call and returns the same
    pair afterwards. Logs go to stderr through ConsoleLogRecordExporter
    with immediate (non-batched) processing.
    """
    global _default_tracer_provider, _default_logger_provider

    if _default_logger_provider is None:
        _default_tracer_provider, _default_logger_provider = configure_telemetry(
            service_name=service_name,
            log_exporter=ConsoleLogRecordExporter(),
            batch_logs=False,
        )

    assert _default_tracer_provider is not None
    return _default_tracer_provider, _default_logger_provider
