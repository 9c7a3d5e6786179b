"""OpenTelemetry helpers for rxlink components.

Provider configuration, a structured logger wrapper and a console
log-record exporter.
"""

from .config import (
    configure_telemetry,
    get_default_providers,
)
from .exporters import ConsoleLogRecordExporter
from .logger import (
    LogContext,
    OTelLogger,
    format_log_record,
)

__all__ = [
    # config
    "configure_telemetry",
    "get_default_providers",
    # logger
    "OTelLogger",
    "LogContext",
    "format_log_record",
    # exporters
    "ConsoleLogRecordExporter",
]
