"""Console log-record exporter for CLI-friendly output."""

import sys
from collections.abc import Sequence

from opentelemetry.sdk._logs.export import (
    LogRecordExporter,
    LogRecordExportResult,
)

from .logger import format_log_record


class ConsoleLogRecordExporter(LogRecordExporter):
    """OTel LogRecordExporter that writes one human-readable line per record.

    Unlike OTel's ConsoleLogExporter, which prints verbose JSON, this
    produces lines such as::

        2026-02-03T10:30:00Z [INFO] LinkManager@AA:BB:CC:DD:EE:FF LinkManager\t: 'Connected'

    Parameters:
        out: Text stream to write to. Defaults to ``sys.stderr`` resolved at
            export time.
    """

    def __init__(self, out=None):
        self._out = out

    def _stream(self):
        return self._out if self._out is not None else sys.stderr

    def export(self, batch: Sequence) -> LogRecordExportResult:
        out = self._stream()
        try:
            for readable_record in batch:
                record = getattr(readable_record, "log_record", readable_record)
                out.write(format_log_record(record))
            out.flush()
            return LogRecordExportResult.SUCCESS
        except Exception:
            return LogRecordExportResult.FAILURE

    def shutdown(self) -> None:
        pass

    def force_flush(self, timeout_millis: int = 30000) -> bool:
        self._stream().flush()
        return True
