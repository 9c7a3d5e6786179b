"""Shared OTel logging mixin for link components."""

from opentelemetry._logs import LoggerProvider

from .telemetry.logger import LogContext, OTelLogger


def make_logger(
    logger_provider: LoggerProvider | None, source: str, context: LogContext | None = None
) -> OTelLogger | None:
    """Build an :class:`OTelLogger` for ``source``, or None without a provider."""
    if logger_provider is None:
        return None
    return OTelLogger(
        logger_provider.get_logger(f"rxlink.{source}"), source=source, context=context
    )


class OTelLoggingMixin:
    """Mixin providing _log() for link components with OTel integration."""

    _logger: OTelLogger | None

    def _log(self, body: str, level: str = "INFO", **attrs) -> None:
        """Emit a log record via the OTel logger if configured."""
        if self._logger is None:
            return
        if level == "DEBUG":
            self._logger.debug(body, **attrs)
        elif level == "WARN":
            self._logger.warning(body, **attrs)
        elif level == "ERROR":
            self._logger.error(body, **attrs)
        else:
            self._logger.info(body, **attrs)
