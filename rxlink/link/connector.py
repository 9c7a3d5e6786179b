"""Background handshake with a peer."""

import contextlib
import threading
from typing import TYPE_CHECKING

from opentelemetry.trace import Tracer

from .._otel_mixin import OTelLoggingMixin
from ..telemetry.logger import OTelLogger
from ..transport.base import PeerHandle, Stream, Transport
from ..utils import get_full_error_info, get_short_error_info

if TYPE_CHECKING:
    from .manager import LinkManager


class ConnectorWorker(OTelLoggingMixin):
    """Runs one blocking ``Stream.connect()`` on a daemon thread.

    Reports back to its owner exactly once: ``_connector_succeeded`` with
    the open stream, or ``_connection_failed`` with a short cause. A
    cancelled worker reports nothing and closes whatever stream it holds.
    """

    def __init__(
        self,
        owner: "LinkManager",
        transport: Transport,
        peer: PeerHandle,
        logger: OTelLogger | None = None,
        tracer: Tracer | None = None,
    ):
        self.peer = peer
        self._owner = owner
        self._transport = transport
        self._logger = logger
        self._tracer = tracer

        self._cancelled = threading.Event()
        # guards the hand-over of self._stream between run and cancel
        self._stream_lock = threading.Lock()
        self._stream: Stream | None = None
        self._thread = threading.Thread(
            target=self._run, name=f"rxlink-connect-{peer.address}", daemon=True
        )

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def start(self) -> None:
        self._thread.start()

    def is_alive(self) -> bool:
        return self._thread.is_alive()

    def join(self, timeout: float | None = None) -> bool:
        """Wait for the thread to exit. Returns True if it is gone."""
        if self._thread.ident is not None and self._thread is not threading.current_thread():
            self._thread.join(timeout)
        return not self._thread.is_alive()

    def cancel(self) -> None:
        """Request early termination and unblock a pending handshake."""
        self._cancelled.set()
        with self._stream_lock:
            stream, self._stream = self._stream, None
        if stream is not None:
            self._close(stream)

    def _run(self) -> None:
        try:
            self._connect()
        except Exception as e:
            self._log(
                f"Unexpected connector failure for {self.peer}:\n{get_full_error_info(e)}",
                "ERROR",
            )
            if not self.cancelled:
                self._owner._connection_failed(self, get_short_error_info(e))

    def _connect(self) -> None:
        self._log(f"Connecting to {self.peer}...", "INFO")

        try:
            stream = self._transport.create_stream(self.peer)
        except OSError as e:
            self._log(f"Failed to create stream: {get_short_error_info(e)}", "ERROR")
            if not self.cancelled:
                self._owner._connection_failed(self, get_short_error_info(e))
            return

        with self._stream_lock:
            if self.cancelled:
                self._close(stream)
                return
            self._stream = stream

        span = (
            self._tracer.start_as_current_span(
                "rxlink.connect",
                attributes={"peer.name": self.peer.name, "peer.address": self.peer.address},
            )
            if self._tracer
            else contextlib.nullcontext()
        )
        try:
            with span:
                stream.connect()
        except (OSError, EOFError) as e:
            self._close(stream)
            if self.cancelled:
                self._log(f"Connection to {self.peer} cancelled.", "DEBUG")
                return
            self._log(f"Connection to {self.peer} failed: {get_short_error_info(e)}", "ERROR")
            self._owner._connection_failed(self, get_short_error_info(e))
            return

        with self._stream_lock:
            if self._stream is None:
                # cancel() already closed it
                return
            self._stream = None

        self._log(f"Connected to {self.peer}.", "INFO")
        if not self._owner._connector_succeeded(self, stream, self.peer):
            self._log(f"Connection to {self.peer} no longer wanted, closing.", "DEBUG")
            self._close(stream)

    def _close(self, stream: Stream) -> None:
        try:
            stream.close()
        except OSError as e:
            self._log(f"Failed to close stream: {get_short_error_info(e)}", "WARN")
