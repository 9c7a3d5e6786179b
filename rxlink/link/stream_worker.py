"""Owner of a live stream: background read loop plus synchronous writes."""

import threading
from typing import TYPE_CHECKING

from .._otel_mixin import OTelLoggingMixin
from ..config import LinkConfig
from ..telemetry.logger import OTelLogger
from ..transport.base import PeerHandle, Stream
from ..utils import get_full_error_info, get_short_error_info
from .framing import framer_factory

if TYPE_CHECKING:
    from .manager import LinkManager


class StreamWorker(OTelLoggingMixin):
    """Reads and writes one connected stream.

    The read loop runs on a daemon thread for the worker's whole lifetime
    and forwards framed messages to the owner. A read failure closes the
    stream and is reported once as a lost connection, unless the worker
    was cancelled first. Writes run on the caller's thread.
    """

    def __init__(
        self,
        owner: "LinkManager",
        stream: Stream,
        peer: PeerHandle,
        config: LinkConfig,
        logger: OTelLogger | None = None,
    ):
        self.peer = peer
        self._owner = owner
        self._stream = stream
        self._config = config
        self._logger = logger
        self._framer = framer_factory(config.framing, config.encoding)

        self._cancelled = threading.Event()
        self._write_lock = threading.Lock()
        # guards _closed and _lost so the stream is closed and the loss reported once
        self._close_lock = threading.Lock()
        self._closed = False
        self._lost = False
        self._thread = threading.Thread(
            target=self._run, name=f"rxlink-stream-{peer.address}", daemon=True
        )

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def start(self) -> None:
        self._thread.start()

    def is_alive(self) -> bool:
        return self._thread.is_alive()

    def join(self, timeout: float | None = None) -> bool:
        """Wait for the read loop to exit. Returns True if it is gone."""
        if self._thread.ident is not None and self._thread is not threading.current_thread():
            self._thread.join(timeout)
        return not self._thread.is_alive()

    def cancel(self) -> None:
        """Stop the read loop; the pending read fails and is not reported."""
        self._cancelled.set()
        self._close_stream()

    def write(self, data: bytes) -> bool:
        """Blocking write of ``data``. Returns False if the stream failed."""
        with self._write_lock:
            try:
                self._stream.write(data)
            except (OSError, EOFError) as e:
                self._log(f"Failed to send to {self.peer}: {get_short_error_info(e)}", "WARN")
                if self._config.write_failure_is_loss and not self.cancelled:
                    self._report_lost(get_short_error_info(e))
                return False
        self._log(f"Sent {len(data)} bytes to {self.peer}.", "DEBUG")
        return True

    def _run(self) -> None:
        self._log(f"Reading from {self.peer}.", "DEBUG")
        try:
            self._read_loop()
        except Exception as e:
            self._log(
                f"Unexpected reader failure for {self.peer}:\n{get_full_error_info(e)}",
                "ERROR",
            )
            if not self.cancelled:
                self._report_lost(get_short_error_info(e))

    def _read_loop(self) -> None:
        while not self._cancelled.is_set():
            try:
                data = self._stream.read(self._config.read_buffer_size)
            except (OSError, EOFError) as e:
                if self.cancelled or self._lost:
                    self._log(f"Reader for {self.peer} stopped.", "DEBUG")
                    return
                self._log(f"Failed to read from {self.peer}: {get_short_error_info(e)}", "WARN")
                self._report_lost(get_short_error_info(e))
                return

            if not data:
                continue

            for text in self._framer.feed(data):
                self._log(f"Received: {text}", "DEBUG")
                self._owner._message_received(self, text)

    def _report_lost(self, reason: str) -> None:
        with self._close_lock:
            if self._lost:
                return
            self._lost = True
        self._close_stream()
        self._owner._connection_lost(self, reason)

    def _close_stream(self) -> None:
        with self._close_lock:
            if self._closed:
                return
            self._closed = True
        try:
            self._stream.close()
        except OSError as e:
            self._log(f"Failed to close stream: {get_short_error_info(e)}", "WARN")
