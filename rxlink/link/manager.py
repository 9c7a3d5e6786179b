"""The link state machine.

:class:`LinkManager` owns the lifecycle state and the two workers of a
single point-to-point link, and publishes what happens through an
:class:`~rxlink.link.dispatcher.EventDispatcher`.
"""

import threading

from opentelemetry._logs import LoggerProvider
from opentelemetry.trace import Tracer, TracerProvider
from reactivex import Observable
from reactivex import operators as ops
from reactivex.scheduler import EventLoopScheduler

from .._otel_mixin import OTelLoggingMixin, make_logger
from ..config import LinkConfig
from ..mechanism import NotConnectedError
from ..telemetry.logger import LogContext
from ..transport.base import PeerHandle, Stream, Transport
from ..utils import get_short_error_info, to_payload
from .connector import ConnectorWorker
from .dispatcher import EventDispatcher
from .events import (
    ConnectivityChanged,
    LinkCallback,
    LinkError,
    LinkEvent,
    MessageReceived,
)
from .state import LinkState
from .stream_worker import StreamWorker


class LinkManager(OTelLoggingMixin):
    """A single logical link to one peer.

    Key Features
    ------------
    * **Three-state lifecycle** -- NONE, CONNECTING, CONNECTED. Every
      transition emits one ``ConnectivityChanged`` event, including
      transitions that do not flip the boolean.
    * **Single owner** -- at most one connector and one stream worker exist
      at a time; a new one is only started after the previous one has been
      cancelled and joined. All transitions run under one lock.
    * **No retry** -- a failed or lost link stays down until the next
      :meth:`connect`.
    * **No exceptions at the boundary** -- writing while disconnected emits
      a ``LinkError`` event instead of raising.

    Parameters
    ----------
    transport : Transport
        Creates the stream for each connect attempt.
    config : LinkConfig | None
        Buffer size, framing, timeouts and policies. Defaults to ``LinkConfig()``.
    callback : LinkCallback | None
        Consumer callback; can be replaced later with :meth:`set_callback`.
    scheduler : EventLoopScheduler | None
        Event delivery thread. Defaults to a private one.
    name : str | None
        Log source name. Defaults to ``"LinkManager"``.
    tracer_provider, logger_provider
        Optional OTel providers. Without a logger provider nothing is logged.
    """

    def __init__(
        self,
        transport: Transport,
        config: LinkConfig | None = None,
        callback: LinkCallback | None = None,
        scheduler: EventLoopScheduler | None = None,
        name: str | None = None,
        tracer_provider: TracerProvider | None = None,
        logger_provider: LoggerProvider | None = None,
    ):
        self._transport = transport
        self._config = config if config else LinkConfig()
        self._name = name if name else "LinkManager"

        self._logger = make_logger(
            logger_provider, self._name, LogContext(component=self._name)
        )
        self._tracer: Tracer | None = (
            tracer_provider.get_tracer(f"rxlink.{self._name}")
            if tracer_provider
            else None
        )

        self._dispatcher = EventDispatcher(
            scheduler,
            logger=self._child_logger("EventDispatcher"),
        )
        self._dispatcher.set_callback(callback)

        self._lock = threading.RLock()
        self._state_changed = threading.Condition(self._lock)
        self._state = LinkState.NONE
        self._last_error: str | None = None
        self._peer: PeerHandle | None = None
        self._connector: ConnectorWorker | None = None
        self._stream_worker: StreamWorker | None = None

    # ---------------- observation ---------------- #
    @property
    def config(self) -> LinkConfig:
        return self._config

    @property
    def state(self) -> LinkState:
        return self._state

    @property
    def peer(self) -> PeerHandle | None:
        """The peer of the current or most recent attempt."""
        return self._peer

    @property
    def connector(self) -> ConnectorWorker | None:
        return self._connector

    @property
    def stream_worker(self) -> StreamWorker | None:
        return self._stream_worker

    def is_connected(self) -> bool:
        return self._state is LinkState.CONNECTED

    @property
    def events(self) -> Observable[LinkEvent]:
        """Every event, in delivery order."""
        return self._dispatcher.events

    @property
    def messages(self) -> Observable[str]:
        """Text of each ``MessageReceived`` event."""
        return self.events.pipe(
            ops.filter(lambda e: isinstance(e, MessageReceived)),
            ops.map(lambda e: e.text),
        )

    @property
    def connectivity(self) -> Observable[bool]:
        """Flag of each ``ConnectivityChanged`` event."""
        return self.events.pipe(
            ops.filter(lambda e: isinstance(e, ConnectivityChanged)),
            ops.map(lambda e: e.connected),
        )

    @property
    def errors(self) -> Observable[str]:
        """Reason of each ``LinkError`` event."""
        return self.events.pipe(
            ops.filter(lambda e: isinstance(e, LinkError)),
            ops.map(lambda e: e.reason),
        )

    def set_callback(self, callback: LinkCallback | None) -> None:
        self._dispatcher.set_callback(callback)

    def flush(self, timeout: float | None = None) -> bool:
        """Wait until all events raised so far have been delivered."""
        return self._dispatcher.flush(timeout)

    # ---------------- public operations ---------------- #
    def connect(self, peer: PeerHandle) -> None:
        """Start connecting to ``peer``. Ignored while connecting or connected."""
        with self._lock:
            if self._state in (LinkState.CONNECTING, LinkState.CONNECTED):
                self._log(
                    f"connect({peer}) ignored, link is {self._state.value}.", "DEBUG"
                )
                return

            self._log(f"Connecting: {peer}", "INFO")
            self._last_error = None
            self._cleanup_workers()

            self._peer = peer
            self._connector = ConnectorWorker(
                self,
                self._transport,
                peer,
                logger=self._child_logger("ConnectorWorker", peer),
                tracer=self._tracer,
            )
            self._connector.start()
            self._set_state(LinkState.CONNECTING)

    def on_stream_established(self, stream: Stream, peer: PeerHandle) -> None:
        """Adopt an open ``stream`` to ``peer`` and become CONNECTED.

        Replaces any current stream worker. Also usable directly by callers
        that opened the stream themselves.

        ``ConnectivityChanged(True)`` is posted before the worker starts
        reading, so it precedes every message from the new stream.
        """
        with self._lock:
            self._log(f"Connected: {peer}", "INFO")
            self._cleanup_workers()

            self._peer = peer
            self._stream_worker = StreamWorker(
                self,
                stream,
                peer,
                self._config,
                logger=self._child_logger("StreamWorker", peer),
            )
            self._set_state(LinkState.CONNECTED)
            self._stream_worker.start()

    def stop(self) -> None:
        """Tear the link down. A no-op when already down."""
        with self._lock:
            if (
                self._state is LinkState.NONE
                and self._connector is None
                and self._stream_worker is None
            ):
                return

            self._log("Stopping link.", "INFO")
            self._cleanup_workers()
            self._set_state(LinkState.NONE)

    def write(self, data: str | bytes) -> bool:
        """Send one command to the peer.

        Returns True if the bytes were written. While not connected nothing
        is sent and a ``LinkError`` event is emitted instead.
        """
        try:
            payload = to_payload(data, self._config.encoding)
        except (TypeError, UnicodeEncodeError) as e:
            self._log(f"Rejected outbound command: {get_short_error_info(e)}", "ERROR")
            self._dispatcher.post(LinkError(get_short_error_info(e)))
            return False

        with self._lock:
            worker = (
                self._stream_worker if self._state is LinkState.CONNECTED else None
            )

        if worker is None:
            self._log("Write attempted without a connection.", "ERROR")
            self._dispatcher.post(LinkError(self._config.not_connected_message))
            return False

        return worker.write(payload)

    def wait_until_connected(self, timeout: float | None = None) -> None:
        """Block until a pending connect attempt has settled.

        Raises:
            NotConnectedError: if the link is not CONNECTED once the attempt
                settles, or is still CONNECTING when the timeout expires.
        """
        with self._state_changed:
            self._state_changed.wait_for(
                lambda: self._state is not LinkState.CONNECTING, timeout
            )
            if self._state is LinkState.CONNECTED:
                return
            reason = (
                f"still connecting after {timeout}s"
                if self._state is LinkState.CONNECTING
                else self._last_error or self._config.not_connected_message
            )
        raise NotConnectedError(reason, source=self._name)

    def dispose(self) -> None:
        """Stop the link and shut event delivery down."""
        self.stop()
        self._dispatcher.dispose(self._config.join_timeout)

    def __enter__(self) -> "LinkManager":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.dispose()

    # ---------------- worker reports ---------------- #
    def _connector_succeeded(
        self, worker: ConnectorWorker, stream: Stream, peer: PeerHandle
    ) -> bool:
        """Returns False if ``worker`` was replaced or cancelled meanwhile."""
        if not self._acquire_for(worker):
            return False
        try:
            if self._connector is not worker:
                return False
            self._connector = None
            self.on_stream_established(stream, peer)
            return True
        finally:
            self._lock.release()

    def _connection_failed(self, worker: ConnectorWorker, reason: str) -> None:
        if not self._acquire_for(worker):
            return
        try:
            if self._connector is not worker:
                return
            self._connector = None
            self._log(f"Connection failed: {reason}", "ERROR")
            self._last_error = reason
            self._cleanup_workers()
            self._set_state(LinkState.NONE)
            self._dispatcher.post(LinkError(reason))
        finally:
            self._lock.release()

    def _connection_lost(self, worker: StreamWorker, reason: str) -> None:
        if not self._acquire_for(worker):
            return
        try:
            if self._stream_worker is not worker:
                return
            self._stream_worker = None
            self._log(f"Connection lost: {reason}", "WARN")
            self._last_error = reason
            self._cleanup_workers()
            self._set_state(LinkState.NONE)
        finally:
            self._lock.release()

    def _message_received(self, worker: StreamWorker, text: str) -> None:
        if self._stream_worker is worker:
            self._dispatcher.post(MessageReceived(text))

    # ---------------- internals ---------------- #
    def _acquire_for(self, worker: ConnectorWorker | StreamWorker) -> bool:
        """Take the lock on behalf of ``worker``, giving up once it is cancelled.

        ``stop()`` holds the lock while it joins a cancelled worker, so a
        worker blocked here must notice its cancellation and back off.
        """
        while not self._lock.acquire(timeout=self._config.lock_poll_interval):
            if worker.cancelled:
                return False
        return True

    def _cleanup_workers(self) -> None:
        """Cancel and join the current workers. Caller holds the lock."""
        connector, self._connector = self._connector, None
        stream_worker, self._stream_worker = self._stream_worker, None

        for worker in (connector, stream_worker):
            if worker is None:
                continue
            worker.cancel()
            if not worker.join(self._config.join_timeout):
                self._log(
                    f"{type(worker).__name__} for {worker.peer} did not stop within "
                    f"{self._config.join_timeout}s.",
                    "WARN",
                )

    def _set_state(self, state: LinkState) -> None:
        """Record ``state`` and announce it. Caller holds the lock."""
        self._log(f"Link state: {self._state.value} -> {state.value}", "DEBUG")
        self._state = state
        self._dispatcher.post(ConnectivityChanged(state is LinkState.CONNECTED))
        self._state_changed.notify_all()

    def _child_logger(self, component: str, peer: PeerHandle | None = None):
        if self._logger is None:
            return None
        overrides = {"source": component, "component": component}
        if peer is not None:
            overrides["peer_name"] = peer.name
            overrides["peer_address"] = peer.address
        return self._logger.with_context(**overrides)
