"""Shared test fixtures for rxlink tests."""

import queue
import threading
import time

import pytest

from rxlink import LinkConfig, LinkManager, PeerHandle
from rxlink.link.events import ConnectivityChanged, LinkError, MessageReceived


def wait_for(predicate, timeout: float = 2.0, interval: float = 0.005) -> bool:
    """Poll ``predicate`` until it holds or ``timeout`` expires."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(interval)
    return predicate()


class FakeStream:
    """In-memory stream.

    ``connect`` blocks while ``connect_gate`` is set and not yet released,
    ``read`` serves items pushed with :meth:`feed`, :meth:`eof` or
    :meth:`fail`, and every call fails once the stream is closed.
    """

    def __init__(self, connect_error=None, gated=False, write_error=None, monitor=None):
        self.connect_error = connect_error
        self.write_error = write_error
        self.connect_gate = threading.Event() if gated else None
        self.monitor = monitor
        self.peer = None
        self.inbound: queue.Queue = queue.Queue()
        self.written: list[bytes] = []
        self.closed = threading.Event()
        self.close_count = 0

    # test controls
    def release(self):
        assert self.connect_gate is not None
        self.connect_gate.set()

    def feed(self, data: bytes):
        self.inbound.put(data)

    def eof(self):
        self.inbound.put(EOFError("end of stream"))

    def fail(self, error: BaseException):
        self.inbound.put(error)

    # Stream protocol
    def connect(self):
        if self.monitor is not None:
            self.monitor.enter()
        try:
            if self.connect_gate is not None:
                while not self.connect_gate.wait(0.005):
                    if self.closed.is_set():
                        raise OSError("closed during connect")
            if self.closed.is_set():
                raise OSError("stream closed")
            if self.connect_error is not None:
                raise self.connect_error
        finally:
            if self.monitor is not None:
                self.monitor.leave()

    def read(self, size: int) -> bytes:
        while True:
            if self.closed.is_set():
                raise OSError("stream closed")
            try:
                item = self.inbound.get(timeout=0.005)
            except queue.Empty:
                continue
            if isinstance(item, BaseException):
                raise item
            return item[:size]

    def write(self, data: bytes):
        if self.closed.is_set():
            raise OSError("stream closed")
        if self.write_error is not None:
            raise self.write_error
        self.written.append(data)

    def close(self):
        self.close_count += 1
        self.closed.set()


class ConcurrencyMonitor:
    """Tracks the highest number of threads inside a section at once."""

    def __init__(self):
        self._lock = threading.Lock()
        self.current = 0
        self.peak = 0

    def enter(self):
        with self._lock:
            self.current += 1
            self.peak = max(self.peak, self.current)

    def leave(self):
        with self._lock:
            self.current -= 1


class FakeTransport:
    """Hands out prepared FakeStreams first, then default ones."""

    def __init__(self, monitor=None):
        self.monitor = monitor
        self.create_error = None
        self.streams: list[FakeStream] = []
        self._prepared: list[FakeStream] = []
        self._lock = threading.Lock()

    def prepare(self, stream: FakeStream) -> FakeStream:
        self._prepared.append(stream)
        return stream

    def create_stream(self, peer: PeerHandle) -> FakeStream:
        if self.create_error is not None:
            raise self.create_error
        with self._lock:
            stream = self._prepared.pop(0) if self._prepared else FakeStream(monitor=self.monitor)
            stream.peer = peer
            self.streams.append(stream)
        return stream


class Recorder:
    """LinkCallback that records events and detects overlapping calls."""

    def __init__(self):
        self.events: list = []
        self.threads: set[int] = set()
        self.overlapped = False
        self._active = 0
        self._lock = threading.Lock()

    def _record(self, event):
        with self._lock:
            self._active += 1
            if self._active > 1:
                self.overlapped = True
        self.threads.add(threading.get_ident())
        time.sleep(0.001)
        self.events.append(event)
        with self._lock:
            self._active -= 1

    def on_message_received(self, text: str) -> None:
        self._record(MessageReceived(text))

    def on_connection_status_changed(self, connected: bool) -> None:
        self._record(ConnectivityChanged(connected))

    def on_error(self, reason: str) -> None:
        self._record(LinkError(reason))

    def of_type(self, kind) -> list:
        return [e for e in self.events if isinstance(e, kind)]


@pytest.fixture
def peer():
    return PeerHandle("ESP32", "00:11:22:33:44:55")


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def recorder():
    return Recorder()


@pytest.fixture
def link(transport, recorder):
    manager = LinkManager(
        transport,
        config=LinkConfig(join_timeout=1.0, lock_poll_interval=0.005),
        callback=recorder,
    )
    yield manager
    manager.dispose()


@pytest.fixture
def connected(link, transport, peer):
    """A link that completed connect(peer); returns (link, stream)."""
    stream = transport.prepare(FakeStream())
    link.connect(peer)
    assert wait_for(link.is_connected)
    return link, stream
