"""Serial-port transport backed by pyserial.

Useful for peripherals bound to ``/dev/rfcomm*`` or wired through a USB
UART, where the peer's ``address`` is the device path.
"""

import threading

import serial

from .base import PeerHandle

LINE_TERMINATOR = b"\n"


class SerialStream:
    """A serial port opened on :meth:`connect`.

    Each read collects bytes up to and including a newline, so a line paced
    out over the wire comes back whole. A read timeout yields what arrived
    so far, ``b""`` when nothing did, which the stream worker treats as
    "nothing arrived yet".
    """

    def __init__(self, peer: PeerHandle, baudrate: int = 9600, timeout: float | None = 0.5):
        self.peer = peer
        self.baudrate = baudrate
        self.timeout = timeout
        self._ser = serial.Serial()
        self._ser.port = peer.address
        self._ser.baudrate = baudrate
        self._ser.timeout = timeout
        self._closed = False
        self._close_lock = threading.Lock()

    def connect(self) -> None:
        try:
            self._ser.open()
        except serial.SerialException as e:
            raise OSError(f"Cannot open {self.peer.address}: {e}") from e
        if self._closed:
            # closed while opening
            self._ser.close()
            raise OSError(f"{self.peer.address} was closed during open")

    def read(self, size: int) -> bytes:
        if self._closed or not self._ser.is_open:
            raise EOFError(f"{self.peer.address} is closed")
        try:
            return self._ser.read_until(expected=LINE_TERMINATOR, size=size)
        except (serial.SerialException, TypeError) as e:
            # pyserial raises TypeError when the port is closed mid-read
            raise OSError(f"Read from {self.peer.address} failed: {e}") from e

    def write(self, data: bytes) -> None:
        try:
            self._ser.write(data)
            self._ser.flush()
        except serial.SerialException as e:
            raise OSError(f"Write to {self.peer.address} failed: {e}") from e

    def close(self) -> None:
        with self._close_lock:
            if self._closed:
                return
            self._closed = True
        if self._ser.is_open:
            # wakes up a read blocked in another thread
            self._ser.cancel_read()
            self._ser.close()


class SerialTransport:
    """Creates serial streams with a fixed baudrate and read timeout."""

    def __init__(self, baudrate: int = 9600, timeout: float | None = 0.5):
        self.baudrate = baudrate
        self.timeout = timeout

    def create_stream(self, peer: PeerHandle) -> SerialStream:
        return SerialStream(peer, baudrate=self.baudrate, timeout=self.timeout)
