"""Transport abstractions.

A :class:`Transport` turns a :class:`PeerHandle` into an unconnected
:class:`Stream`. The link manager only relies on the four stream
operations below, so any byte-level duplex channel can be plugged in.

Stream contract:
    - ``connect()`` blocks until the handshake completes, raising
      ``OSError`` on failure. Closing the stream from another thread must
      unblock it.
    - ``read(size)`` blocks for up to ``size`` bytes. It returns ``b""``
      when nothing arrived (e.g. a read timeout) and raises ``EOFError``
      or ``OSError`` once the peer is gone or the stream was closed.
    - ``write(data)`` blocks until ``data`` has been handed to the
      channel, raising ``OSError`` on failure.
    - ``close()`` may be called more than once.
"""

from dataclasses import dataclass
from typing import Protocol, runtime_checkable

# Serial Port Profile service class identifier.
SPP_UUID = "00001101-0000-1000-8000-00805F9B34FB"


@dataclass(frozen=True)
class PeerHandle:
    """Identifies the remote endpoint of a link.

    Attributes:
        name: Human-readable peer name, used in logs only.
        address: Bluetooth MAC address, or serial device path.
        channel: RFCOMM channel. Ignored by serial transports.
    """

    name: str
    address: str
    channel: int = 1

    def __post_init__(self):
        if not self.address:
            raise ValueError("PeerHandle.address must not be empty")
        if not 1 <= self.channel <= 30:
            raise ValueError(f"RFCOMM channel must be in 1..30, got {self.channel}")

    def __str__(self) -> str:
        return f"{self.name}[{self.address}]"


@runtime_checkable
class Stream(Protocol):
    """Byte-level duplex channel to a peer."""

    def connect(self) -> None: ...

    def read(self, size: int) -> bytes: ...

    def write(self, data: bytes) -> None: ...

    def close(self) -> None: ...


@runtime_checkable
class Transport(Protocol):
    """Factory for unconnected streams."""

    def create_stream(self, peer: PeerHandle) -> Stream: ...
