"""Bluetooth RFCOMM transport backed by the stdlib socket module (Linux/BlueZ)."""

import socket
import threading

from .base import PeerHandle


class RfcommStream:
    """A single RFCOMM socket to ``peer``.

    The socket is created eagerly so that :meth:`close` can unblock a
    pending :meth:`connect` from another thread.
    """

    def __init__(self, peer: PeerHandle, sock: socket.socket):
        self.peer = peer
        self._sock = sock
        self._closed = False
        self._close_lock = threading.Lock()

    def connect(self) -> None:
        self._sock.connect((self.peer.address, self.peer.channel))

    def read(self, size: int) -> bytes:
        data = self._sock.recv(size)
        if not data:
            raise EOFError(f"{self.peer} closed the connection")
        return data

    def write(self, data: bytes) -> None:
        self._sock.sendall(data)

    def close(self) -> None:
        with self._close_lock:
            if self._closed:
                return
            self._closed = True
        try:
            # shutdown wakes up a recv/connect blocked in another thread
            self._sock.shutdown(socket.SHUT_RDWR)
        except OSError:
            pass
        self._sock.close()


class RfcommTransport:
    """Creates RFCOMM streams.

    The peer's ``channel`` is used directly; service discovery of the
    Serial Port Profile channel is left to the caller.
    """

    def create_stream(self, peer: PeerHandle) -> RfcommStream:
        family = getattr(socket, "AF_BLUETOOTH", None)
        proto = getattr(socket, "BTPROTO_RFCOMM", None)
        if family is None or proto is None:
            raise OSError("Bluetooth RFCOMM sockets are not supported on this platform")
        sock = socket.socket(family, socket.SOCK_STREAM, proto)
        return RfcommStream(peer, sock)
