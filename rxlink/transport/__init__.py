"""Transports that supply byte streams to the link manager."""

from typing import Literal

from .base import SPP_UUID, PeerHandle, Stream, Transport
from .rfcomm import RfcommStream, RfcommTransport
from .serial_port import SerialStream, SerialTransport


def transport_factory(kind: Literal["rfcomm", "serial"], **kwargs) -> Transport:
    """Create a Transport instance based on the kind parameter."""
    if kind == "rfcomm":
        return RfcommTransport(**kwargs)
    elif kind == "serial":
        return SerialTransport(**kwargs)
    else:
        raise ValueError(f"Unsupported transport '{kind}'.")


__all__ = [
    "SPP_UUID",
    "PeerHandle",
    "Stream",
    "Transport",
    "RfcommStream",
    "RfcommTransport",
    "SerialStream",
    "SerialTransport",
    "transport_factory",
]
