"""Convenience exports for the :mod:`rxlink` package."""

from .commands import build_dispense_command, order_ready, parse_ultrasonic  # noqa: F401
from .config import LinkConfig  # noqa: F401
from .link import (  # noqa: F401
    ConnectivityChanged,
    EventDispatcher,
    LinkCallback,
    LinkError,
    LinkEvent,
    LinkManager,
    LinkState,
    MessageReceived,
)
from .mechanism import NotConnectedError  # noqa: F401
from .telemetry import configure_telemetry, get_default_providers  # noqa: F401
from .transport import (  # noqa: F401
    SPP_UUID,
    PeerHandle,
    RfcommTransport,
    SerialTransport,
    Stream,
    Transport,
    transport_factory,
)

__all__ = [
    "NotConnectedError",
    "LinkConfig",

    # Link
    "LinkManager",
    "LinkState",
    "EventDispatcher",
    "LinkEvent",
    "MessageReceived",
    "ConnectivityChanged",
    "LinkError",
    "LinkCallback",

    # Transport
    "SPP_UUID",
    "PeerHandle",
    "Stream",
    "Transport",
    "RfcommTransport",
    "SerialTransport",
    "transport_factory",

    # Commands
    "build_dispense_command",
    "parse_ultrasonic",
    "order_ready",

    # Telemetry
    "configure_telemetry",
    "get_default_providers",
]
