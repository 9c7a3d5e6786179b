"""Events delivered by the link to its consumer.

``LinkEvent`` is the tagged union of the three event kinds. Consumers
either subscribe to the event Observable and match on type, or register a
:class:`LinkCallback` and get one method call per event.
"""

from dataclasses import dataclass
from typing import Protocol, runtime_checkable


@dataclass(frozen=True)
class MessageReceived:
    """A trimmed, non-empty text message read from the peer."""

    text: str


@dataclass(frozen=True)
class ConnectivityChanged:
    """Emitted once per state transition; ``connected`` is True iff CONNECTED."""

    connected: bool


@dataclass(frozen=True)
class LinkError:
    """A non-fatal, human-readable failure report."""

    reason: str


LinkEvent = MessageReceived | ConnectivityChanged | LinkError


@runtime_checkable
class LinkCallback(Protocol):
    """Callback contract for link consumers."""

    def on_message_received(self, text: str) -> None: ...

    def on_connection_status_changed(self, connected: bool) -> None: ...

    def on_error(self, reason: str) -> None: ...


def dispatch_to_callback(event: LinkEvent, callback: LinkCallback) -> None:
    """Invoke the callback method matching ``event``."""
    if isinstance(event, MessageReceived):
        callback.on_message_received(event.text)
    elif isinstance(event, ConnectivityChanged):
        callback.on_connection_status_changed(event.connected)
    elif isinstance(event, LinkError):
        callback.on_error(event.reason)
    else:
        raise TypeError(f"Unknown link event {event!r}")
