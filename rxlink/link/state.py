"""Link lifecycle states."""

from enum import Enum


class LinkState(Enum):
    """Lifecycle states of a :class:`~rxlink.link.LinkManager`.

    State transitions:
        NONE → CONNECTING: connect() started a connector
        CONNECTING → CONNECTED: handshake succeeded
        CONNECTED → CONNECTED: a new stream replaced the current one
        CONNECTING → NONE: handshake failed
        CONNECTED → NONE: the peer went away
        any → NONE: stop()
    """

    NONE = "none"
    CONNECTING = "connecting"
    CONNECTED = "connected"
