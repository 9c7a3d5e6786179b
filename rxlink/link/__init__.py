"""Link state machine, workers and event delivery."""

from .connector import ConnectorWorker
from .dispatcher import EventDispatcher
from .events import (
    ConnectivityChanged,
    LinkCallback,
    LinkError,
    LinkEvent,
    MessageReceived,
)
from .framing import ChunkFramer, Framer, LineFramer, framer_factory
from .manager import LinkManager
from .state import LinkState
from .stream_worker import StreamWorker

__all__ = [
    # state machine
    "LinkManager",
    "LinkState",
    # workers
    "ConnectorWorker",
    "StreamWorker",
    # events
    "EventDispatcher",
    "LinkEvent",
    "MessageReceived",
    "ConnectivityChanged",
    "LinkError",
    "LinkCallback",
    # framing
    "Framer",
    "ChunkFramer",
    "LineFramer",
    "framer_factory",
]
