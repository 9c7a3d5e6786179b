"""Link configuration.

Provides :class:`LinkConfig`, the frozen set of knobs shared by the link
manager and its workers.
"""

from dataclasses import dataclass
from typing import Literal

FRAMING = Literal["chunk", "line"]


@dataclass(frozen=True)
class LinkConfig:
    """Typed configuration for a :class:`~rxlink.link.LinkManager`.

    Attributes:
        read_buffer_size: Maximum number of bytes requested per read call.
        encoding: Text encoding for inbound messages and ``str`` writes.
        framing: ``"chunk"`` delivers each read as one trimmed message,
            ``"line"`` reassembles newline-terminated lines across reads.
        join_timeout: Seconds to wait for a cancelled worker thread to exit.
        lock_poll_interval: Seconds between lock attempts made by a worker
            reporting a failure, so it can notice its own cancellation.
        not_connected_message: Reason carried by the error event emitted
            when writing while the link is down.
        write_failure_is_loss: If True, a failed write is treated like a
            failed read and drops the link. If False (default), write
            failures are only logged.
    """

    read_buffer_size: int = 1024
    encoding: str = "utf-8"
    framing: FRAMING = "chunk"
    join_timeout: float = 2.0
    lock_poll_interval: float = 0.05
    not_connected_message: str = "not connected"
    write_failure_is_loss: bool = False

    def __post_init__(self):
        if self.read_buffer_size <= 0:
            raise ValueError(
                f"read_buffer_size must be positive, got {self.read_buffer_size}"
            )
        if self.join_timeout <= 0:
            raise ValueError(f"join_timeout must be positive, got {self.join_timeout}")
        if self.lock_poll_interval <= 0:
            raise ValueError(
                f"lock_poll_interval must be positive, got {self.lock_poll_interval}"
            )
        if self.framing not in ("chunk", "line"):
            raise ValueError(f"Unsupported framing '{self.framing}'.")
