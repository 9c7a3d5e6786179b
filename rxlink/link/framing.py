"""Inbound framing: how raw reads become text messages.

Two framers are available through :func:`framer_factory`:

* ``"chunk"`` -- each read is one message: decode, strip, deliver if
  non-empty. A message split across two reads arrives as two messages.
* ``"line"`` -- text is buffered and every ``\\n``-terminated line is
  delivered stripped; the unterminated tail waits for the next read.
"""

import codecs
from abc import ABC, abstractmethod


class Framer(ABC):
    @abstractmethod
    def feed(self, data: bytes) -> list[str]:
        """Consume one read and return the complete messages it yields."""
        ...


class ChunkFramer(Framer):
    def __init__(self, encoding: str = "utf-8"):
        self.encoding = encoding

    def feed(self, data: bytes) -> list[str]:
        text = data.decode(self.encoding, errors="replace").strip()
        return [text] if text else []


class LineFramer(Framer):
    def __init__(self, encoding: str = "utf-8"):
        self.encoding = encoding
        # incremental decoder keeps multi-byte sequences split across reads intact
        self._decoder = codecs.getincrementaldecoder(encoding)(errors="replace")
        self._pending = ""

    def feed(self, data: bytes) -> list[str]:
        self._pending += self._decoder.decode(data)
        *lines, self._pending = self._pending.split("\n")
        return [line.strip() for line in lines if line.strip()]


def framer_factory(framing: str, encoding: str = "utf-8") -> Framer:
    """Create a Framer instance based on the framing parameter."""
    if framing == "chunk":
        return ChunkFramer(encoding)
    elif framing == "line":
        return LineFramer(encoding)
    else:
        raise ValueError(f"Unsupported framing '{framing}'.")
