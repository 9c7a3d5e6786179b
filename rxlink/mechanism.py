"""Core error types for :mod:`rxlink`."""


class NotConnectedError(ConnectionError):
    """The link is not (or no longer) connected to its peer."""

    def __init__(self, reason: str, source: str = "Unknown"):
        super().__init__(f"<{source}> {reason}")
        self.reason = reason
        self.source = source

    def __str__(self):
        return f"<{self.source}> {self.reason}"
