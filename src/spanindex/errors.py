"""Exception hierarchy for span export failures."""


class SpanIndexError(Exception):
    """Base class for errors raised while exporting a span."""


class InvalidSpanError(SpanIndexError):
    """The span cannot be normalized (e.g. it ends before it starts)."""


class SerializationError(SpanIndexError):
    """A derived record could not be JSON-encoded.

    Attributes:
        channel: Name of the output channel the payload was meant for.
    """

    def __init__(self, channel: str, message: str) -> None:
        super().__init__(f"{channel}: {message}")
        self.channel = channel


class ChannelWriteError(SpanIndexError):
    """Submitting a message to an output channel failed or timed out.

    Attributes:
        channel: Name of the output channel that failed.
    """

    def __init__(self, channel: str, message: str) -> None:
        super().__init__(f"{channel}: {message}")
        self.channel = channel
