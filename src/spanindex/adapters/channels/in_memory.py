"""In-memory output channel.

Keeps every submitted message in a list. Used by tests and for dry runs of
the exporter without a broker.
"""

import json
import time
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class ChannelMessage:
    """One message as submitted to a channel."""

    value: bytes
    key: bytes
    timestamp: float

    def json(self) -> Any:
        """Decode the message value as JSON."""
        return json.loads(self.value)


class InMemoryChannel:
    """In-memory implementation of ChannelPort.

    Args:
        topic: Name reported in logs and error messages.
    """

    def __init__(self, topic: str = "in-memory") -> None:
        self.topic = topic
        self._messages: list[ChannelMessage] = []

    async def send(self, value: bytes, key: bytes = b"1") -> None:
        """Record one message."""
        self._messages.append(
            ChannelMessage(value=value, key=key, timestamp=time.time())
        )

    @property
    def messages(self) -> list[ChannelMessage]:
        return list(self._messages)

    def decoded(self) -> list[Any]:
        """Return every message value decoded as JSON, in send order."""
        return [message.json() for message in self._messages]

    def clear(self) -> None:
        self._messages.clear()
