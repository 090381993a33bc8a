"""Output channel adapters implementing ChannelPort."""

from spanindex.adapters.channels.in_memory import ChannelMessage, InMemoryChannel
from spanindex.adapters.channels.kafka import KafkaChannel, KafkaChannelGroup

__all__ = [
    "ChannelMessage",
    "InMemoryChannel",
    "KafkaChannel",
    "KafkaChannelGroup",
]
