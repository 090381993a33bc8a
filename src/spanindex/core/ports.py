"""Port interfaces for output channels and diagnostics storage.

These protocols define the contracts that adapters must implement.
The core domain depends only on these interfaces, not concrete implementations.
"""

from collections.abc import Iterable
from typing import Protocol, runtime_checkable

from spanindex.core.models import LogEntry, MetricSample


@runtime_checkable
class ChannelPort(Protocol):
    """Port for one output channel (one broker topic).

    Adapters implementing this protocol submit a single message per call and
    must be safe to share between concurrent batches.
    Examples: KafkaChannel, InMemoryChannel.
    """

    async def send(self, value: bytes, key: bytes = b"1") -> None:
        """Submit one message.

        Raises:
            ChannelWriteError: If the message could not be delivered.
        """
        ...


@runtime_checkable
class LogStoragePort(Protocol):
    """Port for log storage operations.

    Adapters implementing this protocol can store and retrieve log entries.
    Examples: InMemoryLogStorage.
    """

    def write(self, entry: LogEntry) -> None:
        """Write a log entry to storage."""
        ...

    def read(self, since: float = 0) -> Iterable[LogEntry]:
        """Read log entries since the given timestamp.

        Args:
            since: Unix timestamp. Returns entries with timestamp > since.
                   Default 0 returns all entries.

        Returns:
            Iterable of LogEntry objects, ordered by timestamp ascending.
        """
        ...


@runtime_checkable
class MetricsStoragePort(Protocol):
    """Port for metrics storage operations.

    Adapters implementing this protocol can store and retrieve metric samples.
    Examples: InMemoryMetricsStorage.
    """

    def write(self, sample: MetricSample) -> None:
        """Write a metric sample to storage."""
        ...

    def scrape(self) -> Iterable[MetricSample]:
        """Scrape all current metric samples.

        Returns:
            Iterable of MetricSample objects representing current state.
        """
        ...
