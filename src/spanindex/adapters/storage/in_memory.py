"""In-memory storage adapters for exporter logs and metrics."""

import threading
from collections.abc import Iterable

from spanindex.core.models import LogEntry, MetricSample


class InMemoryLogStorage:
    """In-memory implementation of LogStoragePort.

    Stores log entries in a list. Suitable for testing and
    low-volume deployments where persistence is not required.
    """

    def __init__(self) -> None:
        self._entries: list[LogEntry] = []
        self._lock = threading.Lock()

    def write(self, entry: LogEntry) -> None:
        """Write a log entry to storage."""
        with self._lock:
            self._entries.append(entry)

    def read(self, since: float = 0) -> Iterable[LogEntry]:
        """Read log entries since the given timestamp.

        Returns entries with timestamp > since, ordered by timestamp ascending.
        """
        with self._lock:
            filtered = [e for e in self._entries if e.timestamp > since]
        return sorted(filtered, key=lambda e: e.timestamp)

    def clear(self) -> None:
        """Remove all entries."""
        with self._lock:
            self._entries.clear()


class InMemoryMetricsStorage:
    """In-memory implementation of MetricsStoragePort.

    Stores metric samples in a list. Suitable for testing and
    low-volume deployments where persistence is not required.
    """

    def __init__(self) -> None:
        self._samples: list[MetricSample] = []
        self._lock = threading.Lock()

    def write(self, sample: MetricSample) -> None:
        """Write a metric sample to storage."""
        with self._lock:
            self._samples.append(sample)

    def scrape(self) -> Iterable[MetricSample]:
        """Scrape all current metric samples."""
        with self._lock:
            return list(self._samples)

    def total(self, name: str, **labels: str) -> float:
        """Sum the values of samples with this name and matching labels."""
        return sum(
            sample.value
            for sample in self.scrape()
            if sample.name == name
            and all(sample.labels.get(k) == v for k, v in labels.items())
        )
