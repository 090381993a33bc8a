"""Storage adapters implementing the diagnostics ports."""

from spanindex.adapters.storage.in_memory import (
    InMemoryLogStorage,
    InMemoryMetricsStorage,
)

__all__ = [
    "InMemoryLogStorage",
    "InMemoryMetricsStorage",
]
