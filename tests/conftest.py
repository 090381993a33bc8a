"""Shared test fixtures for all test modules."""

import logging
from collections.abc import Iterator

import pytest

from spanindex.adapters.channels.in_memory import InMemoryChannel
from spanindex.adapters.logging import StructuredLogHandler
from spanindex.adapters.storage.in_memory import (
    InMemoryLogStorage,
    InMemoryMetricsStorage,
)
from spanindex.core.exporter import SpanBatchExporter
from spanindex.core.writer import MultiTargetWriter, OutputChannels


@pytest.fixture
def channels() -> dict[str, InMemoryChannel]:
    """Three empty in-memory channels keyed by role."""
    return {
        "model": InMemoryChannel("model"),
        "index": InMemoryChannel("index"),
        "error": InMemoryChannel("error"),
    }


@pytest.fixture
def metrics_storage() -> InMemoryMetricsStorage:
    """Empty metrics storage."""
    return InMemoryMetricsStorage()


@pytest.fixture
def writer(
    channels: dict[str, InMemoryChannel], metrics_storage: InMemoryMetricsStorage
) -> MultiTargetWriter:
    """Writer bound to the in-memory channels."""
    return MultiTargetWriter(
        OutputChannels(
            model=channels["model"],
            index=channels["index"],
            error=channels["error"],
        ),
        metrics_storage=metrics_storage,
    )


@pytest.fixture
def exporter(
    writer: MultiTargetWriter, metrics_storage: InMemoryMetricsStorage
) -> SpanBatchExporter:
    """Batch exporter bound to the in-memory writer."""
    return SpanBatchExporter(writer, metrics_storage=metrics_storage)


@pytest.fixture
def log_storage() -> Iterator[InMemoryLogStorage]:
    """Log storage receiving everything the spanindex loggers emit."""
    storage = InMemoryLogStorage()
    handler = StructuredLogHandler(storage)
    logger = logging.getLogger("spanindex")
    previous_level = logger.level
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)
    try:
        yield storage
    finally:
        logger.removeHandler(handler)
        logger.setLevel(previous_level)
