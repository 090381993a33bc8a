"""Factory wiring a SpanBatchExporter to its Kafka channels."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from spanindex.adapters.channels.kafka import KafkaChannelGroup
from spanindex.config import ExporterConfig
from spanindex.core.exporter import SpanBatchExporter
from spanindex.core.ports import MetricsStoragePort
from spanindex.core.writer import MultiTargetWriter

logger = logging.getLogger(__name__)


@asynccontextmanager
async def create_traces_exporter(
    config: ExporterConfig,
    metrics_storage: MetricsStoragePort | None = None,
) -> AsyncIterator[SpanBatchExporter]:
    """Start the producers and yield a ready exporter.

    The producers are stopped when the context exits, whether or not the
    body raised.

    Args:
        config: Exporter settings.
        metrics_storage: Storage adapter for metrics (optional).

    Yields:
        SpanBatchExporter writing to the fixed model, index and error topics.
    """
    logger.info(
        "Creating traces exporter",
        extra={"datasource": config.datasource, "kafka_url": config.kafka_url},
    )
    async with KafkaChannelGroup(config) as group:
        writer = MultiTargetWriter(group.channels, metrics_storage=metrics_storage)
        yield SpanBatchExporter(writer, metrics_storage=metrics_storage)
