"""Export an OTLP/JSON trace file to the Kafka topics.

Run with:
    SPANINDEX_DATASOURCE=tcp://localhost:9000 \
    SPANINDEX_KAFKA_URL=localhost:9092 \
    python examples/kafka_export.py traces.json

Topics written:
    signoz-spans-topic            - trace-model message per span
    signoz-index-v2-topic         - index row per span
    signoz-error-index-v2-topic   - error row per exception event
"""

import asyncio
import logging
import sys
from pathlib import Path

from spanindex import (
    ExporterConfig,
    InMemoryLogStorage,
    InMemoryMetricsStorage,
    StructuredLogHandler,
    create_traces_exporter,
)
from spanindex.adapters.otlp_json import parse_traces

# Create storage instances
log_storage = InMemoryLogStorage()
metrics_storage = InMemoryMetricsStorage()

logging.getLogger("spanindex").addHandler(StructuredLogHandler(log_storage))
logging.getLogger("spanindex").setLevel(logging.INFO)


async def main(path: Path) -> int:
    config = ExporterConfig.from_env()
    batch = parse_traces(path.read_bytes())

    async with create_traces_exporter(config, metrics_storage) as exporter:
        summary = await exporter.push_trace_data(batch)

    print(f"spans={summary.spans} written={summary.written} failed={summary.failed}")
    for entry in log_storage.read():
        print(f"[{entry.level}] {entry.message} {entry.attributes}")
    return 1 if summary.failed else 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main(Path(sys.argv[1]))))
