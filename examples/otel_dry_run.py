"""Feed an OpenTelemetry TracerProvider into in-memory channels.

Run with:
    python examples/otel_dry_run.py

The exporter runs on an event loop in a background thread, the way it
would inside a host application; the channels are in-memory so no broker
is needed. The decoded index and error rows are printed at the end.
"""

import asyncio
import json
import threading

from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.trace import SpanKind

from spanindex import (
    InMemoryChannel,
    InMemoryMetricsStorage,
    MultiTargetWriter,
    OutputChannels,
    SpanBatchExporter,
)
from spanindex.adapters.otel import FanOutSpanExporter
from spanindex.core.metrics import MESSAGES_WRITTEN_TOTAL

model, index, error = (InMemoryChannel(name) for name in ("model", "index", "error"))
metrics_storage = InMemoryMetricsStorage()

loop = asyncio.new_event_loop()
threading.Thread(target=loop.run_forever, daemon=True).start()

exporter = SpanBatchExporter(
    MultiTargetWriter(OutputChannels(model, index, error), metrics_storage),
    metrics_storage=metrics_storage,
)
provider = TracerProvider(resource=Resource.create({"service.name": "checkout"}))
provider.add_span_processor(BatchSpanProcessor(FanOutSpanExporter(exporter, loop)))
tracer = provider.get_tracer("examples.otel_dry_run")


def pay(card: str) -> None:
    with tracer.start_as_current_span("POST /pay", kind=SpanKind.SERVER) as span:
        span.set_attribute("http.method", "POST")
        span.set_attribute("http.route", "/pay")
        with tracer.start_as_current_span("charge", kind=SpanKind.CLIENT) as client:
            client.set_attribute("http.url", "https://payments.example/v1/charge")
            client.set_attribute("http.status_code", 200)
        if card == "bad":
            span.set_attribute("http.status_code", 400)
            span.record_exception(ValueError("bad card"))
        else:
            span.set_attribute("http.status_code", 200)


if __name__ == "__main__":
    pay("good")
    pay("bad")
    provider.shutdown()
    loop.call_soon_threadsafe(loop.stop)

    for row in index.decoded():
        print(json.dumps({k: row[k] for k in ("name", "httpCode", "hasError")}))
    for row in error.decoded():
        print(json.dumps(row, indent=2))
    for channel in ("model", "index", "error"):
        total = metrics_storage.total(MESSAGES_WRITTEN_TOTAL, channel=channel)
        print(f"{channel}: {total:.0f} messages")
