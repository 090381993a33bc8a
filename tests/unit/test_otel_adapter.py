"""Tests for the OpenTelemetry SDK adapter."""

import asyncio
import json
import threading
from collections.abc import Callable, Iterator
from typing import Any

import pytest
from opentelemetry import trace
from opentelemetry.sdk.resources import Resource as SdkResource
from opentelemetry.sdk.trace import ReadableSpan, TracerProvider
from opentelemetry.sdk.trace.export import SimpleSpanProcessor, SpanExportResult
from opentelemetry.sdk.trace.export.in_memory_span_exporter import (
    InMemorySpanExporter,
)
from opentelemetry.trace import Status
from opentelemetry.trace import StatusCode as SdkStatusCode

from spanindex.adapters.channels.in_memory import InMemoryChannel
from spanindex.adapters.otel import (
    FanOutSpanExporter,
    group_readable_spans,
    to_raw_span,
)
from spanindex.core.exporter import SpanBatchExporter
from spanindex.core.models import SpanKind, StatusCode


def record_spans(
    build: Callable[[trace.Tracer], None],
    service_name: str = "checkout",
    scope: str = "test-scope",
) -> list[ReadableSpan]:
    """Run build against a fresh tracer and return the finished spans."""
    memory = InMemorySpanExporter()
    provider = TracerProvider(
        resource=SdkResource.create({"service.name": service_name})
    )
    provider.add_span_processor(SimpleSpanProcessor(memory))
    build(provider.get_tracer(scope, "1.0"))
    provider.shutdown()
    return list(memory.get_finished_spans())


@pytest.fixture
def background_loop() -> Iterator[asyncio.AbstractEventLoop]:
    """An event loop running in a daemon thread."""
    loop = asyncio.new_event_loop()
    thread = threading.Thread(target=loop.run_forever, daemon=True)
    thread.start()
    try:
        yield loop
    finally:
        loop.call_soon_threadsafe(loop.stop)
        thread.join(timeout=5)
        loop.close()


class TestToRawSpan:
    """Tests for to_raw_span()."""

    @pytest.mark.core
    def test_maps_identity_kind_and_parent(self) -> None:
        def build(tracer: trace.Tracer) -> None:
            with tracer.start_as_current_span("POST /pay", kind=trace.SpanKind.SERVER):
                with tracer.start_as_current_span(
                    "charge", kind=trace.SpanKind.CLIENT
                ):
                    pass

        child_sdk, parent_sdk = record_spans(build)
        child = to_raw_span(child_sdk)
        parent = to_raw_span(parent_sdk)

        assert child.kind is SpanKind.CLIENT
        assert parent.kind is SpanKind.SERVER
        assert child.trace_id == parent.trace_id
        assert child.parent_span_id == parent.span_id
        assert parent.parent_span_id == b""
        assert len(child.trace_id) == 16
        assert child.trace_id_hex == format(child_sdk.context.trace_id, "032x")
        assert child.end_time >= child.start_time

    @pytest.mark.core
    def test_maps_status_attributes_and_exception(self) -> None:
        def build(tracer: trace.Tracer) -> None:
            with tracer.start_as_current_span(
                "POST /pay", record_exception=False, set_status_on_exception=False
            ) as span:
                span.set_attribute("http.status_code", 500)
                span.set_attribute("tags", ["a", "b"])
                span.record_exception(ValueError("bad card"))
                span.set_status(Status(SdkStatusCode.ERROR))

        [sdk_span] = record_spans(build)
        raw = to_raw_span(sdk_span)

        assert raw.status_code is StatusCode.ERROR
        assert raw.attributes["http.status_code"].int_value == 500
        assert json.loads(raw.attributes["tags"].string_value) == ["a", "b"]
        [event] = raw.events
        assert event.name == "exception"
        assert event.attributes["exception.type"].string_value == "ValueError"
        assert event.attributes["exception.message"].string_value == "bad card"

    @pytest.mark.core
    def test_maps_internal_kind_by_name(self) -> None:
        [sdk_span] = record_spans(
            lambda tracer: tracer.start_span("work").end()
        )
        assert to_raw_span(sdk_span).kind is SpanKind.INTERNAL


class TestGroupReadableSpans:
    """Tests for group_readable_spans()."""

    @pytest.mark.core
    def test_groups_by_resource_then_scope(self) -> None:
        def build_two_scopes(tracer: trace.Tracer) -> None:
            tracer.start_span("a").end()
            db_tracer = provider.get_tracer("db", "2.0")
            db_tracer.start_span("b").end()
            tracer.start_span("c").end()

        memory = InMemorySpanExporter()
        provider = TracerProvider(
            resource=SdkResource.create({"service.name": "checkout"})
        )
        provider.add_span_processor(SimpleSpanProcessor(memory))
        build_two_scopes(provider.get_tracer("http", "1.0"))
        checkout = list(memory.get_finished_spans())
        billing = record_spans(
            lambda tracer: tracer.start_span("d").end(), service_name="billing"
        )

        batch = group_readable_spans([*checkout, *billing])

        assert len(batch) == 2
        services = [
            r.resource.attributes["service.name"].string_value for r in batch
        ]
        assert services == ["checkout", "billing"]
        scopes = batch[0].scope_spans
        assert [(s.scope.name, s.scope.version) for s in scopes] == [
            ("http", "1.0"),
            ("db", "2.0"),
        ]
        assert [[span.name for span in s.spans] for s in scopes] == [
            ["a", "c"],
            ["b"],
        ]

    @pytest.mark.core
    def test_empty_input(self) -> None:
        assert group_readable_spans([]) == []


class TestFanOutSpanExporter:
    """Tests for FanOutSpanExporter."""

    @pytest.mark.tier(2)
    def test_export_writes_spans_through_the_loop(
        self,
        background_loop: asyncio.AbstractEventLoop,
        exporter: SpanBatchExporter,
        channels: dict[str, InMemoryChannel],
    ) -> None:
        def build(tracer: trace.Tracer) -> None:
            with tracer.start_as_current_span("POST /pay") as span:
                span.record_exception(ValueError("bad card"))

        fan_out = FanOutSpanExporter(exporter, background_loop, timeout=5.0)

        result = fan_out.export(record_spans(build))

        assert result is SpanExportResult.SUCCESS
        [row] = channels["index"].decoded()
        assert row["serviceName"] == "checkout"
        assert row["name"] == "POST /pay"
        assert channels["error"].decoded()[0]["exceptionType"] == "ValueError"

    @pytest.mark.tier(2)
    def test_plugs_into_a_span_processor(
        self,
        background_loop: asyncio.AbstractEventLoop,
        exporter: SpanBatchExporter,
        channels: dict[str, InMemoryChannel],
    ) -> None:
        provider = TracerProvider(
            resource=SdkResource.create({"service.name": "checkout"})
        )
        provider.add_span_processor(
            SimpleSpanProcessor(FanOutSpanExporter(exporter, background_loop))
        )
        provider.get_tracer("test").start_span("GET /orders").end()
        provider.shutdown()

        assert [r["name"] for r in channels["index"].decoded()] == ["GET /orders"]

    @pytest.mark.tier(2)
    def test_timeout_returns_failure(
        self, background_loop: asyncio.AbstractEventLoop
    ) -> None:
        class SlowExporter:
            async def push_trace_data(self, batch: Any, deadline: Any = None) -> None:
                await asyncio.sleep(10)

        fan_out = FanOutSpanExporter(
            SlowExporter(), background_loop, timeout=0.05  # type: ignore[arg-type]
        )

        assert fan_out.export([]) is SpanExportResult.FAILURE

    @pytest.mark.tier(2)
    def test_export_after_shutdown_fails(
        self,
        background_loop: asyncio.AbstractEventLoop,
        exporter: SpanBatchExporter,
    ) -> None:
        fan_out = FanOutSpanExporter(exporter, background_loop)
        fan_out.shutdown()
        assert fan_out.export([]) is SpanExportResult.FAILURE
        assert fan_out.force_flush() is True

    @pytest.mark.tier(1)
    async def test_export_on_exporter_loop_raises(
        self, exporter: SpanBatchExporter
    ) -> None:
        fan_out = FanOutSpanExporter(exporter, asyncio.get_running_loop())
        with pytest.raises(RuntimeError, match="exporter loop"):
            fan_out.export([])
