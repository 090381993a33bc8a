"""OpenTelemetry SDK adapter.

Lets an in-process TracerProvider feed the exporter: SDK ReadableSpans are
grouped by resource and instrumentation scope into ResourceSpans, and
FanOutSpanExporter plugs into a span processor like any SpanExporter.
"""

import asyncio
import concurrent.futures
import json
import logging
from collections import defaultdict
from collections.abc import Mapping, Sequence

from opentelemetry.sdk.trace import ReadableSpan
from opentelemetry.sdk.trace.export import SpanExporter, SpanExportResult

from spanindex.core.exporter import SpanBatchExporter
from spanindex.core.models import (
    AttributeValue,
    Attributes,
    InstrumentationScope,
    RawEvent,
    RawLink,
    RawSpan,
    Resource,
    ResourceSpans,
    ScopeSpans,
    SpanKind,
    StatusCode,
)

logger = logging.getLogger(__name__)

DEFAULT_EXPORT_TIMEOUT_SECONDS = 30.0


def _attribute_value(value: object) -> AttributeValue:
    if isinstance(value, (list, tuple)):
        return AttributeValue.of_string(json.dumps(list(value)))
    return AttributeValue.from_python(value)


def _attributes(values: Mapping[str, object] | None) -> Attributes:
    if not values:
        return {}
    return {key: _attribute_value(value) for key, value in values.items()}


def _span_id(value: int) -> bytes:
    return value.to_bytes(8, "big")


def _trace_id(value: int) -> bytes:
    return value.to_bytes(16, "big")


def to_raw_span(span: ReadableSpan) -> RawSpan:
    """Convert an SDK span into a RawSpan.

    The SDK numbers span kinds from INTERNAL=0, so kinds are mapped by name.
    """
    parent = span.parent
    parent_span_id = b""
    if parent is not None and parent.is_valid:
        parent_span_id = _span_id(parent.span_id)
    return RawSpan(
        trace_id=_trace_id(span.context.trace_id),
        span_id=_span_id(span.context.span_id),
        parent_span_id=parent_span_id,
        name=span.name,
        start_time=span.start_time or 0,
        end_time=span.end_time or 0,
        kind=SpanKind[span.kind.name],
        status_code=StatusCode[span.status.status_code.name],
        attributes=_attributes(span.attributes),
        events=[
            RawEvent(
                name=event.name,
                timestamp=event.timestamp,
                attributes=_attributes(event.attributes),
            )
            for event in span.events
        ],
        links=[
            RawLink(
                trace_id=_trace_id(link.context.trace_id),
                span_id=_span_id(link.context.span_id),
                attributes=_attributes(link.attributes),
            )
            for link in span.links
        ],
    )


def group_readable_spans(spans: Sequence[ReadableSpan]) -> list[ResourceSpans]:
    """Group SDK spans by resource, then by instrumentation scope.

    Groups keep the order in which their first span appears.
    """
    resources: dict[tuple, Resource] = {}
    buckets: dict[tuple, dict[tuple[str, str], list[RawSpan]]] = defaultdict(
        lambda: defaultdict(list)
    )
    for span in spans:
        resource_attrs = span.resource.attributes if span.resource else {}
        r_key = tuple(sorted((k, repr(v)) for k, v in resource_attrs.items()))
        if r_key not in resources:
            resources[r_key] = Resource(attributes=_attributes(resource_attrs))
        scope = span.instrumentation_scope
        s_key = (scope.name, scope.version or "") if scope else ("", "")
        buckets[r_key][s_key].append(to_raw_span(span))

    return [
        ResourceSpans(
            resource=resources[r_key],
            scope_spans=[
                ScopeSpans(
                    scope=InstrumentationScope(name=name, version=version),
                    spans=span_list,
                )
                for (name, version), span_list in scopes.items()
            ],
        )
        for r_key, scopes in buckets.items()
    ]


class FanOutSpanExporter(SpanExporter):
    """SpanExporter handing batches to a SpanBatchExporter.

    The batch exporter and its channels live on an event loop owned by the
    caller (typically running in a dedicated thread); export() submits each
    batch to that loop and blocks until it is done or the timeout expires.

    Args:
        exporter: The batch exporter to feed.
        loop: Event loop the exporter's channels are bound to.
        timeout: Seconds allowed per batch; also the write deadline.
    """

    def __init__(
        self,
        exporter: SpanBatchExporter,
        loop: asyncio.AbstractEventLoop,
        timeout: float = DEFAULT_EXPORT_TIMEOUT_SECONDS,
    ) -> None:
        self._exporter = exporter
        self._loop = loop
        self._timeout = timeout
        self._shutdown = False

    async def _push(self, batch: list[ResourceSpans]) -> None:
        deadline = asyncio.get_running_loop().time() + self._timeout
        await self._exporter.push_trace_data(batch, deadline=deadline)

    def export(self, spans: Sequence[ReadableSpan]) -> SpanExportResult:
        if self._shutdown:
            logger.warning("Export called after shutdown")
            return SpanExportResult.FAILURE
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None
        if running is self._loop:
            raise RuntimeError("export() must not be called from the exporter loop")

        future = asyncio.run_coroutine_threadsafe(
            self._push(group_readable_spans(spans)), self._loop
        )
        try:
            future.result(timeout=self._timeout)
        except concurrent.futures.TimeoutError:
            future.cancel()
            logger.error(
                "Span export timed out",
                extra={"timeout": self._timeout, "spans": len(spans)},
            )
            return SpanExportResult.FAILURE
        return SpanExportResult.SUCCESS

    def shutdown(self) -> None:
        self._shutdown = True

    def force_flush(self, timeout_millis: int = 30000) -> bool:
        return True
