"""Reader for OTLP/JSON trace documents.

Converts the JSON encoding of ExportTraceServiceRequest
(resourceSpans -> scopeSpans -> spans) into a batch of ResourceSpans.
Identifiers are hex strings; 64-bit integers may arrive as strings.
The pre-1.0 ``instrumentationLibrarySpans`` key is accepted as well.
"""

import json
from collections.abc import Mapping
from typing import Any

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


def _decode_value(value: Mapping[str, Any]) -> AttributeValue:
    if "stringValue" in value:
        return AttributeValue.of_string(str(value["stringValue"]))
    if "intValue" in value:
        return AttributeValue.of_int(int(value["intValue"]))
    if "doubleValue" in value:
        return AttributeValue.of_double(float(value["doubleValue"]))
    if "boolValue" in value:
        return AttributeValue.of_bool(bool(value["boolValue"]))
    for composite in ("arrayValue", "kvlistValue", "bytesValue"):
        if composite in value:
            return AttributeValue.of_string(
                json.dumps(value[composite], separators=(",", ":"))
            )
    return AttributeValue.empty()


def decode_attributes(items: list[Mapping[str, Any]] | None) -> Attributes:
    """Decode an OTLP key/value list, keeping its order."""
    return {
        item["key"]: _decode_value(item.get("value") or {}) for item in items or []
    }


def _decode_id(value: str | None) -> bytes:
    return bytes.fromhex(value or "")


def _decode_kind(value: int | str | None) -> SpanKind:
    if value is None:
        return SpanKind.UNSPECIFIED
    if isinstance(value, str) and not value.isdigit():
        return SpanKind[value.removeprefix("SPAN_KIND_")]
    return SpanKind(int(value))


def _decode_status(value: int | str | None) -> StatusCode:
    if value is None:
        return StatusCode.UNSET
    if isinstance(value, str) and not value.isdigit():
        return StatusCode[value.removeprefix("STATUS_CODE_")]
    return StatusCode(int(value))


def decode_span(span: Mapping[str, Any]) -> RawSpan:
    """Decode one OTLP/JSON span.

    Raises:
        ValueError: If identifiers, timestamps or enums are malformed.
        KeyError: If an enum name is unknown.
    """
    status = span.get("status") or {}
    return RawSpan(
        trace_id=_decode_id(span.get("traceId")),
        span_id=_decode_id(span.get("spanId")),
        parent_span_id=_decode_id(span.get("parentSpanId")),
        name=span.get("name", ""),
        start_time=int(span.get("startTimeUnixNano", 0)),
        end_time=int(span.get("endTimeUnixNano", 0)),
        kind=_decode_kind(span.get("kind")),
        status_code=_decode_status(status.get("code")),
        attributes=decode_attributes(span.get("attributes")),
        events=[
            RawEvent(
                name=event.get("name", ""),
                timestamp=int(event.get("timeUnixNano", 0)),
                attributes=decode_attributes(event.get("attributes")),
            )
            for event in span.get("events") or []
        ],
        links=[
            RawLink(
                trace_id=_decode_id(link.get("traceId")),
                span_id=_decode_id(link.get("spanId")),
                attributes=decode_attributes(link.get("attributes")),
            )
            for link in span.get("links") or []
        ],
    )


def parse_traces(document: Mapping[str, Any] | str | bytes) -> list[ResourceSpans]:
    """Parse an OTLP/JSON traces document into a batch.

    Args:
        document: The decoded JSON object, or its text.

    Returns:
        One ResourceSpans per entry of resourceSpans, in document order.
    """
    if isinstance(document, (str, bytes)):
        document = json.loads(document)
    batch: list[ResourceSpans] = []
    for resource_spans in document.get("resourceSpans") or []:
        resource = resource_spans.get("resource") or {}
        scope_entries = (
            resource_spans.get("scopeSpans")
            or resource_spans.get("instrumentationLibrarySpans")
            or []
        )
        scope_spans = []
        for entry in scope_entries:
            scope = entry.get("scope") or entry.get("instrumentationLibrary") or {}
            scope_spans.append(
                ScopeSpans(
                    scope=InstrumentationScope(
                        name=scope.get("name", ""),
                        version=scope.get("version", ""),
                    ),
                    spans=[decode_span(span) for span in entry.get("spans") or []],
                )
            )
        batch.append(
            ResourceSpans(
                resource=Resource(
                    attributes=decode_attributes(resource.get("attributes"))
                ),
                scope_spans=scope_spans,
            )
        )
    return batch
