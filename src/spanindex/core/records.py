"""Records derived from a span, ready for serialization."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from spanindex.core.models import SpanKind, StatusCode


class RefType(str, Enum):
    """Type of a causal reference between spans."""

    CHILD_OF = "CHILD_OF"
    FOLLOWS_FROM = "FOLLOWS_FROM"


@dataclass(frozen=True)
class Reference:
    """A typed causal reference from one span to another."""

    trace_id: str
    span_id: str
    ref_type: RefType

    def to_dict(self) -> dict[str, str]:
        return {
            "TraceId": self.trace_id,
            "SpanId": self.span_id,
            "RefType": self.ref_type.value,
        }


@dataclass(frozen=True)
class EventRecord:
    """A span event with its attributes flattened to strings.

    Attributes:
        name: Event name.
        time_unix_nano: Event timestamp in nanoseconds.
        attribute_map: Attribute values rendered as text.
        is_error: True for exception events.
    """

    name: str
    time_unix_nano: int
    attribute_map: dict[str, str] = field(default_factory=dict)
    is_error: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "timeUnixNano": self.time_unix_nano,
            "attributeMap": self.attribute_map,
            "isError": self.is_error,
        }


@dataclass(frozen=True)
class TraceModelRecord:
    """Compact view of a span, enough to rebuild the shape of its trace."""

    trace_id: str
    span_id: str
    name: str
    duration_nano: int
    start_time_unix_nano: int
    service_name: str
    kind: int
    references: list[Reference]
    tag_map: dict[str, str]
    has_error: bool
    events: list[str]

    def to_dict(self) -> dict[str, Any]:
        return {
            "traceId": self.trace_id,
            "spanId": self.span_id,
            "name": self.name,
            "durationNano": self.duration_nano,
            "startTimeUnixNano": self.start_time_unix_nano,
            "serviceName": self.service_name,
            "kind": self.kind,
            "references": [ref.to_dict() for ref in self.references],
            "tagMap": self.tag_map,
            "hasError": self.has_error,
            "events": self.events,
        }


@dataclass
class NormalizedRecord:
    """One span projected onto the fixed export schema.

    Mutable on purpose: the attribute projector and the event extractor fill
    in their fields on the record they are handed.
    """

    trace_id: str
    span_id: str
    parent_span_id: str
    name: str
    start_time_unix_nano: int
    duration_nano: int
    service_name: str
    kind: SpanKind
    status_code: StatusCode
    tag_map: dict[str, str] = field(default_factory=dict)
    has_error: bool = False
    references: list[Reference] = field(default_factory=list)

    http_method: str = ""
    http_url: str = ""
    http_route: str = ""
    http_host: str = ""
    http_code: str = ""
    external_http_method: str = ""
    external_http_url: str = ""
    msg_system: str = ""
    msg_operation: str = ""
    component: str = ""
    db_system: str = ""
    db_name: str = ""
    db_operation: str = ""
    peer_service: str = ""
    rpc_method: str = ""
    rpc_service: str = ""
    rpc_system: str = ""
    grpc_method: str = ""
    grpc_code: str = ""
    response_status_code: str = ""

    events: list[str] = field(default_factory=list)
    error_event: EventRecord | None = None
    error_id: str = ""
    error_group_id: str = ""

    def trace_model(self) -> TraceModelRecord:
        """Return the trace-model view of this record."""
        return TraceModelRecord(
            trace_id=self.trace_id,
            span_id=self.span_id,
            name=self.name,
            duration_nano=self.duration_nano,
            start_time_unix_nano=self.start_time_unix_nano,
            service_name=self.service_name,
            kind=int(self.kind),
            references=list(self.references),
            tag_map=self.tag_map,
            has_error=self.has_error,
            events=list(self.events),
        )
