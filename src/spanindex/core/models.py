"""Core domain models for span input and exporter diagnostics."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum, IntEnum

TRACE_ID_SIZE = 16
SPAN_ID_SIZE = 8


class SpanKind(IntEnum):
    """OpenTelemetry span kind."""

    UNSPECIFIED = 0
    INTERNAL = 1
    SERVER = 2
    CLIENT = 3
    PRODUCER = 4
    CONSUMER = 5


class StatusCode(IntEnum):
    """OpenTelemetry span status code."""

    UNSET = 0
    OK = 1
    ERROR = 2


class ValueType(Enum):
    """Tag of an AttributeValue."""

    EMPTY = "EMPTY"
    STRING = "STRING"
    INT = "INT"
    DOUBLE = "DOUBLE"
    BOOL = "BOOL"


@dataclass(frozen=True)
class AttributeValue:
    """A typed attribute value.

    Accessors return the zero value of their type when the tag does not
    match, so callers never inspect the Python type of the payload.

    Attributes:
        type: Which variant is held.
        value: The raw payload for that variant.
    """

    type: ValueType
    value: str | int | float | bool | None = None

    @classmethod
    def empty(cls) -> "AttributeValue":
        return cls(ValueType.EMPTY)

    @classmethod
    def of_string(cls, value: str) -> "AttributeValue":
        return cls(ValueType.STRING, value)

    @classmethod
    def of_int(cls, value: int) -> "AttributeValue":
        return cls(ValueType.INT, value)

    @classmethod
    def of_double(cls, value: float) -> "AttributeValue":
        return cls(ValueType.DOUBLE, value)

    @classmethod
    def of_bool(cls, value: bool) -> "AttributeValue":
        return cls(ValueType.BOOL, value)

    @classmethod
    def from_python(cls, value: object) -> "AttributeValue":
        """Wrap a plain Python value.

        bool is checked before int since bool is an int subclass. Anything
        that is not a str, int, float or bool is kept as its string form.
        """
        if value is None:
            return cls.empty()
        if isinstance(value, bool):
            return cls.of_bool(value)
        if isinstance(value, int):
            return cls.of_int(value)
        if isinstance(value, float):
            return cls.of_double(value)
        if isinstance(value, str):
            return cls.of_string(value)
        return cls.of_string(str(value))

    @property
    def string_value(self) -> str:
        if self.type is not ValueType.STRING:
            return ""
        return str(self.value)

    @property
    def int_value(self) -> int:
        if self.type is not ValueType.INT:
            return 0
        return int(self.value)  # type: ignore[arg-type]

    @property
    def double_value(self) -> float:
        if self.type is not ValueType.DOUBLE:
            return 0.0
        return float(self.value)  # type: ignore[arg-type]

    @property
    def bool_value(self) -> bool:
        if self.type is not ValueType.BOOL:
            return False
        return bool(self.value)

    def as_text(self) -> str:
        """Render the value as text (integers as decimal, booleans lowercase)."""
        if self.type is ValueType.STRING:
            return self.string_value
        if self.type is ValueType.INT:
            return str(self.int_value)
        if self.type is ValueType.DOUBLE:
            return str(self.double_value)
        if self.type is ValueType.BOOL:
            return "true" if self.bool_value else "false"
        return ""


Attributes = dict[str, AttributeValue]


def attributes_from(values: Mapping[str, object] | None) -> Attributes:
    """Build an attribute bag from plain Python values, keeping key order."""
    if not values:
        return {}
    return {key: AttributeValue.from_python(value) for key, value in values.items()}


def id_hex(value: bytes) -> str:
    """Render an identifier as lowercase hex; an empty or all-zero id is ""."""
    if not any(value):
        return ""
    return value.hex()


def _check_id(name: str, value: bytes, size: int, allow_empty: bool = False) -> None:
    if allow_empty and len(value) == 0:
        return
    if len(value) != size:
        raise ValueError(f"{name} must be {size} bytes, got {len(value)}")


@dataclass(frozen=True)
class RawEvent:
    """A timestamped event attached to a span.

    Attributes:
        name: Event name ("exception" marks an exception event).
        timestamp: Nanoseconds since the Unix epoch.
        attributes: Event attributes.
    """

    name: str
    timestamp: int
    attributes: Attributes = field(default_factory=dict)


@dataclass(frozen=True)
class RawLink:
    """A causal link to another span."""

    trace_id: bytes
    span_id: bytes
    attributes: Attributes = field(default_factory=dict)

    def __post_init__(self) -> None:
        _check_id("link trace_id", self.trace_id, TRACE_ID_SIZE)
        _check_id("link span_id", self.span_id, SPAN_ID_SIZE)


@dataclass(frozen=True)
class RawSpan:
    """A span as handed over by the host pipeline.

    Attributes:
        trace_id: 16-byte trace identifier.
        span_id: 8-byte span identifier.
        parent_span_id: 8-byte parent identifier, or b"" (or all zeros) for a
            root span.
        name: Operation name.
        start_time: Start timestamp in nanoseconds since the Unix epoch.
        end_time: End timestamp in nanoseconds since the Unix epoch.
        kind: Span kind.
        status_code: Span status code.
        attributes: Span-level attributes.
        events: Span events, in recorded order.
        links: Links to other spans, in recorded order.
    """

    trace_id: bytes
    span_id: bytes
    name: str
    start_time: int
    end_time: int
    parent_span_id: bytes = b""
    kind: SpanKind = SpanKind.UNSPECIFIED
    status_code: StatusCode = StatusCode.UNSET
    attributes: Attributes = field(default_factory=dict)
    events: list[RawEvent] = field(default_factory=list)
    links: list[RawLink] = field(default_factory=list)

    def __post_init__(self) -> None:
        _check_id("trace_id", self.trace_id, TRACE_ID_SIZE)
        _check_id("span_id", self.span_id, SPAN_ID_SIZE)
        _check_id(
            "parent_span_id", self.parent_span_id, SPAN_ID_SIZE, allow_empty=True
        )

    @property
    def trace_id_hex(self) -> str:
        return id_hex(self.trace_id)

    @property
    def span_id_hex(self) -> str:
        return id_hex(self.span_id)

    @property
    def parent_span_id_hex(self) -> str:
        return id_hex(self.parent_span_id)


@dataclass(frozen=True)
class Resource:
    """The entity that produced a group of spans."""

    attributes: Attributes = field(default_factory=dict)


@dataclass(frozen=True)
class InstrumentationScope:
    """The instrumentation library that recorded a group of spans."""

    name: str = ""
    version: str = ""


@dataclass(frozen=True)
class ScopeSpans:
    """Spans recorded by one instrumentation scope."""

    scope: InstrumentationScope = field(default_factory=InstrumentationScope)
    spans: list[RawSpan] = field(default_factory=list)


@dataclass(frozen=True)
class ResourceSpans:
    """Spans produced by one resource, grouped by instrumentation scope."""

    resource: Resource = field(default_factory=Resource)
    scope_spans: list[ScopeSpans] = field(default_factory=list)


@dataclass(frozen=True)
class LogEntry:
    """A structured log entry.

    Attributes:
        timestamp: Unix timestamp in seconds.
        level: Log level (e.g., INFO, ERROR, DEBUG).
        message: The log message.
        attributes: Additional structured fields.
    """

    timestamp: float
    level: str
    message: str
    attributes: dict[str, str | int | float | bool] = field(default_factory=dict)


@dataclass(frozen=True)
class MetricSample:
    """A single metric measurement.

    Attributes:
        name: Metric name (e.g., spanindex_spans_total).
        timestamp: Unix timestamp in seconds.
        value: The metric value.
        labels: Key-value pairs for metric dimensions.
    """

    name: str
    timestamp: float
    value: float
    labels: dict[str, str] = field(default_factory=dict)
