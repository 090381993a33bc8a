"""spanindex: fan out tracing spans to trace-model, index and error topics."""

from spanindex.adapters.channels.in_memory import ChannelMessage, InMemoryChannel
from spanindex.adapters.channels.kafka import KafkaChannel, KafkaChannelGroup
from spanindex.adapters.logging import StructuredLogHandler
from spanindex.adapters.storage.in_memory import (
    InMemoryLogStorage,
    InMemoryMetricsStorage,
)
from spanindex.config import ExporterConfig
from spanindex.core.events import error_group_id
from spanindex.core.exporter import ExportSummary, SpanBatchExporter
from spanindex.core.models import (
    AttributeValue,
    InstrumentationScope,
    RawEvent,
    RawLink,
    RawSpan,
    Resource,
    ResourceSpans,
    ScopeSpans,
    SpanKind,
    StatusCode,
    attributes_from,
)
from spanindex.core.normalize import normalize_span, service_name_for_resource
from spanindex.core.records import NormalizedRecord, Reference, RefType
from spanindex.core.writer import MultiTargetWriter, OutputChannels
from spanindex.errors import (
    ChannelWriteError,
    InvalidSpanError,
    SerializationError,
    SpanIndexError,
)
from spanindex.factory import create_traces_exporter

__all__ = [
    "AttributeValue",
    "ChannelMessage",
    "ChannelWriteError",
    "ExportSummary",
    "ExporterConfig",
    "InMemoryChannel",
    "InMemoryLogStorage",
    "InMemoryMetricsStorage",
    "InstrumentationScope",
    "InvalidSpanError",
    "KafkaChannel",
    "KafkaChannelGroup",
    "MultiTargetWriter",
    "NormalizedRecord",
    "OutputChannels",
    "RawEvent",
    "RawLink",
    "RawSpan",
    "RefType",
    "Reference",
    "Resource",
    "ResourceSpans",
    "ScopeSpans",
    "SerializationError",
    "SpanBatchExporter",
    "SpanIndexError",
    "SpanKind",
    "StatusCode",
    "StructuredLogHandler",
    "attributes_from",
    "create_traces_exporter",
    "error_group_id",
    "normalize_span",
    "service_name_for_resource",
]
