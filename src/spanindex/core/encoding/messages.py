"""JSON message encoders for the three output channels."""

import json
from typing import Any

from spanindex.core.records import NormalizedRecord
from spanindex.errors import SerializationError

MODEL_CHANNEL = "model"
INDEX_CHANNEL = "index"
ERROR_CHANNEL = "error"


def _dumps(channel: str, obj: Any) -> str:
    try:
        return json.dumps(obj, allow_nan=False)
    except (TypeError, ValueError) as e:
        raise SerializationError(channel, str(e)) from e


def string_to_bool(value: str) -> bool:
    """Return True only for a case-insensitive "true"."""
    return value.lower() == "true"


def encode_trace_model_message(record: NormalizedRecord) -> bytes:
    """Encode the trace-model message.

    Args:
        record: The normalized span.

    Returns:
        UTF-8 JSON object with timestamp, traceID and the JSON-encoded
        trace model as a string.

    Raises:
        SerializationError: If the record cannot be encoded.
    """
    model = _dumps(MODEL_CHANNEL, record.trace_model().to_dict())
    data = {
        "timestamp": record.start_time_unix_nano,
        "traceID": record.trace_id,
        "model": model,
    }
    return _dumps(MODEL_CHANNEL, data).encode("utf-8")


def index_payload(record: NormalizedRecord) -> dict[str, Any]:
    """Return the flattened index row for a record."""
    return {
        "timestamp": record.start_time_unix_nano,
        "traceID": record.trace_id,
        "spanID": record.span_id,
        "parentSpanID": record.parent_span_id,
        "serviceName": record.service_name,
        "name": record.name,
        "kind": int(record.kind),
        "durationNanos": record.duration_nano,
        "statusCode": int(record.status_code),
        "externalHttpMethod": record.external_http_method,
        "externalHttpUrl": record.external_http_url,
        "component": record.component,
        "dbSystem": record.db_system,
        "dbName": record.db_name,
        "dbOperation": record.db_operation,
        "peerService": record.peer_service,
        "events": record.events,
        "httpMethod": record.http_method,
        "httpUrl": record.http_url,
        "httpCode": record.http_code,
        "httpRoute": record.http_route,
        "httpHost": record.http_host,
        "msgSystem": record.msg_system,
        "msgOperation": record.msg_operation,
        "hasError": record.has_error,
        "tagMap": record.tag_map,
    }


def encode_index_message(record: NormalizedRecord) -> bytes:
    """Encode the index message.

    Raises:
        SerializationError: If the record cannot be encoded.
    """
    return _dumps(INDEX_CHANNEL, index_payload(record)).encode("utf-8")


def error_payload(record: NormalizedRecord) -> dict[str, Any] | None:
    """Return the error row for a record, or None without an exception event."""
    event = record.error_event
    if event is None:
        return None
    attrs = event.attribute_map
    return {
        "timestamp": event.time_unix_nano,
        "errorID": record.error_id,
        "groupID": record.error_group_id,
        "traceID": record.trace_id,
        "spanID": record.span_id,
        "serviceName": record.service_name,
        "exceptionType": attrs.get("exception.type", ""),
        "exceptionMessage": attrs.get("exception.message", ""),
        "exceptionStacktrace": attrs.get("exception.stacktrace", ""),
        "exceptionEscaped": string_to_bool(attrs.get("exception.escaped", "")),
    }


def encode_error_message(record: NormalizedRecord) -> bytes | None:
    """Encode the error message.

    Returns:
        UTF-8 JSON bytes, or None when the span has no exception event.

    Raises:
        SerializationError: If the record cannot be encoded.
    """
    payload = error_payload(record)
    if payload is None:
        return None
    return _dumps(ERROR_CHANNEL, payload).encode("utf-8")
