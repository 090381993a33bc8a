"""Span event extraction and exception grouping."""

import hashlib
import json
import uuid
from collections.abc import Sequence

from spanindex.core.models import RawEvent
from spanindex.core.records import EventRecord, NormalizedRecord

EXCEPTION_EVENT_NAME = "exception"


def error_group_id(service_name: str, exception_type: str, message: str) -> str:
    """Return the group key shared by recurring exceptions.

    The key depends only on its three inputs, so the same error raised by the
    same service collapses into one group across traces.

    Args:
        service_name: Service that recorded the exception.
        exception_type: Value of the exception.type attribute.
        message: Value of the exception.message attribute.

    Returns:
        32-character lowercase hex digest.
    """
    payload = (service_name + exception_type + message).encode("utf-8")
    return hashlib.md5(payload, usedforsecurity=False).hexdigest()


def new_error_id() -> str:
    """Return a fresh identifier for one exception occurrence."""
    return uuid.uuid4().hex


def encode_event(event: EventRecord) -> str:
    """Serialize an event record to compact JSON."""
    return json.dumps(event.to_dict(), separators=(",", ":"))


def to_event_record(event: RawEvent) -> EventRecord:
    return EventRecord(
        name=event.name,
        time_unix_nano=event.timestamp,
        attribute_map={key: value.as_text() for key, value in event.attributes.items()},
        is_error=event.name == EXCEPTION_EVENT_NAME,
    )


def extract_events(events: Sequence[RawEvent], record: NormalizedRecord) -> None:
    """Serialize span events onto the record and pick out the exception.

    Every event is appended to record.events in input order. An exception
    event additionally becomes record.error_event, with a new error id and
    the group id of its type and message; the last exception event wins.
    A span with an exception event is flagged as an error.

    Args:
        events: Events recorded on the span.
        record: Record to populate; record.service_name must already be set.
    """
    for event in events:
        event_record = to_event_record(event)
        if event_record.is_error:
            attrs = event_record.attribute_map
            record.error_event = event_record
            record.has_error = True
            record.error_id = new_error_id()
            record.error_group_id = error_group_id(
                record.service_name,
                attrs.get("exception.type", ""),
                attrs.get("exception.message", ""),
            )
        record.events.append(encode_event(event_record))
