"""Normalization of a raw span into a NormalizedRecord."""

from collections.abc import Mapping

from spanindex.core.events import extract_events
from spanindex.core.models import AttributeValue, RawSpan, Resource, StatusCode
from spanindex.core.projection import project_attributes
from spanindex.core.records import NormalizedRecord
from spanindex.core.references import build_references
from spanindex.errors import InvalidSpanError

SERVICE_NAME_KEY = "service.name"
UNKNOWN_SERVICE_NAME = "<nil-service-name>"


def service_name_for_resource(resource: Resource) -> str:
    """Return the service.name of a resource, or a sentinel when unset."""
    value = resource.attributes.get(SERVICE_NAME_KEY)
    if value is None:
        return UNKNOWN_SERVICE_NAME
    return value.as_text()


def _merge_tags(
    tags: dict[str, str], attributes: Mapping[str, AttributeValue]
) -> None:
    for key, value in attributes.items():
        text = value.as_text()
        if text:
            tags[key] = text


def build_tag_map(
    span_attributes: Mapping[str, AttributeValue],
    resource_attributes: Mapping[str, AttributeValue],
) -> dict[str, str]:
    """Merge span and resource attributes; resource values win on collision."""
    tags: dict[str, str] = {}
    _merge_tags(tags, span_attributes)
    _merge_tags(tags, resource_attributes)
    return tags


def span_duration(span: RawSpan) -> int:
    """Return end - start in nanoseconds.

    Raises:
        InvalidSpanError: If the span ends before it starts.
    """
    if span.end_time < span.start_time:
        raise InvalidSpanError(
            f"span {span.span_id_hex} ends before it starts "
            f"(start={span.start_time}, end={span.end_time})"
        )
    return span.end_time - span.start_time


def normalize_span(
    span: RawSpan, service_name: str, resource: Resource
) -> NormalizedRecord:
    """Build the normalized record for one span.

    Args:
        span: The span to normalize.
        service_name: Service name resolved from the enclosing resource.
        resource: The enclosing resource, whose attributes join the tag map.

    Returns:
        A fully populated NormalizedRecord.

    Raises:
        InvalidSpanError: If the span timing is inconsistent.
    """
    record = NormalizedRecord(
        trace_id=span.trace_id_hex,
        span_id=span.span_id_hex,
        parent_span_id=span.parent_span_id_hex,
        name=span.name,
        start_time_unix_nano=span.start_time,
        duration_nano=span_duration(span),
        service_name=service_name,
        kind=span.kind,
        status_code=span.status_code,
        tag_map=build_tag_map(span.attributes, resource.attributes),
        references=build_references(span.links, span.parent_span_id, span.trace_id),
    )
    if span.status_code == StatusCode.ERROR:
        record.has_error = True
    project_attributes(span.attributes, record, span.kind)
    extract_events(span.events, record)
    return record
