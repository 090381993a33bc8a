"""Projection of span attributes onto the fixed export schema.

Each supported attribute key is registered in a ProjectionRegistry together
with the handler that writes it into a NormalizedRecord. The default registry
holds the HTTP, RPC, database and messaging vocabulary; keys without a
handler are ignored here and only end up in the tag map.
"""

from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass
from urllib.parse import urlparse

from spanindex.core.models import AttributeValue, SpanKind, ValueType
from spanindex.core.records import NormalizedRecord

HTTP_ERROR_THRESHOLD = 400
# Observed behavior: only codes >= 2 count as errors, so CANCELLED (1) does
# not flag the span. Conventional GRPC semantics would treat any nonzero code
# as a failure.
GRPC_ERROR_THRESHOLD = 2


@dataclass(frozen=True)
class ProjectionContext:
    """What a handler may look at besides the value it projects.

    Attributes:
        kind: Kind of the span being projected.
        attributes: The whole span attribute bag, for sibling lookups.
    """

    kind: SpanKind
    attributes: Mapping[str, AttributeValue]


Handler = Callable[[AttributeValue, NormalizedRecord, ProjectionContext], None]


class ProjectionRegistry:
    """Mapping from attribute key to the handler that projects it."""

    def __init__(self) -> None:
        self._handlers: dict[str, Handler] = {}

    def register(self, key: str, handler: Handler) -> None:
        """Register the handler for an attribute key.

        Raises:
            TypeError: If handler is not callable.
            ValueError: If the key already has a handler.
        """
        if not callable(handler):
            raise TypeError("handler must be callable")
        if key in self._handlers:
            raise ValueError(f"{key!r} is already registered")
        self._handlers[key] = handler

    def lookup(self, key: str) -> Handler | None:
        return self._handlers.get(key)

    def keys(self) -> list[str]:
        """Return the supported attribute vocabulary, in registration order."""
        return list(self._handlers)

    def __contains__(self, key: object) -> bool:
        return key in self._handlers

    def __iter__(self) -> Iterator[str]:
        return iter(self._handlers)

    def __len__(self) -> int:
        return len(self._handlers)


def _parse_int(text: str) -> int | None:
    """Parse an optionally signed run of ASCII digits, else return None.

    Whitespace, underscores and non-ASCII digits are rejected even though
    int() would accept them.
    """
    digits = text[1:] if text[:1] in ("+", "-") else text
    if not (digits.isascii() and digits.isdigit()):
        return None
    return int(text)


def _hostname(url: str) -> str:
    """Reduce a URL to its host name, without port or user info.

    The host keeps its case. A URL that cannot be parsed is kept literally;
    one without a host (a bare path) gives "".
    """
    try:
        netloc = urlparse(url).netloc
    except ValueError:
        return url
    host = netloc.rpartition("@")[2]
    if host.startswith("["):
        return host[1:].partition("]")[0]
    return host.partition(":")[0]


def _verbatim(field_name: str) -> Handler:
    """Build a handler that stores the string value into one record field."""

    def handler(
        value: AttributeValue, record: NormalizedRecord, ctx: ProjectionContext
    ) -> None:
        setattr(record, field_name, value.string_value)

    handler.__name__ = f"project_{field_name}"
    return handler


def project_http_status_code(
    value: AttributeValue, record: NormalizedRecord, ctx: ProjectionContext
) -> None:
    if value.type is ValueType.INT:
        code: int | None = value.int_value
    else:
        code = _parse_int(value.as_text())
    if code is None:
        record.http_code = value.as_text()
    else:
        if code >= HTTP_ERROR_THRESHOLD:
            record.has_error = True
        record.http_code = str(code)
    record.response_status_code = record.http_code


def project_http_url(
    value: AttributeValue, record: NormalizedRecord, ctx: ProjectionContext
) -> None:
    if ctx.kind == SpanKind.CLIENT:
        record.external_http_url = _hostname(value.string_value)
    else:
        record.http_url = value.string_value


def project_http_method(
    value: AttributeValue, record: NormalizedRecord, ctx: ProjectionContext
) -> None:
    if ctx.kind == SpanKind.CLIENT:
        record.external_http_method = value.string_value
    else:
        record.http_method = value.string_value


def project_grpc_status_code(
    value: AttributeValue, record: NormalizedRecord, ctx: ProjectionContext
) -> None:
    # Instrumentations disagree on whether this is a string or an int.
    code = value.int_value
    parsed = _parse_int(value.string_value)
    if parsed:
        code = parsed
    if code >= GRPC_ERROR_THRESHOLD:
        record.has_error = True
    record.grpc_code = str(code)
    record.response_status_code = record.grpc_code


def project_rpc_method(
    value: AttributeValue, record: NormalizedRecord, ctx: ProjectionContext
) -> None:
    record.rpc_method = value.string_value
    system = ctx.attributes.get("rpc.system")
    if system is not None and system.string_value == "grpc":
        record.grpc_method = value.string_value


def project_jsonrpc_error_code(
    value: AttributeValue, record: NormalizedRecord, ctx: ProjectionContext
) -> None:
    record.response_status_code = value.as_text()


def default_registry() -> ProjectionRegistry:
    """Build the registry with the supported semantic-convention keys."""
    registry = ProjectionRegistry()
    registry.register("http.status_code", project_http_status_code)
    registry.register("http.url", project_http_url)
    registry.register("http.method", project_http_method)
    registry.register("http.route", _verbatim("http_route"))
    registry.register("http.host", _verbatim("http_host"))
    registry.register("messaging.system", _verbatim("msg_system"))
    registry.register("messaging.operation", _verbatim("msg_operation"))
    registry.register("component", _verbatim("component"))
    registry.register("db.system", _verbatim("db_system"))
    registry.register("db.name", _verbatim("db_name"))
    registry.register("db.operation", _verbatim("db_operation"))
    registry.register("peer.service", _verbatim("peer_service"))
    registry.register("rpc.grpc.status_code", project_grpc_status_code)
    registry.register("rpc.method", project_rpc_method)
    registry.register("rpc.service", _verbatim("rpc_service"))
    registry.register("rpc.system", _verbatim("rpc_system"))
    registry.register("rpc.jsonrpc.error_code", project_jsonrpc_error_code)
    return registry


DEFAULT_REGISTRY = default_registry()


def project_attributes(
    attributes: Mapping[str, AttributeValue],
    record: NormalizedRecord,
    kind: SpanKind,
    registry: ProjectionRegistry = DEFAULT_REGISTRY,
) -> None:
    """Project every known attribute onto the record, in bag order.

    Args:
        attributes: Span-level attribute bag.
        record: Record to populate.
        kind: Kind of the span, for client/server branching.
        registry: Projection table to use.
    """
    ctx = ProjectionContext(kind=kind, attributes=attributes)
    for key, value in attributes.items():
        handler = registry.lookup(key)
        if handler is not None:
            handler(value, record, ctx)
