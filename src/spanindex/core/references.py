"""Causal references (parent and links) for a span."""

from collections.abc import Sequence

from spanindex.core.models import RawLink, id_hex
from spanindex.core.records import Reference, RefType


def build_references(
    links: Sequence[RawLink],
    parent_span_id: bytes,
    trace_id: bytes,
) -> list[Reference]:
    """Build the ordered reference list of a span.

    A nonzero parent comes first as CHILD_OF since consumers take the first
    CHILD_OF entry as the primary parent. Every link follows as
    FOLLOWS_FROM, in link order.

    Args:
        links: Links recorded on the span.
        parent_span_id: Parent span id; b"" or all zeros for a root span.
        trace_id: Trace id of the span itself.

    Returns:
        List of references; empty for a root span without links.
    """
    refs: list[Reference] = []
    if any(parent_span_id):
        refs.append(
            Reference(
                trace_id=id_hex(trace_id),
                span_id=id_hex(parent_span_id),
                ref_type=RefType.CHILD_OF,
            )
        )
    # Link semantics are not captured in the data model, so links can only
    # ever be FOLLOWS_FROM.
    for link in links:
        refs.append(
            Reference(
                trace_id=id_hex(link.trace_id),
                span_id=id_hex(link.span_id),
                ref_type=RefType.FOLLOWS_FROM,
            )
        )
    return refs
