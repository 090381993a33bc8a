"""Batch driver: normalizes and writes every span of a trace batch.

Partial-failure contract: a span that cannot be normalized or written is
logged and counted, and the driver moves on to the next span. The batch
call never raises because of a single span; only task cancellation
propagates. Spans written before a failure or a cancellation stay written.
"""

import logging
import time
from collections.abc import Iterable
from dataclasses import dataclass

from spanindex.core.metrics import (
    SPAN_FAILURES_TOTAL,
    SPAN_WRITE_DURATION,
    SPANS_TOTAL,
    counter,
    histogram,
)
from spanindex.core.models import MetricSample, RawSpan, Resource, ResourceSpans
from spanindex.core.normalize import normalize_span, service_name_for_resource
from spanindex.core.ports import MetricsStoragePort
from spanindex.core.writer import MultiTargetWriter

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExportSummary:
    """Outcome of one batch.

    Attributes:
        spans: Number of spans seen.
        written: Spans whose writes all succeeded.
        failed: Spans that were skipped or only partially written.
    """

    spans: int = 0
    written: int = 0
    failed: int = 0


class SpanBatchExporter:
    """Drives normalization and fan-out for batches of spans."""

    def __init__(
        self,
        writer: MultiTargetWriter,
        metrics_storage: MetricsStoragePort | None = None,
    ) -> None:
        """Initialize the driver.

        Args:
            writer: Writer owning the output channels.
            metrics_storage: Storage adapter for metrics (optional).
        """
        self.writer = writer
        self.metrics_storage = metrics_storage

    async def push_trace_data(
        self,
        batch: Iterable[ResourceSpans],
        deadline: float | None = None,
    ) -> ExportSummary:
        """Export every span of the batch, resource by resource.

        Args:
            batch: Resource spans as supplied by the host pipeline.
            deadline: Event-loop time bounding each channel write.

        Returns:
            ExportSummary with per-span counts.
        """
        spans = written = 0
        for resource_spans in batch:
            resource = resource_spans.resource
            service_name = service_name_for_resource(resource)
            for scope_spans in resource_spans.scope_spans:
                for span in scope_spans.spans:
                    spans += 1
                    if await self._export_span(span, service_name, resource, deadline):
                        written += 1
        failed = spans - written
        if failed:
            logger.warning(
                "Exported batch with failures: %d of %d spans failed",
                failed,
                spans,
                extra={"spans": spans, "failed": failed},
            )
        return ExportSummary(spans=spans, written=written, failed=failed)

    async def _export_span(
        self,
        span: RawSpan,
        service_name: str,
        resource: Resource,
        deadline: float | None,
    ) -> bool:
        """Normalize and write one span; return False if it failed."""
        self._write_metric(counter(SPANS_TOTAL))
        try:
            record = normalize_span(span, service_name, resource)
        except Exception as e:
            self._log_failure("normalize", e, span, service_name)
            return False
        start = time.perf_counter()
        try:
            await self.writer.write(record, deadline=deadline)
        except Exception as e:
            self._log_failure("write", e, span, service_name)
            return False
        for sample in histogram(SPAN_WRITE_DURATION, time.perf_counter() - start):
            self._write_metric(sample)
        return True

    def _write_metric(self, sample: MetricSample) -> None:
        if self.metrics_storage is not None:
            self.metrics_storage.write(sample)

    def _log_failure(
        self,
        stage: str,
        error: Exception,
        span: RawSpan,
        service_name: str,
    ) -> None:
        logger.error(
            "Error in writing spans: %s",
            error,
            extra={
                "stage": stage,
                "error": str(error),
                "error_type": type(error).__name__,
                "trace_id": span.trace_id_hex,
                "span_id": span.span_id_hex,
                "service_name": service_name,
            },
        )
        self._write_metric(counter(SPAN_FAILURES_TOTAL, labels={"stage": stage}))
