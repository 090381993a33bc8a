"""Fan-out of a normalized span to the model, index and error channels."""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass

from spanindex.core.encoding.messages import (
    ERROR_CHANNEL,
    INDEX_CHANNEL,
    MODEL_CHANNEL,
    encode_error_message,
    encode_index_message,
    encode_trace_model_message,
)
from spanindex.core.metrics import MESSAGES_WRITTEN_TOTAL, counter
from spanindex.core.ports import ChannelPort, MetricsStoragePort
from spanindex.core.records import NormalizedRecord
from spanindex.errors import ChannelWriteError, SerializationError

logger = logging.getLogger(__name__)

MESSAGE_KEY = b"1"


@dataclass(frozen=True)
class OutputChannels:
    """The three output channels; a None channel is skipped."""

    model: ChannelPort | None = None
    index: ChannelPort | None = None
    error: ChannelPort | None = None


class MultiTargetWriter:
    """Writes one normalized span to each configured output channel.

    Writes run sequentially in a fixed order (model, index, error) and stop
    at the first failure, which is raised to the caller. Spans are
    independent of each other: a failure never leaks into the next call.
    """

    def __init__(
        self,
        channels: OutputChannels,
        metrics_storage: MetricsStoragePort | None = None,
    ) -> None:
        """Initialize the writer with its output channels.

        Args:
            channels: Output channels, owned by the caller.
            metrics_storage: Storage adapter for metrics (optional).
        """
        self.channels = channels
        self.metrics_storage = metrics_storage

    async def write(
        self, record: NormalizedRecord, deadline: float | None = None
    ) -> list[str]:
        """Write the record to every configured channel.

        Args:
            record: The normalized span.
            deadline: Event-loop time (``loop.time()``) after which any
                in-flight write is abandoned. None means no deadline.

        Returns:
            Names of the channels written, in write order.

        Raises:
            SerializationError: If a payload cannot be encoded.
            ChannelWriteError: If a channel rejects the message or the
                deadline expires.
        """
        written: list[str] = []
        steps: list[tuple[str, ChannelPort | None, Callable[..., bytes | None]]] = [
            (MODEL_CHANNEL, self.channels.model, encode_trace_model_message),
            (INDEX_CHANNEL, self.channels.index, encode_index_message),
            (ERROR_CHANNEL, self.channels.error, encode_error_message),
        ]
        for name, channel, encode in steps:
            if channel is None:
                continue
            try:
                payload = encode(record)
            except SerializationError as e:
                logger.error(
                    "Error encoding span for channel %s: %s",
                    name,
                    e,
                    extra={"channel": name, "trace_id": record.trace_id},
                )
                raise
            if payload is None:
                continue
            await self._submit(name, channel, payload, deadline, record)
            written.append(name)
        return written

    async def _submit(
        self,
        name: str,
        channel: ChannelPort,
        payload: bytes,
        deadline: float | None,
        record: NormalizedRecord,
    ) -> None:
        try:
            async with asyncio.timeout_at(deadline):
                await channel.send(payload, key=MESSAGE_KEY)
        except TimeoutError as e:
            error = ChannelWriteError(name, "deadline exceeded")
            self._log_write_error(error, record)
            raise error from e
        except ChannelWriteError as e:
            self._log_write_error(e, record)
            raise
        if self.metrics_storage is not None:
            self.metrics_storage.write(
                counter(MESSAGES_WRITTEN_TOTAL, labels={"channel": name})
            )

    @staticmethod
    def _log_write_error(error: ChannelWriteError, record: NormalizedRecord) -> None:
        logger.error(
            "Error writing span to channel %s: %s",
            error.channel,
            error,
            extra={
                "channel": error.channel,
                "trace_id": record.trace_id,
                "span_id": record.span_id,
            },
        )
