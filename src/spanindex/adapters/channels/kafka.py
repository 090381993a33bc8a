"""Kafka output channels built on aiokafka.

One AIOKafkaProducer is started per topic, all with the same fixed
timeouts. KafkaChannelGroup owns the producers: it starts them once, hands
the channels to the writer and stops them on close.
"""

import asyncio
import logging
import time
from types import TracebackType

from aiokafka import AIOKafkaProducer
from aiokafka.errors import KafkaError

from spanindex.config import ExporterConfig
from spanindex.core.writer import OutputChannels
from spanindex.errors import ChannelWriteError
from spanindex.topics import ALL_TOPICS, ERROR_TOPIC, INDEX_TOPIC, MODEL_TOPIC

logger = logging.getLogger(__name__)


class KafkaChannel:
    """ChannelPort implementation publishing to one Kafka topic.

    Args:
        producer: A started producer, owned by the caller.
        topic: Topic every message is published to.
    """

    def __init__(self, producer: AIOKafkaProducer, topic: str) -> None:
        self.producer = producer
        self.topic = topic

    async def send(self, value: bytes, key: bytes = b"1") -> None:
        """Publish one message and wait for the broker acknowledgement.

        Raises:
            ChannelWriteError: If the broker rejects or times out the message.
        """
        try:
            await self.producer.send_and_wait(
                self.topic,
                value=value,
                key=key,
                timestamp_ms=int(time.time() * 1000),
            )
        except KafkaError as e:
            raise ChannelWriteError(self.topic, str(e)) from e


def create_producer(config: ExporterConfig) -> AIOKafkaProducer:
    """Create (but do not start) a producer with the configured timeouts."""
    return AIOKafkaProducer(
        bootstrap_servers=config.kafka_url,
        client_id=config.client_id,
        request_timeout_ms=int(config.write_timeout * 1000),
    )


class KafkaChannelGroup:
    """The model, index and error channels with their producers.

    Example:
        ```python
        async with KafkaChannelGroup(config) as group:
            writer = MultiTargetWriter(group.channels)
        ```
    """

    def __init__(self, config: ExporterConfig) -> None:
        self.config = config
        self._producers: dict[str, AIOKafkaProducer] = {}
        self._channels = OutputChannels()
        self._started = False

    async def start(self) -> None:
        """Start one producer per topic.

        Raises:
            KafkaError: If a producer cannot connect.
            TimeoutError: If a producer does not connect within dial_timeout.

        Producers already started are stopped again before raising.
        """
        if self._started:
            return
        try:
            for topic in ALL_TOPICS:
                producer = create_producer(self.config)
                self._producers[topic] = producer
                await asyncio.wait_for(
                    producer.start(), timeout=self.config.dial_timeout
                )
        except Exception:
            logger.error(
                "Failed to start Kafka producers",
                extra={"kafka_url": self.config.kafka_url},
            )
            await self.close()
            raise
        self._channels = OutputChannels(
            model=KafkaChannel(self._producers[MODEL_TOPIC], MODEL_TOPIC),
            index=KafkaChannel(self._producers[INDEX_TOPIC], INDEX_TOPIC),
            error=KafkaChannel(self._producers[ERROR_TOPIC], ERROR_TOPIC),
        )
        self._started = True
        logger.info(
            "Kafka producers started",
            extra={"kafka_url": self.config.kafka_url},
        )

    @property
    def channels(self) -> OutputChannels:
        if not self._started:
            raise RuntimeError("KafkaChannelGroup is not started")
        return self._channels

    async def close(self) -> None:
        """Stop every producer, flushing pending messages."""
        producers, self._producers = self._producers, {}
        self._channels = OutputChannels()
        self._started = False
        for topic, producer in producers.items():
            try:
                await producer.stop()
            except KafkaError as e:
                logger.error(
                    "Error stopping Kafka producer: %s",
                    e,
                    extra={"topic": topic},
                )

    async def __aenter__(self) -> "KafkaChannelGroup":
        await self.start()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()
