"""
automation_hub.events.publisher

Event publisher port and implementations.

Responsibilities:
- Define the `EventPublisher` protocol used by the service layer.
- Publish events to Kafka via aiokafka (acks=all, key = automation id).
- Provide an in-memory publisher for local runs without a broker and for tests.

Delivery is synchronous from the caller's point of view: `publish` returns
once the broker acknowledged the record, or raises `PublishError`.
"""

from __future__ import annotations

import asyncio
from collections import deque
from typing import Protocol

from aiokafka import AIOKafkaProducer
from aiokafka.errors import KafkaError

from automation_hub.errors import ConfigurationError, PublishError
from automation_hub.events.models import AutomationEvent
from automation_hub.observability.logging import get_logger
from automation_hub.settings import Settings

log = get_logger(__name__)


class EventPublisher(Protocol):
    async def publish(self, event: AutomationEvent) -> None: ...

    async def start(self) -> None: ...

    async def stop(self) -> None: ...


class KafkaEventPublisher:
    def __init__(self, *, brokers: str, topic: str, client_id: str) -> None:
        self._brokers = brokers
        self._topic = topic
        self._client_id = client_id
        self._producer: AIOKafkaProducer | None = None
        self._start_lock = asyncio.Lock()

    async def start(self) -> None:
        if self._producer is not None:
            return
        async with self._start_lock:
            # Concurrent publishes may have queued here while another one connected.
            if self._producer is not None:
                return
            producer = AIOKafkaProducer(
                bootstrap_servers=self._brokers,
                client_id=self._client_id,
                acks="all",
                enable_idempotence=True,
            )
            try:
                await producer.start()
            except KafkaError as e:
                # aiokafka leaves a half-open client behind on failed bootstrap.
                await producer.stop()
                raise PublishError(f"failed to connect to Kafka at {self._brokers}: {e}") from e
            self._producer = producer
        log.info("kafka_publisher_started", brokers=self._brokers, topic=self._topic)

    async def stop(self) -> None:
        if self._producer is None:
            return
        producer, self._producer = self._producer, None
        await producer.stop()
        log.info("kafka_publisher_stopped")

    async def publish(self, event: AutomationEvent) -> None:
        # Lazily connect so a broker outage at boot does not prevent serving reads.
        await self.start()
        assert self._producer is not None
        try:
            await self._producer.send_and_wait(
                self._topic,
                value=event.model_dump_json().encode(),
                key=event.key(),
            )
        except KafkaError as e:
            raise PublishError(f"failed to publish {event.type} event: {e}") from e


class InMemoryEventPublisher:
    """
    Keeps the most recent `maxlen` events in process. Used by tests and by dev runs
    without a broker; nothing here ever leaves the process.
    """

    def __init__(self, *, maxlen: int = 1000) -> None:
        self.events: deque[AutomationEvent] = deque(maxlen=maxlen)
        self.fail_with: str | None = None

    async def start(self) -> None:
        return None

    async def stop(self) -> None:
        return None

    async def publish(self, event: AutomationEvent) -> None:
        if self.fail_with is not None:
            raise PublishError(self.fail_with)
        self.events.append(event)


def build_publisher(settings: Settings) -> EventPublisher:
    if settings.kafka_enabled:
        return KafkaEventPublisher(
            brokers=settings.kafka_brokers,
            topic=settings.kafka_topic,
            client_id=settings.kafka_client_id,
        )
    if settings.env == "prod":
        raise ConfigurationError("kafka must be enabled in prod (set AHUB_KAFKA_ENABLED=true)")
    log.warning("kafka_disabled", detail="events are kept in memory only", env=settings.env)
    return InMemoryEventPublisher()


# --- Module Notes -----------------------------------------------------------
# There is no outbox: if publish fails after the store committed, subscribers miss
# that change until the next mutation of the same automation.
