"""
tests.test_event_publisher

Kafka publisher behavior against a fake aiokafka producer, plus publisher selection.
"""

from __future__ import annotations

import asyncio
import json
import uuid
from typing import Any

import pytest
from aiokafka.errors import KafkaError

from automation_hub.errors import ConfigurationError, PublishError
from automation_hub.events import publisher as publisher_module
from automation_hub.events.models import AutomationEvent, AutomationSnapshot, EventType
from automation_hub.events.publisher import (
    InMemoryEventPublisher,
    KafkaEventPublisher,
    build_publisher,
)
from automation_hub.settings import Settings


class FakeProducer:
    instances: list[FakeProducer] = []
    fail_start = False
    fail_send = False

    def __init__(self, **kwargs: Any) -> None:
        self.kwargs = kwargs
        self.started = False
        self.stopped = False
        self.sent: list[tuple[str, bytes, bytes]] = []
        FakeProducer.instances.append(self)

    async def start(self) -> None:
        await asyncio.sleep(0.01)
        if FakeProducer.fail_start:
            raise KafkaError("no brokers available")
        self.started = True

    async def stop(self) -> None:
        self.stopped = True

    async def send_and_wait(self, topic: str, value: bytes, key: bytes) -> None:
        if FakeProducer.fail_send:
            raise KafkaError("leader not available")
        self.sent.append((topic, value, key))


@pytest.fixture
def fake_producer(monkeypatch: pytest.MonkeyPatch) -> type[FakeProducer]:
    FakeProducer.instances = []
    FakeProducer.fail_start = False
    FakeProducer.fail_send = False
    monkeypatch.setattr(publisher_module, "AIOKafkaProducer", FakeProducer)
    return FakeProducer


@pytest.fixture
def kafka() -> KafkaEventPublisher:
    return KafkaEventPublisher(brokers="kafka:9092", topic="automations", client_id="hub")


def _event(event_type: EventType = EventType.create) -> AutomationEvent:
    return AutomationEvent(
        type=event_type,
        automation=AutomationSnapshot(
            id=uuid.uuid4(), name="Nightly Sync", url_path="nightly-sync", position=1, image=""
        ),
    )


@pytest.mark.asyncio
async def test_publish_connects_lazily_and_sends_keyed_json(
    fake_producer: type[FakeProducer], kafka: KafkaEventPublisher
) -> None:
    event = _event()

    await kafka.publish(event)

    [producer] = fake_producer.instances
    assert producer.started
    assert producer.kwargs["acks"] == "all"
    assert producer.kwargs["enable_idempotence"] is True
    [(topic, value, key)] = producer.sent
    assert topic == "automations"
    assert key == str(event.automation.id).encode()
    body = json.loads(value)
    assert body["type"] == "CREATE"
    assert body["automation"]["url_path"] == "nightly-sync"


@pytest.mark.asyncio
async def test_concurrent_publishes_share_one_producer(
    fake_producer: type[FakeProducer], kafka: KafkaEventPublisher
) -> None:
    await asyncio.gather(*(kafka.publish(_event()) for _ in range(5)))

    assert len(fake_producer.instances) == 1
    assert len(fake_producer.instances[0].sent) == 5


@pytest.mark.asyncio
async def test_failed_start_stops_producer_and_raises_publish_error(
    fake_producer: type[FakeProducer], kafka: KafkaEventPublisher
) -> None:
    fake_producer.fail_start = True

    with pytest.raises(PublishError):
        await kafka.start()

    [producer] = fake_producer.instances
    assert producer.stopped


@pytest.mark.asyncio
async def test_publish_reconnects_after_failed_boot(
    fake_producer: type[FakeProducer], kafka: KafkaEventPublisher
) -> None:
    fake_producer.fail_start = True
    with pytest.raises(PublishError):
        await kafka.start()

    fake_producer.fail_start = False
    await kafka.publish(_event(EventType.update))

    assert len(fake_producer.instances) == 2
    assert len(fake_producer.instances[1].sent) == 1


@pytest.mark.asyncio
async def test_send_failure_is_wrapped_as_publish_error(
    fake_producer: type[FakeProducer], kafka: KafkaEventPublisher
) -> None:
    fake_producer.fail_send = True

    with pytest.raises(PublishError) as excinfo:
        await kafka.publish(_event(EventType.delete))

    assert isinstance(excinfo.value.__cause__, KafkaError)


@pytest.mark.asyncio
async def test_stop_closes_producer_once(
    fake_producer: type[FakeProducer], kafka: KafkaEventPublisher
) -> None:
    await kafka.start()
    await kafka.stop()
    await kafka.stop()

    [producer] = fake_producer.instances
    assert producer.stopped


@pytest.mark.asyncio
async def test_in_memory_publisher_keeps_only_recent_events() -> None:
    publisher = InMemoryEventPublisher(maxlen=2)
    events = [_event() for _ in range(3)]

    for event in events:
        await publisher.publish(event)

    assert list(publisher.events) == events[1:]


def test_build_publisher_selects_kafka_when_enabled() -> None:
    settings = Settings(env="prod", kafka_enabled=True)
    assert isinstance(build_publisher(settings), KafkaEventPublisher)


def test_build_publisher_falls_back_to_memory_outside_prod() -> None:
    assert isinstance(build_publisher(Settings(env="dev")), InMemoryEventPublisher)


def test_build_publisher_refuses_prod_without_kafka() -> None:
    with pytest.raises(ConfigurationError):
        build_publisher(Settings(env="prod", kafka_enabled=False))
