"""
Tests for the event emitter.
"""

import asyncio
import logging

import pytest

from akasha.events import AkashaEvent, EventEmitter, EventType


def entity_created() -> AkashaEvent:
    return AkashaEvent(type=EventType.ENTITY_CREATED, scope_id="S1")


class TestSubscription:
    def test_on_and_listener_count(self):
        events = EventEmitter()
        events.on(EventType.ENTITY_CREATED, print)
        events.on("entity.created", repr)
        assert events.listener_count(EventType.ENTITY_CREATED) == 2
        assert events.listener_count(EventType.LEARN_STARTED) == 0

    def test_unknown_event_type(self):
        with pytest.raises(ValueError):
            EventEmitter().on("entity.exploded", print)

    def test_off(self):
        events = EventEmitter()
        received = []
        events.on(EventType.ENTITY_CREATED, received.append)
        events.off(EventType.ENTITY_CREATED, received.append)
        events.off(EventType.ENTITY_CREATED, print)

        events.emit(entity_created())
        events.flush()

        assert received == []


class TestDeliveryWithoutLoop:
    def test_queued_until_flush(self):
        events = EventEmitter()
        received = []
        events.on(EventType.ENTITY_CREATED, received.append)

        events.emit(entity_created())
        assert received == []

        events.flush()
        assert len(received) == 1

    def test_once(self):
        events = EventEmitter()
        received = []
        events.once(EventType.ENTITY_CREATED, received.append)

        events.emit(entity_created())
        events.emit(entity_created())
        events.flush()

        assert len(received) == 1
        assert events.listener_count(EventType.ENTITY_CREATED) == 0

    def test_failing_handler_is_isolated(self):
        events = EventEmitter()
        received = []

        def broken(event):
            raise RuntimeError("subscriber bug")

        events.on(EventType.ENTITY_CREATED, broken)
        events.on(EventType.ENTITY_CREATED, received.append)

        events.emit(entity_created())
        events.flush()

        assert len(received) == 1

    def test_queue_keeps_newest_deliveries(self, caplog):
        events = EventEmitter(max_pending=3)
        received = []
        events.on(EventType.ENTITY_CREATED, received.append)

        with caplog.at_level(logging.DEBUG, logger="akasha.events.emitter"):
            for index in range(5):
                events.emit(AkashaEvent(type=EventType.ENTITY_CREATED, scope_id=f"S{index}"))
        events.flush()

        assert [event.scope_id for event in received] == ["S2", "S3", "S4"]
        assert "Event queue full" in caplog.text

    def test_max_pending_must_be_positive(self):
        with pytest.raises(ValueError, match="max_pending"):
            EventEmitter(max_pending=0)


class TestDeliveryInLoop:
    @pytest.mark.asyncio
    async def test_queue_bound_does_not_apply_inside_a_loop(self):
        events = EventEmitter(max_pending=1)
        received = []
        events.on(EventType.ENTITY_CREATED, received.append)
        events.on(EventType.ENTITY_CREATED, received.append)

        events.emit(entity_created())
        await events.drain()

        assert len(received) == 2

    @pytest.mark.asyncio
    async def test_handlers_do_not_run_inline(self):
        events = EventEmitter()
        received = []
        events.on(EventType.ENTITY_CREATED, received.append)

        events.emit(entity_created())
        assert received == []

        await events.drain()
        assert len(received) == 1

    @pytest.mark.asyncio
    async def test_async_handler(self):
        events = EventEmitter()
        received = []

        async def handler(event):
            await asyncio.sleep(0)
            received.append(event.type)

        events.on(EventType.ENTITY_CREATED, handler)
        events.emit(entity_created())
        await events.drain()

        assert received == [EventType.ENTITY_CREATED]

    @pytest.mark.asyncio
    async def test_failing_async_handler_is_isolated(self):
        events = EventEmitter()
        received = []

        async def broken(event):
            raise RuntimeError("subscriber bug")

        events.on(EventType.ENTITY_CREATED, broken)
        events.on(EventType.ENTITY_CREATED, received.append)
        events.emit(entity_created())
        await events.drain()

        assert len(received) == 1


class TestEventModel:
    def test_timestamp_default(self):
        event = entity_created()
        assert event.timestamp.endswith("Z")
        assert event.entity is None
