"""Event bus tests."""

import asyncio
import logging
import uuid

import pytest

import stagewright.events.bus as bus_module
from stagewright.enums import WorkflowActionType, WorkflowLevel
from stagewright.events import (
    EventBus,
    StageStartedEvent,
    WorkflowEvent,
    WorkflowEventHandler,
    WorkflowTransitionEvent,
    get_event_bus,
)


def _started(project_id=None):
    return StageStartedEvent(
        project_id=project_id or uuid.uuid4(), stage_id=uuid.uuid4(), stage_name="Foundation"
    )


@pytest.mark.asyncio
async def test_publish_delivers_to_subscribers():
    received = []
    async with EventBus() as bus:
        bus.subscribe(StageStartedEvent, received.append)
        event = _started()
        assert bus.publish(event) is True
        await bus.join()

    assert received == [event]


@pytest.mark.asyncio
async def test_base_class_subscribers_receive_subtypes():
    received = []

    async def handler(event):
        received.append(event.event_type)

    async with EventBus() as bus:
        bus.subscribe(WorkflowEvent, handler)
        bus.publish(_started())
        bus.publish(
            WorkflowTransitionEvent(
                project_id=uuid.uuid4(),
                action=WorkflowActionType.PAUSE_STAGE,
                target_level=WorkflowLevel.STAGE,
                target_id=uuid.uuid4(),
                new_status="BLOCKED",
            )
        )
        await bus.join()

    assert sorted(received) == ["STAGE_STARTED", "WORKFLOW_TRANSITION"]


@pytest.mark.asyncio
async def test_publish_does_not_wait_for_handlers():
    release = asyncio.Event()
    done = []

    async def slow(event):
        await release.wait()
        done.append(event)

    async with EventBus() as bus:
        bus.subscribe(StageStartedEvent, slow)
        bus.publish(_started())
        assert done == []
        release.set()
        await bus.join()

    assert len(done) == 1


@pytest.mark.asyncio
async def test_failing_handler_is_isolated(caplog):
    received = []

    def broken(event):
        raise RuntimeError("boom")

    async with EventBus() as bus:
        bus.subscribe(StageStartedEvent, broken)
        bus.subscribe(StageStartedEvent, received.append)
        with caplog.at_level(logging.ERROR, logger="stagewright.events.bus"):
            bus.publish(_started())
            await bus.join()

    assert len(received) == 1
    assert "broken" in caplog.text


@pytest.mark.asyncio
async def test_full_queue_drops_event():
    bus = EventBus(workers=1, queue_size=1)
    assert bus.publish(_started()) is True
    assert bus.publish(_started()) is False
    await bus.stop()


@pytest.mark.asyncio
async def test_publish_starts_workers_lazily():
    received = []
    bus = EventBus()
    bus.subscribe(StageStartedEvent, received.append)
    assert not bus.running

    bus.publish(_started())
    assert bus.running
    await bus.stop()

    assert len(received) == 1
    assert not bus.running


@pytest.mark.asyncio
async def test_event_handler_records_timeline_and_notifies():
    project_id = uuid.uuid4()
    messages = []

    async def notifier(event, message):
        messages.append(message)

    handler = WorkflowEventHandler(notifier=notifier)
    async with EventBus() as bus:
        handler.register(bus)
        bus.publish(_started(project_id))
        await bus.join()

    assert [e.event_type for e in handler.timeline[project_id]] == ["STAGE_STARTED"]
    assert messages == ["Stage 'Foundation' has started"]


@pytest.mark.asyncio
async def test_timeline_keeps_most_recent_events():
    project_id = uuid.uuid4()
    handler = WorkflowEventHandler(timeline_size=2)
    events = [_started(project_id) for _ in range(3)]
    async with EventBus(workers=1) as bus:
        handler.register(bus)
        for event in events:
            bus.publish(event)
        await bus.join()

    assert list(handler.timeline[project_id]) == events[1:]


@pytest.mark.asyncio
async def test_running_bus_is_not_replaced(tmp_path, monkeypatch):
    monkeypatch.setenv("STAGEWRIGHT_CONFIG", str(tmp_path / "missing.yaml"))
    monkeypatch.setattr(bus_module, "_bus_instance", None)
    received = []
    bus = get_event_bus(workers=1)
    bus.subscribe(StageStartedEvent, received.append)
    bus.start()

    with pytest.raises(RuntimeError):
        get_event_bus(workers=4)
    assert get_event_bus() is bus

    bus.publish(_started())
    await bus.stop()
    assert len(received) == 1

    replacement = get_event_bus(workers=4)
    assert replacement is not bus
    assert replacement._worker_count == 4


def test_get_event_bus_reads_config(tmp_path, monkeypatch):
    monkeypatch.setattr(bus_module, "_bus_instance", None)
    config_path = tmp_path / "stagewright.yaml"
    config_path.write_text("events:\n  workers: 3\n  queue_size: 10\n")
    monkeypatch.setenv("STAGEWRIGHT_CONFIG", str(config_path))

    bus = get_event_bus(workers=None, queue_size=10)
    assert bus._worker_count == 3
    assert bus._queue.maxsize == 10
    assert get_event_bus() is bus


def test_event_serialises_to_json():
    event = _started()
    assert '"event_type":"STAGE_STARTED"' in event.to_json()
