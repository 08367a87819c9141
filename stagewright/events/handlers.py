"""Default subscribers for workflow events."""

from __future__ import annotations

import logging
from collections import defaultdict, deque
from functools import partial
from typing import Awaitable, Callable, Deque, Dict, Optional
from uuid import UUID

from .bus import EventBus
from .models import (
    AssignmentAcceptedEvent,
    StageCompletedEvent,
    StageStartedEvent,
    StepCompletedEvent,
    TaskCompletedEvent,
    WorkflowEvent,
    WorkflowTransitionEvent,
)

logger = logging.getLogger(__name__)

Notifier = Callable[[WorkflowEvent, str], Awaitable[None]]


class WorkflowEventHandler:
    """Notification, timeline and reporting side effects of transitions.

    Delivery is best-effort: these run on the bus workers after the
    transition has been committed. ``notifier`` is the outbound hook to
    whatever sends messages to people (email, chat); when omitted the
    notifications are only logged. ``timeline`` keeps the most recent
    ``timeline_size`` events per project.
    """

    def __init__(self, notifier: Optional[Notifier] = None, timeline_size: int = 100) -> None:
        self._notifier = notifier
        self.timeline: Dict[UUID, Deque[WorkflowEvent]] = defaultdict(
            partial(deque, maxlen=timeline_size)
        )

    def register(self, bus: EventBus) -> None:
        bus.subscribe(StageStartedEvent, self.handle_stage_started)
        bus.subscribe(StageCompletedEvent, self.handle_stage_completed)
        bus.subscribe(TaskCompletedEvent, self.handle_task_completed)
        bus.subscribe(StepCompletedEvent, self.handle_step_completed)
        bus.subscribe(AssignmentAcceptedEvent, self.handle_assignment_accepted)
        bus.subscribe(WorkflowTransitionEvent, self.handle_transition)

    async def _notify(self, event: WorkflowEvent, message: str) -> None:
        logger.debug(f"Sending notification for project {event.project_id}: {message}")
        if self._notifier is not None:
            await self._notifier(event, message)

    def _record(self, event: WorkflowEvent) -> None:
        self.timeline[event.project_id].append(event)

    async def handle_stage_started(self, event: StageStartedEvent) -> None:
        logger.info(f"Stage started: {event.stage_name} for project: {event.project_id}")
        self._record(event)
        await self._notify(event, f"Stage '{event.stage_name}' has started")

    async def handle_stage_completed(self, event: StageCompletedEvent) -> None:
        logger.info(
            f"Stage completed: {event.stage_name} for project: {event.project_id} "
            f"in {event.actual_duration}"
        )
        self._record(event)
        await self._notify(event, f"Stage '{event.stage_name}' has been completed")
        logger.debug(f"Generating stage completion report for stage: {event.stage_id}")

    async def handle_task_completed(self, event: TaskCompletedEvent) -> None:
        logger.info(f"Task completed: {event.task_name} for project: {event.project_id}")
        self._record(event)
        await self._notify(event, f"Task '{event.task_name}' has been completed")

    async def handle_step_completed(self, event: StepCompletedEvent) -> None:
        logger.info(f"Step completed: {event.step_name} for project: {event.project_id}")
        self._record(event)
        await self._notify(event, f"Step '{event.step_name}' has been completed")

    async def handle_assignment_accepted(self, event: AssignmentAcceptedEvent) -> None:
        logger.info(f"Assignment accepted: {event.assignment_id} for step: {event.step_id}")
        self._record(event)
        await self._notify(event, f"Assignment for step '{event.step_name}' was accepted")

    async def handle_transition(self, event: WorkflowTransitionEvent) -> None:
        logger.info(
            f"{event.action.value} moved {event.target_level.value.lower()} "
            f"{event.target_id} to {event.new_status}"
        )
        self._record(event)
