"""Workflow events and their in-process delivery."""

from .bus import EventBus, EventHandler, get_event_bus
from .handlers import WorkflowEventHandler
from .models import (
    AssignmentAcceptedEvent,
    StageCompletedEvent,
    StageStartedEvent,
    StepCompletedEvent,
    TaskCompletedEvent,
    WorkflowEvent,
    WorkflowTransitionEvent,
)

__all__ = [
    "EventBus",
    "EventHandler",
    "get_event_bus",
    "WorkflowEventHandler",
    "WorkflowEvent",
    "StageStartedEvent",
    "StageCompletedEvent",
    "TaskCompletedEvent",
    "StepCompletedEvent",
    "AssignmentAcceptedEvent",
    "WorkflowTransitionEvent",
]
