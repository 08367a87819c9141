"""Typed domain events published after a committed transition."""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone
from typing import Literal, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from ..enums import WorkflowActionType, WorkflowLevel


class WorkflowEvent(BaseModel):
    """Common envelope for every workflow event."""

    event_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    event_type: str
    project_id: UUID
    user_id: Optional[UUID] = None
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    def to_json(self) -> str:
        return self.model_dump_json()


class StageStartedEvent(WorkflowEvent):
    event_type: Literal["STAGE_STARTED"] = "STAGE_STARTED"
    stage_id: UUID
    stage_name: str


class StageCompletedEvent(WorkflowEvent):
    event_type: Literal["STAGE_COMPLETED"] = "STAGE_COMPLETED"
    stage_id: UUID
    stage_name: str
    actual_duration: Optional[timedelta] = None


class TaskCompletedEvent(WorkflowEvent):
    event_type: Literal["TASK_COMPLETED"] = "TASK_COMPLETED"
    task_id: UUID
    task_name: str
    stage_id: Optional[UUID] = None
    stage_name: Optional[str] = None
    actual_duration: Optional[timedelta] = None
    notes: Optional[str] = None


class StepCompletedEvent(WorkflowEvent):
    event_type: Literal["STEP_COMPLETED"] = "STEP_COMPLETED"
    step_id: UUID
    step_name: str
    task_id: Optional[UUID] = None
    task_name: Optional[str] = None
    stage_id: Optional[UUID] = None
    stage_name: Optional[str] = None
    actual_duration: Optional[timedelta] = None
    notes: Optional[str] = None


class AssignmentAcceptedEvent(WorkflowEvent):
    event_type: Literal["ASSIGNMENT_ACCEPTED"] = "ASSIGNMENT_ACCEPTED"
    assignment_id: UUID
    step_id: UUID
    step_name: Optional[str] = None
    assigned_to_user_id: UUID
    accepted_at: Optional[datetime] = None


class WorkflowTransitionEvent(WorkflowEvent):
    """Published for transitions without a dedicated event type."""

    event_type: Literal["WORKFLOW_TRANSITION"] = "WORKFLOW_TRANSITION"
    action: WorkflowActionType
    target_level: WorkflowLevel
    target_id: UUID
    new_status: str


__all__ = [
    "WorkflowEvent",
    "StageStartedEvent",
    "StageCompletedEvent",
    "TaskCompletedEvent",
    "StepCompletedEvent",
    "AssignmentAcceptedEvent",
    "WorkflowTransitionEvent",
]
