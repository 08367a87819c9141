"""Status transition table for every action the executor implements."""

from __future__ import annotations

from typing import Dict, FrozenSet, NamedTuple, Optional

from .contracts import EntityStatus, WorkflowExecutionContext
from .enums import (
    AssignmentStatus,
    StageStatus,
    StepStatus,
    WorkflowActionType,
    WorkflowLevel,
)


class Transition(NamedTuple):
    level: WorkflowLevel
    allowed_from: FrozenSet[EntityStatus]
    target: EntityStatus
    verb: str


A = WorkflowActionType

TRANSITIONS: Dict[WorkflowActionType, Transition] = {
    A.START_STAGE: Transition(
        WorkflowLevel.STAGE, frozenset({StageStatus.NOT_STARTED}), StageStatus.IN_PROGRESS, "start"
    ),
    A.COMPLETE_STAGE: Transition(
        WorkflowLevel.STAGE, frozenset({StageStatus.IN_PROGRESS}), StageStatus.COMPLETED, "complete"
    ),
    A.PAUSE_STAGE: Transition(
        WorkflowLevel.STAGE, frozenset({StageStatus.IN_PROGRESS}), StageStatus.BLOCKED, "pause"
    ),
    A.RESUME_STAGE: Transition(
        WorkflowLevel.STAGE, frozenset({StageStatus.BLOCKED}), StageStatus.IN_PROGRESS, "resume"
    ),
    A.START_TASK: Transition(
        WorkflowLevel.TASK, frozenset({StageStatus.NOT_STARTED}), StageStatus.IN_PROGRESS, "start"
    ),
    A.COMPLETE_TASK: Transition(
        WorkflowLevel.TASK, frozenset({StageStatus.IN_PROGRESS}), StageStatus.COMPLETED, "complete"
    ),
    A.PAUSE_TASK: Transition(
        WorkflowLevel.TASK, frozenset({StageStatus.IN_PROGRESS}), StageStatus.BLOCKED, "pause"
    ),
    A.RESUME_TASK: Transition(
        WorkflowLevel.TASK, frozenset({StageStatus.BLOCKED}), StageStatus.IN_PROGRESS, "resume"
    ),
    A.START_STEP: Transition(
        WorkflowLevel.STEP,
        frozenset({StepStatus.NOT_STARTED, StepStatus.READY_TO_START}),
        StepStatus.IN_PROGRESS,
        "start",
    ),
    A.COMPLETE_STEP: Transition(
        WorkflowLevel.STEP, frozenset({StepStatus.IN_PROGRESS}), StepStatus.COMPLETED, "complete"
    ),
    A.SKIP_STEP: Transition(
        WorkflowLevel.STEP,
        frozenset({StepStatus.NOT_STARTED, StepStatus.READY_TO_START, StepStatus.IN_PROGRESS}),
        StepStatus.SKIPPED,
        "skip",
    ),
    A.ACCEPT_ASSIGNMENT: Transition(
        WorkflowLevel.ASSIGNMENT,
        frozenset({AssignmentStatus.PENDING}),
        AssignmentStatus.ACCEPTED,
        "accept",
    ),
    A.DECLINE_ASSIGNMENT: Transition(
        WorkflowLevel.ASSIGNMENT,
        frozenset({AssignmentStatus.PENDING}),
        AssignmentStatus.DECLINED,
        "decline",
    ),
}

# Child statuses that let a parent stage or task complete.
TERMINAL_TASK_STATUSES = frozenset({StageStatus.COMPLETED, StageStatus.SKIPPED})
TERMINAL_STEP_STATUSES = frozenset(
    {StepStatus.COMPLETED, StepStatus.SKIPPED, StepStatus.CANCELLED}
)

_LEVEL_LABELS = {
    WorkflowLevel.STAGE: "stage",
    WorkflowLevel.TASK: "task",
    WorkflowLevel.STEP: "step",
    WorkflowLevel.ASSIGNMENT: "assignment",
}


def level_label(level: WorkflowLevel) -> str:
    return _LEVEL_LABELS[level]


def target_entity(context: WorkflowExecutionContext, level: WorkflowLevel):
    """Return the context entity addressed at ``level`` (may be ``None``)."""
    if level is WorkflowLevel.STAGE:
        return context.project_stage
    if level is WorkflowLevel.TASK:
        return context.project_task
    if level is WorkflowLevel.STEP:
        return context.project_step
    return context.project_step_assignment


def status_error(transition: Transition, current: EntityStatus) -> Optional[str]:
    """Message describing why ``current`` cannot take ``transition``."""
    if current in transition.allowed_from:
        return None
    return (
        f"Cannot {transition.verb} {level_label(transition.level)} "
        f"with status: {current.value}"
    )
