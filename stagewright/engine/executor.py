"""Decides the new state for a validated workflow action."""

from __future__ import annotations

import logging
from functools import partial
from typing import Callable, Dict, Mapping, Optional

from ..contracts import WorkflowExecutionContext, WorkflowExecutionResult
from ..enums import StageStatus, WorkflowActionType
from ..exceptions import UnsupportedWorkflowActionException, WorkflowValidationException
from ..transitions import (
    TERMINAL_STEP_STATUSES,
    TERMINAL_TASK_STATUSES,
    TRANSITIONS,
    level_label,
    status_error,
    target_entity,
)

logger = logging.getLogger(__name__)

ActionHandler = Callable[[WorkflowExecutionContext], WorkflowExecutionResult]

_PAST_TENSE = {
    "start": "started",
    "complete": "completed",
    "pause": "paused",
    "resume": "resumed",
    "skip": "skipped",
    "accept": "accepted",
    "decline": "declined",
}


def _require_tasks_terminal(context: WorkflowExecutionContext) -> None:
    pending = [t for t in context.stage_tasks if t.status not in TERMINAL_TASK_STATUSES]
    if pending:
        names = ", ".join(t.name for t in pending)
        raise WorkflowValidationException(
            f"All tasks must be completed or skipped before completing the stage "
            f"({len(pending)} outstanding: {names})"
        )


def _require_steps_terminal(context: WorkflowExecutionContext) -> None:
    pending = [s for s in context.task_steps if s.status not in TERMINAL_STEP_STATUSES]
    if pending:
        names = ", ".join(s.name for s in pending)
        raise WorkflowValidationException(
            f"All steps must be finished before completing the task "
            f"({len(pending)} outstanding: {names})"
        )


def _require_stage_in_progress(context: WorkflowExecutionContext) -> None:
    stage = context.project_stage
    if stage is None or stage.status is not StageStatus.IN_PROGRESS:
        raise WorkflowValidationException("Parent stage must be in progress to start step")


def _require_step_started(context: WorkflowExecutionContext) -> None:
    if context.project_step.actual_start_date is None:
        raise WorkflowValidationException(
            "Step must have an actual start date before it can be completed"
        )


_PRECONDITIONS: Dict[WorkflowActionType, Callable[[WorkflowExecutionContext], None]] = {
    WorkflowActionType.COMPLETE_STAGE: _require_tasks_terminal,
    WorkflowActionType.COMPLETE_TASK: _require_steps_terminal,
    WorkflowActionType.START_STEP: _require_stage_in_progress,
    WorkflowActionType.COMPLETE_STEP: _require_step_started,
}


def apply_transition(
    action_type: WorkflowActionType, context: WorkflowExecutionContext
) -> WorkflowExecutionResult:
    """Default handler: check the transition table and compute the result."""
    transition = TRANSITIONS[action_type]
    label = level_label(transition.level)
    entity = target_entity(context, transition.level)
    if entity is None:
        raise WorkflowValidationException(
            f"Project {label} is required to {transition.verb} {label}"
        )

    error = status_error(transition, entity.status)
    if error:
        raise WorkflowValidationException(error)

    precondition = _PRECONDITIONS.get(action_type)
    if precondition is not None:
        precondition(context)

    logger.info(
        f"{transition.verb.capitalize()} {label} {entity.id} for project {context.project.id}"
    )
    return WorkflowExecutionResult(
        success=True,
        target_level=transition.level,
        target_id=entity.id,
        new_status=transition.target,
        message=f"{label.capitalize()} {_PAST_TENSE[transition.verb]} successfully",
    )


class WorkflowExecutor:
    """Maps each action type to the handler that performs its transition.

    The executor never persists anything; it only decides the new state.
    Action types without a registered handler fail closed.
    """

    def __init__(self, handlers: Optional[Mapping[WorkflowActionType, ActionHandler]] = None) -> None:
        if handlers is None:
            handlers = {action: partial(apply_transition, action) for action in TRANSITIONS}
        self._handlers: Dict[WorkflowActionType, ActionHandler] = dict(handlers)

    def register(self, action_type: WorkflowActionType, handler: ActionHandler) -> None:
        self._handlers[action_type] = handler

    def supports(self, action_type: WorkflowActionType) -> bool:
        return action_type in self._handlers

    def execute(self, context: WorkflowExecutionContext) -> WorkflowExecutionResult:
        action_type = context.action_type
        logger.debug(
            f"Executing workflow action: {action_type.value} for project: {context.project.id}"
        )

        handler = self._handlers.get(action_type)
        if handler is None:
            raise UnsupportedWorkflowActionException(action_type)

        result = handler(context)
        logger.debug(
            f"Workflow action {action_type.value} executed with result: "
            f"{'SUCCESS' if result.success else 'FAILURE'}"
        )
        return result
