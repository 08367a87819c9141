"""Workflow execution pipeline: resolve, validate, execute, persist, publish."""

from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Any, Iterable, Optional

from ..contracts import (
    RuleVerdict,
    WorkflowExecutionContext,
    WorkflowExecutionRequest,
    WorkflowExecutionResult,
)
from ..enums import WorkflowActionType
from ..events import (
    AssignmentAcceptedEvent,
    EventBus,
    StageCompletedEvent,
    StageStartedEvent,
    StepCompletedEvent,
    TaskCompletedEvent,
    WorkflowEvent,
    WorkflowTransitionEvent,
)
from ..exceptions import (
    StagewrightError,
    WorkflowException,
    WorkflowValidationException,
)
from ..persistence.repository import WorkflowRepository
from ..rules import WorkflowRule, default_rules
from .context import WorkflowContextBuilder
from .executor import WorkflowExecutor
from .rule_engine import RuleEngine
from .state import StateManager

logger = logging.getLogger(__name__)


def _elapsed(start: Optional[date], end: Optional[date]) -> Optional[timedelta]:
    """Calendar days from ``start`` to ``end`` counting both ends."""
    if start is None or end is None:
        return None
    return (end - start) + timedelta(days=1)


class WorkflowEngine:
    """Orchestrates one workflow transition end to end.

    Context building, rule validation and execution happen before any
    write, so a failure in those steps leaves every record untouched. The
    single state write is followed by publication of one event; handlers run
    on the event bus workers and cannot affect the committed transition.
    """

    def __init__(
        self,
        repository: WorkflowRepository,
        event_bus: EventBus,
        rules: Optional[Iterable[WorkflowRule]] = None,
        *,
        context_builder: Optional[WorkflowContextBuilder] = None,
        rule_engine: Optional[RuleEngine] = None,
        executor: Optional[WorkflowExecutor] = None,
        state_manager: Optional[StateManager] = None,
    ) -> None:
        self._event_bus = event_bus
        self._context_builder = context_builder or WorkflowContextBuilder(repository)
        self._rule_engine = rule_engine or RuleEngine(
            rules if rules is not None else default_rules()
        )
        self._executor = executor or WorkflowExecutor()
        self._state_manager = state_manager or StateManager(repository)

    @property
    def rule_engine(self) -> RuleEngine:
        return self._rule_engine

    # ------------------------------------------------------------------
    async def execute_workflow(self, request: WorkflowExecutionRequest) -> WorkflowExecutionResult:
        """Run the full pipeline for ``request`` and return the result.

        Raises:
            WorkflowValidationException: A rule or state precondition failed.
            UnsupportedWorkflowActionException: No handler for the action.
            EntityNotFoundError: A referenced record does not exist.
            ConcurrentModificationError: The target changed concurrently;
                the request may be resubmitted.
            WorkflowException: Any other failure, wrapping the cause.
        """
        action = request.action.type
        logger.info(f"Starting workflow execution for project: {request.project_id}, action: {action.value}")

        try:
            context = await self._context_builder.build_context(request)
            verdict = self._rule_engine.evaluate(context)
            if not verdict.allowed:
                raise WorkflowValidationException(
                    verdict.message or "Workflow transition validation failed",
                    rule_name=verdict.rule_name,
                )

            result = self._executor.execute(context)
            if result.success:
                updated = await self._state_manager.update_state(context, result)
                self._publish(context, result, updated)
        except StagewrightError as e:
            logger.warning(f"Workflow execution failed for project: {request.project_id}: {e}")
            raise
        except Exception as e:
            logger.exception(f"Unexpected error during workflow execution for project: {request.project_id}")
            raise WorkflowException(f"Workflow execution failed: {e}") from e

        logger.info(f"Workflow execution completed for project: {context.project.id}: {result.message}")
        return result

    async def evaluate_transition(self, request: WorkflowExecutionRequest) -> RuleVerdict:
        """Dry run: build the context and evaluate rules without writing."""
        try:
            context = await self._context_builder.build_context(request)
        except StagewrightError as e:
            logger.info(f"Transition check failed to resolve request: {e}")
            return RuleVerdict(allowed=False, message=str(e))
        return self._rule_engine.evaluate(context)

    async def can_execute_transition(self, request: WorkflowExecutionRequest) -> bool:
        return (await self.evaluate_transition(request)).allowed

    async def get_blocking_reasons(self, request: WorkflowExecutionRequest) -> list[str]:
        try:
            context = await self._context_builder.build_context(request)
        except StagewrightError as e:
            return [str(e)]
        return self._rule_engine.get_blocking_reasons(context)

    # ------------------------------------------------------------------
    def _publish(
        self, context: WorkflowExecutionContext, result: WorkflowExecutionResult, updated: Any
    ) -> None:
        # The transition is committed at this point; publishing problems are
        # logged only.
        try:
            event = self.build_event(context, result, updated)
            if event is not None:
                self._event_bus.publish(event)
        except Exception:
            logger.exception(f"Failed to publish workflow event for project: {context.project.id}")

    @staticmethod
    def build_event(
        context: WorkflowExecutionContext, result: WorkflowExecutionResult, updated: Any = None
    ) -> Optional[WorkflowEvent]:
        """Derive the domain event for a successful result."""
        if not result.success:
            return None

        action = context.action_type
        project = context.project
        user_id = context.user.id
        stage = context.project_stage
        task = context.project_task
        step = context.project_step

        if action is WorkflowActionType.START_STAGE and stage is not None:
            return StageStartedEvent(
                project_id=project.id, user_id=user_id, stage_id=stage.id, stage_name=stage.name
            )
        if action is WorkflowActionType.COMPLETE_STAGE and stage is not None:
            end = getattr(updated, "actual_end_date", None)
            return StageCompletedEvent(
                project_id=project.id,
                user_id=user_id,
                stage_id=stage.id,
                stage_name=stage.name,
                actual_duration=_elapsed(stage.actual_start_date, end),
            )
        if action is WorkflowActionType.COMPLETE_TASK and task is not None:
            end = getattr(updated, "actual_end_date", None)
            return TaskCompletedEvent(
                project_id=project.id,
                user_id=user_id,
                task_id=task.id,
                task_name=task.name,
                stage_id=stage.id if stage else None,
                stage_name=stage.name if stage else None,
                actual_duration=_elapsed(task.actual_start_date, end),
                notes=task.notes,
            )
        if action is WorkflowActionType.COMPLETE_STEP and step is not None:
            end = getattr(updated, "actual_end_date", None)
            return StepCompletedEvent(
                project_id=project.id,
                user_id=user_id,
                step_id=step.id,
                step_name=step.name,
                task_id=task.id if task else None,
                task_name=task.name if task else None,
                stage_id=stage.id if stage else None,
                stage_name=stage.name if stage else None,
                actual_duration=_elapsed(step.actual_start_date, end),
                notes=step.notes,
            )
        assignment = context.project_step_assignment
        if action is WorkflowActionType.ACCEPT_ASSIGNMENT and assignment is not None:
            return AssignmentAcceptedEvent(
                project_id=project.id,
                user_id=user_id,
                assignment_id=assignment.id,
                step_id=assignment.project_step_id,
                step_name=step.name if step else None,
                assigned_to_user_id=assignment.assigned_to_user_id,
                accepted_at=getattr(updated, "accepted_at", None),
            )

        if result.target_level is None or result.target_id is None or result.new_status is None:
            logger.debug(f"No event publishing for action type: {action.value}")
            return None
        return WorkflowTransitionEvent(
            project_id=project.id,
            user_id=user_id,
            action=action,
            target_level=result.target_level,
            target_id=result.target_id,
            new_status=result.new_status.value,
        )
