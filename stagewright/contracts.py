"""Request, context and result contracts for the workflow engine."""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple, Union
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from .enums import AssignmentStatus, StageStatus, StepStatus, WorkflowActionType, WorkflowLevel
from .persistence.models import (
    Project,
    ProjectStage,
    ProjectStep,
    ProjectStepAssignment,
    ProjectTask,
    User,
    WorkflowStage,
)


EntityStatus = Union[StageStatus, StepStatus, AssignmentStatus]


class WorkflowAction(BaseModel):
    """The requested transition: an action type and the id it targets."""

    model_config = ConfigDict(frozen=True)

    type: WorkflowActionType
    target_id: Optional[UUID] = None
    reason: Optional[str] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)


class WorkflowExecutionRequest(BaseModel):
    """Raw execution request as produced by an authenticated caller."""

    project_id: Optional[UUID] = None
    stage_id: Optional[UUID] = None
    task_id: Optional[UUID] = None
    step_id: Optional[UUID] = None
    assignment_id: Optional[UUID] = None
    user_id: UUID
    action: WorkflowAction
    metadata: Dict[str, Any] = Field(default_factory=dict)


class StageSnapshot(BaseModel):
    """A project stage paired with the template stage it was created from."""

    model_config = ConfigDict(frozen=True)

    stage: ProjectStage
    template: WorkflowStage


class WorkflowExecutionContext(BaseModel):
    """Fully resolved state for one execution request.

    Built once by :class:`~stagewright.engine.context.WorkflowContextBuilder`
    and never mutated afterwards. Rules and the executor read exclusively
    from it, so every collection they need is fetched eagerly.
    """

    model_config = ConfigDict(frozen=True)

    project: Project
    user: User
    action: WorkflowAction
    project_stage: Optional[ProjectStage] = None
    workflow_stage: Optional[WorkflowStage] = None
    project_task: Optional[ProjectTask] = None
    project_step: Optional[ProjectStep] = None
    project_step_assignment: Optional[ProjectStepAssignment] = None
    project_stages: Tuple[StageSnapshot, ...] = ()
    stage_tasks: Tuple[ProjectTask, ...] = ()
    task_steps: Tuple[ProjectStep, ...] = ()
    metadata: Dict[str, Any] = Field(default_factory=dict)

    @property
    def action_type(self) -> WorkflowActionType:
        return self.action.type


class WorkflowExecutionResult(BaseModel):
    success: bool
    message: str
    target_level: Optional[WorkflowLevel] = None
    target_id: Optional[UUID] = None
    new_status: Optional[EntityStatus] = None
    errors: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)


class RuleVerdict(BaseModel):
    """Outcome of a rule engine evaluation; never persisted."""

    model_config = ConfigDict(frozen=True)

    allowed: bool
    rule_name: Optional[str] = None
    message: Optional[str] = None

    def __bool__(self) -> bool:  # pragma: no cover - trivial
        return self.allowed
