"""Data models for projects, workflow templates and their runtime instances."""

from __future__ import annotations

from datetime import date, datetime
from typing import List, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field

from ..enums import AssignmentStatus, StageStatus, StepStatus


class Project(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: UUID = Field(default_factory=uuid4)
    name: str
    company_id: Optional[UUID] = None


class User(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: UUID = Field(default_factory=uuid4)
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None

    @property
    def full_name(self) -> str:
        parts = [p for p in (self.first_name, self.last_name) if p]
        return " ".join(parts) or self.email


# ----------------------------------------------------------------------
# Design-time templates


class WorkflowStep(BaseModel):
    """Template for a single unit of work inside a task."""

    model_config = ConfigDict(frozen=True)

    id: UUID = Field(default_factory=uuid4)
    name: str
    order_index: int
    estimated_days: Optional[int] = None


class WorkflowTask(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: UUID = Field(default_factory=uuid4)
    name: str
    order_index: int
    estimated_hours: Optional[int] = None
    steps: List[WorkflowStep] = Field(default_factory=list)


class WorkflowStage(BaseModel):
    """Template stage.

    ``order_index`` defines the sequential position inside the template and
    ``parallel_execution`` lets the stage start regardless of earlier stages.
    """

    model_config = ConfigDict(frozen=True)

    id: UUID = Field(default_factory=uuid4)
    template_id: Optional[UUID] = None
    name: str
    order_index: int
    parallel_execution: bool = False
    required_approvals: int = 0
    estimated_duration_days: Optional[int] = None
    tasks: List[WorkflowTask] = Field(default_factory=list)


class WorkflowTemplate(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: UUID = Field(default_factory=uuid4)
    name: str
    description: Optional[str] = None
    stages: List[WorkflowStage] = Field(default_factory=list)


# ----------------------------------------------------------------------
# Runtime instances


class ProjectStage(BaseModel):
    """Runtime instance of a template stage for one project."""

    model_config = ConfigDict(frozen=True)

    id: UUID = Field(default_factory=uuid4)
    project_id: UUID
    workflow_stage_id: UUID
    name: str
    status: StageStatus = StageStatus.NOT_STARTED
    order_index: int = 0
    planned_start_date: Optional[date] = None
    planned_end_date: Optional[date] = None
    actual_start_date: Optional[date] = None
    actual_end_date: Optional[date] = None
    notes: Optional[str] = None
    updated_at: Optional[datetime] = None
    version: int = 1


class ProjectTask(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: UUID = Field(default_factory=uuid4)
    project_stage_id: UUID
    name: str
    status: StageStatus = StageStatus.NOT_STARTED
    order_index: int = 0
    actual_start_date: Optional[date] = None
    actual_end_date: Optional[date] = None
    notes: Optional[str] = None
    updated_at: Optional[datetime] = None
    version: int = 1


class ProjectStep(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: UUID = Field(default_factory=uuid4)
    project_task_id: UUID
    name: str
    status: StepStatus = StepStatus.NOT_STARTED
    order_index: int = 0
    actual_start_date: Optional[date] = None
    actual_end_date: Optional[date] = None
    notes: Optional[str] = None
    updated_at: Optional[datetime] = None
    version: int = 1


class ProjectStepAssignment(BaseModel):
    """Offer of a project step to a user, accepted or declined by them."""

    model_config = ConfigDict(frozen=True)

    id: UUID = Field(default_factory=uuid4)
    project_step_id: UUID
    assigned_to_user_id: UUID
    status: AssignmentStatus = AssignmentStatus.PENDING
    accepted_at: Optional[datetime] = None
    declined_at: Optional[datetime] = None
    decline_reason: Optional[str] = None
    updated_at: Optional[datetime] = None
    version: int = 1
