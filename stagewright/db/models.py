from __future__ import annotations

from datetime import date, datetime
from typing import Optional
from uuid import UUID

from sqlmodel import Field, SQLModel


class ProjectRow(SQLModel, table=True):
    __tablename__ = "projects"

    id: UUID = Field(primary_key=True)
    name: str
    company_id: Optional[UUID] = None


class UserRow(SQLModel, table=True):
    __tablename__ = "users"

    id: UUID = Field(primary_key=True)
    email: str = Field(index=True)
    first_name: Optional[str] = None
    last_name: Optional[str] = None


class WorkflowStageRow(SQLModel, table=True):
    """Template stage referenced by project stages."""

    __tablename__ = "workflow_stages"

    id: UUID = Field(primary_key=True)
    template_id: Optional[UUID] = None
    name: str
    order_index: int
    parallel_execution: bool = False
    required_approvals: int = 0
    estimated_duration_days: Optional[int] = None


class ProjectStageRow(SQLModel, table=True):
    __tablename__ = "project_stages"

    id: UUID = Field(primary_key=True)
    project_id: UUID = Field(foreign_key="projects.id", index=True)
    workflow_stage_id: UUID = Field(foreign_key="workflow_stages.id")
    name: str
    status: str = Field(default="NOT_STARTED")
    order_index: int = 0
    planned_start_date: Optional[date] = None
    planned_end_date: Optional[date] = None
    actual_start_date: Optional[date] = None
    actual_end_date: Optional[date] = None
    notes: Optional[str] = None
    updated_at: Optional[datetime] = None
    version: int = 1


class ProjectTaskRow(SQLModel, table=True):
    __tablename__ = "project_tasks"

    id: UUID = Field(primary_key=True)
    project_stage_id: UUID = Field(foreign_key="project_stages.id", index=True)
    name: str
    status: str = Field(default="NOT_STARTED")
    order_index: int = 0
    actual_start_date: Optional[date] = None
    actual_end_date: Optional[date] = None
    notes: Optional[str] = None
    updated_at: Optional[datetime] = None
    version: int = 1


class ProjectStepRow(SQLModel, table=True):
    __tablename__ = "project_steps"

    id: UUID = Field(primary_key=True)
    project_task_id: UUID = Field(foreign_key="project_tasks.id", index=True)
    name: str
    status: str = Field(default="NOT_STARTED")
    order_index: int = 0
    actual_start_date: Optional[date] = None
    actual_end_date: Optional[date] = None
    notes: Optional[str] = None
    updated_at: Optional[datetime] = None
    version: int = 1


class ProjectStepAssignmentRow(SQLModel, table=True):
    __tablename__ = "project_step_assignments"

    id: UUID = Field(primary_key=True)
    project_step_id: UUID = Field(foreign_key="project_steps.id", index=True)
    assigned_to_user_id: UUID = Field(foreign_key="users.id")
    status: str = Field(default="PENDING")
    accepted_at: Optional[datetime] = None
    declined_at: Optional[datetime] = None
    decline_reason: Optional[str] = None
    updated_at: Optional[datetime] = None
    version: int = 1
