"""Resolution of execution requests into execution contexts."""

from __future__ import annotations

import logging
from typing import Optional, Type, TypeVar
from uuid import UUID

from ..contracts import StageSnapshot, WorkflowExecutionContext, WorkflowExecutionRequest
from ..enums import WorkflowLevel
from ..exceptions import EntityNotFoundError
from ..persistence.models import (
    Project,
    ProjectStage,
    ProjectStep,
    ProjectStepAssignment,
    ProjectTask,
    User,
    WorkflowStage,
)
from ..persistence.repository import WorkflowRepository
from ..transitions import TRANSITIONS

logger = logging.getLogger(__name__)

T = TypeVar("T")


class WorkflowContextBuilder:
    """Resolve a :class:`WorkflowExecutionRequest` into a hydrated context.

    This is the only place the pipeline reads from the repository. Related
    records that rules or the executor need (sibling stages with their
    templates, a stage's tasks, a task's steps) are fetched here so that
    evaluation never performs hidden I/O.
    """

    def __init__(self, repository: WorkflowRepository) -> None:
        self._repository = repository

    async def _require(self, model: Type[T], entity_id: UUID, label: str) -> T:
        entity = await self._repository.get(model, entity_id)
        if entity is None:
            raise EntityNotFoundError(label, entity_id)
        return entity

    def _targeted_ids(self, request: WorkflowExecutionRequest) -> dict[WorkflowLevel, Optional[UUID]]:
        ids = {
            WorkflowLevel.STAGE: request.stage_id,
            WorkflowLevel.TASK: request.task_id,
            WorkflowLevel.STEP: request.step_id,
            WorkflowLevel.ASSIGNMENT: request.assignment_id,
        }
        # Fall back to the action's target id for the level the action addresses
        transition = TRANSITIONS.get(request.action.type)
        if transition is not None and ids[transition.level] is None:
            ids[transition.level] = request.action.target_id
        return ids

    async def build_context(self, request: WorkflowExecutionRequest) -> WorkflowExecutionContext:
        logger.debug(f"Building workflow execution context for project: {request.project_id}")
        ids = self._targeted_ids(request)

        assignment: Optional[ProjectStepAssignment] = None
        if ids[WorkflowLevel.ASSIGNMENT] is not None:
            assignment = await self._require(
                ProjectStepAssignment, ids[WorkflowLevel.ASSIGNMENT], "Project step assignment"
            )

        step: Optional[ProjectStep] = None
        step_id = ids[WorkflowLevel.STEP] or (assignment.project_step_id if assignment else None)
        if step_id is not None:
            step = await self._require(ProjectStep, step_id, "Project step")

        task: Optional[ProjectTask] = None
        task_id = ids[WorkflowLevel.TASK] or (step.project_task_id if step else None)
        if task_id is not None:
            task = await self._require(ProjectTask, task_id, "Project task")

        stage: Optional[ProjectStage] = None
        stage_id = ids[WorkflowLevel.STAGE] or (task.project_stage_id if task else None)
        if stage_id is not None:
            stage = await self._require(ProjectStage, stage_id, "Project stage")

        project_id = request.project_id or (stage.project_id if stage else None)
        if project_id is None:
            raise EntityNotFoundError("Project")
        project = await self._require(Project, project_id, "Project")
        user = await self._require(User, request.user_id, "User")

        if stage is not None and stage.project_id != project.id:
            raise EntityNotFoundError(f"Project stage in project {project.id}", stage.id)
        if task is not None and stage is not None and task.project_stage_id != stage.id:
            raise EntityNotFoundError(f"Project task in stage {stage.id}", task.id)
        if step is not None and task is not None and step.project_task_id != task.id:
            raise EntityNotFoundError(f"Project step in task {task.id}", step.id)

        workflow_stage: Optional[WorkflowStage] = None
        if stage is not None:
            workflow_stage = await self._require(
                WorkflowStage, stage.workflow_stage_id, "Workflow stage"
            )

        transition = TRANSITIONS.get(request.action.type)
        level = transition.level if transition is not None else None

        project_stages: tuple[StageSnapshot, ...] = ()
        stage_tasks: tuple[ProjectTask, ...] = ()
        if stage is not None and level is WorkflowLevel.STAGE:
            project_stages = await self._load_stage_snapshots(project.id)
            stage_tasks = tuple(await self._repository.list_stage_tasks(stage.id))

        task_steps: tuple[ProjectStep, ...] = ()
        if task is not None and level is WorkflowLevel.TASK:
            task_steps = tuple(await self._repository.list_task_steps(task.id))

        return WorkflowExecutionContext(
            project=project,
            user=user,
            action=request.action,
            project_stage=stage,
            workflow_stage=workflow_stage,
            project_task=task,
            project_step=step,
            project_step_assignment=assignment,
            project_stages=project_stages,
            stage_tasks=stage_tasks,
            task_steps=task_steps,
            metadata=request.metadata,
        )

    async def _load_stage_snapshots(self, project_id: UUID) -> tuple[StageSnapshot, ...]:
        snapshots = []
        templates: dict[UUID, WorkflowStage] = {}
        for stage in await self._repository.list_project_stages(project_id):
            template = templates.get(stage.workflow_stage_id)
            if template is None:
                template = await self._require(
                    WorkflowStage, stage.workflow_stage_id, "Workflow stage"
                )
                templates[template.id] = template
            snapshots.append(StageSnapshot(stage=stage, template=template))
        return tuple(snapshots)
