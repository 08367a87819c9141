"""Repository abstraction for workflow state persistence."""

from __future__ import annotations

from typing import Optional, Protocol, Type, TypeVar, Union
from uuid import UUID

from .models import (
    Project,
    ProjectStage,
    ProjectStep,
    ProjectStepAssignment,
    ProjectTask,
    User,
    WorkflowStage,
)

Entity = Union[
    Project,
    User,
    WorkflowStage,
    ProjectStage,
    ProjectTask,
    ProjectStep,
    ProjectStepAssignment,
]
EntityT = TypeVar("EntityT", bound=Entity)

# Records that are mutated through the engine and carry a ``version``.
VERSIONED_MODELS = (ProjectStage, ProjectTask, ProjectStep, ProjectStepAssignment)


class WorkflowRepository(Protocol):
    """Protocol for workflow state persistence backends."""

    async def get(self, model: Type[EntityT], entity_id: UUID) -> Optional[EntityT]:
        """Retrieve an entity of ``model`` by id."""

    async def add(self, entity: EntityT) -> EntityT:
        """Persist a new entity."""

    async def update(self, entity: EntityT) -> EntityT:
        """Persist changes to a versioned entity.

        ``entity.version`` must equal the stored version, otherwise
        :class:`~stagewright.exceptions.ConcurrentModificationError` is raised
        and nothing is written. Returns the entity with its new version.
        """

    async def list_project_stages(self, project_id: UUID) -> list[ProjectStage]:
        """Return the project's stages ordered by template ``order_index``."""

    async def list_stage_tasks(self, stage_id: UUID) -> list[ProjectTask]:
        """Return the stage's tasks ordered by ``order_index``."""

    async def list_task_steps(self, task_id: UUID) -> list[ProjectStep]:
        """Return the task's steps ordered by ``order_index``."""
