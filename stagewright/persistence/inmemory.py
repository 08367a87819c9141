"""In-memory implementation of the workflow repository."""

from __future__ import annotations

import asyncio
from collections import defaultdict
from typing import Dict, Optional, Type
from uuid import UUID

from ..exceptions import ConcurrentModificationError, EntityNotFoundError
from .models import ProjectStage, ProjectStep, ProjectTask, WorkflowStage
from .repository import VERSIONED_MODELS, EntityT, WorkflowRepository


class InMemoryWorkflowRepository(WorkflowRepository):
    """Store workflow state in local memory.

    Useful for tests or when no database is configured. Data is not
    persisted across process restarts. Entities are copied on the way in and
    out so callers never share state with the store.
    """

    def __init__(self) -> None:
        self._entities: Dict[type, Dict[UUID, object]] = defaultdict(dict)
        self._lock = asyncio.Lock()

    # ------------------------------------------------------------------
    async def get(self, model: Type[EntityT], entity_id: UUID) -> Optional[EntityT]:
        entity = self._entities[model].get(entity_id)
        return entity.model_copy(deep=True) if entity is not None else None

    async def add(self, entity: EntityT) -> EntityT:
        async with self._lock:
            self._entities[type(entity)][entity.id] = entity.model_copy(deep=True)
        return entity

    async def update(self, entity: EntityT) -> EntityT:
        model = type(entity)
        name = model.__name__
        async with self._lock:
            stored = self._entities[model].get(entity.id)
            if stored is None:
                raise EntityNotFoundError(name, entity.id)
            if model in VERSIONED_MODELS:
                if stored.version != entity.version:
                    raise ConcurrentModificationError(name, entity.id, entity.version)
                entity = entity.model_copy(update={"version": entity.version + 1})
            self._entities[model][entity.id] = entity.model_copy(deep=True)
        return entity

    async def list_project_stages(self, project_id: UUID) -> list[ProjectStage]:
        templates = self._entities[WorkflowStage]

        def order(stage: ProjectStage) -> int:
            template = templates.get(stage.workflow_stage_id)
            return template.order_index if template is not None else stage.order_index

        stages = [
            s.model_copy(deep=True)
            for s in self._entities[ProjectStage].values()
            if s.project_id == project_id
        ]
        return sorted(stages, key=order)

    async def list_stage_tasks(self, stage_id: UUID) -> list[ProjectTask]:
        tasks = [
            t.model_copy(deep=True)
            for t in self._entities[ProjectTask].values()
            if t.project_stage_id == stage_id
        ]
        return sorted(tasks, key=lambda t: t.order_index)

    async def list_task_steps(self, task_id: UUID) -> list[ProjectStep]:
        steps = [
            s.model_copy(deep=True)
            for s in self._entities[ProjectStep].values()
            if s.project_task_id == task_id
        ]
        return sorted(steps, key=lambda s: s.order_index)
