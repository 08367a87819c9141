"""SQL implementation of the workflow repository."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Dict, Optional, Type
from uuid import UUID

from sqlalchemy import update
from sqlmodel import SQLModel, select

from ..db import (
    Database,
    ProjectRow,
    ProjectStageRow,
    ProjectStepAssignmentRow,
    ProjectStepRow,
    ProjectTaskRow,
    UserRow,
    WorkflowStageRow,
)
from ..exceptions import ConcurrentModificationError, EntityNotFoundError
from .models import (
    Project,
    ProjectStage,
    ProjectStep,
    ProjectStepAssignment,
    ProjectTask,
    User,
    WorkflowStage,
)
from .repository import VERSIONED_MODELS, EntityT, WorkflowRepository

logger = logging.getLogger(__name__)

_ROWS: Dict[type, Type[SQLModel]] = {
    Project: ProjectRow,
    User: UserRow,
    WorkflowStage: WorkflowStageRow,
    ProjectStage: ProjectStageRow,
    ProjectTask: ProjectTaskRow,
    ProjectStep: ProjectStepRow,
    ProjectStepAssignment: ProjectStepAssignmentRow,
}


def _row_values(entity: Any, row_cls: Type[SQLModel]) -> dict[str, Any]:
    values = entity.model_dump(include=set(row_cls.model_fields))
    return {k: v.value if isinstance(v, Enum) else v for k, v in values.items()}


def _to_entity(model: Type[EntityT], row: SQLModel) -> EntityT:
    return model.model_validate(row.model_dump())


class SQLWorkflowRepository(WorkflowRepository):
    """Persist workflow state using SQLModel tables on an async engine.

    Updates of versioned records are conditional on the stored version so
    that two writers that read the same state cannot both succeed.
    """

    def __init__(self, database: Database | str):
        self._db = Database(database) if isinstance(database, str) else database

    async def init_db(self) -> None:
        await self._db.init_db()

    # ------------------------------------------------------------------
    async def get(self, model: Type[EntityT], entity_id: UUID) -> Optional[EntityT]:
        async with self._db.session() as session:
            row = await session.get(_ROWS[model], entity_id)
        return _to_entity(model, row) if row is not None else None

    async def add(self, entity: EntityT) -> EntityT:
        row_cls = _ROWS[type(entity)]
        async with self._db.session() as session:
            async with session.begin():
                session.add(row_cls(**_row_values(entity, row_cls)))
        return entity

    async def update(self, entity: EntityT) -> EntityT:
        model = type(entity)
        row_cls = _ROWS[model]
        values = _row_values(entity, row_cls)
        values.pop("id")
        stmt = update(row_cls).where(row_cls.id == entity.id)
        if model in VERSIONED_MODELS:
            values["version"] = entity.version + 1
            stmt = stmt.where(row_cls.version == entity.version)

        async with self._db.session() as session:
            async with session.begin():
                result = await session.execute(stmt.values(**values))
                if result.rowcount == 0:
                    if await session.get(row_cls, entity.id) is None:
                        raise EntityNotFoundError(model.__name__, entity.id)
                    logger.warning(
                        f"Version conflict on {model.__name__} {entity.id} "
                        f"(expected version {entity.version})"
                    )
                    raise ConcurrentModificationError(
                        model.__name__, entity.id, entity.version
                    )

        if model in VERSIONED_MODELS:
            return entity.model_copy(update={"version": entity.version + 1})
        return entity

    async def list_project_stages(self, project_id: UUID) -> list[ProjectStage]:
        stmt = (
            select(ProjectStageRow)
            .join(WorkflowStageRow, ProjectStageRow.workflow_stage_id == WorkflowStageRow.id)
            .where(ProjectStageRow.project_id == project_id)
            .order_by(WorkflowStageRow.order_index)
        )
        async with self._db.session() as session:
            rows = (await session.execute(stmt)).scalars().all()
        return [_to_entity(ProjectStage, r) for r in rows]

    async def list_stage_tasks(self, stage_id: UUID) -> list[ProjectTask]:
        stmt = (
            select(ProjectTaskRow)
            .where(ProjectTaskRow.project_stage_id == stage_id)
            .order_by(ProjectTaskRow.order_index)
        )
        async with self._db.session() as session:
            rows = (await session.execute(stmt)).scalars().all()
        return [_to_entity(ProjectTask, r) for r in rows]

    async def list_task_steps(self, task_id: UUID) -> list[ProjectStep]:
        stmt = (
            select(ProjectStepRow)
            .where(ProjectStepRow.project_task_id == task_id)
            .order_by(ProjectStepRow.order_index)
        )
        async with self._db.session() as session:
            rows = (await session.execute(stmt)).scalars().all()
        return [_to_entity(ProjectStep, r) for r in rows]
