"""Persistence layer for stagewright workflows."""

from __future__ import annotations

import os
from typing import Optional

from ..config import StagewrightConfig, load_config
from .inmemory import InMemoryWorkflowRepository
from .models import (
    Project,
    ProjectStage,
    ProjectStep,
    ProjectStepAssignment,
    ProjectTask,
    User,
    WorkflowStage,
    WorkflowStep,
    WorkflowTask,
    WorkflowTemplate,
)
from .repository import WorkflowRepository
from .sql import SQLWorkflowRepository

_repository_instance: WorkflowRepository | None = None


def get_repository(
    database_url: Optional[str] = None, config: Optional[StagewrightConfig] = None
) -> WorkflowRepository:
    """Factory function to obtain a workflow repository.

    The repository backend is selected based on ``database_url`` which can be
    provided explicitly, via environment variable ``STAGEWRIGHT_DATABASE_URL``
    or ``DATABASE_URL``, or from loaded configuration. When no database is
    configured, an in-memory repository is returned.
    """

    global _repository_instance
    if _repository_instance is not None and database_url is None and config is None:
        return _repository_instance

    config = config or load_config()
    database_url = (
        database_url
        or os.getenv("STAGEWRIGHT_DATABASE_URL")
        or os.getenv("DATABASE_URL")
        or config.database_url
    )

    if not database_url:
        _repository_instance = InMemoryWorkflowRepository()
    elif "://" in database_url:
        _repository_instance = SQLWorkflowRepository(database_url)
    else:
        raise ValueError(f"Unsupported database backend: {database_url}")

    return _repository_instance


__all__ = [
    "Project",
    "User",
    "WorkflowTemplate",
    "WorkflowStage",
    "WorkflowTask",
    "WorkflowStep",
    "ProjectStage",
    "ProjectTask",
    "ProjectStep",
    "ProjectStepAssignment",
    "WorkflowRepository",
    "InMemoryWorkflowRepository",
    "SQLWorkflowRepository",
    "get_repository",
]
