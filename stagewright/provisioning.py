"""Instantiate a workflow template's stages, tasks and steps for a project."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import NamedTuple

import yaml

from .persistence.models import (
    Project,
    ProjectStage,
    ProjectStep,
    ProjectTask,
    WorkflowStage,
    WorkflowTemplate,
)
from .persistence.repository import WorkflowRepository

logger = logging.getLogger(__name__)


class ProvisionedWorkflow(NamedTuple):
    project: Project
    stages: list[ProjectStage]
    tasks: list[ProjectTask]
    steps: list[ProjectStep]


def load_template(path: str | Path) -> WorkflowTemplate:
    """Load a workflow template from a YAML document.

    Example::

        name: Residential build
        stages:
          - name: Site preparation
            order_index: 1
            tasks:
              - name: Survey
                order_index: 1
                steps:
                  - {name: Peg boundaries, order_index: 1}
          - name: Landscaping
            order_index: 2
            parallel_execution: true
    """
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    return WorkflowTemplate.model_validate(data)


async def provision_project(
    repository: WorkflowRepository, project: Project, template: WorkflowTemplate
) -> ProvisionedWorkflow:
    """Persist ``project`` with one NOT_STARTED record per template element.

    Template stages are stored without their nested tasks; the runtime
    records reference them by id and copy their ``order_index``.
    """
    await repository.add(project)
    stages: list[ProjectStage] = []
    tasks: list[ProjectTask] = []
    steps: list[ProjectStep] = []

    for template_stage in sorted(template.stages, key=lambda s: s.order_index):
        if await repository.get(WorkflowStage, template_stage.id) is None:
            await repository.add(
                template_stage.model_copy(update={"template_id": template.id, "tasks": []})
            )
        stage = ProjectStage(
            project_id=project.id,
            workflow_stage_id=template_stage.id,
            name=template_stage.name,
            order_index=template_stage.order_index,
        )
        await repository.add(stage)
        stages.append(stage)

        for template_task in sorted(template_stage.tasks, key=lambda t: t.order_index):
            task = ProjectTask(
                project_stage_id=stage.id,
                name=template_task.name,
                order_index=template_task.order_index,
            )
            await repository.add(task)
            tasks.append(task)

            for template_step in sorted(template_task.steps, key=lambda s: s.order_index):
                step = ProjectStep(
                    project_task_id=task.id,
                    name=template_step.name,
                    order_index=template_step.order_index,
                )
                await repository.add(step)
                steps.append(step)

    logger.info(
        f"Provisioned project {project.id} from template '{template.name}': "
        f"{len(stages)} stages, {len(tasks)} tasks, {len(steps)} steps"
    )
    return ProvisionedWorkflow(project, stages, tasks, steps)
