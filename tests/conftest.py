"""Shared fixtures for stagewright tests."""

from __future__ import annotations

from typing import Optional
from uuid import UUID

import pytest
import pytest_asyncio

from stagewright.contracts import WorkflowAction, WorkflowExecutionRequest
from stagewright.enums import WorkflowActionType
from stagewright.events import EventBus, WorkflowEvent
from stagewright.persistence import (
    InMemoryWorkflowRepository,
    Project,
    User,
    WorkflowStage,
    WorkflowStep,
    WorkflowTask,
    WorkflowTemplate,
)
from stagewright.provisioning import ProvisionedWorkflow, provision_project


def make_request(
    action: WorkflowActionType,
    user_id: UUID,
    project_id: Optional[UUID] = None,
    *,
    stage_id: Optional[UUID] = None,
    task_id: Optional[UUID] = None,
    step_id: Optional[UUID] = None,
    assignment_id: Optional[UUID] = None,
    reason: Optional[str] = None,
) -> WorkflowExecutionRequest:
    return WorkflowExecutionRequest(
        project_id=project_id,
        stage_id=stage_id,
        task_id=task_id,
        step_id=step_id,
        assignment_id=assignment_id,
        user_id=user_id,
        action=WorkflowAction(type=action, reason=reason),
    )


def build_template() -> WorkflowTemplate:
    """Foundation -> Framing in sequence, Landscaping free to run in parallel."""
    return WorkflowTemplate(
        name="Residential build",
        stages=[
            WorkflowStage(
                name="Foundation",
                order_index=1,
                tasks=[
                    WorkflowTask(
                        name="Pour footings",
                        order_index=1,
                        steps=[
                            WorkflowStep(name="Excavate", order_index=1),
                            WorkflowStep(name="Pour concrete", order_index=2),
                        ],
                    )
                ],
            ),
            WorkflowStage(
                name="Framing",
                order_index=2,
                tasks=[WorkflowTask(name="Erect walls", order_index=1)],
            ),
            WorkflowStage(name="Landscaping", order_index=3, parallel_execution=True),
        ],
    )


class EventRecorder:
    """Collects every event delivered by a bus."""

    def __init__(self) -> None:
        self.events: list[WorkflowEvent] = []

    def __call__(self, event: WorkflowEvent) -> None:
        self.events.append(event)


@pytest.fixture
def repo() -> InMemoryWorkflowRepository:
    return InMemoryWorkflowRepository()


@pytest_asyncio.fixture
async def user(repo) -> User:
    user = User(email="site.manager@example.com", first_name="Sam", last_name="Rivera")
    await repo.add(user)
    return user


@pytest_asyncio.fixture
async def provisioned(repo, template) -> ProvisionedWorkflow:
    return await provision_project(repo, Project(name="12 Oak Street"), template)


@pytest_asyncio.fixture
async def bus():
    async with EventBus(workers=1) as bus:
        yield bus


@pytest.fixture
def recorder(bus) -> EventRecorder:
    recorder = EventRecorder()
    bus.subscribe(WorkflowEvent, recorder)
    return recorder


@pytest.fixture
def make_req():
    return make_request


@pytest.fixture
def template() -> WorkflowTemplate:
    return build_template()
