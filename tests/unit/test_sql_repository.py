import pytest

from stagewright.enums import StageStatus, WorkflowActionType
from stagewright.engine import WorkflowEngine
from stagewright.exceptions import ConcurrentModificationError, EntityNotFoundError
from stagewright.persistence import (
    Project,
    ProjectStage,
    ProjectStepAssignment,
    SQLWorkflowRepository,
    User,
)
from stagewright.provisioning import provision_project


async def _repo(tmp_path) -> SQLWorkflowRepository:
    repo = SQLWorkflowRepository(f"sqlite+aiosqlite:///{tmp_path / 'wf.db'}")
    await repo.init_db()
    return repo


@pytest.mark.asyncio
async def test_sql_repository_crud(tmp_path, template):
    repo = await _repo(tmp_path)
    user = User(email="pm@example.com", first_name="Ada")
    await repo.add(user)
    provisioned = await provision_project(repo, Project(name="Depot"), template)

    loaded_user = await repo.get(User, user.id)
    assert loaded_user == user

    stages = await repo.list_project_stages(provisioned.project.id)
    assert [s.name for s in stages] == ["Foundation", "Framing", "Landscaping"]
    assert all(s.status is StageStatus.NOT_STARTED for s in stages)

    tasks = await repo.list_stage_tasks(stages[0].id)
    assert [t.name for t in tasks] == ["Pour footings"]
    steps = await repo.list_task_steps(tasks[0].id)
    assert [s.name for s in steps] == ["Excavate", "Pour concrete"]

    assignment = ProjectStepAssignment(project_step_id=steps[0].id, assigned_to_user_id=user.id)
    await repo.add(assignment)
    assert (await repo.get(ProjectStepAssignment, assignment.id)).project_step_id == steps[0].id


@pytest.mark.asyncio
async def test_sql_repository_versioned_update(tmp_path, template):
    repo = await _repo(tmp_path)
    provisioned = await provision_project(repo, Project(name="Depot"), template)
    stage = await repo.get(ProjectStage, provisioned.stages[0].id)

    updated = await repo.update(stage.model_copy(update={"status": StageStatus.IN_PROGRESS}))
    assert updated.version == 2

    stored = await repo.get(ProjectStage, stage.id)
    assert stored.status is StageStatus.IN_PROGRESS
    assert stored.version == 2

    # The original read is now stale
    with pytest.raises(ConcurrentModificationError):
        await repo.update(stage.model_copy(update={"status": StageStatus.BLOCKED}))
    assert (await repo.get(ProjectStage, stage.id)).status is StageStatus.IN_PROGRESS


@pytest.mark.asyncio
async def test_sql_repository_update_missing(tmp_path):
    repo = await _repo(tmp_path)
    project = Project(name="Ghost")
    stage = ProjectStage(project_id=project.id, workflow_stage_id=project.id, name="Nowhere")

    with pytest.raises(EntityNotFoundError):
        await repo.update(stage)
    assert await repo.get(ProjectStage, stage.id) is None


@pytest.mark.asyncio
async def test_engine_runs_against_sql_repository(tmp_path, template, bus, recorder, make_req):
    repo = await _repo(tmp_path)
    user = User(email="pm@example.com")
    await repo.add(user)
    provisioned = await provision_project(repo, Project(name="Depot"), template)
    engine = WorkflowEngine(repo, bus)
    foundation, framing = provisioned.stages[:2]
    project_id = provisioned.project.id

    assert not await engine.can_execute_transition(
        make_req(WorkflowActionType.START_STAGE, user.id, project_id, stage_id=framing.id)
    )
    result = await engine.execute_workflow(
        make_req(WorkflowActionType.START_STAGE, user.id, project_id, stage_id=foundation.id)
    )

    assert result.new_status is StageStatus.IN_PROGRESS
    stored = await repo.get(ProjectStage, foundation.id)
    assert stored.status is StageStatus.IN_PROGRESS
    assert stored.actual_start_date is not None
    await bus.join()
    assert [e.event_type for e in recorder.events] == ["STAGE_STARTED"]
