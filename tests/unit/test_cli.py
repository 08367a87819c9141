import asyncio
import uuid

from typer.testing import CliRunner

import stagewright.persistence as persistence
from stagewright.cli import app
from stagewright.enums import StageStatus
from stagewright.persistence import InMemoryWorkflowRepository, Project, ProjectStage, User
from stagewright.provisioning import provision_project

TEMPLATE_YAML = """
name: Fit-out
stages:
  - name: Demolition
    order_index: 1
    tasks:
      - name: Strip out
        order_index: 1
        steps:
          - {name: Remove ceilings, order_index: 1}
  - name: Joinery
    order_index: 2
"""


def _setup_repo() -> InMemoryWorkflowRepository:
    repo = InMemoryWorkflowRepository()
    persistence._repository_instance = repo
    return repo


def _seed(repo, template):
    user = User(email="pm@example.com")
    asyncio.run(repo.add(user))
    provisioned = asyncio.run(provision_project(repo, Project(name="Depot"), template))
    return user, provisioned


def test_project_provision_and_show(tmp_path):
    repo = _setup_repo()
    template_path = tmp_path / "fitout.yaml"
    template_path.write_text(TEMPLATE_YAML)

    runner = CliRunner()
    result = runner.invoke(app, ["project", "provision", str(template_path), "--name", "Level 3"])
    assert result.exit_code == 0, f"Command failed: {result.stdout}"
    assert "Level 3" in result.stdout
    assert "Demolition" in result.stdout

    project_id = result.stdout.split()[1].rstrip(":")
    stages = asyncio.run(repo.list_project_stages(uuid.UUID(project_id)))
    assert [s.name for s in stages] == ["Demolition", "Joinery"]

    result = runner.invoke(app, ["project", "show", project_id])
    assert result.exit_code == 0, f"Command failed: {result.stdout}"
    assert "Demolition [NOT_STARTED]" in result.stdout
    assert "Remove ceilings [NOT_STARTED]" in result.stdout


def test_project_provision_missing_template(tmp_path):
    _setup_repo()
    runner = CliRunner()
    result = runner.invoke(
        app, ["project", "provision", str(tmp_path / "nope.yaml"), "--name", "X"]
    )
    assert result.exit_code == 1
    assert "Specified template does not exist" in result.stdout


def test_project_show_missing():
    _setup_repo()
    result = CliRunner().invoke(app, ["project", "show", str(uuid.uuid4())])
    assert result.exit_code == 1
    assert "Project not found" in result.stdout


def test_workflow_execute_and_check(template):
    repo = _setup_repo()
    user, provisioned = _seed(repo, template)
    project_id = str(provisioned.project.id)
    foundation, framing = provisioned.stages[:2]
    runner = CliRunner()

    check = runner.invoke(
        app,
        ["workflow", "check", "START_STAGE", "--user", str(user.id), "--project", project_id,
         "--stage", str(framing.id)],
    )
    assert check.exit_code == 1
    assert "BLOCKED" in check.stdout
    assert "Previous stages must be completed" in check.stdout

    result = runner.invoke(
        app,
        ["workflow", "execute", "start_stage", "--user", str(user.id), "--project", project_id,
         "--stage", str(foundation.id)],
    )
    assert result.exit_code == 0, f"Command failed: {result.stdout}"
    assert "Stage started successfully (IN_PROGRESS)" in result.stdout
    stored = asyncio.run(repo.get(ProjectStage, foundation.id))
    assert stored.status is StageStatus.IN_PROGRESS

    again = runner.invoke(
        app,
        ["workflow", "execute", "START_STAGE", "--user", str(user.id), "--project", project_id,
         "--stage", str(foundation.id)],
    )
    assert again.exit_code == 1
    assert "WorkflowValidationException" in again.stdout


def test_workflow_execute_unsupported(template):
    repo = _setup_repo()
    user, provisioned = _seed(repo, template)

    result = CliRunner().invoke(
        app,
        ["workflow", "execute", "APPROVE_STAGE", "--user", str(user.id),
         "--stage", str(provisioned.stages[0].id)],
    )
    assert result.exit_code == 1
    assert "Unsupported workflow action: APPROVE_STAGE" in result.stdout


def test_user_add_and_db_init_in_memory():
    repo = _setup_repo()
    runner = CliRunner()

    result = runner.invoke(app, ["user", "add", "crew@example.com", "--first-name", "Lee"])
    assert result.exit_code == 0
    user_id = uuid.UUID(result.stdout.split()[1])
    assert asyncio.run(repo.get(User, user_id)).first_name == "Lee"

    result = runner.invoke(app, ["db", "init"])
    assert result.exit_code == 0
    assert "in-memory" in result.stdout
