"""Command line interface for provisioning projects and driving workflows."""

import asyncio
import logging
from pathlib import Path
from typing import Optional
from uuid import UUID

import typer

from stagewright.config import load_config
from stagewright.contracts import WorkflowAction, WorkflowExecutionRequest
from stagewright.engine import WorkflowEngine
from stagewright.enums import WorkflowActionType
from stagewright.events import EventBus, WorkflowEventHandler
from stagewright.exceptions import StagewrightError
from stagewright.persistence import (
    Project,
    SQLWorkflowRepository,
    User,
    WorkflowRepository,
    get_repository,
)
from stagewright.provisioning import load_template, provision_project

app = typer.Typer(help="CLI for stagewright construction workflows")

db_app = typer.Typer(help="Commands for managing the database")
user_app = typer.Typer(help="Commands for managing users")
project_app = typer.Typer(help="Commands for managing projects")
workflow_app = typer.Typer(help="Commands for executing workflow actions")

app.add_typer(db_app, name="db")
app.add_typer(user_app, name="user")
app.add_typer(project_app, name="project")
app.add_typer(workflow_app, name="workflow")


@app.callback()
def main(
    log_level: Optional[str] = typer.Option(None, help="Logging level, e.g. DEBUG"),
) -> None:
    """stagewright CLI entry point."""
    config = load_config()
    logging.basicConfig(level=(log_level or config.log_level).upper())


def _build_engine(repository: WorkflowRepository) -> tuple[WorkflowEngine, EventBus]:
    events = load_config().events
    bus = EventBus(workers=events.workers, queue_size=events.queue_size)
    WorkflowEventHandler(timeline_size=events.timeline_size).register(bus)
    return WorkflowEngine(repository, bus), bus


def _request(
    action: WorkflowActionType,
    user: UUID,
    project: Optional[UUID],
    stage: Optional[UUID],
    task: Optional[UUID],
    step: Optional[UUID],
    assignment: Optional[UUID],
    reason: Optional[str],
) -> WorkflowExecutionRequest:
    target = assignment or step or task or stage
    return WorkflowExecutionRequest(
        project_id=project,
        stage_id=stage,
        task_id=task,
        step_id=step,
        assignment_id=assignment,
        user_id=user,
        action=WorkflowAction(type=action, target_id=target, reason=reason),
    )


@db_app.command("init")
def db_init() -> None:
    """Create the tables for the configured database."""
    repo = get_repository()
    if not isinstance(repo, SQLWorkflowRepository):
        typer.echo("No database configured; using the in-memory repository")
        return
    asyncio.run(repo.init_db())
    typer.echo("Database initialised")


@user_app.command("add")
def user_add(
    email: str,
    first_name: Optional[str] = None,
    last_name: Optional[str] = None,
) -> None:
    """Register a user who can act on workflows."""
    repo = get_repository()
    user = User(email=email, first_name=first_name, last_name=last_name)
    asyncio.run(repo.add(user))
    typer.echo(f"User {user.id}\t{user.email}")


@project_app.command("provision")
def project_provision(
    template_path: Path,
    name: str = typer.Option(..., help="Project name"),
) -> None:
    """
    Create a project and instantiate every stage, task and step of a template.

    Example:
        stagewright project provision ./templates/residential.yaml --name "12 Oak St"
    """
    if not template_path.exists():
        typer.secho("Specified template does not exist", fg=typer.colors.RED)
        raise typer.Exit(code=1)

    template = load_template(template_path)
    repo = get_repository()
    provisioned = asyncio.run(provision_project(repo, Project(name=name), template))
    typer.echo(f"Project {provisioned.project.id}: {provisioned.project.name}")
    for stage in provisioned.stages:
        typer.echo(f"- stage {stage.id}\t{stage.name}")


@project_app.command("show")
def project_show(project_id: UUID) -> None:
    """Show every stage, task and step of a project with its status."""
    repo = get_repository()

    async def _load():
        project = await repo.get(Project, project_id)
        if project is None:
            return None, []
        tree = []
        for stage in await repo.list_project_stages(project_id):
            tasks = []
            for task in await repo.list_stage_tasks(stage.id):
                tasks.append((task, await repo.list_task_steps(task.id)))
            tree.append((stage, tasks))
        return project, tree

    project, tree = asyncio.run(_load())
    if project is None:
        typer.echo("Project not found")
        raise typer.Exit(code=1)

    typer.echo(f"Project {project.id}: {project.name}")
    for stage, tasks in tree:
        typer.echo(f"- {stage.name} [{stage.status.value}] {stage.id}")
        for task, steps in tasks:
            typer.echo(f"  - {task.name} [{task.status.value}] {task.id}")
            for step in steps:
                typer.echo(f"    - {step.name} [{step.status.value}] {step.id}")


@workflow_app.command("execute")
def workflow_execute(
    action: WorkflowActionType = typer.Argument(..., case_sensitive=False),
    user: UUID = typer.Option(..., help="Acting user id"),
    project: Optional[UUID] = typer.Option(None, help="Project id"),
    stage: Optional[UUID] = typer.Option(None, help="Project stage id"),
    task: Optional[UUID] = typer.Option(None, help="Project task id"),
    step: Optional[UUID] = typer.Option(None, help="Project step id"),
    assignment: Optional[UUID] = typer.Option(None, help="Step assignment id"),
    reason: Optional[str] = typer.Option(None, help="Reason recorded with the action"),
) -> None:
    """
    Execute a workflow action such as START_STAGE or COMPLETE_STEP.

    Example:
        stagewright workflow execute START_STAGE --project <id> --stage <id> --user <id>
    """
    repo = get_repository()
    engine, bus = _build_engine(repo)
    request = _request(action, user, project, stage, task, step, assignment, reason)

    async def _run():
        async with bus:
            return await engine.execute_workflow(request)

    try:
        result = asyncio.run(_run())
    except StagewrightError as exc:
        typer.secho(f"{type(exc).__name__}: {exc}", fg=typer.colors.RED)
        raise typer.Exit(code=1)

    status = result.new_status.value if result.new_status else "-"
    typer.echo(f"{result.message} ({status})")


@workflow_app.command("check")
def workflow_check(
    action: WorkflowActionType = typer.Argument(..., case_sensitive=False),
    user: UUID = typer.Option(..., help="Acting user id"),
    project: Optional[UUID] = typer.Option(None, help="Project id"),
    stage: Optional[UUID] = typer.Option(None, help="Project stage id"),
    task: Optional[UUID] = typer.Option(None, help="Project task id"),
    step: Optional[UUID] = typer.Option(None, help="Project step id"),
    assignment: Optional[UUID] = typer.Option(None, help="Step assignment id"),
) -> None:
    """Report whether an action would currently be allowed, without applying it."""
    repo = get_repository()
    engine, _ = _build_engine(repo)
    request = _request(action, user, project, stage, task, step, assignment, None)

    async def _check():
        if await engine.can_execute_transition(request):
            return []
        return await engine.get_blocking_reasons(request)

    reasons = asyncio.run(_check())
    if not reasons:
        typer.echo("ALLOWED")
        return
    typer.echo("BLOCKED")
    for reason in reasons:
        typer.echo(f"- {reason}")
    raise typer.Exit(code=1)


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    app()
