"""Tests for the workflow executor and its transition handlers."""

from datetime import date

import pytest

from stagewright.contracts import (
    WorkflowAction,
    WorkflowExecutionContext,
    WorkflowExecutionResult,
)
from stagewright.engine import WorkflowExecutor
from stagewright.enums import StageStatus, StepStatus, WorkflowActionType, WorkflowLevel
from stagewright.exceptions import (
    UnsupportedWorkflowActionException,
    WorkflowValidationException,
)
from stagewright.persistence import (
    Project,
    ProjectStage,
    ProjectStep,
    ProjectTask,
    User,
    WorkflowStage,
)

A = WorkflowActionType
PROJECT = Project(name="Depot")
USER = User(email="pm@example.com")
TEMPLATE = WorkflowStage(name="Foundation", order_index=1)


def _stage(status=StageStatus.NOT_STARTED):
    return ProjectStage(
        project_id=PROJECT.id, workflow_stage_id=TEMPLATE.id, name="Foundation", status=status
    )


def _context(action, **kwargs):
    return WorkflowExecutionContext(
        project=PROJECT, user=USER, action=WorkflowAction(type=action), **kwargs
    )


@pytest.mark.parametrize(
    "action,status,expected",
    [
        (A.START_STAGE, StageStatus.NOT_STARTED, StageStatus.IN_PROGRESS),
        (A.PAUSE_STAGE, StageStatus.IN_PROGRESS, StageStatus.BLOCKED),
        (A.RESUME_STAGE, StageStatus.BLOCKED, StageStatus.IN_PROGRESS),
        (A.COMPLETE_STAGE, StageStatus.IN_PROGRESS, StageStatus.COMPLETED),
    ],
)
def test_stage_transitions(action, status, expected):
    stage = _stage(status)
    result = WorkflowExecutor().execute(_context(action, project_stage=stage))

    assert result.success
    assert result.target_level is WorkflowLevel.STAGE
    assert result.target_id == stage.id
    assert result.new_status is expected


def test_start_stage_message():
    result = WorkflowExecutor().execute(_context(A.START_STAGE, project_stage=_stage()))
    assert result.message == "Stage started successfully"


def test_invalid_source_status_is_rejected():
    with pytest.raises(WorkflowValidationException) as exc_info:
        WorkflowExecutor().execute(
            _context(A.START_STAGE, project_stage=_stage(StageStatus.COMPLETED))
        )
    assert exc_info.value.message == "Cannot start stage with status: COMPLETED"


def test_missing_target_is_rejected():
    with pytest.raises(WorkflowValidationException) as exc_info:
        WorkflowExecutor().execute(_context(A.START_STAGE))
    assert exc_info.value.message == "Project stage is required to start stage"


def test_complete_stage_requires_terminal_tasks():
    stage = _stage(StageStatus.IN_PROGRESS)
    tasks = (
        ProjectTask(project_stage_id=stage.id, name="Footings", status=StageStatus.COMPLETED),
        ProjectTask(project_stage_id=stage.id, name="Slab", status=StageStatus.IN_PROGRESS),
        ProjectTask(project_stage_id=stage.id, name="Drainage", status=StageStatus.SKIPPED),
    )

    with pytest.raises(WorkflowValidationException) as exc_info:
        WorkflowExecutor().execute(
            _context(A.COMPLETE_STAGE, project_stage=stage, stage_tasks=tasks)
        )
    assert "Slab" in exc_info.value.message
    assert "Footings" not in exc_info.value.message


def test_complete_task_requires_terminal_steps():
    task = ProjectTask(project_stage_id=PROJECT.id, name="Footings", status=StageStatus.IN_PROGRESS)
    steps = (
        ProjectStep(project_task_id=task.id, name="Excavate", status=StepStatus.CANCELLED),
        ProjectStep(project_task_id=task.id, name="Pour", status=StepStatus.READY_TO_START),
    )

    with pytest.raises(WorkflowValidationException) as exc_info:
        WorkflowExecutor().execute(_context(A.COMPLETE_TASK, project_task=task, task_steps=steps))
    assert "Pour" in exc_info.value.message


def test_complete_step_requires_start_date():
    step = ProjectStep(project_task_id=PROJECT.id, name="Pour", status=StepStatus.IN_PROGRESS)

    with pytest.raises(WorkflowValidationException) as exc_info:
        WorkflowExecutor().execute(_context(A.COMPLETE_STEP, project_step=step))
    assert exc_info.value.message == (
        "Step must have an actual start date before it can be completed"
    )

    started = step.model_copy(update={"actual_start_date": date(2024, 3, 1)})
    result = WorkflowExecutor().execute(_context(A.COMPLETE_STEP, project_step=started))
    assert result.new_status is StepStatus.COMPLETED


@pytest.mark.parametrize("status", [None, StageStatus.NOT_STARTED, StageStatus.BLOCKED])
def test_start_step_requires_stage_in_progress(status):
    step = ProjectStep(project_task_id=PROJECT.id, name="Excavate")
    stage = _stage(status) if status is not None else None

    with pytest.raises(WorkflowValidationException) as exc_info:
        WorkflowExecutor().execute(_context(A.START_STEP, project_stage=stage, project_step=step))
    assert exc_info.value.message == "Parent stage must be in progress to start step"


def test_start_step_in_running_stage():
    step = ProjectStep(project_task_id=PROJECT.id, name="Excavate")
    result = WorkflowExecutor().execute(
        _context(
            A.START_STEP, project_stage=_stage(StageStatus.IN_PROGRESS), project_step=step
        )
    )
    assert result.new_status is StepStatus.IN_PROGRESS
    assert result.target_id == step.id


def test_skip_step_from_ready():
    step = ProjectStep(project_task_id=PROJECT.id, name="Inspect", status=StepStatus.READY_TO_START)
    result = WorkflowExecutor().execute(_context(A.SKIP_STEP, project_step=step))
    assert result.new_status is StepStatus.SKIPPED
    assert result.message == "Step skipped successfully"


@pytest.mark.parametrize(
    "action",
    [
        A.APPROVE_STAGE,
        A.REJECT_STAGE,
        A.APPROVE_TASK,
        A.REJECT_TASK,
        A.BLOCK_WORKFLOW,
        A.UNBLOCK_WORKFLOW,
        A.CANCEL_WORKFLOW,
    ],
)
def test_unsupported_actions_fail_closed(action):
    executor = WorkflowExecutor()
    assert not executor.supports(action)
    with pytest.raises(UnsupportedWorkflowActionException) as exc_info:
        executor.execute(_context(action, project_stage=_stage()))
    assert exc_info.value.action_type is action
    assert str(exc_info.value) == f"Unsupported workflow action: {action.value}"


def test_registered_handler_replaces_unsupported():
    executor = WorkflowExecutor()

    def approve(context):
        return WorkflowExecutionResult(success=True, message="Stage approved")

    executor.register(A.APPROVE_STAGE, approve)
    assert executor.supports(A.APPROVE_STAGE)
    assert executor.execute(_context(A.APPROVE_STAGE)).message == "Stage approved"


def test_empty_handler_map_supports_nothing():
    executor = WorkflowExecutor(handlers={})
    with pytest.raises(UnsupportedWorkflowActionException):
        executor.execute(_context(A.START_STAGE, project_stage=_stage()))
