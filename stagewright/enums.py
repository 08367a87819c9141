"""Enumerations shared by the workflow engine."""

from __future__ import annotations

from enum import Enum


class StageStatus(str, Enum):
    """Lifecycle of project stages and tasks."""

    NOT_STARTED = "NOT_STARTED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    BLOCKED = "BLOCKED"
    SKIPPED = "SKIPPED"


class StepStatus(str, Enum):
    """Lifecycle of project steps."""

    NOT_STARTED = "NOT_STARTED"
    READY_TO_START = "READY_TO_START"
    IN_PROGRESS = "IN_PROGRESS"
    BLOCKED = "BLOCKED"
    COMPLETED = "COMPLETED"
    SKIPPED = "SKIPPED"
    CANCELLED = "CANCELLED"


class AssignmentStatus(str, Enum):
    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    DECLINED = "DECLINED"
    CANCELLED = "CANCELLED"


class WorkflowLevel(str, Enum):
    STAGE = "STAGE"
    TASK = "TASK"
    STEP = "STEP"
    ASSIGNMENT = "ASSIGNMENT"


class WorkflowActionType(str, Enum):
    START_STAGE = "START_STAGE"
    COMPLETE_STAGE = "COMPLETE_STAGE"
    START_TASK = "START_TASK"
    COMPLETE_TASK = "COMPLETE_TASK"
    START_STEP = "START_STEP"
    COMPLETE_STEP = "COMPLETE_STEP"
    PAUSE_STAGE = "PAUSE_STAGE"
    RESUME_STAGE = "RESUME_STAGE"
    PAUSE_TASK = "PAUSE_TASK"
    RESUME_TASK = "RESUME_TASK"
    SKIP_STEP = "SKIP_STEP"
    APPROVE_STAGE = "APPROVE_STAGE"
    REJECT_STAGE = "REJECT_STAGE"
    APPROVE_TASK = "APPROVE_TASK"
    REJECT_TASK = "REJECT_TASK"
    BLOCK_WORKFLOW = "BLOCK_WORKFLOW"
    UNBLOCK_WORKFLOW = "UNBLOCK_WORKFLOW"
    CANCEL_WORKFLOW = "CANCEL_WORKFLOW"
    ACCEPT_ASSIGNMENT = "ACCEPT_ASSIGNMENT"
    DECLINE_ASSIGNMENT = "DECLINE_ASSIGNMENT"


class RulePriority(int, Enum):
    """Rule priority; higher values are evaluated first."""

    LOW = 1
    MEDIUM = 2
    HIGH = 3
    CRITICAL = 4


class RuleType(str, Enum):
    PREREQUISITE = "PREREQUISITE"
    VALIDATION = "VALIDATION"
    BUSINESS_LOGIC = "BUSINESS_LOGIC"
    APPROVAL = "APPROVAL"
    RESOURCE = "RESOURCE"
    TIMING = "TIMING"
