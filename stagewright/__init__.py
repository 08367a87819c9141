"""stagewright: rule-gated workflow execution for construction projects."""

from .contracts import (
    RuleVerdict,
    WorkflowAction,
    WorkflowExecutionContext,
    WorkflowExecutionRequest,
    WorkflowExecutionResult,
)
from .engine import RuleEngine, WorkflowEngine, WorkflowExecutor
from .enums import WorkflowActionType, WorkflowLevel
from .events import EventBus, WorkflowEventHandler, get_event_bus
from .exceptions import (
    ConcurrentModificationError,
    EntityNotFoundError,
    UnsupportedWorkflowActionException,
    WorkflowException,
    WorkflowValidationException,
)
from .persistence import get_repository
from .provisioning import load_template, provision_project

__version__ = "0.1.0"
__all__ = [
    "WorkflowAction",
    "WorkflowActionType",
    "WorkflowLevel",
    "WorkflowExecutionContext",
    "WorkflowExecutionRequest",
    "WorkflowExecutionResult",
    "RuleVerdict",
    "RuleEngine",
    "WorkflowEngine",
    "WorkflowExecutor",
    "EventBus",
    "WorkflowEventHandler",
    "get_event_bus",
    "get_repository",
    "load_template",
    "provision_project",
    "WorkflowException",
    "WorkflowValidationException",
    "UnsupportedWorkflowActionException",
    "EntityNotFoundError",
    "ConcurrentModificationError",
]
