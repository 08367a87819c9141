"""Workflow execution engine."""

from .context import WorkflowContextBuilder
from .executor import ActionHandler, WorkflowExecutor, apply_transition
from .rule_engine import RuleEngine
from .state import StateManager
from .workflow_engine import WorkflowEngine

__all__ = [
    "ActionHandler",
    "RuleEngine",
    "StateManager",
    "WorkflowContextBuilder",
    "WorkflowEngine",
    "WorkflowExecutor",
    "apply_transition",
]
