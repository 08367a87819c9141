"""Workflow gating rules."""

from __future__ import annotations

from .base import WorkflowRule
from .sequential import SequentialStageRule
from .status import TransitionStatusRule


def default_rules() -> list[WorkflowRule]:
    """Rules registered with the engine when none are supplied."""
    return [TransitionStatusRule(), SequentialStageRule()]


__all__ = [
    "WorkflowRule",
    "SequentialStageRule",
    "TransitionStatusRule",
    "default_rules",
]
