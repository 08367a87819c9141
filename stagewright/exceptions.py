"""Error hierarchy raised by the workflow engine.

Resolution failures (:class:`EntityNotFoundError`) and persistence conflicts
(:class:`ConcurrentModificationError`) are deliberately *not* subclasses of
:class:`WorkflowException` so callers can tell "the action is invalid" apart
from "the referenced record is missing" and "retry the whole request".
"""

from __future__ import annotations

from typing import Any, Optional

from .enums import WorkflowActionType


class StagewrightError(Exception):
    """Base class for all stagewright errors."""


class WorkflowException(StagewrightError):
    """Generic workflow failure carrying a human-readable message."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class WorkflowValidationException(WorkflowException):
    """A rule or state precondition rejected the requested transition."""

    def __init__(self, message: str, rule_name: Optional[str] = None) -> None:
        super().__init__(message)
        self.rule_name = rule_name


class UnsupportedWorkflowActionException(WorkflowException):
    """The executor has no handler for the requested action type."""

    def __init__(self, action_type: WorkflowActionType) -> None:
        super().__init__(f"Unsupported workflow action: {action_type.value}")
        self.action_type = action_type


class EntityNotFoundError(StagewrightError):
    """A referenced record could not be resolved."""

    def __init__(self, entity: str, entity_id: Any = None) -> None:
        message = f"{entity} not found" if entity_id is None else f"{entity} not found: {entity_id}"
        super().__init__(message)
        self.entity = entity
        self.entity_id = entity_id


class ConcurrentModificationError(StagewrightError):
    """The record changed since it was read; the request may be resubmitted."""

    retryable = True

    def __init__(self, entity: str, entity_id: Any, expected_version: int) -> None:
        super().__init__(
            f"{entity} {entity_id} was modified concurrently "
            f"(expected version {expected_version})"
        )
        self.entity = entity
        self.entity_id = entity_id
        self.expected_version = expected_version


__all__ = [
    "StagewrightError",
    "WorkflowException",
    "WorkflowValidationException",
    "UnsupportedWorkflowActionException",
    "EntityNotFoundError",
    "ConcurrentModificationError",
]
