"""Base interface for workflow gating rules."""

from __future__ import annotations

import abc

from ..contracts import WorkflowExecutionContext
from ..enums import RulePriority, RuleType


class WorkflowRule(metaclass=abc.ABCMeta):
    """A single gating predicate over an execution context.

    Implementations must be side-effect free: they read only from the
    context and never touch persisted state.
    """

    @property
    def name(self) -> str:
        return type(self).__name__

    @abc.abstractmethod
    def applies_to(self, context: WorkflowExecutionContext) -> bool:
        """Return ``True`` when the rule is relevant for ``context``."""
        raise NotImplementedError

    @abc.abstractmethod
    def evaluate(self, context: WorkflowExecutionContext) -> bool:
        """Return ``True`` when the rule is satisfied."""
        raise NotImplementedError

    @abc.abstractmethod
    def get_failure_message(self, context: WorkflowExecutionContext | None = None) -> str:
        """Human readable reason reported when :meth:`evaluate` fails."""
        raise NotImplementedError

    def get_priority(self) -> RulePriority:
        return RulePriority.MEDIUM

    def get_rule_type(self) -> RuleType:
        return RuleType.VALIDATION

    def __repr__(self) -> str:  # pragma: no cover - debugging aid
        return f"<{self.name} priority={self.get_priority().name}>"
