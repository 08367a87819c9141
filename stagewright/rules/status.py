from __future__ import annotations

from ..contracts import WorkflowExecutionContext
from ..enums import RulePriority, RuleType
from ..transitions import TRANSITIONS, status_error, target_entity
from .base import WorkflowRule


class TransitionStatusRule(WorkflowRule):
    """The target's current status must be a valid source for the action.

    Guards against resubmitting an action that has already been applied,
    e.g. starting a stage that is already in progress.
    """

    def applies_to(self, context: WorkflowExecutionContext) -> bool:
        transition = TRANSITIONS.get(context.action_type)
        return transition is not None and target_entity(context, transition.level) is not None

    def evaluate(self, context: WorkflowExecutionContext) -> bool:
        transition = TRANSITIONS[context.action_type]
        return target_entity(context, transition.level).status in transition.allowed_from

    def get_failure_message(self, context: WorkflowExecutionContext | None = None) -> str:
        if context is None:
            return "Current status does not allow this action"
        transition = TRANSITIONS[context.action_type]
        current = target_entity(context, transition.level).status
        return status_error(transition, current) or "Current status does not allow this action"

    def get_priority(self) -> RulePriority:
        return RulePriority.CRITICAL

    def get_rule_type(self) -> RuleType:
        return RuleType.VALIDATION
