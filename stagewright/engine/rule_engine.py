"""Priority-ordered evaluation of workflow rules."""

from __future__ import annotations

import logging
from typing import Iterable, List

from ..contracts import RuleVerdict, WorkflowExecutionContext
from ..rules.base import WorkflowRule

logger = logging.getLogger(__name__)


class RuleEngine:
    """Aggregates registered rules into a single pass/fail verdict.

    Applicable rules are evaluated highest priority first; rules sharing a
    priority keep their registration order. Evaluation stops at the first
    failing rule, whose message becomes the verdict's message.
    """

    def __init__(self, rules: Iterable[WorkflowRule] = ()) -> None:
        self._rules: List[WorkflowRule] = list(rules)

    @property
    def rules(self) -> list[WorkflowRule]:
        return list(self._rules)

    def register(self, rule: WorkflowRule) -> None:
        self._rules.append(rule)

    def applicable_rules(self, context: WorkflowExecutionContext) -> list[WorkflowRule]:
        """Rules that apply to ``context`` in evaluation order."""
        applicable = [rule for rule in self._rules if rule.applies_to(context)]
        # sorted() is stable, so ties keep registration order
        return sorted(applicable, key=lambda r: r.get_priority().value, reverse=True)

    def evaluate(self, context: WorkflowExecutionContext) -> RuleVerdict:
        rules = self.applicable_rules(context)
        logger.debug(f"Evaluating {len(rules)} applicable rules for {context.action_type.value}")

        for rule in rules:
            if not rule.evaluate(context):
                message = rule.get_failure_message(context)
                logger.warning(f"Rule failed: {rule.name} - {message}")
                return RuleVerdict(allowed=False, rule_name=rule.name, message=message)

        logger.debug("Transition evaluation result: ALLOWED")
        return RuleVerdict(allowed=True)

    def can_execute_transition(self, context: WorkflowExecutionContext) -> bool:
        return self.evaluate(context).allowed

    def get_blocking_rules(self, context: WorkflowExecutionContext) -> list[WorkflowRule]:
        """Every applicable rule that currently fails, in evaluation order."""
        return [rule for rule in self.applicable_rules(context) if not rule.evaluate(context)]

    def get_blocking_reasons(self, context: WorkflowExecutionContext) -> list[str]:
        return [rule.get_failure_message(context) for rule in self.get_blocking_rules(context)]
