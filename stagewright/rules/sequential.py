from __future__ import annotations

import logging

from ..contracts import WorkflowExecutionContext
from ..enums import RulePriority, RuleType, StageStatus, WorkflowActionType
from .base import WorkflowRule

logger = logging.getLogger(__name__)


class SequentialStageRule(WorkflowRule):
    """Stages may only start once every earlier-ordered stage is completed.

    A stage whose template sets ``parallel_execution`` is exempt.
    """

    FAILURE_MESSAGE = "Previous stages must be completed before starting this stage."

    def applies_to(self, context: WorkflowExecutionContext) -> bool:
        return (
            context.action_type is WorkflowActionType.START_STAGE
            and context.project_stage is not None
        )

    def evaluate(self, context: WorkflowExecutionContext) -> bool:
        current = context.project_stage
        template = context.workflow_stage
        if template is None:
            template = next(
                (s.template for s in context.project_stages if s.stage.id == current.id),
                None,
            )
        if template is None:
            logger.warning(f"No template stage resolved for stage {current.id}")
            return False

        if template.parallel_execution:
            logger.debug(f"Stage {current.id} allows parallel execution, skipping sequential check")
            return True

        for snapshot in context.project_stages:
            if (
                snapshot.template.order_index < template.order_index
                and snapshot.stage.status is not StageStatus.COMPLETED
            ):
                logger.warning(
                    f"Previous stage {snapshot.stage.id} is not completed "
                    f"(status: {snapshot.stage.status.value})"
                )
                return False
        return True

    def get_failure_message(self, context: WorkflowExecutionContext | None = None) -> str:
        return self.FAILURE_MESSAGE

    def get_priority(self) -> RulePriority:
        return RulePriority.HIGH

    def get_rule_type(self) -> RuleType:
        return RuleType.PREREQUISITE
