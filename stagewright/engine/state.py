"""Commits execution results to the targeted records."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from ..contracts import WorkflowExecutionContext, WorkflowExecutionResult
from ..enums import AssignmentStatus, WorkflowLevel
from ..exceptions import WorkflowException
from ..persistence.repository import WorkflowRepository
from ..transitions import target_entity

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class StateManager:
    """Writes the new status of exactly one record per execution.

    Writes go through :meth:`WorkflowRepository.update`, which enforces
    optimistic versioning; a
    :class:`~stagewright.exceptions.ConcurrentModificationError` is allowed
    to propagate untouched so callers can retry the whole request.
    """

    def __init__(
        self,
        repository: WorkflowRepository,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._repository = repository
        self._clock = clock

    async def update_state(
        self, context: WorkflowExecutionContext, result: WorkflowExecutionResult
    ) -> Optional[Any]:
        """Persist ``result`` and return the updated record.

        Nothing is written for unsuccessful results.
        """
        if not result.success:
            logger.debug("Result unsuccessful, no state to update")
            return None
        if result.target_level is None or result.new_status is None:
            raise WorkflowException("Execution result does not name a target level and status")

        entity = target_entity(context, result.target_level)
        if entity is None:
            raise WorkflowException(
                f"No {result.target_level.value.lower()} in context to update"
            )

        now = self._clock()
        changes: dict[str, Any] = {"status": result.new_status, "updated_at": now}
        if result.target_level is WorkflowLevel.ASSIGNMENT:
            if result.new_status is AssignmentStatus.ACCEPTED:
                changes["accepted_at"] = now
            elif result.new_status is AssignmentStatus.DECLINED:
                changes["declined_at"] = now
                changes["decline_reason"] = context.action.reason
        else:
            if result.new_status.value == "IN_PROGRESS" and entity.actual_start_date is None:
                changes["actual_start_date"] = now.date()
            elif result.new_status.value == "COMPLETED":
                changes["actual_end_date"] = now.date()

        logger.debug(
            f"Updating {result.target_level.value.lower()} {entity.id} "
            f"from {entity.status.value} to {result.new_status.value}"
        )
        updated = await self._repository.update(entity.model_copy(update=changes))
        logger.info(
            f"{result.target_level.value.capitalize()} {entity.id} status updated "
            f"to {result.new_status.value}"
        )
        return updated
