from .database import Database
from .models import (
    ProjectRow,
    ProjectStageRow,
    ProjectStepAssignmentRow,
    ProjectStepRow,
    ProjectTaskRow,
    UserRow,
    WorkflowStageRow,
)

__all__ = [
    "Database",
    "ProjectRow",
    "UserRow",
    "WorkflowStageRow",
    "ProjectStageRow",
    "ProjectTaskRow",
    "ProjectStepRow",
    "ProjectStepAssignmentRow",
]
