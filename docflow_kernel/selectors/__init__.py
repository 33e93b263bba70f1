"""Read-only query layer.  Selectors never mutate state."""

from docflow_kernel.selectors.activity_selector import ActivityRecord, ActivitySelector
from docflow_kernel.selectors.base import BaseSelector
from docflow_kernel.selectors.workflow_selector import (
    OverdueApproval,
    PendingApproval,
    WorkflowSelector,
)

__all__ = [
    "BaseSelector",
    "WorkflowSelector",
    "PendingApproval",
    "OverdueApproval",
    "ActivitySelector",
    "ActivityRecord",
]
