"""
Pure domain layer.

Value objects and functions with NO dependencies on:
- ORM (SQLAlchemy)
- Database
- I/O

All domain objects are immutable and deterministic.
"""

from docflow_kernel.domain.activity import (
    ActivityAction,
    ActivityEvent,
    ActivitySink,
    InMemoryActivitySink,
    NullActivitySink,
)
from docflow_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from docflow_kernel.domain.gating import (
    aggregate_status,
    available_since,
    available_step,
    is_contiguous,
    not_actionable_reason,
    order_steps,
    rejected_step,
)
from docflow_kernel.domain.policy import (
    AllowAll,
    ApproverDirectory,
    DecisionAuthorization,
    StaticApproverDirectory,
    StepAuthorizationPolicy,
)
from docflow_kernel.domain.workflow import (
    STEP_TRANSITIONS,
    TERMINAL_STEP_STATUSES,
    ApprovalDecision,
    ApprovalStep,
    DecisionResult,
    Document,
    DocumentStatus,
    DocumentType,
    StepStatus,
)

__all__ = [
    # Workflow types
    "StepStatus",
    "DocumentStatus",
    "ApprovalDecision",
    "STEP_TRANSITIONS",
    "TERMINAL_STEP_STATUSES",
    "ApprovalStep",
    "Document",
    "DocumentType",
    "DecisionResult",
    # Gating
    "order_steps",
    "is_contiguous",
    "available_step",
    "rejected_step",
    "not_actionable_reason",
    "aggregate_status",
    "available_since",
    # Authorization
    "DecisionAuthorization",
    "ApproverDirectory",
    "AllowAll",
    "StepAuthorizationPolicy",
    "StaticApproverDirectory",
    # Activity
    "ActivityAction",
    "ActivityEvent",
    "ActivitySink",
    "NullActivitySink",
    "InMemoryActivitySink",
    # Clock
    "Clock",
    "SystemClock",
    "DeterministicClock",
]
