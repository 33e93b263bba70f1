"""
Approval workflow domain types (``docflow_kernel.domain.workflow``).

Responsibility
--------------
Pure value objects for the sequential approval engine: step, document and
document-type statuses, the one-way step transition table, and frozen
snapshots of documents, document types and approval steps.

Architecture position
---------------------
**Kernel domain layer** -- pure value objects.  ZERO I/O.  No imports
from ``db/``, ``models/``, ``services/``, ``selectors/``, or outer layers.

Invariants enforced
-------------------
* Steps are one-way: ``STEP_TRANSITIONS`` allows pending -> approved and
  pending -> rejected only.  Decided steps have no outgoing edges.
* ``ApprovalStep.decided_at`` is set exactly when status leaves pending.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from uuid import UUID


# =========================================================================
# Status Lifecycles
# =========================================================================


class StepStatus(str, Enum):
    """Approval step lifecycle states."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


STEP_TRANSITIONS: dict[StepStatus, frozenset[StepStatus]] = {
    StepStatus.PENDING: frozenset({
        StepStatus.APPROVED,
        StepStatus.REJECTED,
    }),
    StepStatus.APPROVED: frozenset(),
    StepStatus.REJECTED: frozenset(),
}

TERMINAL_STEP_STATUSES: frozenset[StepStatus] = frozenset({
    StepStatus.APPROVED,
    StepStatus.REJECTED,
})


class DocumentStatus(str, Enum):
    """Overall document status, derived from the step set."""

    DRAFT = "draft"
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


FINALIZED_DOCUMENT_STATUSES: frozenset[DocumentStatus] = frozenset({
    DocumentStatus.APPROVED,
})


class ApprovalDecision(str, Enum):
    """Decisions an approver can make on the available step."""

    APPROVED = "approved"
    REJECTED = "rejected"

    @property
    def step_status(self) -> StepStatus:
        return StepStatus(self.value)


# =========================================================================
# Snapshots
# =========================================================================


@dataclass(frozen=True)
class DocumentType:
    """Immutable snapshot of a document-type configuration.

    ``approval_roles``, when present, is the ordered role list and its
    length is the number of required approvals.
    """

    document_type_id: UUID
    name: str
    required_approvals: int
    description: str | None = None
    approval_roles: tuple[str, ...] = ()
    sla_days: int | None = None

    @property
    def step_count(self) -> int:
        if self.approval_roles:
            return len(self.approval_roles)
        return self.required_approvals

    def role_for_sequence(self, sequence: int) -> str | None:
        if not self.approval_roles:
            return None
        return self.approval_roles[sequence - 1]


@dataclass(frozen=True)
class Document:
    """Immutable snapshot of a document record."""

    document_id: UUID
    title: str
    owner_id: UUID
    status: DocumentStatus
    document_type_id: UUID | None = None
    description: str | None = None
    file_reference: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass(frozen=True)
class ApprovalStep:
    """One ordered approval gate for a document.  Immutable snapshot."""

    step_id: UUID
    document_id: UUID
    sequence: int
    status: StepStatus = StepStatus.PENDING
    approver_id: UUID | None = None
    required_role: str | None = None
    comment: str | None = None
    decided_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def is_pending(self) -> bool:
        return self.status == StepStatus.PENDING

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STEP_STATUSES

    def is_decided_by(self, user_id: UUID) -> bool:
        """True when this step left pending under ``user_id``'s decision."""
        return self.is_terminal and self.approver_id == user_id


@dataclass(frozen=True)
class DecisionResult:
    """Outcome of a successful ``decide`` call."""

    document_status: DocumentStatus
    updated_step: ApprovalStep
