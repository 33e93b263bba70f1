"""
Module: docflow_kernel.models.approval_step
Responsibility: ORM persistence for ordered approval steps.

Architecture position: Kernel > Models.  May import from db/base.py and
    exceptions only.

Invariants enforced:
    - UNIQUE(document_id, sequence): a double initialization cannot create
      duplicate sequence numbers even without application-level checks.
    - Status is pending/approved/rejected (DB check).
    - decided_at is set exactly when status leaves pending (DB check).
    - Decided steps are never reopened or rewritten (ORM before_update
      listener).  The transition executor's conditional UPDATE is the only
      sanctioned pending -> decided write path.

Failure modes:
    - IntegrityError on duplicate (document_id, sequence).
    - IntegrityError when status and decided_at disagree.
    - ImmutabilityViolationError on an ORM update of a decided step.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import (
    CheckConstraint,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    event,
    inspect,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from docflow_kernel.db.base import TrackedBase, UUIDString
from docflow_kernel.exceptions import ImmutabilityViolationError

if TYPE_CHECKING:
    from docflow_kernel.domain.workflow import ApprovalStep
    from docflow_kernel.models.document import DocumentModel


class ApprovalStepModel(TrackedBase):
    """Persistent approval step.

    Contract:
        Created in bulk as ``pending`` by the workflow initializer; mutated
        exactly once (pending -> approved|rejected) by the transition
        executor.
    """

    __tablename__ = "approval_steps"

    __table_args__ = (
        UniqueConstraint(
            "document_id", "sequence",
            name="uq_approval_steps_document_sequence",
        ),
        CheckConstraint(
            "sequence >= 1",
            name="ck_approval_steps_sequence_positive",
        ),
        CheckConstraint(
            "status IN ('pending', 'approved', 'rejected')",
            name="ck_approval_steps_valid_status",
        ),
        CheckConstraint(
            "(status = 'pending' AND decided_at IS NULL) OR "
            "(status <> 'pending' AND decided_at IS NOT NULL)",
            name="ck_approval_steps_decided_at",
        ),
        # Pending queue per approver
        Index("ix_approval_steps_approver_status", "approver_id", "status"),
    )

    document_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("documents.id", ondelete="CASCADE"),
        nullable=False,
    )
    sequence: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="pending")
    approver_id: Mapped[UUID | None] = mapped_column(UUIDString(), nullable=True)
    required_role: Mapped[str | None] = mapped_column(String(100), nullable=True)
    comment: Mapped[str | None] = mapped_column(Text, nullable=True)
    decided_at: Mapped[datetime | None] = mapped_column(nullable=True)

    document: Mapped["DocumentModel"] = relationship(
        "DocumentModel",
        back_populates="steps",
    )

    def __repr__(self) -> str:
        return (
            f"<ApprovalStep {self.id} document={self.document_id} "
            f"seq={self.sequence} status={self.status}>"
        )

    def to_dto(self) -> ApprovalStep:
        """Convert ORM model to frozen domain DTO."""
        from docflow_kernel.domain.workflow import (
            ApprovalStep as ApprovalStepDTO,
            StepStatus,
        )

        return ApprovalStepDTO(
            step_id=self.id,
            document_id=self.document_id,
            sequence=self.sequence,
            status=StepStatus(self.status),
            approver_id=self.approver_id,
            required_role=self.required_role,
            comment=self.comment,
            decided_at=self.decided_at,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )


# =============================================================================
# ORM-Level Immutability for Decided Steps (one-way transition)
# =============================================================================

_DECISION_FIELDS = ("status", "approver_id", "comment", "decided_at", "sequence")


@event.listens_for(ApprovalStepModel, "before_update")
def prevent_decided_step_update(mapper, connection, target):
    """Prevent reopening or rewriting a step that has left pending."""
    state = inspect(target)
    status_history = state.attrs.status.history
    previous_status = (
        status_history.deleted[0] if status_history.deleted else target.status
    )
    if previous_status == "pending":
        return

    changed = [
        name for name in _DECISION_FIELDS
        if state.attrs[name].history.has_changes()
    ]
    if changed:
        raise ImmutabilityViolationError(
            entity_type="ApprovalStep",
            entity_id=str(target.id),
            reason=(
                f"step already {previous_status} -- cannot modify "
                + ", ".join(changed)
            ),
        )
