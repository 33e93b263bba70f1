"""
Module: docflow_kernel.models.activity_log
Responsibility: ORM persistence for the document activity trail.

Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - Activity rows are append-only (ORM listeners reject UPDATE/DELETE).

Audit relevance:
    The activity log is the human-readable history of a document: who
    created it, when its workflow started, and who approved or rejected
    each step with which comment.  It is written best-effort and is never
    part of a workflow transition's atomic unit.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import UUID

from sqlalchemy import JSON, Index, String, event
from sqlalchemy.orm import Mapped, mapped_column

from docflow_kernel.db.base import Base, UUIDString
from docflow_kernel.exceptions import ImmutabilityViolationError


class ActivityLogModel(Base):
    """One row of document activity. Append-only."""

    __tablename__ = "activity_logs"

    __table_args__ = (
        Index("ix_activity_logs_document", "document_id", "created_at"),
        Index("ix_activity_logs_user", "user_id"),
    )

    action: Mapped[str] = mapped_column(String(50), nullable=False)
    document_id: Mapped[UUID | None] = mapped_column(UUIDString(), nullable=True)
    user_id: Mapped[UUID | None] = mapped_column(UUIDString(), nullable=True)
    details: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    created_at: Mapped[datetime] = mapped_column(nullable=False)

    def __repr__(self) -> str:
        return (
            f"<ActivityLog {self.action} document={self.document_id} "
            f"user={self.user_id}>"
        )


@event.listens_for(ActivityLogModel, "before_update")
def prevent_activity_update(mapper, connection, target):
    """Prevent updates to activity rows."""
    raise ImmutabilityViolationError(
        entity_type="ActivityLog",
        entity_id=str(target.id),
        reason="Activity log entries are immutable -- cannot modify",
    )


@event.listens_for(ActivityLogModel, "before_delete")
def prevent_activity_delete(mapper, connection, target):
    """Prevent deletion of activity rows."""
    raise ImmutabilityViolationError(
        entity_type="ActivityLog",
        entity_id=str(target.id),
        reason="Activity log entries are immutable -- cannot delete",
    )
