"""Read access to the document activity trail."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any
from uuid import UUID

from sqlalchemy import select

from docflow_kernel.domain.activity import ActivityAction
from docflow_kernel.models.activity_log import ActivityLogModel
from docflow_kernel.selectors.base import BaseSelector


@dataclass(frozen=True)
class ActivityRecord:
    """One persisted activity row."""

    record_id: UUID
    action: ActivityAction
    document_id: UUID | None
    user_id: UUID | None
    created_at: datetime
    details: dict[str, Any] = field(default_factory=dict)


class ActivitySelector(BaseSelector):
    """Queries over ``activity_logs``."""

    def history(self, document_id: UUID) -> list[ActivityRecord]:
        """All activity for ``document_id``, oldest first."""
        rows = self.session.execute(
            select(ActivityLogModel)
            .where(ActivityLogModel.document_id == document_id)
            .order_by(ActivityLogModel.created_at, ActivityLogModel.id)
        ).scalars().all()
        return [self._to_record(row) for row in rows]

    def by_user(self, user_id: UUID, limit: int = 50) -> list[ActivityRecord]:
        """Most recent activity performed by ``user_id``, newest first."""
        rows = self.session.execute(
            select(ActivityLogModel)
            .where(ActivityLogModel.user_id == user_id)
            .order_by(ActivityLogModel.created_at.desc())
            .limit(limit)
        ).scalars().all()
        return [self._to_record(row) for row in rows]

    @staticmethod
    def _to_record(row: ActivityLogModel) -> ActivityRecord:
        return ActivityRecord(
            record_id=row.id,
            action=ActivityAction(row.action),
            document_id=row.document_id,
            user_id=row.user_id,
            created_at=row.created_at,
            details=dict(row.details or {}),
        )
