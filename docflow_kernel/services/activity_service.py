"""
ActivityLogService -- persistent activity sink.

Responsibility:
    Writes ``ActivityEvent`` records to the ``activity_logs`` table, the
    document history the UI renders.  Also provides ``emit_safely``, the
    only way kernel services hand events to a sink.

Architecture position:
    Kernel > Services.  Implements the ``ActivitySink`` protocol from
    ``domain/activity``.

Failure modes:
    - Any database error while writing the row is confined to a SAVEPOINT:
      the row is dropped, the caller's transaction (holding the workflow
      transition) is untouched, and ``emit_safely`` logs and swallows the
      error.
"""

from __future__ import annotations

from sqlalchemy.orm import Session

from docflow_kernel.domain.activity import ActivityEvent, ActivitySink
from docflow_kernel.logging_config import get_logger
from docflow_kernel.models.activity_log import ActivityLogModel

logger = get_logger("services.activity")


def emit_safely(sink: ActivitySink, event: ActivityEvent) -> bool:
    """Hand ``event`` to ``sink``; log and swallow any failure.

    Returns True when the sink accepted the event.
    """
    try:
        sink.record(event)
    except Exception:
        logger.warning(
            "activity_emit_failed",
            extra={
                "action": event.action.value,
                "document_id": str(event.document_id),
            },
            exc_info=True,
        )
        return False
    return True


class ActivityLogService:
    """Activity sink backed by the ``activity_logs`` table."""

    def __init__(self, session: Session):
        self._session = session

    def record(self, event: ActivityEvent) -> None:
        with self._session.begin_nested():
            self._session.add(
                ActivityLogModel(
                    action=event.action.value,
                    document_id=event.document_id,
                    user_id=event.actor_id,
                    details=dict(event.details),
                    created_at=event.occurred_at,
                )
            )

        logger.debug(
            "activity_recorded",
            extra={
                "action": event.action.value,
                "document_id": str(event.document_id),
            },
        )
