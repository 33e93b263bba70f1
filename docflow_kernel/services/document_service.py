"""
DocumentService -- document creation and metadata edits.

Responsibility:
    Creates a document and initializes its approval workflow in one unit
    of work, and applies metadata edits (title, description, file
    reference).  File bytes live in object storage; the kernel only keeps
    the reference.

Architecture position:
    Kernel > Services.  Composes WorkflowInitializer.

Invariants enforced:
    - A document with a type is never left without steps: creation and
      initialization share the caller's transaction.
    - Metadata edits never touch ``status``.

Failure modes:
    - Everything WorkflowInitializer raises.
    - DocumentNotFoundError on edits of unknown documents.
"""

from __future__ import annotations

from collections.abc import Sequence
from uuid import UUID

from sqlalchemy.orm import Session

from docflow_kernel.domain.activity import ActivityAction, ActivityEvent, ActivitySink
from docflow_kernel.domain.clock import Clock
from docflow_kernel.domain.workflow import Document, DocumentStatus
from docflow_kernel.logging_config import get_logger
from docflow_kernel.models.document import DocumentModel
from docflow_kernel.services.activity_service import ActivityLogService, emit_safely
from docflow_kernel.services.base import BaseService
from docflow_kernel.services.workflow_initializer import WorkflowInitializer

logger = get_logger("services.document")


class DocumentService(BaseService):
    """Document lifecycle outside of step decisions."""

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        activity_sink: ActivitySink | None = None,
        initializer: WorkflowInitializer | None = None,
    ):
        super().__init__(session, clock)
        self._activity_sink = (
            activity_sink if activity_sink is not None else ActivityLogService(session)
        )
        self._initializer = initializer or WorkflowInitializer(
            session, self._clock, activity_sink=self._activity_sink,
        )

    def create_document(
        self,
        title: str,
        owner_id: UUID,
        document_type_id: UUID | None = None,
        description: str | None = None,
        file_reference: str | None = None,
        approver_ids: Sequence[UUID | None] | None = None,
    ) -> Document:
        """Persist a document and, when it has a type, its approval steps.

        Without a type the document stays ``draft``.
        """
        now = self._clock.now()
        model = DocumentModel(
            title=title,
            description=description,
            owner_id=owner_id,
            file_reference=file_reference,
            status=DocumentStatus.DRAFT.value,
            created_at=now,
            updated_at=now,
        )
        self.session.add(model)
        self.session.flush()

        logger.info(
            "document_created",
            extra={
                "document_id": str(model.id),
                "owner_id": str(owner_id),
                "document_type_id": str(document_type_id) if document_type_id else None,
            },
        )

        emit_safely(
            self._activity_sink,
            ActivityEvent(
                action=ActivityAction.DOCUMENT_CREATED,
                document_id=model.id,
                actor_id=owner_id,
                occurred_at=now,
                details={"title": title},
            ),
        )

        if document_type_id is not None:
            self._initializer.initialize(
                model.id,
                document_type_id,
                approver_ids=approver_ids,
                actor_id=owner_id,
            )

        return self._load_document(model.id).to_dto()

    def update_details(
        self,
        document_id: UUID,
        actor_id: UUID,
        title: str | None = None,
        description: str | None = None,
        file_reference: str | None = None,
    ) -> Document:
        """Edit document metadata.  Unset arguments are left unchanged."""
        model = self._load_document(document_id)
        changes = {
            name: value
            for name, value in (
                ("title", title),
                ("description", description),
                ("file_reference", file_reference),
            )
            if value is not None and getattr(model, name) != value
        }
        if not changes:
            return model.to_dto()

        for name, value in changes.items():
            setattr(model, name, value)
        model.updated_at = self._clock.now()
        self.session.flush()

        logger.info(
            "document_updated",
            extra={"document_id": str(document_id), "fields": sorted(changes)},
        )

        emit_safely(
            self._activity_sink,
            ActivityEvent(
                action=ActivityAction.DOCUMENT_UPDATED,
                document_id=document_id,
                actor_id=actor_id,
                occurred_at=model.updated_at,
                details={"fields": sorted(changes)},
            ),
        )

        return model.to_dto()
