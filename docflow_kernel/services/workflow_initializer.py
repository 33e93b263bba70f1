"""
WorkflowInitializer -- builds a document's ordered approval steps.

Responsibility:
    Runs once per document, right after the document row is created and
    inside the same unit of work.  Creates one ``pending``, unassigned
    (unless ``approver_ids`` is given) step per required approval, with
    sequence numbers 1..N, then lets the aggregator move the document from
    ``draft`` to ``pending``.

Architecture position:
    Kernel > Services.  May import from domain/, models/, db/.

Invariants enforced:
    - Sequence numbers are contiguous 1..N.
    - Idempotent against double initialization: existing steps raise
      DuplicateSequenceError; a concurrent initializer that slips past the
      check hits UNIQUE(document_id, sequence) and gets the same error.

Failure modes:
    - DocumentNotFoundError / DocumentTypeNotFoundError for unknown ids.
    - InvalidConfigurationError if the type requires fewer than 1 approval,
      if the document has no type or already has a different one, or if
      ``approver_ids`` does not match the step count.
    - DuplicateSequenceError if steps already exist for the document.
"""

from __future__ import annotations

from collections.abc import Sequence
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from docflow_kernel.domain.activity import ActivityAction, ActivityEvent, ActivitySink
from docflow_kernel.domain.clock import Clock
from docflow_kernel.domain.workflow import ApprovalStep, DocumentType, StepStatus
from docflow_kernel.exceptions import (
    DocumentTypeNotFoundError,
    DuplicateSequenceError,
    InvalidConfigurationError,
)
from docflow_kernel.logging_config import get_logger
from docflow_kernel.models.approval_step import ApprovalStepModel
from docflow_kernel.models.document import DocumentTypeModel
from docflow_kernel.services.activity_service import emit_safely
from docflow_kernel.services.base import BaseService
from docflow_kernel.services.status_aggregator import DocumentStatusAggregator

logger = get_logger("services.workflow_initializer")


class WorkflowInitializer(BaseService):
    """Creates the approval steps for a newly created document."""

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        aggregator: DocumentStatusAggregator | None = None,
        activity_sink: ActivitySink | None = None,
    ):
        super().__init__(session, clock)
        self._aggregator = aggregator or DocumentStatusAggregator(session, self._clock)
        self._activity_sink = activity_sink

    def initialize(
        self,
        document_id: UUID,
        document_type_id: UUID | None = None,
        approver_ids: Sequence[UUID | None] | None = None,
        actor_id: UUID | None = None,
    ) -> list[ApprovalStep]:
        """Create steps 1..N for ``document_id``.

        ``document_type_id`` defaults to the document's own type; when given
        and the document has none yet, the document is linked to it.
        """
        document = self._load_document(document_id)
        if (
            document_type_id is not None
            and document.document_type_id is not None
            and document_type_id != document.document_type_id
        ):
            raise InvalidConfigurationError(
                f"document {document_id}",
                f"document has type {document.document_type_id}, "
                f"cannot initialize it as {document_type_id}",
            )
        type_id = document_type_id or document.document_type_id
        if type_id is None:
            raise InvalidConfigurationError(
                f"document {document_id}", "document has no document type",
            )

        document_type = self._load_document_type(type_id)
        step_count = document_type.step_count
        if step_count < 1:
            raise InvalidConfigurationError(
                f"document type {document_type.name!r}",
                f"required approvals must be at least 1 (got {step_count})",
            )
        if approver_ids is not None and len(approver_ids) != step_count:
            raise InvalidConfigurationError(
                f"document type {document_type.name!r}",
                f"{len(approver_ids)} approver(s) given for {step_count} step(s)",
            )

        existing = self.session.execute(
            select(func.count())
            .select_from(ApprovalStepModel)
            .where(ApprovalStepModel.document_id == document_id)
        ).scalar_one()
        if existing:
            raise DuplicateSequenceError(str(document_id), existing)

        now = self._clock.now()
        models = [
            ApprovalStepModel(
                document_id=document_id,
                sequence=sequence,
                status=StepStatus.PENDING.value,
                approver_id=approver_ids[sequence - 1] if approver_ids else None,
                required_role=document_type.role_for_sequence(sequence),
                created_at=now,
                updated_at=now,
            )
            for sequence in range(1, step_count + 1)
        ]

        try:
            with self.session.begin_nested():
                if document.document_type_id is None:
                    document.document_type_id = type_id
                self.session.add_all(models)
        except IntegrityError as exc:
            raise DuplicateSequenceError(str(document_id), step_count) from exc

        document_status = self._aggregator.recompute(document_id)

        logger.info(
            "workflow_initialized",
            extra={
                "document_id": str(document_id),
                "document_type": document_type.name,
                "step_count": step_count,
                "document_status": document_status.value,
            },
        )

        if self._activity_sink is not None:
            emit_safely(
                self._activity_sink,
                ActivityEvent(
                    action=ActivityAction.WORKFLOW_INITIALIZED,
                    document_id=document_id,
                    actor_id=actor_id,
                    occurred_at=now,
                    details={
                        "document_type": document_type.name,
                        "step_count": step_count,
                    },
                ),
            )

        return [model.to_dto() for model in models]

    def _load_document_type(self, document_type_id: UUID) -> DocumentType:
        model = self.session.get(DocumentTypeModel, document_type_id)
        if model is None:
            raise DocumentTypeNotFoundError(str(document_type_id))
        return model.to_dto()
