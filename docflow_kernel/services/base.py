"""
BaseService -- abstract base for all kernel services.

Responsibility:
    Provides the common constructor and session-handling contract for
    every write-side service, plus the fresh-read helpers the workflow
    services share.

Architecture position:
    Kernel > Services -- imperative shell infrastructure.

Invariants enforced:
    - Transaction boundaries: services flush within the caller's
      transaction and never commit or rollback themselves.  The caller
      (API handler, ``session_scope()``, or test harness) owns
      commit/rollback, so a step decision and the recomputed document
      status land in one atomic unit.
    - Fresh reads: step and document rows are always re-read from the
      store (``populate_existing``) before a decision is evaluated; no
      in-memory copy is trusted across calls.
"""

from abc import ABC
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from docflow_kernel.domain.clock import Clock, SystemClock
from docflow_kernel.exceptions import DocumentNotFoundError
from docflow_kernel.models.approval_step import ApprovalStepModel
from docflow_kernel.models.document import DocumentModel


class BaseService(ABC):
    """
    Abstract base class for all kernel services.

    Contract:
        Accepts a SQLAlchemy ``Session`` from the caller and uses
        ``session.flush()`` to persist changes within the active
        transaction.

    Non-goals:
        - Does NOT manage transaction lifecycle (commit/rollback).
    """

    def __init__(self, session: Session, clock: Clock | None = None):
        self.session = session
        self._clock = clock or SystemClock()

    def _load_document(
        self,
        document_id: UUID,
        for_update: bool = False,
    ) -> DocumentModel:
        """Load the document row fresh from the store, optionally locked."""
        stmt = (
            select(DocumentModel)
            .where(DocumentModel.id == document_id)
            .execution_options(populate_existing=True)
        )
        if for_update:
            stmt = stmt.with_for_update()
        model = self.session.execute(stmt).scalar_one_or_none()
        if model is None:
            raise DocumentNotFoundError(str(document_id))
        return model

    def _load_steps(self, document_id: UUID) -> list[ApprovalStepModel]:
        """Load a document's steps fresh from the store, in sequence order."""
        return list(
            self.session.execute(
                select(ApprovalStepModel)
                .where(ApprovalStepModel.document_id == document_id)
                .order_by(ApprovalStepModel.sequence)
                .execution_options(populate_existing=True)
            ).scalars().all()
        )
