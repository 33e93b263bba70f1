"""
DocumentStatusAggregator -- derives and persists a document's status.

Responsibility:
    Recomputes the parent document's status from its approval steps after
    every step mutation:

        any step rejected   -> rejected (permanent)
        all steps approved  -> approved
        otherwise           -> pending
        no steps            -> unchanged (draft)

Architecture position:
    Kernel > Services.  Delegates the rule itself to the pure
    ``domain.gating.aggregate_status``.

Invariants enforced:
    - Deterministic and idempotent: the result is a function of the step
      set read fresh at recompute time, so recomputing twice without an
      intervening step change writes nothing the second time.
    - Serialized per document: the document row is locked FOR UPDATE
      (PostgreSQL) before the steps are read.

Failure modes:
    - DocumentNotFoundError if the document does not exist.
"""

from __future__ import annotations

from uuid import UUID

from docflow_kernel.domain.gating import aggregate_status
from docflow_kernel.domain.workflow import DocumentStatus
from docflow_kernel.logging_config import get_logger
from docflow_kernel.services.base import BaseService

logger = get_logger("services.status_aggregator")


class DocumentStatusAggregator(BaseService):
    """Keeps ``documents.status`` equal to the aggregate of its steps."""

    def recompute(self, document_id: UUID) -> DocumentStatus:
        document = self._load_document(document_id, for_update=True)
        steps = [m.to_dto() for m in self._load_steps(document_id)]

        derived = aggregate_status(steps)
        if derived is None:
            return DocumentStatus(document.status)

        if document.status != derived.value:
            previous = document.status
            document.status = derived.value
            document.updated_at = self._clock.now()
            self.session.flush()

            logger.info(
                "document_status_recomputed",
                extra={
                    "document_id": str(document_id),
                    "previous_status": previous,
                    "new_status": derived.value,
                    "step_count": len(steps),
                },
            )

        return derived
