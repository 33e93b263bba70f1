"""Tests for DocumentStatusAggregator."""

from uuid import uuid4

import pytest
from sqlalchemy import update

from docflow_kernel.domain.workflow import DocumentStatus
from docflow_kernel.exceptions import DocumentNotFoundError
from docflow_kernel.models.approval_step import ApprovalStepModel
from docflow_kernel.services.status_aggregator import DocumentStatusAggregator


@pytest.fixture
def aggregator(session, deterministic_clock):
    return DocumentStatusAggregator(session, deterministic_clock)


def _set_step_status(session, step_id, status, clock):
    session.execute(
        update(ApprovalStepModel.__table__)
        .where(ApprovalStepModel.__table__.c.id == step_id)
        .values(status=status, decided_at=clock.now())
    )


class TestRecompute:

    def test_document_without_steps_unchanged(
        self, aggregator, document_service, test_actor_id,
    ):
        document = document_service.create_document(title="Draft", owner_id=test_actor_id)
        assert aggregator.recompute(document.document_id) == DocumentStatus.DRAFT

    def test_reads_steps_fresh(self, aggregator, create_document, session, deterministic_clock):
        document, steps = create_document(required_approvals=2)
        for step in steps:
            _set_step_status(session, step.step_id, "approved", deterministic_clock)

        assert aggregator.recompute(document.document_id) == DocumentStatus.APPROVED

    def test_rejection_wins(self, aggregator, create_document, session, deterministic_clock):
        document, steps = create_document(required_approvals=3)
        _set_step_status(session, steps[0].step_id, "approved", deterministic_clock)
        _set_step_status(session, steps[1].step_id, "rejected", deterministic_clock)

        assert aggregator.recompute(document.document_id) == DocumentStatus.REJECTED

    def test_idempotent(
        self, aggregator, create_document, session, deterministic_clock, captured_logs,
    ):
        document, steps = create_document(required_approvals=1)
        _set_step_status(session, steps[0].step_id, "approved", deterministic_clock)

        first = aggregator.recompute(document.document_id)
        second = aggregator.recompute(document.document_id)
        assert first == second == DocumentStatus.APPROVED

        changes = [
            r for r in captured_logs()
            if r["message"] == "document_status_recomputed" and r["new_status"] == "approved"
        ]
        assert len(changes) == 1

    def test_unknown_document(self, aggregator):
        with pytest.raises(DocumentNotFoundError):
            aggregator.recompute(uuid4())
