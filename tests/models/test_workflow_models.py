"""
ORM model tests for the workflow persistence layer.

Tests: DocumentTypeModel, DocumentModel, ApprovalStepModel, ActivityLogModel
-- DTO conversion, structural constraints and immutability enforcement.
Service-layer behaviour is tested elsewhere.
"""

from datetime import datetime, timezone
from uuid import uuid4

import pytest
from sqlalchemy.exc import IntegrityError

from docflow_kernel.domain.workflow import DocumentStatus, StepStatus
from docflow_kernel.exceptions import ImmutabilityViolationError
from docflow_kernel.models.activity_log import ActivityLogModel
from docflow_kernel.models.approval_step import ApprovalStepModel
from docflow_kernel.models.document import DocumentModel, DocumentTypeModel

NOW = datetime(2024, 3, 1, 9, 30, tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _make_document(session, **overrides):
    doc_type = DocumentTypeModel(name=f"type-{uuid4().hex[:8]}", required_approvals=2)
    session.add(doc_type)
    session.flush()
    values = dict(
        title="Budget",
        owner_id=uuid4(),
        document_type_id=doc_type.id,
        status="pending",
        created_at=NOW,
        updated_at=NOW,
    )
    values.update(overrides)
    document = DocumentModel(**values)
    session.add(document)
    session.flush()
    return document


def _make_step(session, document, sequence=1, **overrides):
    values = dict(
        document_id=document.id,
        sequence=sequence,
        status="pending",
        created_at=NOW,
        updated_at=NOW,
    )
    values.update(overrides)
    step = ApprovalStepModel(**values)
    session.add(step)
    session.flush()
    return step


# ---------------------------------------------------------------------------
# DTO conversion
# ---------------------------------------------------------------------------


class TestDtoConversion:

    def test_document_to_dto(self, session):
        document = _make_document(session, description="FY25", file_reference="s3://b/k")
        dto = document.to_dto()
        assert dto.document_id == document.id
        assert dto.status == DocumentStatus.PENDING
        assert dto.file_reference == "s3://b/k"
        assert dto.created_at == NOW

    def test_step_to_dto_round_trips_utc(self, session):
        document = _make_document(session)
        step = _make_step(session, document)
        session.expire_all()

        dto = session.get(ApprovalStepModel, step.id).to_dto()
        assert dto.status == StepStatus.PENDING
        assert dto.created_at == NOW
        assert dto.created_at.tzinfo is not None

    def test_document_type_roles_to_tuple(self, session):
        model = DocumentTypeModel(
            name=f"type-{uuid4().hex[:8]}",
            required_approvals=2,
            approval_roles=["manager", "legal"],
            sla_days=4,
        )
        session.add(model)
        session.flush()
        dto = model.to_dto()
        assert dto.approval_roles == ("manager", "legal")
        assert dto.sla_days == 4


# ---------------------------------------------------------------------------
# Structural constraints
# ---------------------------------------------------------------------------


class TestConstraints:

    def test_duplicate_sequence_rejected(self, session):
        document = _make_document(session)
        _make_step(session, document, sequence=1)
        with pytest.raises(IntegrityError):
            with session.begin_nested():
                _make_step(session, document, sequence=1)

    def test_sequence_must_be_positive(self, session):
        document = _make_document(session)
        with pytest.raises(IntegrityError):
            with session.begin_nested():
                _make_step(session, document, sequence=0)

    def test_invalid_step_status_rejected(self, session):
        document = _make_document(session)
        with pytest.raises(IntegrityError):
            with session.begin_nested():
                _make_step(session, document, status="skipped")

    def test_decided_step_needs_decided_at(self, session):
        document = _make_document(session)
        with pytest.raises(IntegrityError):
            with session.begin_nested():
                _make_step(session, document, status="approved")

    def test_pending_step_cannot_carry_decided_at(self, session):
        document = _make_document(session)
        with pytest.raises(IntegrityError):
            with session.begin_nested():
                _make_step(session, document, decided_at=NOW)

    def test_invalid_document_status_rejected(self, session):
        with pytest.raises(IntegrityError):
            with session.begin_nested():
                _make_document(session, status="archived")

    def test_duplicate_document_type_name_rejected(self, session):
        session.add(DocumentTypeModel(name="Duplicate", required_approvals=1))
        session.flush()
        with pytest.raises(IntegrityError):
            with session.begin_nested():
                session.add(DocumentTypeModel(name="Duplicate", required_approvals=2))
                session.flush()

    def test_steps_relationship_ordered(self, session):
        document = _make_document(session)
        _make_step(session, document, sequence=2)
        _make_step(session, document, sequence=1)
        session.expire_all()
        reloaded = session.get(DocumentModel, document.id)
        assert [s.sequence for s in reloaded.steps] == [1, 2]


# ---------------------------------------------------------------------------
# Immutability
# ---------------------------------------------------------------------------


class TestDecidedStepImmutability:

    def test_pending_step_can_be_decided_via_orm(self, session):
        document = _make_document(session)
        step = _make_step(session, document)
        step.status = "approved"
        step.decided_at = NOW
        session.flush()
        assert step.status == "approved"

    def test_decided_step_cannot_be_reopened(self, session):
        document = _make_document(session)
        step = _make_step(session, document, status="approved", decided_at=NOW)
        step.status = "pending"
        step.decided_at = None
        with pytest.raises(ImmutabilityViolationError) as exc_info:
            session.flush()
        assert exc_info.value.entity_type == "ApprovalStep"
        session.rollback()

    def test_decided_step_comment_cannot_change(self, session):
        document = _make_document(session)
        step = _make_step(
            session, document, status="rejected", decided_at=NOW, comment="missing page",
        )
        step.comment = "looks fine"
        with pytest.raises(ImmutabilityViolationError):
            session.flush()
        session.rollback()

    def test_activity_rows_are_append_only(self, session):
        row = ActivityLogModel(
            action="step_approved", document_id=uuid4(), user_id=uuid4(),
            details={}, created_at=NOW,
        )
        session.add(row)
        session.flush()

        row.action = "step_rejected"
        with pytest.raises(ImmutabilityViolationError):
            session.flush()
        session.rollback()

    def test_activity_rows_cannot_be_deleted(self, session):
        row = ActivityLogModel(action="document_created", created_at=NOW)
        session.add(row)
        session.flush()

        session.delete(row)
        with pytest.raises(ImmutabilityViolationError):
            session.flush()
        session.rollback()
