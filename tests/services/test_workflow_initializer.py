"""Tests for WorkflowInitializer."""

from uuid import uuid4

import pytest

from docflow_kernel.domain.activity import ActivityAction
from docflow_kernel.domain.gating import is_contiguous
from docflow_kernel.domain.workflow import DocumentStatus, StepStatus
from docflow_kernel.exceptions import (
    DocumentNotFoundError,
    DocumentTypeNotFoundError,
    DuplicateSequenceError,
    InvalidConfigurationError,
)
from docflow_kernel.models.document import DocumentModel
from docflow_kernel.selectors.workflow_selector import WorkflowSelector
from docflow_kernel.services.workflow_initializer import WorkflowInitializer


@pytest.fixture
def initializer(session, deterministic_clock, activity_sink):
    return WorkflowInitializer(session, deterministic_clock, activity_sink=activity_sink)


@pytest.fixture
def draft_document(document_service, test_actor_id):
    return document_service.create_document(title="Draft", owner_id=test_actor_id)


class TestInitialize:

    def test_creates_contiguous_pending_steps(
        self, initializer, draft_document, create_document_type, session,
    ):
        doc_type = create_document_type(required_approvals=3)
        steps = initializer.initialize(draft_document.document_id, doc_type.document_type_id)

        assert [s.sequence for s in steps] == [1, 2, 3]
        assert is_contiguous(steps)
        assert all(s.status == StepStatus.PENDING for s in steps)
        assert all(s.approver_id is None and s.decided_at is None for s in steps)

        selector = WorkflowSelector(session)
        document = selector.get_document(draft_document.document_id)
        assert document.status == DocumentStatus.PENDING
        assert document.document_type_id == doc_type.document_type_id
        assert selector.get_steps(draft_document.document_id) == tuple(steps)

    def test_draft_stays_draft_without_steps(self, draft_document):
        assert draft_document.status == DocumentStatus.DRAFT

    def test_roles_copied_onto_steps(self, initializer, draft_document, create_document_type):
        doc_type = create_document_type(
            required_approvals=3, approval_roles=["manager", "legal", "executive"],
        )
        steps = initializer.initialize(draft_document.document_id, doc_type.document_type_id)
        assert [s.required_role for s in steps] == ["manager", "legal", "executive"]

    def test_explicit_approvers(self, initializer, draft_document, create_document_type):
        doc_type = create_document_type(required_approvals=2)
        approvers = [uuid4(), None]
        steps = initializer.initialize(
            draft_document.document_id, doc_type.document_type_id, approver_ids=approvers,
        )
        assert [s.approver_id for s in steps] == approvers

    def test_emits_activity(self, initializer, draft_document, create_document_type, activity_sink):
        doc_type = create_document_type(required_approvals=2)
        actor = uuid4()
        initializer.initialize(
            draft_document.document_id, doc_type.document_type_id, actor_id=actor,
        )
        event = activity_sink.events[-1]
        assert event.action == ActivityAction.WORKFLOW_INITIALIZED
        assert event.actor_id == actor
        assert event.details["step_count"] == 2


class TestInitializeErrors:

    def test_double_initialization(self, initializer, draft_document, create_document_type):
        doc_type = create_document_type(required_approvals=2)
        initializer.initialize(draft_document.document_id, doc_type.document_type_id)

        with pytest.raises(DuplicateSequenceError) as exc_info:
            initializer.initialize(draft_document.document_id, doc_type.document_type_id)
        assert exc_info.value.existing_steps == 2

    def test_zero_required_approvals(self, initializer, draft_document, create_document_type):
        doc_type = create_document_type(required_approvals=0)
        with pytest.raises(InvalidConfigurationError):
            initializer.initialize(draft_document.document_id, doc_type.document_type_id)

    def test_document_without_type(self, initializer, draft_document):
        with pytest.raises(InvalidConfigurationError):
            initializer.initialize(draft_document.document_id)

    def test_approver_count_mismatch(self, initializer, draft_document, create_document_type):
        doc_type = create_document_type(required_approvals=3)
        with pytest.raises(InvalidConfigurationError):
            initializer.initialize(
                draft_document.document_id, doc_type.document_type_id, approver_ids=[uuid4()],
            )

    def test_type_must_match_linked_type(
        self, initializer, draft_document, create_document_type, session,
    ):
        linked = create_document_type(required_approvals=1)
        other = create_document_type(required_approvals=3)
        model = session.get(DocumentModel, draft_document.document_id)
        model.document_type_id = linked.document_type_id
        session.flush()

        with pytest.raises(InvalidConfigurationError):
            initializer.initialize(draft_document.document_id, other.document_type_id)
        assert WorkflowSelector(session).get_steps(draft_document.document_id) == ()

        steps = initializer.initialize(draft_document.document_id, linked.document_type_id)
        assert len(steps) == 1

    def test_unknown_document_type(self, initializer, draft_document):
        with pytest.raises(DocumentTypeNotFoundError):
            initializer.initialize(draft_document.document_id, uuid4())

    def test_unknown_document(self, initializer, create_document_type):
        doc_type = create_document_type(required_approvals=1)
        with pytest.raises(DocumentNotFoundError):
            initializer.initialize(uuid4(), doc_type.document_type_id)
