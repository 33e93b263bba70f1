"""Tests for DocumentService: creation unit of work and metadata edits."""

from uuid import uuid4

import pytest
from sqlalchemy import select

from docflow_kernel.domain.activity import ActivityAction
from docflow_kernel.domain.workflow import DocumentStatus
from docflow_kernel.exceptions import DocumentNotFoundError, InvalidConfigurationError
from docflow_kernel.models.activity_log import ActivityLogModel
from docflow_kernel.models.document import DocumentModel
from docflow_kernel.selectors.workflow_selector import WorkflowSelector
from docflow_kernel.services.document_service import DocumentService


class TestCreateDocument:

    def test_with_type_initializes_workflow(
        self, document_service, create_document_type, test_actor_id, session, activity_sink,
    ):
        doc_type = create_document_type(required_approvals=2)
        document = document_service.create_document(
            title="Lease",
            owner_id=test_actor_id,
            document_type_id=doc_type.document_type_id,
            description="Office lease renewal",
            file_reference="documents/lease.pdf",
        )

        assert document.status == DocumentStatus.PENDING
        assert document.file_reference == "documents/lease.pdf"
        assert len(WorkflowSelector(session).get_steps(document.document_id)) == 2
        assert [e.action for e in activity_sink.events] == [
            ActivityAction.DOCUMENT_CREATED,
            ActivityAction.WORKFLOW_INITIALIZED,
        ]

    def test_default_sink_persists_activity(
        self, session, deterministic_clock, create_document_type, test_actor_id,
    ):
        doc_type = create_document_type(required_approvals=2)
        document = DocumentService(session, deterministic_clock).create_document(
            title="Purchase order",
            owner_id=test_actor_id,
            document_type_id=doc_type.document_type_id,
        )

        actions = session.execute(
            select(ActivityLogModel.action)
            .where(ActivityLogModel.document_id == document.document_id)
        ).scalars().all()
        assert sorted(actions) == ["document_created", "workflow_initialized"]

    def test_without_type_stays_draft(self, document_service, test_actor_id, session):
        document = document_service.create_document(title="Notes", owner_id=test_actor_id)
        assert document.status == DocumentStatus.DRAFT
        assert WorkflowSelector(session).get_steps(document.document_id) == ()

    def test_invalid_type_aborts_whole_unit(
        self, document_service, create_document_type, test_actor_id, session,
    ):
        doc_type = create_document_type(required_approvals=0)
        with pytest.raises(InvalidConfigurationError):
            with session.begin_nested():
                document_service.create_document(
                    title="Broken",
                    owner_id=test_actor_id,
                    document_type_id=doc_type.document_type_id,
                )
        remaining = session.execute(
            select(DocumentModel).where(DocumentModel.title == "Broken")
        ).scalars().all()
        assert remaining == []


class TestUpdateDetails:

    def test_updates_changed_fields_only(
        self, document_service, test_actor_id, deterministic_clock, activity_sink,
    ):
        document = document_service.create_document(title="Old", owner_id=test_actor_id)
        deterministic_clock.advance(60)

        updated = document_service.update_details(
            document.document_id, test_actor_id, title="New", file_reference="v2.pdf",
        )
        assert updated.title == "New"
        assert updated.file_reference == "v2.pdf"
        assert updated.status == DocumentStatus.DRAFT
        assert updated.updated_at == deterministic_clock.now()

        event = activity_sink.events[-1]
        assert event.action == ActivityAction.DOCUMENT_UPDATED
        assert event.details["fields"] == ["file_reference", "title"]

    def test_no_changes_is_no_op(self, document_service, test_actor_id, activity_sink):
        document = document_service.create_document(title="Same", owner_id=test_actor_id)
        before = len(activity_sink.events)

        result = document_service.update_details(document.document_id, test_actor_id, title="Same")
        assert result == document
        assert len(activity_sink.events) == before

    def test_unknown_document(self, document_service):
        with pytest.raises(DocumentNotFoundError):
            document_service.update_details(uuid4(), uuid4(), title="x")
