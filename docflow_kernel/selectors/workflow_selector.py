"""
WorkflowSelector -- read side of the approval workflow.

Responsibility:
    Documents, their ordered steps, the currently available step, each
    approver's pending queue, and SLA overdue detection.  All gating
    answers come from the pure ``domain.gating`` functions applied to
    steps read in the caller's transaction.

Architecture position:
    Kernel > Selectors.  Read-only.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime, timedelta
from uuid import UUID

from sqlalchemy import select

from docflow_kernel.domain.gating import available_since, available_step
from docflow_kernel.domain.workflow import (
    ApprovalStep,
    Document,
    DocumentStatus,
    StepStatus,
)
from docflow_kernel.exceptions import DocumentNotFoundError
from docflow_kernel.models.approval_step import ApprovalStepModel
from docflow_kernel.models.document import DocumentModel, DocumentTypeModel
from docflow_kernel.selectors.base import BaseSelector


@dataclass(frozen=True)
class PendingApproval:
    """A step waiting on a specific approver."""

    document: Document
    step: ApprovalStep


@dataclass(frozen=True)
class OverdueApproval:
    """An available step that has exceeded its document type's SLA."""

    document: Document
    step: ApprovalStep
    available_since: datetime
    due_at: datetime
    sla_days: int


class WorkflowSelector(BaseSelector):
    """Read-only queries over documents and approval steps."""

    def get_document(self, document_id: UUID) -> Document:
        model = self.session.get(DocumentModel, document_id, populate_existing=True)
        if model is None:
            raise DocumentNotFoundError(str(document_id))
        return model.to_dto()

    def get_steps(self, document_id: UUID) -> tuple[ApprovalStep, ...]:
        """Steps of ``document_id`` in sequence order, read fresh."""
        models = self.session.execute(
            select(ApprovalStepModel)
            .where(ApprovalStepModel.document_id == document_id)
            .order_by(ApprovalStepModel.sequence)
            .execution_options(populate_existing=True)
        ).scalars().all()
        return tuple(m.to_dto() for m in models)

    def get_available_step(
        self,
        document_id: UUID,
        as_of_steps: Iterable[ApprovalStep] | None = None,
        actor_id: UUID | None = None,
    ) -> ApprovalStep | None:
        """The step available for decision, evaluated over ``as_of_steps``
        when given, otherwise over the stored steps."""
        if as_of_steps is None:
            steps: Iterable[ApprovalStep] = self.get_steps(document_id)
        else:
            steps = [s for s in as_of_steps if s.document_id == document_id]
        return available_step(steps, actor_id=actor_id)

    def pending_for_approver(self, approver_id: UUID) -> list[PendingApproval]:
        """Steps assigned to ``approver_id`` that they can act on now.

        Assigned steps still blocked behind an undecided or rejected
        predecessor are excluded.
        """
        assigned = (
            select(ApprovalStepModel.document_id)
            .where(
                ApprovalStepModel.approver_id == approver_id,
                ApprovalStepModel.status == StepStatus.PENDING.value,
            )
        )
        documents = self.session.execute(
            select(DocumentModel)
            .where(
                DocumentModel.id.in_(assigned),
                DocumentModel.status == DocumentStatus.PENDING.value,
            )
            .order_by(DocumentModel.created_at)
        ).scalars().all()

        pending: list[PendingApproval] = []
        for document in documents:
            step = available_step(self.get_steps(document.id), actor_id=approver_id)
            if step is not None and step.approver_id == approver_id:
                pending.append(PendingApproval(document=document.to_dto(), step=step))
        return pending

    def overdue_steps(self, as_of: datetime) -> list[OverdueApproval]:
        """Available steps older than their document type's SLA at ``as_of``."""
        rows = self.session.execute(
            select(DocumentModel, DocumentTypeModel.sla_days)
            .join(DocumentTypeModel, DocumentModel.document_type_id == DocumentTypeModel.id)
            .where(
                DocumentModel.status == DocumentStatus.PENDING.value,
                DocumentTypeModel.sla_days.is_not(None),
            )
            .order_by(DocumentModel.created_at)
        ).all()

        overdue: list[OverdueApproval] = []
        for document, sla_days in rows:
            steps = self.get_steps(document.id)
            head = available_step(steps)
            since = available_since(steps, document.created_at)
            if head is None or since is None:
                continue
            due_at = since + timedelta(days=sla_days)
            if as_of > due_at:
                overdue.append(
                    OverdueApproval(
                        document=document.to_dto(),
                        step=head,
                        available_since=since,
                        due_at=due_at,
                        sla_days=sla_days,
                    )
                )
        return overdue
