"""
Module: docflow_kernel.models.document
Responsibility: ORM persistence for document types and documents.

Architecture position: Kernel > Models.  May import from db/base.py only
    (domain types are imported lazily inside ``to_dto``).

Invariants enforced:
    - Document status is one of draft/pending/approved/rejected (DB check).
    - Document status is written only by DocumentStatusAggregator once
      approval steps exist; metadata edits never touch it.
    - Deleting a document cascades to its approval steps.

Failure modes:
    - IntegrityError on duplicate document type name.
    - IntegrityError on an unknown document_type_id.
"""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import JSON, CheckConstraint, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from docflow_kernel.db.base import TrackedBase, UUIDString

if TYPE_CHECKING:
    from docflow_kernel.domain.workflow import Document, DocumentType
    from docflow_kernel.models.approval_step import ApprovalStepModel


class DocumentTypeModel(TrackedBase):
    """Persistent document-type configuration.

    Contract:
        Configured by administrators (or seeded from YAML); read-only input
        to the workflow initializer.  ``approval_roles`` is an optional
        ordered role list whose length overrides ``required_approvals``.
    """

    __tablename__ = "document_types"

    __table_args__ = (
        CheckConstraint(
            "required_approvals >= 0",
            name="ck_document_types_required_approvals",
        ),
        CheckConstraint(
            "sla_days IS NULL OR sla_days >= 1",
            name="ck_document_types_sla_days",
        ),
    )

    name: Mapped[str] = mapped_column(String(200), nullable=False, unique=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    required_approvals: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    approval_roles: Mapped[list[str] | None] = mapped_column(JSON, nullable=True)
    sla_days: Mapped[int | None] = mapped_column(Integer, nullable=True)

    def __repr__(self) -> str:
        return (
            f"<DocumentType {self.name} "
            f"approvals={self.required_approvals} sla={self.sla_days}>"
        )

    def to_dto(self) -> DocumentType:
        """Convert ORM model to frozen domain DTO."""
        from docflow_kernel.domain.workflow import DocumentType as DocumentTypeDTO

        return DocumentTypeDTO(
            document_type_id=self.id,
            name=self.name,
            description=self.description,
            required_approvals=self.required_approvals,
            approval_roles=tuple(self.approval_roles or ()),
            sla_days=self.sla_days,
        )


class DocumentModel(TrackedBase):
    """Persistent document record.

    Contract:
        Created as ``draft``; becomes ``pending`` once its workflow is
        initialized.  From then on status is a pure function of the steps.
    """

    __tablename__ = "documents"

    __table_args__ = (
        CheckConstraint(
            "status IN ('draft', 'pending', 'approved', 'rejected')",
            name="ck_documents_valid_status",
        ),
        Index("ix_documents_owner", "owner_id"),
        Index("ix_documents_status", "status"),
    )

    title: Mapped[str] = mapped_column(String(500), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    document_type_id: Mapped[UUID | None] = mapped_column(
        UUIDString(),
        ForeignKey("document_types.id"),
        nullable=True,
    )
    owner_id: Mapped[UUID] = mapped_column(UUIDString(), nullable=False)
    file_reference: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="draft")

    document_type: Mapped[DocumentTypeModel | None] = relationship("DocumentTypeModel")
    steps: Mapped[list["ApprovalStepModel"]] = relationship(
        "ApprovalStepModel",
        back_populates="document",
        order_by="ApprovalStepModel.sequence",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<Document {self.id} {self.title!r} status={self.status}>"

    def to_dto(self) -> Document:
        """Convert ORM model to frozen domain DTO."""
        from docflow_kernel.domain.workflow import (
            Document as DocumentDTO,
            DocumentStatus,
        )

        return DocumentDTO(
            document_id=self.id,
            title=self.title,
            description=self.description,
            document_type_id=self.document_type_id,
            owner_id=self.owner_id,
            file_reference=self.file_reference,
            status=DocumentStatus(self.status),
            created_at=self.created_at,
            updated_at=self.updated_at,
        )
