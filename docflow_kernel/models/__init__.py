"""ORM models for the docflow kernel."""

from docflow_kernel.models.activity_log import ActivityLogModel
from docflow_kernel.models.approval_step import ApprovalStepModel
from docflow_kernel.models.document import DocumentModel, DocumentTypeModel

__all__ = [
    "DocumentTypeModel",
    "DocumentModel",
    "ApprovalStepModel",
    "ActivityLogModel",
]
