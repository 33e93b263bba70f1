"""
Write-side services.

Services flush within the caller's transaction and never commit.
"""

from docflow_kernel.services.activity_service import ActivityLogService, emit_safely
from docflow_kernel.services.base import BaseService
from docflow_kernel.services.document_service import DocumentService
from docflow_kernel.services.status_aggregator import DocumentStatusAggregator
from docflow_kernel.services.transition_executor import (
    REASON_CONCURRENT_UPDATE,
    TransitionExecutor,
)
from docflow_kernel.services.workflow_initializer import WorkflowInitializer
from docflow_kernel.services.workflow_service import WorkflowService

__all__ = [
    "BaseService",
    "WorkflowService",
    "WorkflowInitializer",
    "TransitionExecutor",
    "DocumentStatusAggregator",
    "DocumentService",
    "ActivityLogService",
    "emit_safely",
    "REASON_CONCURRENT_UPDATE",
]
