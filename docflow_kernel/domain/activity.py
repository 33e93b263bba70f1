"""
Activity events (``docflow_kernel.domain.activity``).

Responsibility
--------------
Describes what the kernel tells the outside world after a workflow change:
who did what to which document, and when.  Sinks consume these events;
the kernel does not own their storage format.

Emission is fire-and-forget.  A failing sink must never undo or block a
workflow transition, so services call sinks through
``docflow_kernel.services.activity_service.emit_safely``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Protocol
from uuid import UUID


class ActivityAction(str, Enum):
    """Workflow activity kinds."""

    DOCUMENT_CREATED = "document_created"
    DOCUMENT_UPDATED = "document_updated"
    WORKFLOW_INITIALIZED = "workflow_initialized"
    STEP_APPROVED = "step_approved"
    STEP_REJECTED = "step_rejected"


@dataclass(frozen=True)
class ActivityEvent:
    """Immutable description of one workflow activity."""

    action: ActivityAction
    document_id: UUID
    actor_id: UUID | None
    occurred_at: datetime
    details: dict[str, Any] = field(default_factory=dict)


class ActivitySink(Protocol):
    """Consumer of workflow activity.  ``record`` is fire-and-forget."""

    def record(self, event: ActivityEvent) -> None:
        ...


class NullActivitySink:
    """Discards every event."""

    def record(self, event: ActivityEvent) -> None:
        return None


class InMemoryActivitySink:
    """Collects events in a list.  Used by tests and tooling."""

    def __init__(self) -> None:
        self.events: list[ActivityEvent] = []

    def record(self, event: ActivityEvent) -> None:
        self.events.append(event)
