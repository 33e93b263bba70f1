"""
Gating evaluator and status aggregation (``docflow_kernel.domain.gating``).

Responsibility
--------------
Pure functions over one document's approval steps:

* ``available_step`` -- which step (if any) may be decided right now.
* ``not_actionable_reason`` -- why a given step may not be decided.
* ``aggregate_status`` -- the document status implied by the step set.
* ``available_since`` -- when the available step became actionable.

Architecture position
---------------------
**Kernel domain layer** -- ZERO I/O.  Callers load the steps; these
functions never read or write the store, so the same step tuple always
yields the same answer.

Gating rule
-----------
A step is available when it is ``pending`` and its immediate predecessor
(sequence - 1) is absent (it is step 1) or ``approved``.  A ``rejected``
step halts the pipeline: later steps stay ``pending`` forever and are
never available.  At most one step satisfies the rule at any time.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime
from uuid import UUID

from docflow_kernel.domain.workflow import (
    ApprovalStep,
    DocumentStatus,
    StepStatus,
)

# Reasons reported by not_actionable_reason()
REASON_STEP_NOT_FOUND = "step_not_found"
REASON_ALREADY_DECIDED = "already_decided"
REASON_BLOCKED_BY_REJECTION = "blocked_by_rejection"
REASON_OUT_OF_SEQUENCE = "out_of_sequence"


def order_steps(steps: Iterable[ApprovalStep]) -> tuple[ApprovalStep, ...]:
    """Return the steps sorted by sequence number."""
    return tuple(sorted(steps, key=lambda s: s.sequence))


def is_contiguous(steps: Iterable[ApprovalStep]) -> bool:
    """True when sequence numbers are exactly 1..N with no gaps or repeats."""
    sequences = [s.sequence for s in order_steps(steps)]
    return sequences == list(range(1, len(sequences) + 1))


def _is_gate_open(step: ApprovalStep, by_sequence: dict[int, ApprovalStep]) -> bool:
    if step.status != StepStatus.PENDING:
        return False
    predecessor = by_sequence.get(step.sequence - 1)
    return predecessor is None or predecessor.status == StepStatus.APPROVED


def available_step(
    steps: Iterable[ApprovalStep],
    actor_id: UUID | None = None,
) -> ApprovalStep | None:
    """
    Return the step currently available for decision, or None.

    When ``actor_id`` is given, a step assigned to a different approver is
    not available to that actor; unassigned steps are available to anyone
    (role checks belong to the authorization policy).
    """
    ordered = order_steps(steps)
    by_sequence = {s.sequence: s for s in ordered}
    for step in ordered:
        if _is_gate_open(step, by_sequence):
            if (
                actor_id is not None
                and step.approver_id is not None
                and step.approver_id != actor_id
            ):
                return None
            return step
    return None


def rejected_step(steps: Iterable[ApprovalStep]) -> ApprovalStep | None:
    """Return the lowest-sequence rejected step, if the pipeline is halted."""
    for step in order_steps(steps):
        if step.status == StepStatus.REJECTED:
            return step
    return None


def not_actionable_reason(
    steps: Iterable[ApprovalStep],
    step_id: UUID,
) -> str | None:
    """Return why ``step_id`` cannot be decided now, or None if it can."""
    ordered = order_steps(steps)
    target = next((s for s in ordered if s.step_id == step_id), None)
    if target is None:
        return REASON_STEP_NOT_FOUND
    if target.is_terminal:
        return REASON_ALREADY_DECIDED
    head = available_step(ordered)
    if head is not None and head.step_id == step_id:
        return None
    blocker = rejected_step(ordered)
    if blocker is not None and blocker.sequence < target.sequence:
        return REASON_BLOCKED_BY_REJECTION
    return REASON_OUT_OF_SEQUENCE


def aggregate_status(steps: Iterable[ApprovalStep]) -> DocumentStatus | None:
    """
    Derive the document status from its steps.

    Returns None for an empty step set: a document without steps keeps
    whatever status it has (``draft``).
    """
    statuses = [s.status for s in steps]
    if not statuses:
        return None
    if StepStatus.REJECTED in statuses:
        return DocumentStatus.REJECTED
    if all(status == StepStatus.APPROVED for status in statuses):
        return DocumentStatus.APPROVED
    return DocumentStatus.PENDING


def available_since(
    steps: Iterable[ApprovalStep],
    document_created_at: datetime | None,
) -> datetime | None:
    """
    When did the currently available step become actionable?

    Step 1 is actionable from document creation; step N from the moment
    step N-1 was approved.  None when no step is available.
    """
    ordered = order_steps(steps)
    head = available_step(ordered)
    if head is None:
        return None
    if head.sequence == 1:
        return document_created_at or head.created_at
    predecessor = next(s for s in ordered if s.sequence == head.sequence - 1)
    return predecessor.decided_at
