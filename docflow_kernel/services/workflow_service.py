"""
WorkflowService -- the workflow engine's public entry point.

Responsibility:
    Wires the initializer, transition executor, status aggregator and
    activity sink around one session and exposes the four operations
    callers use:

        initialize_workflow(document_id, document_type_id)
        get_available_step(document_id, as_of_steps=None)
        decide(document_id, step_id, actor_id, decision, comment=None)
        recompute_document_status(document_id)

Architecture position:
    Kernel > Services.  The UI/API layer talks to this class only.

Invariants enforced:
    - Every collaborator shares the caller's session and clock, so a
      decision, its status recompute and its activity row land in the
      same transaction (the activity row inside its own SAVEPOINT).
    - The service never commits.  Use ``session_scope()`` or an explicit
      ``session.commit()`` around each call.

Usage:
    with session_scope() as session:
        service = WorkflowService(session, authorization=policy)
        result = service.decide(doc_id, step_id, user_id, "approved")
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from uuid import UUID

from sqlalchemy.orm import Session

from docflow_kernel.domain.activity import ActivitySink
from docflow_kernel.domain.clock import Clock, SystemClock
from docflow_kernel.domain.policy import DecisionAuthorization
from docflow_kernel.domain.workflow import (
    ApprovalDecision,
    ApprovalStep,
    DecisionResult,
    DocumentStatus,
)
from docflow_kernel.selectors.workflow_selector import WorkflowSelector
from docflow_kernel.services.activity_service import ActivityLogService
from docflow_kernel.services.status_aggregator import DocumentStatusAggregator
from docflow_kernel.services.transition_executor import TransitionExecutor
from docflow_kernel.services.workflow_initializer import WorkflowInitializer


class WorkflowService:
    """Facade over the sequential approval engine.

    Args:
        session: Caller-owned session.
        clock: Time source for decided_at and activity timestamps.
        authorization: ``can_decide`` predicate; defaults to
            ``StepAuthorizationPolicy()``.
        activity_sink: Where activity events go.  Defaults to the
            ``activity_logs`` table; pass ``NullActivitySink()`` to disable.
    """

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        authorization: DecisionAuthorization | None = None,
        activity_sink: ActivitySink | None = None,
    ):
        self._session = session
        self._clock = clock or SystemClock()
        self._activity_sink = (
            activity_sink if activity_sink is not None else ActivityLogService(session)
        )
        self._aggregator = DocumentStatusAggregator(session, self._clock)
        self._initializer = WorkflowInitializer(
            session,
            self._clock,
            aggregator=self._aggregator,
            activity_sink=self._activity_sink,
        )
        self._executor = TransitionExecutor(
            session,
            self._clock,
            authorization=authorization,
            activity_sink=self._activity_sink,
            aggregator=self._aggregator,
        )
        self._selector = WorkflowSelector(session)

    @property
    def activity_sink(self) -> ActivitySink:
        return self._activity_sink

    def initialize_workflow(
        self,
        document_id: UUID,
        document_type_id: UUID | None = None,
        approver_ids: Sequence[UUID | None] | None = None,
        actor_id: UUID | None = None,
    ) -> list[ApprovalStep]:
        return self._initializer.initialize(
            document_id,
            document_type_id,
            approver_ids=approver_ids,
            actor_id=actor_id,
        )

    def get_available_step(
        self,
        document_id: UUID,
        as_of_steps: Iterable[ApprovalStep] | None = None,
        actor_id: UUID | None = None,
    ) -> ApprovalStep | None:
        """The step currently open for decision, or None.

        Pure when ``as_of_steps`` is given; otherwise reads the stored steps.
        """
        return self._selector.get_available_step(
            document_id, as_of_steps=as_of_steps, actor_id=actor_id,
        )

    def decide(
        self,
        document_id: UUID,
        step_id: UUID,
        actor_id: UUID,
        decision: ApprovalDecision | str,
        comment: str | None = None,
        authorization: DecisionAuthorization | None = None,
    ) -> DecisionResult:
        return self._executor.decide(
            document_id,
            step_id,
            actor_id,
            decision,
            comment=comment,
            authorization=authorization,
        )

    def recompute_document_status(self, document_id: UUID) -> DocumentStatus:
        return self._aggregator.recompute(document_id)
