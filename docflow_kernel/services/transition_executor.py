"""
TransitionExecutor -- applies approve/reject decisions to approval steps.

Responsibility:
    ``decide(document_id, step_id, actor_id, decision, comment)`` checks,
    in order:

        1. the document exists and is not already fully approved;
        2. the step is the one the gating evaluator says is available;
        3. a rejection carries a non-empty comment;
        4. the caller-supplied authorization predicate admits the actor;

    then commits the step transition as a compare-and-swap and recomputes
    the document status in the same transaction.

Architecture position:
    Kernel > Services.  Gating is delegated to the pure
    ``domain.gating`` functions; authorization to an injected
    ``DecisionAuthorization``; activity to an injected ``ActivitySink``.

Invariants enforced:
    - One-way steps: the UPDATE is guarded by ``status = 'pending'`` and by
      "sequence = 1 OR predecessor approved", evaluated by the store at
      write time.  Two concurrent callers on the same step cannot both
      match the guard.
    - Per-document serialization: the document row is locked FOR UPDATE
      (PostgreSQL) before gating, so sibling decides and recomputes on the
      same document do not interleave.
    - No partial application: status, approver, comment, decided_at and
      updated_at are written by a single statement.

Failure modes:
    - DocumentNotFoundError, DocumentAlreadyFinalizedError,
      StepNotActionableError, CommentRequiredError, NotAuthorizedError.
    - StoreConflictError never escapes: the executor re-reads and
      re-evaluates once, then reports StepNotActionableError.

Audit relevance:
    Emits STEP_APPROVED / STEP_REJECTED activity after the transition,
    best-effort; a failing sink is logged and ignored.
"""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import func, literal, or_, select, update
from sqlalchemy.orm import Session

from docflow_kernel.db.base import UUIDString
from docflow_kernel.domain.activity import ActivityAction, ActivityEvent, ActivitySink
from docflow_kernel.domain.clock import Clock
from docflow_kernel.domain.gating import not_actionable_reason
from docflow_kernel.domain.policy import DecisionAuthorization, StepAuthorizationPolicy
from docflow_kernel.domain.workflow import (
    FINALIZED_DOCUMENT_STATUSES,
    ApprovalDecision,
    ApprovalStep,
    DecisionResult,
    DocumentStatus,
    StepStatus,
)
from docflow_kernel.exceptions import (
    CommentRequiredError,
    DocumentAlreadyFinalizedError,
    NotAuthorizedError,
    StepNotActionableError,
    StoreConflictError,
)
from docflow_kernel.logging_config import LogContext, get_logger
from docflow_kernel.models.approval_step import ApprovalStepModel
from docflow_kernel.services.activity_service import emit_safely
from docflow_kernel.services.base import BaseService
from docflow_kernel.services.status_aggregator import DocumentStatusAggregator

logger = get_logger("services.transition_executor")

REASON_CONCURRENT_UPDATE = "lost_concurrent_update"

# Re-evaluations after a lost conditional update
STORE_CONFLICT_RETRIES = 1

_ACTIVITY_BY_DECISION = {
    ApprovalDecision.APPROVED: ActivityAction.STEP_APPROVED,
    ApprovalDecision.REJECTED: ActivityAction.STEP_REJECTED,
}


class TransitionExecutor(BaseService):
    """Applies one decision to the currently available step."""

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        authorization: DecisionAuthorization | None = None,
        activity_sink: ActivitySink | None = None,
        aggregator: DocumentStatusAggregator | None = None,
    ):
        super().__init__(session, clock)
        self._authorization = authorization or StepAuthorizationPolicy()
        self._activity_sink = activity_sink
        self._aggregator = aggregator or DocumentStatusAggregator(session, self._clock)

    def decide(
        self,
        document_id: UUID,
        step_id: UUID,
        actor_id: UUID,
        decision: ApprovalDecision | str,
        comment: str | None = None,
        authorization: DecisionAuthorization | None = None,
    ) -> DecisionResult:
        """Approve or reject ``step_id`` on behalf of ``actor_id``."""
        decision = ApprovalDecision(decision)
        policy = authorization or self._authorization

        with LogContext.bind(
            actor_id=str(actor_id),
            document_id=str(document_id),
            step_id=str(step_id),
        ):
            attempt = 0
            while True:
                step = self._check_preconditions(
                    document_id, step_id, actor_id, decision, comment, policy,
                )
                try:
                    updated = self._compare_and_set(step, actor_id, decision, comment)
                    break
                except StoreConflictError as exc:
                    if attempt >= STORE_CONFLICT_RETRIES:
                        raise StepNotActionableError(
                            str(document_id), str(step_id), REASON_CONCURRENT_UPDATE,
                        ) from exc
                    attempt += 1
                    logger.warning(
                        "store_conflict_retry",
                        extra={"attempt": attempt, "expected_status": exc.expected_status},
                    )

            document_status = self._aggregator.recompute(document_id)

            logger.info(
                "step_decided",
                extra={
                    "decision": decision.value,
                    "sequence": updated.sequence,
                    "document_status": document_status.value,
                },
            )

            if self._activity_sink is not None:
                emit_safely(
                    self._activity_sink,
                    ActivityEvent(
                        action=_ACTIVITY_BY_DECISION[decision],
                        document_id=document_id,
                        actor_id=actor_id,
                        occurred_at=updated.decided_at or self._clock.now(),
                        details={
                            "step_id": str(step_id),
                            "sequence": updated.sequence,
                            "comment": updated.comment,
                            "document_status": document_status.value,
                        },
                    ),
                )

        return DecisionResult(document_status=document_status, updated_step=updated)

    def _check_preconditions(
        self,
        document_id: UUID,
        step_id: UUID,
        actor_id: UUID,
        decision: ApprovalDecision,
        comment: str | None,
        policy: DecisionAuthorization,
    ) -> ApprovalStep:
        """Run checks 1-4 against freshly read state; return the target step."""
        document = self._load_document(document_id, for_update=True)
        status = DocumentStatus(document.status)
        if status in FINALIZED_DOCUMENT_STATUSES:
            raise DocumentAlreadyFinalizedError(str(document_id), status.value, str(step_id))

        steps = [m.to_dto() for m in self._load_steps(document_id)]
        reason = not_actionable_reason(steps, step_id)
        if reason is not None:
            raise StepNotActionableError(str(document_id), str(step_id), reason)
        step = next(s for s in steps if s.step_id == step_id)

        if decision == ApprovalDecision.REJECTED and not (comment and comment.strip()):
            raise CommentRequiredError(str(step_id), decision.value)

        if not policy.can_decide(actor_id, step):
            raise NotAuthorizedError(str(actor_id), str(step_id))

        return step

    def _compare_and_set(
        self,
        step: ApprovalStep,
        actor_id: UUID,
        decision: ApprovalDecision,
        comment: str | None,
    ) -> ApprovalStep:
        """Conditionally move ``step`` out of pending; StoreConflictError if lost."""
        steps = ApprovalStepModel.__table__
        prev = steps.alias("prev")
        predecessor_approved = (
            select(prev.c.id)
            .where(
                prev.c.document_id == steps.c.document_id,
                prev.c.sequence == steps.c.sequence - 1,
                prev.c.status == StepStatus.APPROVED.value,
            )
            .correlate(steps)
            .exists()
        )

        now = self._clock.now()
        result = self.session.execute(
            update(steps)
            .where(
                steps.c.id == step.step_id,
                steps.c.document_id == step.document_id,
                steps.c.status == StepStatus.PENDING.value,
                or_(steps.c.sequence == 1, predecessor_approved),
            )
            .values(
                status=decision.step_status.value,
                approver_id=func.coalesce(
                    steps.c.approver_id, literal(actor_id, UUIDString()),
                ),
                comment=comment if comment and comment.strip() else None,
                decided_at=now,
                updated_at=now,
            )
        )

        if result.rowcount != 1:
            raise StoreConflictError(
                "ApprovalStep", str(step.step_id), StepStatus.PENDING.value,
            )

        model = self.session.execute(
            select(ApprovalStepModel)
            .where(ApprovalStepModel.id == step.step_id)
            .execution_options(populate_existing=True)
        ).scalar_one()
        return model.to_dto()
