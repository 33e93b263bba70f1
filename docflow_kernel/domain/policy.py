"""
Authorization policies for step decisions (``docflow_kernel.domain.policy``).

Responsibility
--------------
The kernel never decides on its own who may act on a step.  Callers supply
a ``DecisionAuthorization`` -- a ``can_decide(user_id, step)`` predicate --
and the transition executor consults it after gating.  This module defines
that protocol, the ``ApproverDirectory`` lookup used by the role-aware
default, and the two stock policies.

Architecture position
---------------------
**Kernel domain layer** -- pure.  Directory implementations that hit a
user/role store live outside the kernel.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Protocol
from uuid import UUID

from docflow_kernel.domain.workflow import ApprovalStep


class DecisionAuthorization(Protocol):
    """Pluggable predicate: may ``user_id`` decide ``step``?"""

    def can_decide(self, user_id: UUID, step: ApprovalStep) -> bool:
        ...


class ApproverDirectory(Protocol):
    """Pluggable interface for user/role lookups."""

    def has_role(self, user_id: UUID, role: str) -> bool:
        """Check if the user holds a specific role."""
        ...


class AllowAll:
    """Every authenticated user may decide any available step."""

    def can_decide(self, user_id: UUID, step: ApprovalStep) -> bool:
        return True


class StepAuthorizationPolicy:
    """Default policy.

    - A step with an assigned approver may only be decided by that user.
    - A step with a ``required_role`` needs the role per the directory.
    - Anything else may be decided by any authenticated user.
    """

    def __init__(self, directory: ApproverDirectory | None = None):
        self._directory = directory

    def can_decide(self, user_id: UUID, step: ApprovalStep) -> bool:
        if step.approver_id is not None and step.approver_id != user_id:
            return False
        if step.required_role is not None:
            if self._directory is None:
                return False
            return self._directory.has_role(user_id, step.required_role)
        return True


class StaticApproverDirectory:
    """In-memory role directory: ``{user_id: {role, ...}}``."""

    def __init__(self, roles_by_user: Mapping[UUID, set[str] | frozenset[str]]):
        self._roles = {user: frozenset(roles) for user, roles in roles_by_user.items()}

    def has_role(self, user_id: UUID, role: str) -> bool:
        return role in self._roles.get(user_id, frozenset())
