"""Leave application state machine.

    pending --recommend--> recommended --approve--> approved
       |                        |
       +--not_recommend--+      +--reject--+
                         v                 v
                      rejected          rejected

approved and rejected are terminal. Only the application's recommender acts on
a pending application and only its approver acts on a recommended one.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from ..common.validators import optional_text
from ..core.enums import LeaveAction, LeaveStatus
from ..core.exceptions import AuthorizationError, InvalidStateError, ValidationError
from ..users.model import Actor
from .model import LeaveApplication

TRANSITIONS: dict[tuple[LeaveStatus, LeaveAction], LeaveStatus] = {
    (LeaveStatus.PENDING, LeaveAction.RECOMMEND): LeaveStatus.RECOMMENDED,
    (LeaveStatus.PENDING, LeaveAction.NOT_RECOMMEND): LeaveStatus.REJECTED,
    (LeaveStatus.RECOMMENDED, LeaveAction.APPROVE): LeaveStatus.APPROVED,
    (LeaveStatus.RECOMMENDED, LeaveAction.REJECT): LeaveStatus.REJECTED,
}

RECOMMENDER_ACTIONS = frozenset({LeaveAction.RECOMMEND, LeaveAction.NOT_RECOMMEND})
APPROVER_ACTIONS = frozenset({LeaveAction.APPROVE, LeaveAction.REJECT})


@dataclass(frozen=True)
class LeaveTransition:
    """A validated, not yet applied, status change with the fields it stamps."""

    leave_id: int
    action: LeaveAction
    from_status: LeaveStatus
    to_status: LeaveStatus
    fields: dict[str, Any]

    @property
    def is_rejection(self) -> bool:
        return self.to_status == LeaveStatus.REJECTED


def allowed_edges() -> set[tuple[LeaveStatus, LeaveStatus]]:
    return {(src, dst) for (src, _), dst in TRANSITIONS.items()}


def next_status(current: LeaveStatus, action: LeaveAction) -> LeaveStatus:
    try:
        return TRANSITIONS[(current, action)]
    except KeyError:
        if current.is_terminal:
            raise InvalidStateError(f"Leave application is already {current.value}") from None
        raise InvalidStateError(f"Cannot {action.value.replace('_', ' ')} a {current.value} leave application") from None


def authorize(leave: LeaveApplication, actor: Actor, action: LeaveAction) -> None:
    if action in RECOMMENDER_ACTIONS:
        if actor.user_id != leave.recommender_id:
            raise AuthorizationError("Only the designated recommender can act on this application")
    elif action in APPROVER_ACTIONS:
        if actor.user_id != leave.approver_id:
            raise AuthorizationError("Only the designated approver can act on this application")
    else:
        raise AuthorizationError(f"Unsupported action: {action!r}")


def plan_transition(
    leave: LeaveApplication,
    actor: Actor,
    action: LeaveAction,
    *,
    remarks: Optional[str] = None,
    now: datetime,
) -> LeaveTransition:
    authorize(leave, actor, action)
    to_status = next_status(leave.status, action)
    remarks = optional_text(remarks)

    fields: dict[str, Any] = {"updated_at": now}
    if action in RECOMMENDER_ACTIONS:
        fields["recommendation_by"] = actor.user_id
        fields["recommendation_date"] = now
        if action == LeaveAction.RECOMMEND:
            if remarks:
                fields["recommendation_remarks"] = remarks
        else:
            if not remarks:
                raise ValidationError("Please provide a reason for not recommending this application")
            fields["rejection_reason"] = remarks
    else:
        fields["approval_by"] = actor.user_id
        fields["approval_date"] = now
        if remarks:
            fields["approval_remarks"] = remarks
            if action == LeaveAction.REJECT:
                fields["rejection_reason"] = remarks

    return LeaveTransition(
        leave_id=leave.leave_id,
        action=action,
        from_status=leave.status,
        to_status=to_status,
        fields=fields,
    )
