from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date
from typing import Callable, Optional

from ..common.datetime_utils import leave_days_between, now_local
from ..common.validators import require_non_empty
from ..core.constants import DEFAULT_LIST_LIMIT
from ..core.enums import LeaveAction, LeaveStatus, LeaveType, Role
from ..core.exceptions import AuthorizationError, InvalidStateError, NotFoundError, ValidationError
from ..notifications.dispatch import NotificationDispatcher
from ..users.model import Actor
from ..users.repository import UserRepository
from ..users.service import resolve_division_personnel
from .model import LeaveApplication, LeaveSlip, NewLeaveApplication
from .repository import LeaveRepository
from .workflow import plan_transition

logger = logging.getLogger(__name__)

APPLICANT_ROLES = {Role.STAFF, Role.DIVISION_CC, Role.DIVISIONAL_HEAD}
OVERSIGHT_ROLES = {Role.ADMIN, Role.HOD}


class LeaveService:
    """Use cases of the leave workflow: submit, recommend-or-reject, approve-or-reject.

    Every operation takes the acting user explicitly. The leave update is
    persisted first; notifications follow and are best-effort.
    """

    def __init__(
        self,
        leaves: LeaveRepository,
        users: UserRepository,
        dispatcher: NotificationDispatcher,
        *,
        clock: Callable = now_local,
    ):
        self._leaves = leaves
        self._users = users
        self._dispatcher = dispatcher
        self._clock = clock

    def _get(self, leave_id: int) -> LeaveApplication:
        leave = self._leaves.get(int(leave_id))
        if not leave:
            raise NotFoundError("Leave application does not exist")
        return leave

    def submit(
        self,
        *,
        actor: Actor,
        leave_type: LeaveType,
        start_date: date,
        resume_date: date,
        reason: str,
        recommender_id: int,
        approver_id: int,
        acting_officer_id: Optional[int] = None,
    ) -> int:
        if actor.role not in APPLICANT_ROLES:
            raise AuthorizationError("Your role cannot apply for leave here")

        applicant = self._users.get_by_id(actor.user_id)
        if not applicant:
            raise NotFoundError("Applicant account does not exist")
        if not applicant.division:
            raise ValidationError("Your account is not assigned to a division")

        if resume_date <= start_date:
            raise ValidationError("Resume date must be after the start date")
        reason = require_non_empty(reason, "Reason")

        personnel = resolve_division_personnel(self._users, division=applicant.division, applicant_id=applicant.user_id)
        recommender_id = int(recommender_id)
        approver_id = int(approver_id)
        if recommender_id == applicant.user_id or approver_id == applicant.user_id:
            raise ValidationError("You cannot review your own leave application")
        if recommender_id not in personnel.recommender_ids():
            raise ValidationError("Recommending officer must be a Division CC of your division")
        if approver_id not in personnel.approver_ids():
            raise ValidationError("Approving officer must be your Divisional Head or an HOD")

        acting_name = None
        if acting_officer_id:
            acting = personnel.acting_officer(int(acting_officer_id))
            if not acting:
                raise ValidationError("Acting officer must be another staff member of your division")
            acting_name = acting.full_name

        now = self._clock()
        application = NewLeaveApplication(
            applicant_id=applicant.user_id,
            applicant_name=applicant.full_name,
            designation=applicant.designation or "N/A",
            division=applicant.division,
            leave_type=leave_type,
            leave_days=leave_days_between(start_date, resume_date),
            start_date=start_date,
            resume_date=resume_date,
            reason=reason,
            recommender_id=recommender_id,
            approver_id=approver_id,
            acting_officer_id=int(acting_officer_id) if acting_officer_id else None,
            acting_officer_name=acting_name,
            created_at=now,
        )

        leave_id = self._leaves.create(application)
        logger.info(
            "User %s submitted leave %s (%s, %d days)",
            applicant.user_id,
            leave_id,
            leave_type.value,
            application.leave_days,
        )

        self._dispatcher.leave_submitted(application.with_id(leave_id))
        return leave_id

    def _transition(
        self,
        *,
        actor: Actor,
        leave_id: int,
        action: LeaveAction,
        remarks: Optional[str],
    ) -> LeaveApplication:
        leave = self._get(leave_id)
        transition = plan_transition(leave, actor, action, remarks=remarks, now=self._clock())

        ok = self._leaves.apply_transition(
            leave.leave_id,
            expected_status=transition.from_status,
            new_status=transition.to_status,
            fields=transition.fields,
        )
        if not ok:
            raise InvalidStateError("Leave application was changed by someone else; reload and try again")

        updated = replace(leave, status=transition.to_status, **transition.fields)
        logger.info(
            "User %s moved leave %s from %s to %s",
            actor.user_id,
            leave.leave_id,
            transition.from_status.value,
            transition.to_status.value,
        )

        self._dispatcher.leave_transitioned(updated, transition)
        return updated

    def recommend(
        self,
        *,
        actor: Actor,
        leave_id: int,
        recommended: bool,
        remarks: Optional[str] = None,
    ) -> LeaveApplication:
        """Recommender's decision on a pending application: recommended, or rejected with a reason."""
        action = LeaveAction.RECOMMEND if recommended else LeaveAction.NOT_RECOMMEND
        return self._transition(actor=actor, leave_id=leave_id, action=action, remarks=remarks)

    def decide(
        self,
        *,
        actor: Actor,
        leave_id: int,
        approved: bool,
        remarks: Optional[str] = None,
    ) -> LeaveApplication:
        """Approver's final decision on a recommended application."""
        action = LeaveAction.APPROVE if approved else LeaveAction.REJECT
        return self._transition(actor=actor, leave_id=leave_id, action=action, remarks=remarks)

    def get_application(self, *, actor: Actor, leave_id: int) -> LeaveApplication:
        leave = self._get(leave_id)
        involved = {leave.applicant_id, leave.recommender_id, leave.approver_id}
        if actor.user_id not in involved and actor.role not in OVERSIGHT_ROLES:
            raise AuthorizationError("You do not have access to this leave application")
        return leave

    def get_printable(self, *, actor: Actor, leave_id: int) -> LeaveSlip:
        leave = self.get_application(actor=actor, leave_id=leave_id)
        if not leave.status.is_terminal:
            raise InvalidStateError("Only approved or rejected applications can be printed")

        recommender_id = leave.recommendation_by or leave.recommender_id
        approver_id = leave.approval_by or leave.approver_id
        return LeaveSlip(
            leave=leave,
            recommender=self._users.get_by_id(recommender_id),
            approver=self._users.get_by_id(approver_id),
            printed_at=self._clock(),
        )

    def list_my_applications(self, *, actor: Actor) -> list[LeaveApplication]:
        return list(self._leaves.list_for_applicant(actor.user_id, limit=DEFAULT_LIST_LIMIT))

    def list_pending_recommendations(self, *, actor: Actor) -> list[LeaveApplication]:
        return list(
            self._leaves.list_for_recommender(actor.user_id, status=LeaveStatus.PENDING, limit=DEFAULT_LIST_LIMIT)
        )

    def list_for_approver(
        self, *, actor: Actor, status: Optional[LeaveStatus] = LeaveStatus.RECOMMENDED
    ) -> list[LeaveApplication]:
        return list(self._leaves.list_for_approver(actor.user_id, status=status, limit=DEFAULT_LIST_LIMIT))
