from __future__ import annotations

from typing import Any, Optional, Protocol, Sequence

from ..core.enums import LeaveStatus
from .model import LeaveApplication, NewLeaveApplication


class LeaveRepository(Protocol):
    def create(self, application: NewLeaveApplication) -> int:
        raise NotImplementedError

    def get(self, leave_id: int) -> Optional[LeaveApplication]:
        raise NotImplementedError

    def list_for_applicant(self, applicant_id: int, *, limit: int = 200) -> Sequence[LeaveApplication]:
        raise NotImplementedError

    def list_for_recommender(
        self, recommender_id: int, *, status: Optional[LeaveStatus] = None, limit: int = 200
    ) -> Sequence[LeaveApplication]:
        raise NotImplementedError

    def list_for_approver(
        self, approver_id: int, *, status: Optional[LeaveStatus] = None, limit: int = 200
    ) -> Sequence[LeaveApplication]:
        raise NotImplementedError

    def apply_transition(
        self,
        leave_id: int,
        *,
        expected_status: LeaveStatus,
        new_status: LeaveStatus,
        fields: dict[str, Any],
    ) -> bool:
        """Set status and fields only if the stored status still equals expected_status.

        Returns False when nothing matched (record missing or already moved on).
        """

        raise NotImplementedError
