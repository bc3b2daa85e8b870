from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import LeaveStatus, LeaveType
from ..users.model import User


@dataclass(frozen=True)
class LeaveApplication:
    leave_id: int
    applicant_id: int
    applicant_name: str
    designation: str
    division: str
    leave_type: LeaveType
    leave_days: int
    start_date: date
    resume_date: date
    reason: str
    recommender_id: int
    approver_id: int
    status: LeaveStatus
    created_at: datetime
    updated_at: datetime
    acting_officer_id: Optional[int] = None
    acting_officer_name: Optional[str] = None
    recommendation_by: Optional[int] = None
    recommendation_date: Optional[datetime] = None
    recommendation_remarks: Optional[str] = None
    approval_by: Optional[int] = None
    approval_date: Optional[datetime] = None
    approval_remarks: Optional[str] = None
    rejection_reason: Optional[str] = None


@dataclass(frozen=True)
class NewLeaveApplication:
    """Fields of an application at submit time, before the store assigns an id."""

    applicant_id: int
    applicant_name: str
    designation: str
    division: str
    leave_type: LeaveType
    leave_days: int
    start_date: date
    resume_date: date
    reason: str
    recommender_id: int
    approver_id: int
    acting_officer_id: Optional[int]
    acting_officer_name: Optional[str]
    created_at: datetime

    def with_id(self, leave_id: int) -> LeaveApplication:
        return LeaveApplication(
            leave_id=int(leave_id),
            applicant_id=self.applicant_id,
            applicant_name=self.applicant_name,
            designation=self.designation,
            division=self.division,
            leave_type=self.leave_type,
            leave_days=self.leave_days,
            start_date=self.start_date,
            resume_date=self.resume_date,
            reason=self.reason,
            recommender_id=self.recommender_id,
            approver_id=self.approver_id,
            status=LeaveStatus.PENDING,
            created_at=self.created_at,
            updated_at=self.created_at,
            acting_officer_id=self.acting_officer_id,
            acting_officer_name=self.acting_officer_name,
        )


@dataclass(frozen=True)
class LeaveSlip:
    """A closed application with the people who handled it, ready for printing."""

    leave: LeaveApplication
    recommender: Optional[User]
    approver: Optional[User]
    printed_at: datetime
