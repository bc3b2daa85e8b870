from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User roles; role plus division decides leave routing."""

    ADMIN = "Admin"
    STAFF = "Staff"
    DIVISION_CC = "Division CC"
    DIVISIONAL_HEAD = "Divisional Head"
    HOD = "HOD"


class StaffType(str, Enum):
    OFFICE = "Office"
    FIELD = "Field"


class LeaveType(str, Enum):
    ANNUAL = "annual"
    CASUAL = "casual"
    SICK = "sick"
    MATERNITY = "maternity"

    @property
    def label(self) -> str:
        return f"{self.value.capitalize()} Leave"


class LeaveStatus(str, Enum):
    """Leave workflow states. APPROVED and REJECTED are terminal."""

    PENDING = "pending"
    RECOMMENDED = "recommended"
    APPROVED = "approved"
    REJECTED = "rejected"

    @property
    def is_terminal(self) -> bool:
        return self in {LeaveStatus.APPROVED, LeaveStatus.REJECTED}


class LeaveAction(str, Enum):
    """Actions a designated reviewer can take on a leave application."""

    RECOMMEND = "recommend"
    NOT_RECOMMEND = "not_recommend"
    APPROVE = "approve"
    REJECT = "reject"


class NotificationType(str, Enum):
    LEAVE_APPLICATION = "leave_application"
    LEAVE_RECOMMENDATION = "leave_recommendation"
    LEAVE_APPROVAL = "leave_approval"
    LEAVE_REJECTION = "leave_rejection"
