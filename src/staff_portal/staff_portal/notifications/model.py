from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from datetime import datetime
from typing import Optional, Union

from ..core.constants import NOTIFICATION_BADGE_CAP
from ..core.enums import NotificationType
from ..core.exceptions import ValidationError


@dataclass(frozen=True)
class LeaveApplicationPayload:
    leave_id: int
    applicant_name: str


@dataclass(frozen=True)
class LeaveRecommendationPayload:
    leave_id: int
    applicant_name: str
    is_recommended: bool


@dataclass(frozen=True)
class LeaveDecisionPayload:
    leave_id: int
    applicant_name: str


NotificationPayload = Union[LeaveApplicationPayload, LeaveRecommendationPayload, LeaveDecisionPayload]

PAYLOAD_TYPES: dict[NotificationType, type] = {
    NotificationType.LEAVE_APPLICATION: LeaveApplicationPayload,
    NotificationType.LEAVE_RECOMMENDATION: LeaveRecommendationPayload,
    NotificationType.LEAVE_APPROVAL: LeaveDecisionPayload,
    NotificationType.LEAVE_REJECTION: LeaveDecisionPayload,
}


def payload_to_dict(payload: Optional[NotificationPayload]) -> dict:
    return asdict(payload) if payload is not None else {}


def payload_from_dict(kind: NotificationType, data: Optional[dict]) -> Optional[NotificationPayload]:
    """Rebuild the payload variant for `kind`; None when the stored data is empty or incomplete."""
    if not data:
        return None
    cls = PAYLOAD_TYPES[kind]
    names = [f.name for f in fields(cls)]
    if any(n not in data for n in names):
        return None
    return cls(**{n: data[n] for n in names})


@dataclass(frozen=True)
class NotificationInput:
    """A notification to be created; `created_at` is filled in by the store when omitted."""

    user_id: int
    type: NotificationType
    title: str
    message: str
    payload: Optional[NotificationPayload] = None
    read: bool = False
    created_at: Optional[datetime] = None

    def __post_init__(self):
        if self.payload is not None and not isinstance(self.payload, PAYLOAD_TYPES[self.type]):
            raise ValidationError(
                f"{type(self.payload).__name__} is not a valid payload for {self.type.value} notifications"
            )


@dataclass(frozen=True)
class Notification:
    notification_id: int
    user_id: int
    type: NotificationType
    title: str
    message: str
    read: bool
    created_at: datetime
    payload: Optional[NotificationPayload] = None


@dataclass(frozen=True)
class NotificationSnapshot:
    """What a live feed shows: the newest notifications and the total unread count."""

    items: tuple[Notification, ...]
    unread_count: int

    @property
    def badge(self) -> str:
        if self.unread_count <= 0:
            return ""
        if self.unread_count > NOTIFICATION_BADGE_CAP:
            return f"{NOTIFICATION_BADGE_CAP}+"
        return str(self.unread_count)
