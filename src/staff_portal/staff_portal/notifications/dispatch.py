"""Leave workflow → notifications.

The build_* functions are pure: they only decide recipients and content.
NotificationDispatcher hands each result to the store one by one; there is no
retry, batching or transaction with the leave update itself.
"""

from __future__ import annotations

import logging
from typing import Iterable

from ..core.enums import LeaveAction, NotificationType
from ..leaves.model import LeaveApplication
from ..leaves.workflow import LeaveTransition
from .model import (
    LeaveApplicationPayload,
    LeaveDecisionPayload,
    LeaveRecommendationPayload,
    NotificationInput,
)
from .store import NotificationStore

logger = logging.getLogger(__name__)


def build_submission_notifications(leave: LeaveApplication) -> list[NotificationInput]:
    payload = LeaveApplicationPayload(leave_id=leave.leave_id, applicant_name=leave.applicant_name)
    return [
        NotificationInput(
            user_id=leave.recommender_id,
            type=NotificationType.LEAVE_APPLICATION,
            title="New Leave Application",
            message=f"{leave.applicant_name} has submitted a leave application for your recommendation.",
            payload=payload,
        ),
        NotificationInput(
            user_id=leave.approver_id,
            type=NotificationType.LEAVE_APPLICATION,
            title="New Leave Application",
            message=f"{leave.applicant_name} has submitted a leave application that may require your approval.",
            payload=payload,
        ),
    ]


def build_recommendation_notification(leave: LeaveApplication, *, is_recommended: bool) -> NotificationInput:
    if is_recommended:
        title = "Leave Recommended"
        message = f"{leave.applicant_name}'s leave application has been recommended and is now awaiting your approval."
    else:
        title = "Leave Not Recommended"
        message = f"{leave.applicant_name}'s leave application has been rejected and is now closed."

    return NotificationInput(
        user_id=leave.approver_id,
        type=NotificationType.LEAVE_RECOMMENDATION,
        title=title,
        message=message,
        payload=LeaveRecommendationPayload(
            leave_id=leave.leave_id,
            applicant_name=leave.applicant_name,
            is_recommended=is_recommended,
        ),
    )


def build_decision_notification(leave: LeaveApplication, *, is_approved: bool) -> NotificationInput:
    outcome = "approved" if is_approved else "rejected"
    return NotificationInput(
        user_id=leave.applicant_id,
        type=NotificationType.LEAVE_APPROVAL if is_approved else NotificationType.LEAVE_REJECTION,
        title=f"Leave {outcome.capitalize()}",
        message=f"Your leave application has been {outcome}.",
        payload=LeaveDecisionPayload(leave_id=leave.leave_id, applicant_name=leave.applicant_name),
    )


def build_transition_notifications(leave: LeaveApplication, transition: LeaveTransition) -> list[NotificationInput]:
    if transition.action == LeaveAction.RECOMMEND:
        return [build_recommendation_notification(leave, is_recommended=True)]
    if transition.action == LeaveAction.NOT_RECOMMEND:
        return [build_recommendation_notification(leave, is_recommended=False)]
    if transition.action == LeaveAction.APPROVE:
        return [build_decision_notification(leave, is_approved=True)]
    return [build_decision_notification(leave, is_approved=False)]


class NotificationDispatcher:
    def __init__(self, store: NotificationStore):
        self._store = store

    def _send(self, notifications: Iterable[NotificationInput]) -> int:
        sent = 0
        for notification in notifications:
            self._store.create(notification)
            sent += 1
        return sent

    def leave_submitted(self, leave: LeaveApplication) -> int:
        sent = self._send(build_submission_notifications(leave))
        logger.info("Leave %s submitted: dispatched %d notifications", leave.leave_id, sent)
        return sent

    def leave_transitioned(self, leave: LeaveApplication, transition: LeaveTransition) -> int:
        sent = self._send(build_transition_notifications(leave, transition))
        logger.info(
            "Leave %s %s -> %s: dispatched %d notifications",
            leave.leave_id,
            transition.from_status.value,
            transition.to_status.value,
            sent,
        )
        return sent
