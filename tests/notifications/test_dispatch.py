from __future__ import annotations

from datetime import datetime

from src.staff_portal.staff_portal.core.enums import LeaveAction, LeaveStatus, NotificationType
from src.staff_portal.staff_portal.leaves.workflow import LeaveTransition
from src.staff_portal.staff_portal.notifications.dispatch import (
    NotificationDispatcher,
    build_decision_notification,
    build_recommendation_notification,
    build_submission_notifications,
    build_transition_notifications,
)
from src.staff_portal.staff_portal.notifications.store import NotificationStore


def _transition(action, from_status, to_status):
    return LeaveTransition(leave_id=10, action=action, from_status=from_status, to_status=to_status, fields={})


def test_submission_goes_to_both_reviewers(make_leave):
    recommender_note, approver_note = build_submission_notifications(make_leave())

    assert recommender_note.user_id == 2
    assert recommender_note.message == (
        "Alice Nguyen has submitted a leave application for your recommendation."
    )
    assert approver_note.user_id == 3
    assert approver_note.message == (
        "Alice Nguyen has submitted a leave application that may require your approval."
    )
    for note in (recommender_note, approver_note):
        assert note.type == NotificationType.LEAVE_APPLICATION
        assert note.title == "New Leave Application"
        assert note.payload.leave_id == 10
        assert note.payload.applicant_name == "Alice Nguyen"


def test_recommendation_text_follows_outcome(make_leave):
    yes = build_recommendation_notification(make_leave(), is_recommended=True)
    no = build_recommendation_notification(make_leave(), is_recommended=False)

    assert yes.user_id == no.user_id == 3
    assert yes.title == "Leave Recommended"
    assert "awaiting your approval" in yes.message
    assert no.title == "Leave Not Recommended"
    assert no.message == "Alice Nguyen's leave application has been rejected and is now closed."


def test_decision_goes_to_applicant(make_leave):
    approved = build_decision_notification(make_leave(), is_approved=True)
    rejected = build_decision_notification(make_leave(), is_approved=False)

    assert (approved.user_id, approved.type, approved.title) == (1, NotificationType.LEAVE_APPROVAL, "Leave Approved")
    assert (rejected.user_id, rejected.type, rejected.title) == (1, NotificationType.LEAVE_REJECTION, "Leave Rejected")


def test_each_transition_yields_one_notification(make_leave):
    cases = {
        LeaveAction.RECOMMEND: (LeaveStatus.PENDING, LeaveStatus.RECOMMENDED, 3, NotificationType.LEAVE_RECOMMENDATION),
        LeaveAction.NOT_RECOMMEND: (LeaveStatus.PENDING, LeaveStatus.REJECTED, 3, NotificationType.LEAVE_RECOMMENDATION),
        LeaveAction.APPROVE: (LeaveStatus.RECOMMENDED, LeaveStatus.APPROVED, 1, NotificationType.LEAVE_APPROVAL),
        LeaveAction.REJECT: (LeaveStatus.RECOMMENDED, LeaveStatus.REJECTED, 1, NotificationType.LEAVE_REJECTION),
    }
    for action, (src, dst, recipient, kind) in cases.items():
        (note,) = build_transition_notifications(make_leave(dst), _transition(action, src, dst))
        assert (note.user_id, note.type) == (recipient, kind)


def test_dispatcher_counts_and_stores(make_leave, notifications_repo):
    dispatcher = NotificationDispatcher(NotificationStore(notifications_repo, clock=lambda: datetime(2026, 3, 2)))

    assert dispatcher.leave_submitted(make_leave()) == 2
    sent = dispatcher.leave_transitioned(
        make_leave(LeaveStatus.RECOMMENDED),
        _transition(LeaveAction.RECOMMEND, LeaveStatus.PENDING, LeaveStatus.RECOMMENDED),
    )

    assert sent == 1
    assert [n.user_id for n in notifications_repo.items.values()] == [2, 3, 3]
