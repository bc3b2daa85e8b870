from __future__ import annotations

import pytest

from src.staff_portal.staff_portal.core.enums import LeaveAction, LeaveStatus, Role
from src.staff_portal.staff_portal.core.exceptions import AuthorizationError, InvalidStateError, ValidationError
from src.staff_portal.staff_portal.leaves.workflow import allowed_edges, next_status, plan_transition
from src.staff_portal.staff_portal.users.model import Actor

CAROL = Actor(user_id=2, role=Role.DIVISION_CC, full_name="Carol Tran")
DAVE = Actor(user_id=3, role=Role.DIVISIONAL_HEAD, full_name="Dave Pham")
ERIN = Actor(user_id=4, role=Role.HOD, full_name="Erin Le")


def test_only_four_edges_exist():
    assert allowed_edges() == {
        (LeaveStatus.PENDING, LeaveStatus.RECOMMENDED),
        (LeaveStatus.PENDING, LeaveStatus.REJECTED),
        (LeaveStatus.RECOMMENDED, LeaveStatus.APPROVED),
        (LeaveStatus.RECOMMENDED, LeaveStatus.REJECTED),
    }


@pytest.mark.parametrize("status", [LeaveStatus.APPROVED, LeaveStatus.REJECTED])
@pytest.mark.parametrize("action", list(LeaveAction))
def test_terminal_states_accept_no_action(status, action):
    with pytest.raises(InvalidStateError, match="already"):
        next_status(status, action)


def test_approve_skipping_recommendation_is_invalid():
    with pytest.raises(InvalidStateError):
        next_status(LeaveStatus.PENDING, LeaveAction.APPROVE)
    with pytest.raises(InvalidStateError):
        next_status(LeaveStatus.RECOMMENDED, LeaveAction.RECOMMEND)


def test_recommend_stamps_recommender_fields(make_leave, fixed_now):
    leave = make_leave()

    t = plan_transition(leave, CAROL, LeaveAction.RECOMMEND, remarks="  fine by me ", now=fixed_now)

    assert t.from_status == LeaveStatus.PENDING
    assert t.to_status == LeaveStatus.RECOMMENDED
    assert t.fields == {
        "updated_at": fixed_now,
        "recommendation_by": 2,
        "recommendation_date": fixed_now,
        "recommendation_remarks": "fine by me",
    }
    assert not t.is_rejection


def test_not_recommend_requires_reason(make_leave, fixed_now):
    with pytest.raises(ValidationError):
        plan_transition(make_leave(), CAROL, LeaveAction.NOT_RECOMMEND, remarks="   ", now=fixed_now)

    t = plan_transition(make_leave(), CAROL, LeaveAction.NOT_RECOMMEND, remarks="Busy period", now=fixed_now)
    assert t.to_status == LeaveStatus.REJECTED
    assert t.fields["rejection_reason"] == "Busy period"
    assert t.is_rejection


def test_reject_with_remarks_also_sets_rejection_reason(make_leave, fixed_now):
    leave = make_leave(LeaveStatus.RECOMMENDED)

    t = plan_transition(leave, DAVE, LeaveAction.REJECT, remarks="Short staffed", now=fixed_now)

    assert t.to_status == LeaveStatus.REJECTED
    assert t.fields["approval_by"] == 3
    assert t.fields["approval_remarks"] == "Short staffed"
    assert t.fields["rejection_reason"] == "Short staffed"


def test_approve_without_remarks(make_leave, fixed_now):
    t = plan_transition(make_leave(LeaveStatus.RECOMMENDED), DAVE, LeaveAction.APPROVE, now=fixed_now)

    assert t.to_status == LeaveStatus.APPROVED
    assert "approval_remarks" not in t.fields
    assert "rejection_reason" not in t.fields


def test_only_designated_reviewers_may_act(make_leave, fixed_now):
    # the approver cannot take the recommender's step
    with pytest.raises(AuthorizationError):
        plan_transition(make_leave(), DAVE, LeaveAction.RECOMMEND, now=fixed_now)

    # an HOD who is not the chosen approver cannot decide either
    with pytest.raises(AuthorizationError):
        plan_transition(make_leave(LeaveStatus.RECOMMENDED), ERIN, LeaveAction.APPROVE, now=fixed_now)


def test_authorization_is_checked_before_state(make_leave, fixed_now):
    leave = make_leave(LeaveStatus.APPROVED)

    with pytest.raises(AuthorizationError):
        plan_transition(leave, ERIN, LeaveAction.REJECT, now=fixed_now)

    with pytest.raises(InvalidStateError):
        plan_transition(leave, DAVE, LeaveAction.REJECT, now=fixed_now)
