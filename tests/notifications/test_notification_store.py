from __future__ import annotations

import logging
from datetime import datetime, timedelta

import pytest

from src.staff_portal.staff_portal.core.enums import NotificationType
from src.staff_portal.staff_portal.core.exceptions import StoreError, ValidationError
from src.staff_portal.staff_portal.notifications.model import (
    LeaveApplicationPayload,
    LeaveDecisionPayload,
    NotificationInput,
)
from src.staff_portal.staff_portal.notifications.store import NotificationStore


@pytest.fixture
def store(notifications_repo, fixed_now):
    return NotificationStore(notifications_repo, clock=lambda: fixed_now, list_limit=3, feed_limit=2)


def _note(user_id=1, title="Leave Approved", **overrides):
    kwargs = dict(
        user_id=user_id,
        type=NotificationType.LEAVE_APPROVAL,
        title=title,
        message="Your leave application has been approved.",
        payload=LeaveDecisionPayload(leave_id=10, applicant_name="Alice Nguyen"),
    )
    kwargs.update(overrides)
    return NotificationInput(**kwargs)


def test_create_stamps_time_and_starts_unread(store, notifications_repo, fixed_now):
    store.create(_note())

    (n,) = notifications_repo.items.values()
    assert n.created_at == fixed_now
    assert n.read is False
    assert n.payload.leave_id == 10


def test_create_keeps_given_timestamp(store, notifications_repo):
    at = datetime(2026, 1, 5, 7, 0)
    store.create(_note(created_at=at))

    assert notifications_repo.items[1].created_at == at


def test_create_rejects_blank_content(store):
    with pytest.raises(ValidationError):
        store.create(_note(title="  "))
    with pytest.raises(ValidationError):
        store.create(_note(user_id=0))


def test_payload_must_match_type():
    with pytest.raises(ValidationError):
        _note(payload=LeaveApplicationPayload(leave_id=1, applicant_name="A"))


def test_create_failure_is_logged_not_raised(store, notifications_repo, caplog):
    notifications_repo.fail_insert = True

    with caplog.at_level(logging.ERROR):
        store.create(_note())

    assert notifications_repo.items == {}
    assert "Error creating leave_approval notification for user 1" in caplog.text


def test_list_is_newest_first_and_limited(store, fixed_now):
    for i in range(5):
        store.create(_note(title=f"n{i}", created_at=fixed_now + timedelta(minutes=i)))
    store.create(_note(user_id=2))

    titles = [n.title for n in store.list_for_user(1)]

    assert titles == ["n4", "n3", "n2"]
    assert len(store.list_for_user(1, limit=10)) == 5


def test_reads_degrade_to_empty_on_store_error(store, notifications_repo, caplog):
    store.create(_note())
    notifications_repo.fail_reads = True

    with caplog.at_level(logging.ERROR):
        assert store.list_for_user(1) == []
        assert store.unread_count(1) == 0

    with pytest.raises(StoreError):
        store.snapshot(1)


def test_mark_read_is_idempotent(store, notifications_repo):
    store.create(_note())

    store.mark_read(1)
    store.mark_read(1)

    assert notifications_repo.items[1].read is True
    assert store.unread_count(1) == 0


def test_mark_read_unknown_id_is_silent(store):
    store.mark_read(404)


@pytest.mark.parametrize("count", [0, 1, 7])
def test_mark_all_read_leaves_nothing_unread(store, count):
    for _ in range(count):
        store.create(_note())
    store.create(_note(user_id=2))

    store.mark_all_read_for_user(1)

    assert store.unread_count(1) == 0
    assert store.unread_count(2) == 1


def test_mark_all_read_skips_failed_updates(store, notifications_repo, caplog):
    for _ in range(3):
        store.create(_note())
    notifications_repo.fail_set_read_ids = {2}

    with caplog.at_level(logging.WARNING):
        store.mark_all_read_for_user(1)

    assert [n.read for n in notifications_repo.items.values()] == [True, False, True]
    assert "Marked 2 of 3 notifications read for user 1" in caplog.text


def test_snapshot_and_badge(store, fixed_now):
    for i in range(12):
        store.create(_note(created_at=fixed_now + timedelta(seconds=i)))

    snap = store.snapshot(1)

    assert len(snap.items) == 2
    assert snap.unread_count == 12
    assert snap.badge == "9+"


def test_owner_of(store):
    store.create(_note(user_id=3))

    assert store.owner_of(1) == 3
    assert store.owner_of(2) is None
