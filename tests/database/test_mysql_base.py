from __future__ import annotations

import json
from datetime import datetime

import mysql.connector
import pytest

from src.staff_portal.staff_portal.core.enums import LeaveStatus, NotificationType
from src.staff_portal.staff_portal.core.exceptions import StoreError
from src.staff_portal.staff_portal.database.mysql_base import db_cursor, load_json, where_clause
from src.staff_portal.staff_portal.notifications.model import LeaveRecommendationPayload, NotificationInput
from src.staff_portal.staff_portal.notifications.mysql_notification_repository import MySQLNotificationRepository


class FakeCursor:
    def __init__(self, rows=None, fail=False):
        self.rows = rows or []
        self.fail = fail
        self.executed = []
        self.rowcount = 0
        self.lastrowid = 41
        self.closed = False

    def execute(self, sql, params=None):
        if self.fail:
            raise mysql.connector.errors.DatabaseError(msg="Lost connection")
        self.executed.append((sql, params))
        self.rowcount = 1

    def fetchone(self):
        return self.rows[0] if self.rows else None

    def fetchall(self):
        return self.rows

    def close(self):
        self.closed = True


class FakeConn:
    def __init__(self, cursor):
        self._cursor = cursor
        self.committed = False
        self.rolled_back = False
        self.closed = False

    def cursor(self, dictionary=True):
        return self._cursor

    def commit(self):
        self.committed = True

    def rollback(self):
        self.rolled_back = True

    def close(self):
        self.closed = True


class FakeFactory:
    def __init__(self, cursor, refuse=False):
        self.conn = FakeConn(cursor)
        self.refuse = refuse

    def connect(self):
        if self.refuse:
            raise mysql.connector.errors.InterfaceError(msg="Can't connect")
        return self.conn


def test_db_cursor_commits_on_success():
    factory = FakeFactory(FakeCursor())

    with db_cursor(factory) as (_, cur):
        cur.execute("SELECT 1")

    assert factory.conn.committed
    assert factory.conn.closed
    assert cur.closed


def test_db_cursor_wraps_driver_errors():
    factory = FakeFactory(FakeCursor(fail=True))

    with pytest.raises(StoreError, match="Lost connection"):
        with db_cursor(factory) as (_, cur):
            cur.execute("SELECT 1")

    assert factory.conn.rolled_back
    assert not factory.conn.committed
    assert factory.conn.closed


def test_db_cursor_wraps_connect_errors():
    with pytest.raises(StoreError, match="Cannot connect"):
        with db_cursor(FakeFactory(FakeCursor(), refuse=True)):
            pass


def test_where_clause_skips_none_and_unwraps_enums():
    sql, params = where_clause([("approver_id", 3), ("status", LeaveStatus.RECOMMENDED), ("division", None)])

    assert sql == "1=1 AND approver_id=%s AND status=%s"
    assert params == [3, "recommended"]


def test_load_json_accepts_driver_shapes():
    assert load_json(None) == {}
    assert load_json(b'{"leave_id": 1}') == {"leave_id": 1}
    assert load_json({"leave_id": 2}) == {"leave_id": 2}


def test_notification_insert_serialises_payload():
    cursor = FakeCursor()
    repo = MySQLNotificationRepository(FakeFactory(cursor))

    nid = repo.insert(
        NotificationInput(
            user_id=3,
            type=NotificationType.LEAVE_RECOMMENDATION,
            title="Leave Recommended",
            message="m",
            payload=LeaveRecommendationPayload(leave_id=9, applicant_name="Alice", is_recommended=True),
            created_at=datetime(2026, 3, 2, 9, 0),
        )
    )

    assert nid == 41
    _, params = cursor.executed[0]
    assert json.loads(params[4]) == {"leave_id": 9, "applicant_name": "Alice", "is_recommended": True}
    assert params[5] == 0


def test_notification_row_maps_to_tagged_payload():
    row = {
        "notification_id": 5,
        "user_id": 1,
        "type": "leave_rejection",
        "title": "Leave Rejected",
        "message": "Your leave application has been rejected.",
        "data": '{"leave_id": 9, "applicant_name": "Alice"}',
        "is_read": 1,
        "created_at": datetime(2026, 3, 2, 9, 0),
    }
    repo = MySQLNotificationRepository(FakeFactory(FakeCursor(rows=[row])))

    n = repo.get(5)

    assert n.type == NotificationType.LEAVE_REJECTION
    assert n.read is True
    assert n.payload.leave_id == 9
