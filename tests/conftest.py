from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from typing import Optional

import pytest
from werkzeug.security import generate_password_hash

from src.staff_portal.staff_portal.core.enums import LeaveStatus, LeaveType, Role, StaffType
from src.staff_portal.staff_portal.core.exceptions import StoreError
from src.staff_portal.staff_portal.leaves.model import LeaveApplication, NewLeaveApplication
from src.staff_portal.staff_portal.notifications.model import Notification, NotificationInput
from src.staff_portal.staff_portal.users.division_model import Division
from src.staff_portal.staff_portal.users.model import User


class FakeUsersRepo:
    def __init__(self, users: list[User]):
        self._by_id = {u.user_id: u for u in users}
        self._next_id = max(self._by_id, default=0) + 1

    def get_by_id(self, user_id):
        return self._by_id.get(int(user_id))

    def get_by_email(self, email):
        for u in self._by_id.values():
            if u.email == email:
                return u
        return None

    def list_by_division(self, division):
        return [u for u in self._by_id.values() if u.division == division and u.is_active]

    def list_by_role(self, role):
        return [u for u in self._by_id.values() if u.role == role and u.is_active]

    def create_user(self, *, full_name, email, password_hash, role, division, staff_type, designation):
        uid = self._next_id
        self._next_id += 1
        self._by_id[uid] = User(
            user_id=uid,
            full_name=full_name,
            email=email,
            password_hash=password_hash,
            role=role,
            division=division,
            staff_type=staff_type,
            designation=designation,
        )
        return uid

    def update_profile(self, user_id, *, full_name, role, division, staff_type, designation):
        user = self._by_id.get(int(user_id))
        if not user:
            return False
        self._by_id[user.user_id] = replace(
            user, full_name=full_name, role=role, division=division, staff_type=staff_type, designation=designation
        )
        return True

    def delete_by_id(self, user_id):
        return self._by_id.pop(int(user_id), None) is not None

    def list_admin_view(self):
        return [{"user_id": u.user_id, "full_name": u.full_name, "role": u.role.value} for u in self._by_id.values()]


class FakeDivisionsRepo:
    def __init__(self, names):
        self._items = {n: Division(division_id=i + 1, name=n) for i, n in enumerate(names)}

    def list_all(self):
        return list(self._items.values())

    def get_by_name(self, name: str) -> Optional[Division]:
        return self._items.get(name)

    def create(self, *, name, description):
        division_id = len(self._items) + 1
        self._items[name] = Division(division_id=division_id, name=name, description=description)
        return division_id


class FakeLeavesRepo:
    def __init__(self):
        self._next_id = 1
        self.items: dict[int, LeaveApplication] = {}
        self.fail_writes = False
        self.fail_reads = False

    def create(self, application: NewLeaveApplication) -> int:
        if self.fail_writes:
            raise StoreError("leave store down")
        leave_id = self._next_id
        self._next_id += 1
        self.items[leave_id] = application.with_id(leave_id)
        return leave_id

    def _check_reads(self):
        if self.fail_reads:
            raise StoreError("leave store down")

    def get(self, leave_id):
        self._check_reads()
        return self.items.get(int(leave_id))

    def list_for_applicant(self, applicant_id, *, limit=200):
        self._check_reads()
        return [lv for lv in self.items.values() if lv.applicant_id == applicant_id][:limit]

    def list_for_recommender(self, recommender_id, *, status=None, limit=200):
        self._check_reads()
        return [
            lv
            for lv in self.items.values()
            if lv.recommender_id == recommender_id and (status is None or lv.status == status)
        ][:limit]

    def list_for_approver(self, approver_id, *, status=None, limit=200):
        self._check_reads()
        return [
            lv
            for lv in self.items.values()
            if lv.approver_id == approver_id and (status is None or lv.status == status)
        ][:limit]

    def apply_transition(self, leave_id, *, expected_status, new_status, fields):
        if self.fail_writes:
            raise StoreError("leave store down")
        leave = self.items.get(int(leave_id))
        if not leave or leave.status != expected_status:
            return False
        self.items[leave.leave_id] = replace(leave, status=new_status, **fields)
        return True


class FakeNotificationsRepo:
    def __init__(self):
        self._next_id = 1
        self.items: dict[int, Notification] = {}
        self.fail_insert = False
        self.fail_reads = False
        self.fail_set_read_ids: set[int] = set()

    def insert(self, notification: NotificationInput) -> int:
        if self.fail_insert:
            raise StoreError("notification store down")
        nid = self._next_id
        self._next_id += 1
        self.items[nid] = Notification(
            notification_id=nid,
            user_id=notification.user_id,
            type=notification.type,
            title=notification.title,
            message=notification.message,
            read=notification.read,
            created_at=notification.created_at,
            payload=notification.payload,
        )
        return nid

    def get(self, notification_id) -> Optional[Notification]:
        if self.fail_reads:
            raise StoreError("notification store down")
        return self.items.get(int(notification_id))

    def for_user(self, user_id) -> list[Notification]:
        return [n for n in self.items.values() if n.user_id == user_id]

    def list_for_user(self, user_id, *, limit=20):
        if self.fail_reads:
            raise StoreError("notification store down")
        items = sorted(self.for_user(user_id), key=lambda n: (n.created_at, n.notification_id), reverse=True)
        return items[:limit]

    def count_unread(self, user_id):
        if self.fail_reads:
            raise StoreError("notification store down")
        return sum(1 for n in self.for_user(user_id) if not n.read)

    def list_unread_ids(self, user_id):
        if self.fail_reads:
            raise StoreError("notification store down")
        return [n.notification_id for n in self.for_user(user_id) if not n.read]

    def set_read(self, notification_id):
        if int(notification_id) in self.fail_set_read_ids:
            raise StoreError(f"update of {notification_id} failed")
        n = self.items.get(int(notification_id))
        if not n or n.read:
            return False
        self.items[n.notification_id] = replace(n, read=True)
        return True


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2026, 3, 2, 9, 30, 0)


@pytest.fixture
def staff_directory() -> list[User]:
    pw = generate_password_hash("secret1")
    return [
        User(1, "Alice Nguyen", "alice@example.com", pw, Role.STAFF, "IT", StaffType.OFFICE, "Developer"),
        User(2, "Carol Tran", "carol@example.com", pw, Role.DIVISION_CC, "IT", StaffType.OFFICE, "Coordinator"),
        User(3, "Dave Pham", "dave@example.com", pw, Role.DIVISIONAL_HEAD, "IT", StaffType.OFFICE, "Head of IT"),
        User(4, "Erin Le", "erin@example.com", pw, Role.HOD, None, None, "Head of Department"),
        User(5, "Frank Vo", "frank@example.com", pw, Role.STAFF, "IT", StaffType.FIELD, "Technician"),
        User(6, "Gina Do", "gina@example.com", pw, Role.DIVISION_CC, "HR", StaffType.OFFICE, "Coordinator"),
        User(7, "Root Admin", "admin@example.com", pw, Role.ADMIN, None, None, "Administrator"),
    ]


@pytest.fixture
def users_repo(staff_directory) -> FakeUsersRepo:
    return FakeUsersRepo(staff_directory)


@pytest.fixture
def divisions_repo() -> FakeDivisionsRepo:
    return FakeDivisionsRepo(["IT", "HR"])


@pytest.fixture
def leaves_repo() -> FakeLeavesRepo:
    return FakeLeavesRepo()


@pytest.fixture
def notifications_repo() -> FakeNotificationsRepo:
    return FakeNotificationsRepo()


def _make_leave(status: LeaveStatus = LeaveStatus.PENDING, **overrides) -> LeaveApplication:
    base = dict(
        leave_id=10,
        applicant_id=1,
        applicant_name="Alice Nguyen",
        designation="Developer",
        division="IT",
        leave_type=LeaveType.CASUAL,
        leave_days=3,
        start_date=datetime(2026, 3, 9).date(),
        resume_date=datetime(2026, 3, 12).date(),
        reason="Family trip",
        recommender_id=2,
        approver_id=3,
        status=status,
        created_at=datetime(2026, 3, 1, 8, 0, 0),
        updated_at=datetime(2026, 3, 1, 8, 0, 0),
    )
    base.update(overrides)
    return LeaveApplication(**base)


@pytest.fixture
def make_leave():
    return _make_leave
