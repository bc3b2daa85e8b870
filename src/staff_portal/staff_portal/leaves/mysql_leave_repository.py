from __future__ import annotations

from typing import Any, Optional, Sequence

from ..core.enums import LeaveStatus, LeaveType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, where_clause
from .model import LeaveApplication, NewLeaveApplication
from .repository import LeaveRepository

_LEAVE_COLUMNS = """
    leave_id, applicant_id, applicant_name, designation, division,
    leave_type, leave_days, start_date, resume_date, reason,
    acting_officer_id, acting_officer_name, recommender_id, approver_id, status,
    recommendation_by, recommendation_date, recommendation_remarks,
    approval_by, approval_date, approval_remarks, rejection_reason,
    created_at, updated_at
"""

# Columns a transition may stamp; anything else is a programming error.
TRANSITION_COLUMNS = frozenset(
    {
        "updated_at",
        "recommendation_by",
        "recommendation_date",
        "recommendation_remarks",
        "approval_by",
        "approval_date",
        "approval_remarks",
        "rejection_reason",
    }
)


def _opt_int(value: Any) -> Optional[int]:
    return int(value) if value is not None else None


def _row_to_leave(r: dict) -> LeaveApplication:
    return LeaveApplication(
        leave_id=int(r["leave_id"]),
        applicant_id=int(r["applicant_id"]),
        applicant_name=r["applicant_name"],
        designation=r["designation"],
        division=r["division"],
        leave_type=LeaveType(r["leave_type"]),
        leave_days=int(r["leave_days"]),
        start_date=r["start_date"],
        resume_date=r["resume_date"],
        reason=r["reason"],
        recommender_id=int(r["recommender_id"]),
        approver_id=int(r["approver_id"]),
        status=LeaveStatus(r["status"]),
        created_at=r["created_at"],
        updated_at=r["updated_at"],
        acting_officer_id=_opt_int(r.get("acting_officer_id")),
        acting_officer_name=r.get("acting_officer_name"),
        recommendation_by=_opt_int(r.get("recommendation_by")),
        recommendation_date=r.get("recommendation_date"),
        recommendation_remarks=r.get("recommendation_remarks"),
        approval_by=_opt_int(r.get("approval_by")),
        approval_date=r.get("approval_date"),
        approval_remarks=r.get("approval_remarks"),
        rejection_reason=r.get("rejection_reason"),
    )


class MySQLLeaveRepository(LeaveRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(self, application: NewLeaveApplication) -> int:
        a = application
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO leave_applications(
                    applicant_id, applicant_name, designation, division,
                    leave_type, leave_days, start_date, resume_date, reason,
                    acting_officer_id, acting_officer_name, recommender_id, approver_id,
                    status, created_at, updated_at
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(a.applicant_id),
                    a.applicant_name,
                    a.designation,
                    a.division,
                    a.leave_type.value,
                    int(a.leave_days),
                    a.start_date,
                    a.resume_date,
                    a.reason,
                    a.acting_officer_id,
                    a.acting_officer_name,
                    int(a.recommender_id),
                    int(a.approver_id),
                    LeaveStatus.PENDING.value,
                    a.created_at,
                    a.created_at,
                ),
            )
            return int(cur.lastrowid)

    def get(self, leave_id: int) -> Optional[LeaveApplication]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_LEAVE_COLUMNS} FROM leave_applications WHERE leave_id=%s", (int(leave_id),))
            r = fetchone(cur)
            return _row_to_leave(r) if r else None

    def _list(self, filters: list[tuple[str, Any]], limit: int) -> Sequence[LeaveApplication]:
        where, params = where_clause(filters)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_LEAVE_COLUMNS}
                FROM leave_applications
                WHERE {where}
                ORDER BY created_at DESC
                LIMIT %s
                """,
                tuple(params + [int(limit)]),
            )
            return [_row_to_leave(r) for r in fetchall(cur)]

    def list_for_applicant(self, applicant_id: int, *, limit: int = 200) -> Sequence[LeaveApplication]:
        return self._list([("applicant_id", int(applicant_id))], limit)

    def list_for_recommender(
        self, recommender_id: int, *, status: Optional[LeaveStatus] = None, limit: int = 200
    ) -> Sequence[LeaveApplication]:
        return self._list([("recommender_id", int(recommender_id)), ("status", status)], limit)

    def list_for_approver(
        self, approver_id: int, *, status: Optional[LeaveStatus] = None, limit: int = 200
    ) -> Sequence[LeaveApplication]:
        return self._list([("approver_id", int(approver_id)), ("status", status)], limit)

    def apply_transition(
        self,
        leave_id: int,
        *,
        expected_status: LeaveStatus,
        new_status: LeaveStatus,
        fields: dict[str, Any],
    ) -> bool:
        unknown = set(fields) - TRANSITION_COLUMNS
        if unknown:
            raise ValueError(f"Unexpected leave columns: {sorted(unknown)}")

        columns = sorted(fields)
        assignments = ", ".join(["status=%s"] + [f"{c}=%s" for c in columns])
        params = [new_status.value] + [fields[c] for c in columns] + [int(leave_id), expected_status.value]

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"UPDATE leave_applications SET {assignments} WHERE leave_id=%s AND status=%s",
                tuple(params),
            )
            return cur.rowcount > 0
