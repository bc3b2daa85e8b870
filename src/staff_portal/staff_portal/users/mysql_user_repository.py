from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import Role, StaffType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import User
from .repository import UserRepository

_USER_COLUMNS = "user_id, full_name, email, password_hash, role, division, staff_type, designation, is_active"


def _row_to_user(row: dict) -> User:
    return User(
        user_id=int(row["user_id"]),
        full_name=row["full_name"],
        email=row["email"],
        password_hash=row["password_hash"],
        role=Role(row["role"]),
        division=row.get("division"),
        staff_type=StaffType(row["staff_type"]) if row.get("staff_type") else None,
        designation=row.get("designation"),
        is_active=bool(row.get("is_active", True)),
    )


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, user_id: int) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_USER_COLUMNS} FROM users WHERE user_id=%s", (int(user_id),))
            row = fetchone(cur)
            return _row_to_user(row) if row else None

    def get_by_email(self, email: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_USER_COLUMNS} FROM users WHERE email=%s", (email,))
            row = fetchone(cur)
            return _row_to_user(row) if row else None

    def list_by_division(self, division: str) -> Sequence[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_USER_COLUMNS} FROM users WHERE division=%s AND is_active=1 ORDER BY full_name",
                (division,),
            )
            return [_row_to_user(r) for r in fetchall(cur)]

    def list_by_role(self, role: Role) -> Sequence[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_USER_COLUMNS} FROM users WHERE role=%s AND is_active=1 ORDER BY full_name",
                (role.value,),
            )
            return [_row_to_user(r) for r in fetchall(cur)]

    def create_user(
        self,
        *,
        full_name: str,
        email: str,
        password_hash: str,
        role: Role,
        division: Optional[str],
        staff_type: Optional[StaffType],
        designation: Optional[str],
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO users(full_name, email, password_hash, role, division, staff_type, designation, is_active)
                VALUES(%s,%s,%s,%s,%s,%s,%s,1)
                """,
                (
                    full_name,
                    email,
                    password_hash,
                    role.value,
                    division,
                    staff_type.value if staff_type else None,
                    designation,
                ),
            )
            return int(cur.lastrowid)

    def update_profile(
        self,
        user_id: int,
        *,
        full_name: str,
        role: Role,
        division: Optional[str],
        staff_type: Optional[StaffType],
        designation: Optional[str],
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE users
                SET full_name=%s, role=%s, division=%s, staff_type=%s, designation=%s
                WHERE user_id=%s
                """,
                (
                    full_name,
                    role.value,
                    division,
                    staff_type.value if staff_type else None,
                    designation,
                    int(user_id),
                ),
            )
            return cur.rowcount > 0

    def delete_by_id(self, user_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM users WHERE user_id=%s", (int(user_id),))
            return cur.rowcount > 0

    def list_admin_view(self) -> Sequence[dict]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT user_id, full_name, email, role, division, staff_type, designation, is_active
                FROM users
                ORDER BY division, full_name
                """
            )
            rows = fetchall(cur)
            out: list[dict] = []
            for r in rows:
                out.append(
                    {
                        "user_id": int(r["user_id"]),
                        "full_name": r["full_name"],
                        "email": r["email"],
                        "role": r["role"],
                        "division": r.get("division") or "-",
                        "staff_type": r.get("staff_type") or "-",
                        "designation": r.get("designation") or "-",
                        "is_active": bool(r.get("is_active", True)),
                    }
                )
            return out
