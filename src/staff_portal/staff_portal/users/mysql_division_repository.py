from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .division_model import Division
from .division_repository import DivisionRepository


class MySQLDivisionRepository(DivisionRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_all(self) -> Sequence[Division]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT division_id, name, description FROM divisions ORDER BY name")
            rows = fetchall(cur)
            return [
                Division(division_id=int(r["division_id"]), name=r["name"], description=r.get("description"))
                for r in rows
            ]

    def get_by_name(self, name: str) -> Optional[Division]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT division_id, name, description FROM divisions WHERE name=%s", (name,))
            r = fetchone(cur)
            if not r:
                return None
            return Division(division_id=int(r["division_id"]), name=r["name"], description=r.get("description"))

    def create(self, *, name: str, description: Optional[str]) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("INSERT INTO divisions(name, description) VALUES(%s,%s)", (name, description))
            return int(cur.lastrowid)
