from __future__ import annotations

import json
from typing import Optional, Sequence

from ..core.enums import NotificationType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, load_json
from .model import Notification, NotificationInput, payload_from_dict, payload_to_dict
from .repository import NotificationRepository

_NOTIFICATION_COLUMNS = "notification_id, user_id, type, title, message, data, is_read, created_at"


def _row_to_notification(r: dict) -> Notification:
    kind = NotificationType(r["type"])
    return Notification(
        notification_id=int(r["notification_id"]),
        user_id=int(r["user_id"]),
        type=kind,
        title=r["title"],
        message=r["message"],
        read=bool(r["is_read"]),
        created_at=r["created_at"],
        payload=payload_from_dict(kind, load_json(r.get("data"))),
    )


class MySQLNotificationRepository(NotificationRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def insert(self, notification: NotificationInput) -> int:
        n = notification
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO notifications(user_id, type, title, message, data, is_read, created_at)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(n.user_id),
                    n.type.value,
                    n.title,
                    n.message,
                    json.dumps(payload_to_dict(n.payload)),
                    1 if n.read else 0,
                    n.created_at,
                ),
            )
            return int(cur.lastrowid)

    def get(self, notification_id: int) -> Optional[Notification]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_NOTIFICATION_COLUMNS} FROM notifications WHERE notification_id=%s",
                (int(notification_id),),
            )
            r = fetchone(cur)
            return _row_to_notification(r) if r else None

    def list_for_user(self, user_id: int, *, limit: int = 20) -> Sequence[Notification]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_NOTIFICATION_COLUMNS}
                FROM notifications
                WHERE user_id=%s
                ORDER BY created_at DESC, notification_id DESC
                LIMIT %s
                """,
                (int(user_id), int(limit)),
            )
            return [_row_to_notification(r) for r in fetchall(cur)]

    def count_unread(self, user_id: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT COUNT(*) AS n FROM notifications WHERE user_id=%s AND is_read=0",
                (int(user_id),),
            )
            r = fetchone(cur)
            return int(r["n"]) if r else 0

    def list_unread_ids(self, user_id: int) -> Sequence[int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT notification_id FROM notifications WHERE user_id=%s AND is_read=0",
                (int(user_id),),
            )
            return [int(r["notification_id"]) for r in fetchall(cur)]

    def set_read(self, notification_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE notifications SET is_read=1 WHERE notification_id=%s AND is_read=0",
                (int(notification_id),),
            )
            return cur.rowcount > 0
