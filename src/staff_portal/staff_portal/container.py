from __future__ import annotations

from dataclasses import dataclass

from .core.constants import DEFAULT_FEED_LIMIT, DEFAULT_NOTIFICATION_LIMIT, DEFAULT_POLL_SECONDS
from .database.connection import DBConfig, DatabaseConnection
from .leaves.mysql_leave_repository import MySQLLeaveRepository
from .leaves.service import LeaveService
from .notifications.dispatch import NotificationDispatcher
from .notifications.mysql_notification_repository import MySQLNotificationRepository
from .notifications.store import NotificationStore
from .users.mysql_division_repository import MySQLDivisionRepository
from .users.mysql_user_repository import MySQLUserRepository
from .users.service import AuthService, UserService


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection

    users_repo: MySQLUserRepository
    divisions_repo: MySQLDivisionRepository
    leaves_repo: MySQLLeaveRepository
    notifications_repo: MySQLNotificationRepository

    auth_service: AuthService
    user_service: UserService
    notification_store: NotificationStore
    notification_dispatcher: NotificationDispatcher
    leave_service: LeaveService


def build_container(*, db_config: dict, notification_settings: dict | None = None) -> Container:
    settings = notification_settings or {}
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    users_repo = MySQLUserRepository(conn)
    divisions_repo = MySQLDivisionRepository(conn)
    leaves_repo = MySQLLeaveRepository(conn)
    notifications_repo = MySQLNotificationRepository(conn)

    auth_service = AuthService(users_repo)
    user_service = UserService(users_repo, divisions_repo)
    notification_store = NotificationStore(
        notifications_repo,
        list_limit=int(settings.get("list_limit", DEFAULT_NOTIFICATION_LIMIT)),
        feed_limit=int(settings.get("feed_limit", DEFAULT_FEED_LIMIT)),
        poll_seconds=float(settings.get("poll_seconds", DEFAULT_POLL_SECONDS)),
    )
    notification_dispatcher = NotificationDispatcher(notification_store)
    leave_service = LeaveService(leaves_repo, users_repo, notification_dispatcher)

    return Container(
        conn=conn,
        users_repo=users_repo,
        divisions_repo=divisions_repo,
        leaves_repo=leaves_repo,
        notifications_repo=notifications_repo,
        auth_service=auth_service,
        user_service=user_service,
        notification_store=notification_store,
        notification_dispatcher=notification_dispatcher,
        leave_service=leave_service,
    )
