from __future__ import annotations

import logging
import threading
from dataclasses import replace
from typing import Callable, Optional

from apscheduler.schedulers.background import BackgroundScheduler

from ..common.datetime_utils import now_local
from ..core.constants import DEFAULT_FEED_LIMIT, DEFAULT_NOTIFICATION_LIMIT, DEFAULT_POLL_SECONDS
from ..core.exceptions import StoreError, ValidationError
from .model import Notification, NotificationInput, NotificationSnapshot
from .repository import NotificationRepository
from .subscription import NotificationSubscription

logger = logging.getLogger(__name__)


class NotificationStore:
    """Read/write access to notification records.

    Delivery is best-effort: store failures on create/read/mark are logged and
    swallowed so they never fail the workflow action that caused them.
    """

    def __init__(
        self,
        notifications: NotificationRepository,
        *,
        clock: Callable = now_local,
        list_limit: int = DEFAULT_NOTIFICATION_LIMIT,
        feed_limit: int = DEFAULT_FEED_LIMIT,
        poll_seconds: float = DEFAULT_POLL_SECONDS,
    ):
        self._notifications = notifications
        self._clock = clock
        self._list_limit = int(list_limit)
        self._feed_limit = int(feed_limit)
        self._poll_seconds = float(poll_seconds)
        self._scheduler: Optional[BackgroundScheduler] = None
        self._scheduler_lock = threading.Lock()

    def create(self, notification: NotificationInput) -> None:
        if not notification.user_id:
            raise ValidationError("Notification recipient is required")
        if not (notification.title or "").strip() or not (notification.message or "").strip():
            raise ValidationError("Notification title and message are required")

        record = notification
        if record.created_at is None:
            record = replace(record, created_at=self._clock())

        try:
            notification_id = self._notifications.insert(record)
        except StoreError:
            logger.exception(
                "Error creating %s notification for user %s", record.type.value, record.user_id
            )
            return
        logger.debug("Created notification %s for user %s", notification_id, record.user_id)

    def list_for_user(self, user_id: int, limit: Optional[int] = None) -> list[Notification]:
        try:
            return list(self._notifications.list_for_user(int(user_id), limit=int(limit or self._list_limit)))
        except StoreError:
            logger.exception("Error fetching notifications for user %s", user_id)
            return []

    def unread_count(self, user_id: int) -> int:
        try:
            return self._notifications.count_unread(int(user_id))
        except StoreError:
            logger.exception("Error counting unread notifications for user %s", user_id)
            return 0

    def mark_read(self, notification_id: int) -> None:
        try:
            changed = self._notifications.set_read(int(notification_id))
        except StoreError:
            logger.exception("Error marking notification %s as read", notification_id)
            return
        if not changed:
            logger.debug("Notification %s already read or missing", notification_id)

    def mark_all_read_for_user(self, user_id: int) -> None:
        """One independent update per unread record; a failed update is logged and skipped."""
        try:
            unread_ids = list(self._notifications.list_unread_ids(int(user_id)))
        except StoreError:
            logger.exception("Error loading unread notifications for user %s", user_id)
            return

        failed = 0
        for notification_id in unread_ids:
            try:
                self._notifications.set_read(notification_id)
            except StoreError:
                failed += 1
                logger.warning("Could not mark notification %s as read", notification_id, exc_info=True)

        if failed:
            logger.warning("Marked %d of %d notifications read for user %s", len(unread_ids) - failed, len(unread_ids), user_id)

    def owner_of(self, notification_id: int) -> Optional[int]:
        """Recipient id of a notification, or None when it does not exist. Raises StoreError."""
        notification = self._notifications.get(int(notification_id))
        return notification.user_id if notification else None

    def snapshot(self, user_id: int, limit: Optional[int] = None) -> NotificationSnapshot:
        """Current feed state for a user. Unlike the list helpers this raises StoreError."""
        items = self._notifications.list_for_user(int(user_id), limit=int(limit or self._feed_limit))
        unread = self._notifications.count_unread(int(user_id))
        return NotificationSnapshot(items=tuple(items), unread_count=int(unread))

    def subscribe(
        self,
        user_id: int,
        on_change: Callable[[NotificationSnapshot], None],
        *,
        limit: Optional[int] = None,
        interval: Optional[float] = None,
        start: bool = True,
    ) -> NotificationSubscription:
        subscription = NotificationSubscription(
            self,
            user_id=int(user_id),
            on_change=on_change,
            limit=int(limit or self._feed_limit),
            interval=float(interval if interval is not None else self._poll_seconds),
            scheduler_factory=self._live_scheduler,
        )
        if start:
            subscription.start()
        return subscription

    def _live_scheduler(self) -> BackgroundScheduler:
        """Shared scheduler running every subscription's poll job; started on first use."""
        with self._scheduler_lock:
            if self._scheduler is None:
                self._scheduler = BackgroundScheduler(daemon=True)
                self._scheduler.start()
                logger.info("Notification poll scheduler started")
            return self._scheduler

    def shutdown(self) -> None:
        """Stop the poll scheduler; later subscriptions start a new one."""
        with self._scheduler_lock:
            scheduler, self._scheduler = self._scheduler, None
        if scheduler is not None:
            scheduler.shutdown(wait=False)
            logger.info("Notification poll scheduler stopped")
