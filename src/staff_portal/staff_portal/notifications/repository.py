from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Notification, NotificationInput


class NotificationRepository(Protocol):
    """Notification persistence. Implementations raise StoreError on backend failures."""

    def insert(self, notification: NotificationInput) -> int:
        raise NotImplementedError

    def get(self, notification_id: int) -> Optional[Notification]:
        raise NotImplementedError

    def list_for_user(self, user_id: int, *, limit: int = 20) -> Sequence[Notification]:
        """Newest first."""

        raise NotImplementedError

    def count_unread(self, user_id: int) -> int:
        raise NotImplementedError

    def list_unread_ids(self, user_id: int) -> Sequence[int]:
        raise NotImplementedError

    def set_read(self, notification_id: int) -> bool:
        raise NotImplementedError
