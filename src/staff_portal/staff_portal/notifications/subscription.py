from __future__ import annotations

import logging
import threading
from datetime import datetime
from typing import TYPE_CHECKING, Callable, Optional

from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.base import BaseScheduler

from ..core.exceptions import StoreError
from .model import NotificationSnapshot

if TYPE_CHECKING:
    from apscheduler.job import Job

    from .store import NotificationStore

logger = logging.getLogger(__name__)


class NotificationSubscription:
    """Live view of one user's notifications.

    start() registers an interval job on the store's APScheduler scheduler
    that polls every `interval` seconds and calls `on_change` with a fresh
    snapshot whenever the list or unread count differs from the last one
    delivered (and once on the first poll). Use it as a context manager, or
    call close(), to remove the job. Once close() has returned, `on_change`
    is never called again.
    """

    def __init__(
        self,
        store: "NotificationStore",
        *,
        user_id: int,
        on_change: Callable[[NotificationSnapshot], None],
        limit: int,
        interval: float,
        scheduler_factory: Callable[[], BaseScheduler],
    ):
        self._store = store
        self._user_id = user_id
        self._on_change = on_change
        self._limit = limit
        self._interval = interval
        self._scheduler_factory = scheduler_factory
        self._stop = threading.Event()
        # held while delivering; close() takes it so no delivery outlives close()
        self._lock = threading.RLock()
        self._job: Optional["Job"] = None
        self._last: Optional[NotificationSnapshot] = None

    @property
    def user_id(self) -> int:
        return self._user_id

    @property
    def job_id(self) -> str:
        return f"notifications-user-{self._user_id}-{id(self):x}"

    @property
    def closed(self) -> bool:
        return self._stop.is_set()

    @property
    def scheduled(self) -> bool:
        return self._job is not None

    @property
    def last_snapshot(self) -> Optional[NotificationSnapshot]:
        return self._last

    def start(self) -> "NotificationSubscription":
        with self._lock:
            if self.closed:
                raise RuntimeError("Subscription is closed")
            if self._job is None:
                self._job = self._scheduler_factory().add_job(
                    self._poll,
                    trigger="interval",
                    seconds=self._interval,
                    id=self.job_id,
                    next_run_time=datetime.now(),
                    max_instances=1,
                    coalesce=True,
                )
        return self

    def refresh(self) -> Optional[NotificationSnapshot]:
        """Poll once; returns the snapshot delivered to on_change, or None if nothing was delivered."""
        if self.closed:
            return None
        try:
            snapshot = self._store.snapshot(self._user_id, limit=self._limit)
        except StoreError:
            logger.warning("Notification poll failed for user %s", self._user_id, exc_info=True)
            return None

        with self._lock:
            # close() may have run while the store call was in flight
            if self.closed or snapshot == self._last:
                return None
            self._last = snapshot
            self._on_change(snapshot)
        return snapshot

    def _poll(self) -> None:
        try:
            self.refresh()
        except Exception:
            logger.exception("Notification listener for user %s failed; unsubscribing", self._user_id)
            self.close()

    def close(self) -> None:
        with self._lock:
            if self._stop.is_set():
                return
            self._stop.set()
            job, self._job = self._job, None

        if job is not None:
            try:
                job.remove()
            except JobLookupError:
                logger.debug("Job %s already gone", job.id)

    def __enter__(self) -> "NotificationSubscription":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
