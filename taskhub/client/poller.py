# taskhub/client/poller.py
"""
Keeps a NotificationStore in sync with the server by polling the unread
count on a fixed interval
"""

import logging
from datetime import datetime
from typing import Optional

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

from taskhub.client.api import TaskHubClient
from taskhub.client.store import NotificationStore
from taskhub.config import settings

logger = logging.getLogger(__name__)


class NotificationPoller:
    def __init__(
        self,
        client: TaskHubClient,
        store: NotificationStore,
        interval_seconds: Optional[int] = None,
    ):
        self.client = client
        self.store = store
        self.interval_seconds = interval_seconds or settings.CLIENT_REFRESH_SECONDS
        self.scheduler: Optional[BackgroundScheduler] = None

    @property
    def is_running(self) -> bool:
        return self.scheduler is not None and self.scheduler.running

    def refresh(self) -> Optional[int]:
        """Fetch the unread count into the store; a failed fetch leaves it untouched"""
        count = self.client.get_unread_count()
        if count is None:
            return None
        self.store.set_unread_count(count)
        return count

    def mark_as_read(self, notification_id: int) -> bool:
        if self.client.mark_as_read(notification_id) is None:
            return False
        self.store.decrement()
        return True

    def mark_all_as_read(self) -> bool:
        if self.client.mark_all_as_read() is None:
            return False
        self.store.clear()
        return True

    def start(self):
        if self.is_running:
            return
        self.scheduler = BackgroundScheduler()
        self.scheduler.add_job(
            self.refresh,
            trigger=IntervalTrigger(seconds=self.interval_seconds),
            id="refresh_unread_count",
            name="Refresh Unread Notification Count",
            next_run_time=datetime.now(),
            replace_existing=True,
        )
        self.scheduler.start()
        logger.info(f"Notification poller started (every {self.interval_seconds}s)")

    def stop(self):
        if self.is_running:
            self.scheduler.shutdown(wait=False)
            logger.info("Notification poller stopped")
        self.scheduler = None
