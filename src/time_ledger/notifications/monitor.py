"""Daily scan for users who reached the work-hour threshold."""

import logging
from collections import defaultdict
from datetime import date
from decimal import Decimal
from typing import Optional

from time_ledger.core.clock import Clock, SystemClock
from time_ledger.core.config import ConfigManager
from time_ledger.core.storage import StorageManager
from time_ledger.notifications.markers import NotificationMarkerStore
from time_ledger.notifications.notifier import EmailNotifier

logger = logging.getLogger(__name__)


class WorkHourMonitor:
    """Notify each user at most once per day when their hours reach the threshold."""

    def __init__(
        self,
        storage: StorageManager,
        config: ConfigManager,
        notifier: EmailNotifier,
        markers: Optional[NotificationMarkerStore] = None,
        clock: Optional[Clock] = None,
    ):
        self.storage = storage
        self.config = config
        self.notifier = notifier
        self.markers = markers or NotificationMarkerStore(
            storage.state_dir / "notifications.json"
        )
        self.clock = clock or SystemClock()

    @property
    def threshold(self) -> Decimal:
        return Decimal(str(self.config.get("notifications.threshold_hours", 8)))

    def hours_by_user(self, day: date) -> dict[int, Decimal]:
        """Sum stored hours of logs started on ``day``, per user.

        Running logs have no stored hours and add nothing.
        """
        totals: dict[int, Decimal] = defaultdict(Decimal)
        for log in self.storage.load_time_logs():
            if log.start_time.date() == day and log.hours is not None:
                totals[log.owner_user_id] += log.hours
        return dict(totals)

    def check(self, day: Optional[date] = None) -> list[int]:
        """Run the daily scan.

        Args:
            day: Day to scan. Today per the clock if None.

        Returns:
            Ids of users a notification was dispatched for in this run
        """
        if not self.config.get("notifications.enabled", True):
            logger.info("Notifications disabled, skipping work-hour check")
            return []

        day = day or self.clock.now().date()
        over = sorted(
            user_id for user_id, hours in self.hours_by_user(day).items() if hours >= self.threshold
        )
        if not over:
            logger.info(f"No users reached {self.threshold} hours on {day}")
            return []

        dispatched = []
        for user_id in over:
            if self.markers.is_marked(user_id, day):
                continue
            self.notifier.dispatch(user_id)
            self.markers.mark(user_id, day)
            dispatched.append(user_id)

        logger.info(f"Dispatched {len(dispatched)} work-hour notification(s) for {day}")
        return dispatched
