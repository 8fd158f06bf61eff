"""Daily over-hours notifications for Time Ledger."""

from time_ledger.notifications.markers import NotificationMarkerStore
from time_ledger.notifications.monitor import WorkHourMonitor
from time_ledger.notifications.notifier import EmailNotifier

__all__ = ["EmailNotifier", "NotificationMarkerStore", "WorkHourMonitor"]
