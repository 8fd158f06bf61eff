"""APScheduler integration for the daily work-hour check."""

import logging
from typing import Any, Optional

from apscheduler.schedulers.blocking import BlockingScheduler  # type: ignore[import-untyped]
from apscheduler.triggers.cron import CronTrigger  # type: ignore[import-untyped]

from time_ledger.core.config import ConfigManager
from time_ledger.notifications.monitor import WorkHourMonitor

logger = logging.getLogger(__name__)

JOB_ID = "work_hour_check"


def parse_check_time(value: str) -> tuple[int, int]:
    """Split ``HH:MM`` into hour and minute.

    Raises:
        ValueError: If the value is not a valid time of day
    """
    hour_text, _, minute_text = value.partition(":")
    hour, minute = int(hour_text), int(minute_text)
    if not (0 <= hour <= 23 and 0 <= minute <= 59):
        raise ValueError(f"Invalid check time: {value}")
    return hour, minute


def build_scheduler(
    monitor: WorkHourMonitor,
    config: ConfigManager,
    scheduler: Optional[Any] = None,
) -> Any:
    """Register the daily check on a scheduler.

    Args:
        monitor: Monitor whose ``check`` runs once a day
        config: Configuration with ``notifications.check_time``
        scheduler: Scheduler to use. A BlockingScheduler is created if None.

    Returns:
        The scheduler, not yet started
    """
    scheduler = scheduler or BlockingScheduler()
    hour, minute = parse_check_time(config.get("notifications.check_time", "23:00"))

    if scheduler.get_job(JOB_ID):
        scheduler.remove_job(JOB_ID)

    scheduler.add_job(
        monitor.check,
        trigger=CronTrigger(hour=hour, minute=minute),
        id=JOB_ID,
        name="Daily work-hour check",
        replace_existing=True,
        max_instances=1,
        coalesce=True,
    )
    logger.info(f"Scheduled work-hour check daily at {hour:02d}:{minute:02d}")
    return scheduler


def run_scheduler(monitor: WorkHourMonitor, config: ConfigManager) -> None:
    """Run the daily check until interrupted.

    Note:
        This function blocks until the process is stopped.
    """
    scheduler = build_scheduler(monitor, config)
    try:
        scheduler.start()
    except (KeyboardInterrupt, SystemExit):
        logger.info("Scheduler stopped")
    finally:
        if scheduler.running:
            scheduler.shutdown(wait=False)
        monitor.notifier.shutdown()
