"""Core time tracking engine.

Keeps each user's timeline consistent: at most one running time log, no two
overlapping intervals, timestamps never in the future, and ``hours`` always
derived from the stored start/end pair.
"""

import logging
from datetime import datetime
from typing import Any, Optional

from time_ledger.core.clock import Clock, SystemClock
from time_ledger.core.errors import Conflict, ValidationFailed
from time_ledger.core.filters import TimeLogFilters
from time_ledger.core.intervals import find_overlap, running_log
from time_ledger.core.models import TimeLog, TimeLogTag
from time_ledger.core.ownership import OwnershipGuard
from time_ledger.core.storage import StorageManager
from time_ledger.core.validation import is_blank, parse_timestamp

logger = logging.getLogger(__name__)

OVERLAP_MESSAGE = "Time log overlaps with an existing entry."


def coerce_tag(value: Any) -> Optional[TimeLogTag]:
    """Map a requested tag to a TimeLogTag, or None when it is not a known tag."""
    if isinstance(value, TimeLogTag):
        return value
    if isinstance(value, str) and value in TimeLogTag.values():
        return TimeLogTag(value)
    return None


class TimeTracker:
    """Core time tracking functionality."""

    def __init__(self, storage: Optional[StorageManager] = None, clock: Optional[Clock] = None):
        """Initialize time tracker.

        Args:
            storage: Storage manager instance. Creates default if None.
            clock: Source of "now". Wall clock if None.
        """
        self.storage = storage or StorageManager()
        self.clock = clock or SystemClock()
        self.guard = OwnershipGuard(self.storage)

    def _check_not_future(self, value: datetime, field: str, now: datetime) -> None:
        if value > now:
            label = "Start" if field == "start_time" else "End"
            raise ValidationFailed.for_field(field, f"{label} time cannot be in the future.")

    def _check_order(self, start_time: datetime, end_time: datetime) -> None:
        if end_time < start_time:
            raise ValidationFailed.for_field("end_time", "End time cannot be before start time.")

    def _check_overlap(
        self,
        logs: list[TimeLog],
        start_time: datetime,
        end_time: Optional[datetime],
        exclude_id: Optional[int] = None,
    ) -> None:
        clash = find_overlap(start_time, end_time, logs, exclude_id=exclude_id)
        if clash is not None:
            raise Conflict(OVERLAP_MESSAGE)

    # Timer state machine

    def start(
        self,
        user_id: int,
        project_id: int,
        description: Optional[str] = None,
        tag: Any = None,
    ) -> TimeLog:
        """Start a timer on a project.

        Args:
            user_id: Requesting user
            project_id: Project to track
            description: Optional description
            tag: Optional tag, ignored unless billable/non-billable

        Returns:
            The new running time log

        Raises:
            NotFound: If the project is not the user's
            Conflict: If a timer is already running
        """
        project = self.guard.project(project_id, user_id)

        with self.storage.user_lock(user_id):
            logs = self.storage.load_time_logs(owner_user_id=user_id)
            current = running_log(logs)
            if current is not None and current.project_id == project.id:
                raise Conflict(
                    "You have an ongoing time log for this project. "
                    "Please end it before starting a new one."
                )
            if current is not None:
                raise Conflict(
                    "You have an ongoing time log for another project. "
                    "Please end it before starting a new one."
                )

            now = self.clock.now()
            self._check_overlap(logs, now, None)

            time_log = TimeLog(
                owner_user_id=user_id,
                project_id=project.id,
                client_id=project.client_id,
                start_time=now,
                description=description or "",
                tag=coerce_tag(tag),
                created_at=now,
                updated_at=now,
            )
            self.storage.save_time_log(time_log)

        logger.info("User %s started time log %s on project %s", user_id, time_log.id, project.id)
        return time_log

    def stop(self, user_id: int, project_id: int) -> TimeLog:
        """Stop the running timer of a project.

        Refused when another log of the user starts after the running one,
        because closing the timer at "now" would swallow that later entry.

        Raises:
            NotFound: If the project is not the user's
            Conflict: If no timer runs for the project, or a later log exists
        """
        project = self.guard.project(project_id, user_id)

        with self.storage.user_lock(user_id):
            logs = self.storage.load_time_logs(owner_user_id=user_id)
            current = next(
                (log for log in logs if log.project_id == project.id and log.is_running), None
            )
            if current is None:
                raise Conflict("No ongoing time log found for this project.")

            later = [
                log for log in logs if log.id != current.id and log.start_time > current.start_time
            ]
            if later:
                raise Conflict(
                    "You have another time log after this one. "
                    "Please stop this time log manually."
                )

            current.end_time = self.clock.now()
            current.updated_at = current.end_time
            self._check_order(current.start_time, current.end_time)
            self.storage.save_time_log(current)

        logger.info("User %s stopped time log %s (%s h)", user_id, current.id, current.hours)
        return current

    def status(self, user_id: int) -> Optional[TimeLog]:
        """Get the user's running time log, if any."""
        return running_log(self.storage.load_time_logs(owner_user_id=user_id))

    # Manual entries

    def store(
        self,
        user_id: int,
        project_id: Any,
        start_time: Any,
        end_time: Any = None,
        description: Optional[str] = None,
        tag: Any = None,
    ) -> TimeLog:
        """Create a time log from explicit times.

        Without ``end_time`` the log is created running.

        Raises:
            ValidationFailed: Missing/unparseable input, future or inverted times
            NotFound: If the project is not the user's
            Conflict: If the interval overlaps another log of the user
        """
        if is_blank(project_id):
            raise ValidationFailed.for_field("project_id", "We need to know the project ID!")
        try:
            project_id = int(project_id)
        except (TypeError, ValueError):
            raise ValidationFailed.for_field("project_id", "The project ID must be an integer.")
        if is_blank(start_time):
            raise ValidationFailed.for_field("start_time", "We need to know the start time!")

        start = parse_timestamp(start_time, "start_time")
        end = None if is_blank(end_time) else parse_timestamp(end_time, "end_time")

        project = self.guard.project(project_id, user_id)

        now = self.clock.now()
        self._check_not_future(start, "start_time", now)
        if end is not None:
            self._check_order(start, end)
            self._check_not_future(end, "end_time", now)

        with self.storage.user_lock(user_id):
            logs = self.storage.load_time_logs(owner_user_id=user_id)
            self._check_overlap(logs, start, end)

            time_log = TimeLog(
                owner_user_id=user_id,
                project_id=project.id,
                client_id=project.client_id,
                start_time=start,
                end_time=end,
                description=description or "",
                tag=coerce_tag(tag),
                created_at=now,
                updated_at=now,
            )
            self.storage.save_time_log(time_log)

        logger.info("User %s stored time log %s on project %s", user_id, time_log.id, project.id)
        return time_log

    def update(
        self,
        user_id: int,
        time_log_id: int,
        start_time: Any = None,
        end_time: Any = None,
        description: Optional[str] = None,
        tag: Any = None,
    ) -> TimeLog:
        """Update a time log leniently.

        Only non-blank arguments change the record. An unknown tag is ignored.
        The overlap check runs on the resulting start/end pair.

        Raises:
            NotFound: If the log is not the user's
            ValidationFailed: Unparseable, future or inverted times
            Conflict: If the new interval overlaps another log of the user
        """
        with self.storage.user_lock(user_id):
            time_log = self.guard.time_log(time_log_id, user_id)
            now = self.clock.now()

            new_start = time_log.start_time
            new_end = time_log.end_time

            if not is_blank(start_time):
                new_start = parse_timestamp(start_time, "start_time")
                self._check_not_future(new_start, "start_time", now)

            if not is_blank(end_time):
                new_end = parse_timestamp(end_time, "end_time")
                self._check_order(new_start, new_end)
                self._check_not_future(new_end, "end_time", now)
            elif new_end is not None:
                self._check_order(new_start, new_end)

            if new_start != time_log.start_time or new_end != time_log.end_time:
                logs = self.storage.load_time_logs(owner_user_id=user_id)
                self._check_overlap(logs, new_start, new_end, exclude_id=time_log.id)

            time_log.start_time = new_start
            time_log.end_time = new_end
            if not is_blank(description):
                time_log.description = description  # type: ignore[assignment]
            new_tag = coerce_tag(tag)
            if new_tag is not None:
                time_log.tag = new_tag
            time_log.updated_at = now

            self.storage.save_time_log(time_log)

        logger.info("User %s updated time log %s", user_id, time_log.id)
        return time_log

    # Queries

    def get(self, user_id: int, time_log_id: int) -> TimeLog:
        """Get one of the user's time logs.

        Raises:
            NotFound: If the log is not the user's
        """
        return self.guard.time_log(time_log_id, user_id)

    def get_time_logs(self, user_id: int, filters: Optional[TimeLogFilters] = None) -> list[TimeLog]:
        """List the user's time logs, most recent start first."""
        logs = self.storage.load_time_logs(owner_user_id=user_id)
        if filters is not None:
            logs = filters.apply(logs)
        return logs

    def delete(self, user_id: int, time_log_id: int) -> None:
        """Delete one of the user's time logs.

        Raises:
            NotFound: If the log is not the user's
        """
        with self.storage.user_lock(user_id):
            time_log = self.guard.time_log(time_log_id, user_id)
            self.storage.delete_time_log(time_log.id)
        logger.info("User %s deleted time log %s", user_id, time_log_id)
