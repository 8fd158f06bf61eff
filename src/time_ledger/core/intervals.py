"""Interval arithmetic for the time-log timeline.

A time log is the half-open interval ``[start_time, end_time)``. A running log
has no end and is treated as unbounded, because "now" keeps moving while it
runs.
"""

from collections.abc import Iterable
from datetime import datetime
from typing import Optional

from time_ledger.core.models import TimeLog


def overlaps(
    start_a: datetime,
    end_a: Optional[datetime],
    start_b: datetime,
    end_b: Optional[datetime],
) -> bool:
    """Check whether two intervals share any instant.

    ``None`` as an end means open-ended. Touching intervals (one ends exactly
    when the other starts) do not overlap.

    Example:
        >>> t = datetime(2025, 6, 1)
        >>> overlaps(t.replace(hour=9), t.replace(hour=10), t.replace(hour=10), None)
        False
    """
    a_before_b_ends = end_b is None or start_a < end_b
    b_before_a_ends = end_a is None or start_b < end_a
    return a_before_b_ends and b_before_a_ends


def find_overlap(
    start_time: datetime,
    end_time: Optional[datetime],
    logs: Iterable[TimeLog],
    exclude_id: Optional[int] = None,
) -> Optional[TimeLog]:
    """Return the first log overlapping the candidate interval.

    Args:
        start_time: Candidate start
        end_time: Candidate end (None for a running candidate)
        logs: Logs of a single user to check against
        exclude_id: Id of the log being updated, never checked against itself

    Returns:
        An overlapping log or None
    """
    for log in logs:
        if exclude_id is not None and log.id == exclude_id:
            continue
        if overlaps(start_time, end_time, log.start_time, log.end_time):
            return log
    return None


def running_log(logs: Iterable[TimeLog]) -> Optional[TimeLog]:
    """Return the running log among ``logs``, if any."""
    for log in logs:
        if log.is_running:
            return log
    return None
