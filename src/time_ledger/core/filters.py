"""Filters shared by time-log listing and the total-hours query."""

from dataclasses import dataclass
from datetime import date
from typing import Any, Optional

from time_ledger.core.errors import ValidationFailed
from time_ledger.core.models import TimeLog
from time_ledger.core.validation import is_blank, parse_date_filter


def _parse_id(value: Any, field: str) -> Optional[int]:
    if is_blank(value):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationFailed.for_field(field, f"The {field} must be an integer.")


@dataclass
class TimeLogFilters:
    """Optional criteria narrowing a user's time logs.

    Attributes:
        project_id: Only logs of this project
        client_id: Only logs of this client
        start_date: Only logs whose start date is on or after this date
        end_date: Only logs whose end date is on or before this date; running
            logs have no end date and never match
    """

    project_id: Optional[int] = None
    client_id: Optional[int] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    @classmethod
    def from_params(
        cls,
        project_id: Any = None,
        client_id: Any = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
    ) -> "TimeLogFilters":
        """Build filters from raw request parameters.

        Raises:
            ValidationFailed: If an id is not an integer or a date is malformed
        """
        return cls(
            project_id=_parse_id(project_id, "project_id"),
            client_id=_parse_id(client_id, "client_id"),
            start_date=parse_date_filter(start_date, "start_date"),
            end_date=parse_date_filter(end_date, "end_date"),
        )

    def matches(self, log: TimeLog) -> bool:
        if self.project_id is not None and log.project_id != self.project_id:
            return False
        if self.client_id is not None and log.client_id != self.client_id:
            return False
        if self.start_date is not None and log.start_time.date() < self.start_date:
            return False
        if self.end_date is not None:
            if log.end_time is None or log.end_time.date() > self.end_date:
                return False
        return True

    def apply(self, logs: list[TimeLog]) -> list[TimeLog]:
        """Return the matching logs, preserving order."""
        return [log for log in logs if self.matches(log)]
