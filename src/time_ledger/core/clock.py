"""Clock abstraction so "now" is injectable and deterministic under test."""

from datetime import datetime, timedelta
from typing import Optional, Protocol


class Clock(Protocol):
    """Anything that can tell the current time."""

    def now(self) -> datetime:
        """Return the current local time (naive)."""
        ...


class SystemClock:
    """Wall clock, truncated to whole seconds like the stored timestamps."""

    def now(self) -> datetime:
        return datetime.now().replace(microsecond=0)


class FixedClock:
    """Settable clock for tests.

    Example:
        >>> clock = FixedClock(datetime(2025, 6, 1, 12, 0))
        >>> clock.advance(minutes=90)
        >>> clock.now()
        datetime.datetime(2025, 6, 1, 13, 30)
    """

    def __init__(self, current: Optional[datetime] = None):
        self.current = current or datetime(2025, 6, 1, 12, 0, 0)

    def now(self) -> datetime:
        return self.current

    def set(self, current: datetime) -> None:
        self.current = current

    def advance(self, **kwargs: float) -> None:
        """Move the clock forward by a ``timedelta(**kwargs)``."""
        self.current = self.current + timedelta(**kwargs)
