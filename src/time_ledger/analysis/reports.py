"""Report aggregation over a user's time logs."""

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, datetime, time
from decimal import Decimal
from typing import Any, Optional

from rich.console import Console  # type: ignore[import-not-found]
from rich.table import Table  # type: ignore[import-not-found]

from time_ledger.core.clock import Clock, SystemClock
from time_ledger.core.filters import TimeLogFilters
from time_ledger.core.models import TimeLog, round_hours
from time_ledger.core.storage import StorageManager
from time_ledger.core.validation import parse_date_filter


@dataclass
class ReportData:
    """Hours of closed time logs folded three ways.

    Attributes:
        by_date: ``{date, total_hours}`` per calendar date, newest first
        by_project: ``{project_id, hours}`` per project
        by_client: ``{client_id, hours}`` per client
        start_date: Lower bound the report was built with, if any
        end_date: Upper bound the report was built with, if any
    """

    by_date: list[dict[str, Any]] = field(default_factory=list)
    by_project: list[dict[str, Any]] = field(default_factory=list)
    by_client: list[dict[str, Any]] = field(default_factory=list)
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    @property
    def total_hours(self) -> float:
        return float(round_hours(sum((Decimal(str(r["total_hours"])) for r in self.by_date), Decimal(0))))

    def is_empty(self) -> bool:
        return not self.by_date

    def to_dict(self) -> dict[str, Any]:
        """Convert to the JSON shape served by the API."""
        return {
            "by_date": self.by_date,
            "by_project": self.by_project,
            "by_client": self.by_client,
        }


class ReportAggregator:
    """Read-only aggregation of a user's time logs.

    Both queries only look at logs owned by the requesting user.
    """

    def __init__(self, storage: StorageManager, clock: Optional[Clock] = None):
        self.storage = storage
        self.clock = clock or SystemClock()

    def total_hours(self, user_id: int, filters: Optional[TimeLogFilters] = None) -> float:
        """Sum hours of the matching logs.

        When the most recently started matching log is still running, the time
        elapsed since its start counts too.

        Args:
            user_id: Requesting user
            filters: Optional project/client/date criteria

        Returns:
            Total hours rounded to two decimals
        """
        logs = self.storage.load_time_logs(owner_user_id=user_id)
        if filters is not None:
            logs = filters.apply(logs)

        total = sum((log.hours for log in logs if log.hours is not None), Decimal(0))

        # Logs come back newest start first
        if logs and logs[0].is_running:
            elapsed = (self.clock.now() - logs[0].start_time).total_seconds()
            total += Decimal(int(elapsed)) / Decimal(3600)

        return float(round_hours(total))

    def report(
        self,
        user_id: int,
        start_date: Any = None,
        end_date: Any = None,
    ) -> ReportData:
        """Group closed logs by date, project and client.

        Args:
            user_id: Requesting user
            start_date: Optional ``YYYY-MM-DD`` or ``date``; start of day inclusive
            end_date: Optional ``YYYY-MM-DD`` or ``date``; end of day inclusive

        Returns:
            ReportData with the three views

        Raises:
            ValidationFailed: If a date is malformed
        """
        start = start_date if isinstance(start_date, date) else parse_date_filter(start_date, "start_date")
        end = end_date if isinstance(end_date, date) else parse_date_filter(end_date, "end_date")

        lower = datetime.combine(start, time.min) if start else None
        upper = datetime.combine(end, time(23, 59, 59)) if end else None

        rows: dict[tuple[date, int, int], Decimal] = defaultdict(Decimal)
        for log in self.storage.load_time_logs(owner_user_id=user_id):
            if not self._in_window(log, lower, upper):
                continue
            rows[(log.start_time.date(), log.project_id, log.client_id)] += log.hours or Decimal(0)

        by_date: dict[date, Decimal] = {}
        by_project: dict[int, Decimal] = {}
        by_client: dict[int, Decimal] = {}
        for (day, project_id, client_id), hours in sorted(
            rows.items(), key=lambda item: (-item[0][0].toordinal(), item[0][1], item[0][2])
        ):
            by_date[day] = by_date.get(day, Decimal(0)) + hours
            by_project[project_id] = by_project.get(project_id, Decimal(0)) + hours
            by_client[client_id] = by_client.get(client_id, Decimal(0)) + hours

        return ReportData(
            by_date=[
                {"date": day.isoformat(), "total_hours": float(round_hours(hours))}
                for day, hours in by_date.items()
            ],
            by_project=[
                {"project_id": pid, "hours": float(round_hours(hours))}
                for pid, hours in by_project.items()
            ],
            by_client=[
                {"client_id": cid, "hours": float(round_hours(hours))}
                for cid, hours in by_client.items()
            ],
            start_date=start,
            end_date=end,
        )

    @staticmethod
    def _in_window(
        log: TimeLog, lower: Optional[datetime], upper: Optional[datetime]
    ) -> bool:
        if log.is_running:
            return False
        if lower is not None and log.start_time < lower:
            return False
        if upper is not None and log.start_time > upper:
            return False
        return True


class ReportPrinter:
    """Print report aggregations to the terminal."""

    def __init__(self, console: Optional[Console] = None):
        """Initialize report printer.

        Args:
            console: Rich console for output. Creates default if None.
        """
        self.console = console or Console()

    def print_report(self, report: ReportData, title: str = "Time Report Summary") -> None:
        """Display the three report views as tables."""
        if report.is_empty():
            self.console.print("[yellow]No completed time logs for this period[/yellow]")
            return

        self.console.print(f"\n[bold cyan]{title}[/bold cyan]")
        if report.start_date or report.end_date:
            self.console.print(
                f"[dim]{report.start_date or 'Beginning'} to {report.end_date or 'Present'}[/dim]"
            )
        self.console.print(f"Total: [bold]{report.total_hours:.2f} h[/bold]\n")

        self._print_table("By Date", ["Date", "Total Hours"], report.by_date, ["date", "total_hours"])
        self._print_table(
            "By Project", ["Project ID", "Hours"], report.by_project, ["project_id", "hours"]
        )
        self._print_table(
            "By Client", ["Client ID", "Hours"], report.by_client, ["client_id", "hours"]
        )

    def _print_table(
        self, title: str, headers: list[str], rows: list[dict[str, Any]], keys: list[str]
    ) -> None:
        table = Table(title=title, show_header=True, header_style="bold magenta")
        table.add_column(headers[0], style="cyan")
        table.add_column(headers[1], justify="right", style="green")
        for row in rows:
            table.add_row(str(row[keys[0]]), f"{row[keys[1]]:.2f}")
        self.console.print(table)
        self.console.print()
