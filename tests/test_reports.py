"""Tests for report aggregation."""

from datetime import date, datetime

import pytest  # type: ignore[import-not-found]
from rich.console import Console  # type: ignore[import-not-found]

from time_ledger.analysis.reports import ReportAggregator, ReportData, ReportPrinter
from time_ledger.core.clock import FixedClock
from time_ledger.core.errors import ValidationFailed
from time_ledger.core.filters import TimeLogFilters
from time_ledger.core.models import Client, Project, User
from time_ledger.core.storage import StorageManager
from time_ledger.core.tracker import TimeTracker


@pytest.fixture
def seeded(
    storage: StorageManager,
    tracker: TimeTracker,
    clock: FixedClock,
    user: User,
    project: Project,
    second_project: Project,
) -> TimeTracker:
    """Two days of closed logs: 3 h on June 1st, 2 h on June 2nd."""
    clock.set(datetime(2025, 6, 3, 12, 0))
    tracker.store(user.id, project.id, "2025-06-01T09:00:00", "2025-06-01T11:00:00")
    tracker.store(user.id, second_project.id, "2025-06-01T13:00:00", "2025-06-01T14:00:00")
    tracker.store(user.id, project.id, "2025-06-02T09:00:00", "2025-06-02T11:00:00")
    return tracker


class TestReport:
    """Test grouped report."""

    def test_groups_by_date_project_and_client(
        self,
        storage: StorageManager,
        seeded: TimeTracker,
        user: User,
        client: Client,
        project: Project,
        second_project: Project,
    ) -> None:
        report = ReportAggregator(storage).report(user.id)

        assert report.by_date == [
            {"date": "2025-06-02", "total_hours": 2.0},
            {"date": "2025-06-01", "total_hours": 3.0},
        ]
        assert report.by_project == [
            {"project_id": project.id, "hours": 4.0},
            {"project_id": second_project.id, "hours": 1.0},
        ]
        assert report.by_client == [{"client_id": client.id, "hours": 5.0}]
        assert report.total_hours == 5.0

    def test_window_is_inclusive_by_day(
        self, storage: StorageManager, seeded: TimeTracker, user: User
    ) -> None:
        report = ReportAggregator(storage).report(user.id, "2025-06-02", "2025-06-02")
        assert report.by_date == [{"date": "2025-06-02", "total_hours": 2.0}]

        report = ReportAggregator(storage).report(user.id, end_date=date(2025, 6, 1))
        assert [row["date"] for row in report.by_date] == ["2025-06-01"]
        assert report.end_date == date(2025, 6, 1)

    def test_running_logs_excluded(
        self,
        storage: StorageManager,
        seeded: TimeTracker,
        clock: FixedClock,
        user: User,
        project: Project,
    ) -> None:
        seeded.start(user.id, project.id)
        clock.advance(hours=1)
        report = ReportAggregator(storage, clock).report(user.id)
        assert report.total_hours == 5.0

    def test_other_users_not_included(
        self, storage: StorageManager, seeded: TimeTracker, other_user: User
    ) -> None:
        report = ReportAggregator(storage).report(other_user.id)
        assert report.is_empty()
        assert report.to_dict() == {"by_date": [], "by_project": [], "by_client": []}

    def test_bad_date(self, storage: StorageManager, user: User) -> None:
        with pytest.raises(ValidationFailed):
            ReportAggregator(storage).report(user.id, "2025-13-01")


class TestTotalHours:
    """Test total-hours query."""

    def test_sum_of_closed_logs(
        self, storage: StorageManager, seeded: TimeTracker, clock: FixedClock, user: User
    ) -> None:
        assert ReportAggregator(storage, clock).total_hours(user.id) == 5.0

    def test_with_filters(
        self,
        storage: StorageManager,
        seeded: TimeTracker,
        clock: FixedClock,
        user: User,
        second_project: Project,
    ) -> None:
        aggregator = ReportAggregator(storage, clock)
        assert aggregator.total_hours(user.id, TimeLogFilters(project_id=second_project.id)) == 1.0
        assert (
            aggregator.total_hours(user.id, TimeLogFilters.from_params(start_date="2025-06-02"))
            == 2.0
        )

    def test_running_log_counts_elapsed_time(
        self,
        storage: StorageManager,
        tracker: TimeTracker,
        clock: FixedClock,
        user: User,
        project: Project,
    ) -> None:
        """A timer running for 90 minutes adds 1.5 hours."""
        tracker.start(user.id, project.id)
        clock.advance(minutes=90)
        assert ReportAggregator(storage, clock).total_hours(user.id) == 1.5

    def test_no_logs(self, storage: StorageManager, user: User) -> None:
        assert ReportAggregator(storage).total_hours(user.id) == 0.0


class TestReportPrinter:
    """Test terminal output."""

    def test_print_report(self, storage: StorageManager, seeded: TimeTracker, user: User) -> None:
        console = Console(record=True, width=100)
        ReportPrinter(console).print_report(ReportAggregator(storage).report(user.id))

        output = console.export_text()
        assert "By Date" in output
        assert "2025-06-02" in output
        assert "5.00" in output

    def test_print_empty_report(self) -> None:
        console = Console(record=True)
        ReportPrinter(console).print_report(ReportData())
        assert "No completed time logs" in console.export_text()
