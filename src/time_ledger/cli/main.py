"""Main CLI application."""

from datetime import date, datetime
from pathlib import Path
from typing import Optional

import click
from rich.table import Table

from time_ledger import __version__
from time_ledger.analysis.reports import ReportAggregator, ReportPrinter
from time_ledger.cli.api_commands import api
from time_ledger.cli.common import console, fail, get_config, get_storage
from time_ledger.cli.config_commands import config
from time_ledger.core.accounts import AccountManager
from time_ledger.core.errors import TimeLedgerError
from time_ledger.core.filters import TimeLogFilters
from time_ledger.core.logging_config import setup_logging
from time_ledger.core.tracker import TimeTracker
from time_ledger.export import get_renderer
from time_ledger.notifications import EmailNotifier, WorkHourMonitor


def format_datetime(dt: Optional[datetime]) -> str:
    """Format datetime for display."""
    return dt.strftime("%Y-%m-%d %H:%M:%S") if dt else "running"


@click.group()
@click.version_option(version=__version__)
@click.option("--config", "config_path", help="Path to config file", type=click.Path())
@click.option("--data-dir", help="Custom data directory", type=click.Path())
@click.option("--no-color", is_flag=True, help="Disable colored output")
@click.pass_context
def cli(
    ctx: click.Context, config_path: Optional[str], data_dir: Optional[str], no_color: bool
) -> None:
    """Time Ledger - multi-tenant time tracking.

    Serve the API, administer users, print and export reports, and run the
    daily work-hour notification.
    """
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    ctx.obj["data_dir"] = data_dir

    if no_color:
        console.no_color = True


cli.add_command(api)
cli.add_command(config)


# ============================================================================
# Users
# ============================================================================


@cli.group()
def user() -> None:
    """Manage user accounts."""
    pass


@user.command("create")
@click.argument("name")
@click.argument("email")
@click.option("--password", prompt=True, hide_input=True, confirmation_prompt=True)
@click.pass_context
def user_create(ctx: click.Context, name: str, email: str, password: str) -> None:
    """Register a new user.

    Example:
        time-ledger user create "Ada Lovelace" ada@example.com
    """
    try:
        account = AccountManager(get_storage(ctx)).register(name, email, password)
    except TimeLedgerError as e:
        fail(e.message)
        return

    console.print(f"[green]✓[/green] Created user {account.id}: {account.email}")


@user.command("list")
@click.pass_context
def user_list(ctx: click.Context) -> None:
    """List registered users."""
    users = get_storage(ctx).load_users()
    if not users:
        console.print("[yellow]No users registered[/yellow]")
        return

    table = Table(title="Users")
    table.add_column("ID", style="cyan", justify="right")
    table.add_column("Name")
    table.add_column("Email", style="green")
    table.add_column("Created", style="dim")
    for account in users:
        table.add_row(str(account.id), account.name, account.email, format_datetime(account.created_at))
    console.print(table)


# ============================================================================
# Time logs
# ============================================================================


@cli.command()
@click.option("-u", "--user-id", type=int, required=True, help="Owner of the time logs")
@click.option("-n", "--count", default=10, help="Number of time logs to show")
@click.option("-p", "--project-id", help="Filter by project")
@click.option("-c", "--client-id", help="Filter by client")
@click.option("--from", "from_date", help="Start date (YYYY-MM-DD)")
@click.option("--to", "to_date", help="End date (YYYY-MM-DD)")
@click.pass_context
def log(
    ctx: click.Context,
    user_id: int,
    count: int,
    project_id: Optional[str],
    client_id: Optional[str],
    from_date: Optional[str],
    to_date: Optional[str],
) -> None:
    """Show a user's time logs, most recent first.

    Example:
        time-ledger log -u 1 --from 2025-06-01
    """
    tracker = TimeTracker(get_storage(ctx))
    try:
        filters = TimeLogFilters.from_params(project_id, client_id, from_date, to_date)
    except TimeLedgerError as e:
        fail(e.message)
        return

    logs = tracker.get_time_logs(user_id, filters)[:count]
    if not logs:
        console.print("[yellow]No time logs found[/yellow]")
        return

    table = Table(title=f"Time logs of user {user_id}")
    table.add_column("ID", style="cyan", justify="right")
    table.add_column("Project", justify="right")
    table.add_column("Client", justify="right")
    table.add_column("Start")
    table.add_column("End")
    table.add_column("Hours", justify="right", style="green")
    table.add_column("Tag", style="magenta")
    table.add_column("Description", style="dim")
    for entry in logs:
        table.add_row(
            str(entry.id),
            str(entry.project_id),
            str(entry.client_id),
            format_datetime(entry.start_time),
            format_datetime(entry.end_time),
            str(entry.hours) if entry.hours is not None else "-",
            entry.tag.value if entry.tag else "",
            entry.description,
        )
    console.print(table)


# ============================================================================
# Reports
# ============================================================================


@cli.group()
def report() -> None:
    """Print or export reports."""
    pass


@report.command("show")
@click.option("-u", "--user-id", type=int, required=True, help="User to report on")
@click.option("--from", "from_date", help="Start date (YYYY-MM-DD)")
@click.option("--to", "to_date", help="End date (YYYY-MM-DD)")
@click.pass_context
def report_show(
    ctx: click.Context, user_id: int, from_date: Optional[str], to_date: Optional[str]
) -> None:
    """Print hours by date, project and client.

    Example:
        time-ledger report show -u 1 --from 2025-06-01 --to 2025-06-30
    """
    try:
        data = ReportAggregator(get_storage(ctx)).report(user_id, from_date, to_date)
    except TimeLedgerError as e:
        fail(e.message)
        return

    ReportPrinter(console).print_report(data)


@report.command("export")
@click.option("-u", "--user-id", type=int, required=True, help="User to report on")
@click.option(
    "-f",
    "--format",
    "format_name",
    type=click.Choice(["markdown", "excel"]),
    help="Document format (default: from config)",
)
@click.option("-o", "--output", type=click.Path(), help="Output file (default: report.<ext>)")
@click.option("--from", "from_date", help="Start date (YYYY-MM-DD)")
@click.option("--to", "to_date", help="End date (YYYY-MM-DD)")
@click.pass_context
def report_export(
    ctx: click.Context,
    user_id: int,
    format_name: Optional[str],
    output: Optional[str],
    from_date: Optional[str],
    to_date: Optional[str],
) -> None:
    """Write the report to a Markdown or Excel document.

    Example:
        time-ledger report export -u 1 -f excel -o june.xlsx --from 2025-06-01
    """
    config_mgr = get_config(ctx)
    try:
        data = ReportAggregator(get_storage(ctx)).report(user_id, from_date, to_date)
    except TimeLedgerError as e:
        fail(e.message)
        return

    renderer = get_renderer(format_name or config_mgr.get("export.default_format", "markdown"))
    renderer.output_path = Path(output) if output else Path(renderer.filename)
    path = renderer.export(data)
    console.print(f"[green]✓[/green] Report written to {path}")


# ============================================================================
# Notifications
# ============================================================================


@cli.group()
def notify() -> None:
    """Daily work-hour notifications."""
    pass


@notify.command("check")
@click.option("--date", "day", help="Day to check (YYYY-MM-DD, default: today)")
@click.pass_context
def notify_check(ctx: click.Context, day: Optional[str]) -> None:
    """Notify users whose logged hours reached the threshold.

    Each user is notified at most once per day.

    Example:
        time-ledger notify check
    """
    config_mgr = get_config(ctx)
    setup_logging(config_mgr)

    try:
        target = date.fromisoformat(day) if day else None
    except ValueError:
        fail("Invalid date format for --date. Use YYYY-MM-DD")
        return

    storage = get_storage(ctx)
    notifier = EmailNotifier(storage, config_mgr)
    try:
        notified = WorkHourMonitor(storage, config_mgr, notifier).check(target)
    finally:
        notifier.shutdown(wait=True)

    if notified:
        console.print(f"[green]✓[/green] Notified {len(notified)} user(s): {', '.join(map(str, notified))}")
    else:
        console.print("No users to notify")


@notify.command("schedule")
@click.pass_context
def notify_schedule(ctx: click.Context) -> None:
    """Run the check every day at notifications.check_time.

    Example:
        time-ledger config set notifications.check_time 18:30
        time-ledger notify schedule
    """
    from time_ledger.notifications.scheduler import run_scheduler

    config_mgr = get_config(ctx)
    setup_logging(config_mgr)

    storage = get_storage(ctx)
    monitor = WorkHourMonitor(storage, config_mgr, EmailNotifier(storage, config_mgr))
    console.print(
        f"Checking work hours daily at {config_mgr.get('notifications.check_time')} "
        "(Ctrl+C to stop)"
    )
    run_scheduler(monitor, config_mgr)


if __name__ == "__main__":
    cli(obj={})
