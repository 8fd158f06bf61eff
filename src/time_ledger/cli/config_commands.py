"""CLI commands for reading and changing Time Ledger settings."""

from collections.abc import Iterator
from typing import Any

import click  # type: ignore[import-not-found]
from rich.table import Table  # type: ignore[import-not-found]

from time_ledger.cli.common import console, fail, get_config
from time_ledger.core.config import ConfigManager

SECRET_KEYS = {"notifications.smtp.password", "api.authentication.secret_key"}


def parse_value(value: str) -> Any:
    """Convert a command-line string to the YAML type it most likely means."""
    lowered = value.lower()
    if lowered in ("true", "yes"):
        return True
    if lowered in ("false", "no"):
        return False
    if lowered == "null":
        return None
    for cast in (int, float):
        try:
            return cast(value)
        except ValueError:
            continue
    return value


def flatten(settings: dict[str, Any], prefix: str = "") -> Iterator[tuple[str, Any]]:
    """Yield ``(dotted.key, value)`` pairs for every leaf setting."""
    for key, value in settings.items():
        dotted = f"{prefix}.{key}" if prefix else key
        if isinstance(value, dict):
            yield from flatten(value, dotted)
        else:
            yield dotted, value


def display(key: str, value: Any) -> str:
    if value is None:
        return "-"
    if key in SECRET_KEYS:
        return "********"
    return str(value)


def _section(config_mgr: ConfigManager, name: str) -> dict[str, Any]:
    settings = config_mgr.to_dict()
    for part in name.split("."):
        settings = settings.get(part) if isinstance(settings, dict) else None  # type: ignore[assignment]
    if not isinstance(settings, dict):
        fail(f"Unknown section '{name}'")
    return settings


@click.group()  # type: ignore[misc]
def config() -> None:
    """Read and change settings.

    Settings live in ~/.time-ledger/config.yml unless --config or
    $TIME_LEDGER_CONFIG points elsewhere. Sections: general, notifications,
    export, api, advanced.
    """
    pass


@config.command("show")  # type: ignore[misc]
@click.argument("section", required=False)  # type: ignore[misc]
@click.pass_context  # type: ignore[misc]
def config_show(ctx: click.Context, section: str) -> None:
    """Show settings, or only those of SECTION. Secrets are masked.

    Example:
        time-ledger config show notifications
        time-ledger config show notifications.smtp
    """
    config_mgr = get_config(ctx)
    settings = _section(config_mgr, section) if section else config_mgr.to_dict()

    table = Table(title=f"Settings ({config_mgr.config_path})")
    table.add_column("Key", style="cyan")
    table.add_column("Value", style="green")
    for key, value in flatten(settings, section or ""):
        table.add_row(key, display(key, value))
    console.print(table)


@config.command("get")  # type: ignore[misc]
@click.argument("key")  # type: ignore[misc]
@click.pass_context  # type: ignore[misc]
def config_get(ctx: click.Context, key: str) -> None:
    """Print one setting.

    Example:
        time-ledger config get notifications.threshold_hours
    """
    config_mgr = get_config(ctx)
    if key not in config_mgr.get_all_keys():
        fail(f"Unknown setting '{key}'")

    value = config_mgr.get(key)
    click.echo("null" if value is None else value)


@config.command("set")  # type: ignore[misc]
@click.argument("key")  # type: ignore[misc]
@click.argument("value")  # type: ignore[misc]
@click.pass_context  # type: ignore[misc]
def config_set(ctx: click.Context, key: str, value: str) -> None:
    """Change one existing setting.

    VALUE is read as a boolean (true/false), null, a number or text.

    Example:
        time-ledger config set notifications.threshold_hours 7.5
        time-ledger config set notifications.smtp.host smtp.example.com
        time-ledger config set export.default_format excel
        time-ledger config set api.rate_limiting.per_minute 60
    """
    config_mgr = get_config(ctx)
    if key not in config_mgr.get_all_keys():
        fail(f"Unknown setting '{key}'")

    converted = parse_value(value)
    try:
        config_mgr.set(key, converted)
    except ValueError as e:
        fail(str(e))

    console.print(f"[green]✓[/green] {key} = {display(key, converted)}")
    if key == "notifications.check_time":
        console.print("[dim]Restart 'time-ledger notify schedule' to apply[/dim]")


@config.command("path")  # type: ignore[misc]
@click.pass_context  # type: ignore[misc]
def config_path(ctx: click.Context) -> None:
    """Print the settings file location."""
    click.echo(str(get_config(ctx).config_path))
