"""Helpers shared by the CLI command groups."""

import sys
from pathlib import Path
from typing import NoReturn, Optional

import click
from rich.console import Console

from time_ledger.core.config import ConfigManager
from time_ledger.core.storage import StorageManager

console = Console()
error_console = Console(stderr=True)


def get_config(ctx: click.Context) -> ConfigManager:
    """Get the ConfigManager selected by the global --config option."""
    obj = ctx.ensure_object(dict)
    config_mgr: Optional[ConfigManager] = obj.get("config")
    if config_mgr is None:
        config_path = obj.get("config_path")
        config_mgr = ConfigManager(Path(config_path) if config_path else None)
        obj["config"] = config_mgr
    return config_mgr


def get_storage(ctx: click.Context) -> StorageManager:
    """Get StorageManager for --data-dir, else the configured data directory."""
    data_dir = ctx.ensure_object(dict).get("data_dir")
    return StorageManager(Path(data_dir) if data_dir else get_config(ctx).data_dir)


def fail(message: str) -> NoReturn:
    """Print an error and exit with status 1."""
    error_console.print(f"[red]Error:[/red] {message}")
    sys.exit(1)
