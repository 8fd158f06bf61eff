"""Dependency injection for FastAPI endpoints.

This module provides dependency functions for use with FastAPI's dependency
injection system. These dependencies provide access to core Time Ledger
components like configuration, storage, the clock and the managers built on
top of them.
"""

from fastapi import Depends, Request  # type: ignore[import-untyped]

from time_ledger.analysis.reports import ReportAggregator
from time_ledger.core.accounts import AccountManager
from time_ledger.core.clients import ClientManager
from time_ledger.core.clock import Clock, SystemClock
from time_ledger.core.config import ConfigManager
from time_ledger.core.projects import ProjectManager
from time_ledger.core.storage import StorageManager
from time_ledger.core.tracker import TimeTracker


def get_config(request: Request = None) -> ConfigManager:  # type: ignore[assignment,misc]
    """Get configuration manager instance.

    Args:
        request: FastAPI Request object (when used as dependency)

    Returns:
        ConfigManager instance from app state or new instance

    Note:
        This is a dependency function for FastAPI endpoints.
        Use with Depends(get_config) in endpoint parameters.
    """
    if request is not None and hasattr(request, "app"):
        if hasattr(request.app.state, "config"):
            config: ConfigManager = request.app.state.config
            return config
    return ConfigManager()


def get_clock(request: Request = None) -> Clock:  # type: ignore[assignment,misc]
    """Get the clock the application was created with."""
    if request is not None and hasattr(request, "app"):
        clock = getattr(request.app.state, "clock", None)
        if clock is not None:
            return clock  # type: ignore[no-any-return]
    return SystemClock()


def get_storage(config: ConfigManager = Depends(get_config)) -> StorageManager:
    """Get storage instance for the configured data directory.

    Note:
        This is a dependency function for FastAPI endpoints.
        Use with Depends(get_storage) in endpoint parameters.
        Can also be called directly for testing.
    """
    return StorageManager(config.data_dir)


def get_tracker(
    storage: StorageManager = Depends(get_storage),
    clock: Clock = Depends(get_clock),
) -> TimeTracker:
    return TimeTracker(storage, clock)


def get_accounts(
    storage: StorageManager = Depends(get_storage),
    clock: Clock = Depends(get_clock),
) -> AccountManager:
    return AccountManager(storage, clock)


def get_clients(
    storage: StorageManager = Depends(get_storage),
    clock: Clock = Depends(get_clock),
) -> ClientManager:
    return ClientManager(storage, clock)


def get_projects(
    storage: StorageManager = Depends(get_storage),
    clock: Clock = Depends(get_clock),
) -> ProjectManager:
    return ProjectManager(storage, clock)


def get_reports(
    storage: StorageManager = Depends(get_storage),
    clock: Clock = Depends(get_clock),
) -> ReportAggregator:
    return ReportAggregator(storage, clock)
