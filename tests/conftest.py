"""Pytest configuration and shared fixtures."""

import tempfile
from collections.abc import Iterator
from pathlib import Path

import pytest  # type: ignore[import-not-found]

from time_ledger.core.clients import ClientManager
from time_ledger.core.clock import FixedClock
from time_ledger.core.models import Client, Project, User
from time_ledger.core.projects import ProjectManager
from time_ledger.core.storage import StorageManager
from time_ledger.core.tracker import TimeTracker


def pytest_configure(config: pytest.Config) -> None:
    """Configure pytest."""
    config.addinivalue_line("markers", "integration: Integration tests")
    config.addinivalue_line("markers", "slow: Slow tests")


@pytest.fixture
def temp_dir() -> Iterator[Path]:
    """Create temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def storage(temp_dir: Path) -> StorageManager:
    """Storage whose data, state and backup directories live in temp_dir."""
    return StorageManager(temp_dir / "data")


@pytest.fixture
def clock() -> FixedClock:
    """Clock frozen at 2025-06-01 12:00:00."""
    return FixedClock()


@pytest.fixture
def tracker(storage: StorageManager, clock: FixedClock) -> TimeTracker:
    return TimeTracker(storage, clock)


@pytest.fixture
def user(storage: StorageManager) -> User:
    return storage.save_user(User(name="Ada", email="ada@example.com", password_hash="-"))


@pytest.fixture
def other_user(storage: StorageManager) -> User:
    return storage.save_user(User(name="Grace", email="grace@example.com", password_hash="-"))


@pytest.fixture
def client(storage: StorageManager, user: User) -> Client:
    return ClientManager(storage).create(user.id, "Acme", "billing@acme.test", "Wile E.")


@pytest.fixture
def project(storage: StorageManager, user: User, client: Client) -> Project:
    return ProjectManager(storage).create(user.id, "Website", "active", client.id)


@pytest.fixture
def second_project(storage: StorageManager, user: User, client: Client) -> Project:
    return ProjectManager(storage).create(user.id, "Mobile app", "active", client.id)
