"""Shared fixtures for API tests."""

from pathlib import Path

import pytest  # type: ignore[import-not-found]
from fastapi import FastAPI  # type: ignore[import-untyped]
from fastapi.testclient import TestClient  # type: ignore[import-untyped]

from time_ledger.api import create_app
from time_ledger.core.clock import FixedClock
from time_ledger.core.config import ConfigManager


def register_and_login(
    api_client: TestClient, email: str = "ada@example.com", name: str = "Ada"
) -> dict[str, str]:
    """Register a user and return bearer headers for them."""
    response = api_client.post(
        "/api/v1/register", json={"name": name, "email": email, "password": "password123"}
    )
    assert response.status_code == 201, response.text

    response = api_client.post("/api/v1/login", json={"email": email, "password": "password123"})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['data']['token']}"}


@pytest.fixture
def test_config(temp_dir: Path) -> ConfigManager:
    """Configuration keeping all data under the temporary directory."""
    config = ConfigManager(temp_dir / "config.yml")
    config.set("general.data_dir", str(temp_dir / "data"))
    return config


@pytest.fixture
def api_clock() -> FixedClock:
    return FixedClock()


@pytest.fixture
def test_app(test_config: ConfigManager, api_clock: FixedClock) -> FastAPI:
    """Create a test FastAPI application."""
    return create_app(test_config, api_clock)


@pytest.fixture
def api_client(test_app: FastAPI) -> TestClient:
    """Create a test client."""
    return TestClient(test_app)


@pytest.fixture
def auth_headers(api_client: TestClient) -> dict[str, str]:
    return register_and_login(api_client)


@pytest.fixture
def other_headers(api_client: TestClient) -> dict[str, str]:
    return register_and_login(api_client, email="grace@example.com", name="Grace")


@pytest.fixture
def client_id(api_client: TestClient, auth_headers: dict[str, str]) -> int:
    response = api_client.post(
        "/api/v1/clients",
        json={"name": "Acme", "email": "billing@acme.test", "contact_person": "Wile E."},
        headers=auth_headers,
    )
    assert response.status_code == 201, response.text
    return int(response.json()["data"]["id"])


@pytest.fixture
def project_id(api_client: TestClient, auth_headers: dict[str, str], client_id: int) -> int:
    response = api_client.post(
        "/api/v1/projects",
        json={"title": "Website", "status": "active", "client_id": client_id},
        headers=auth_headers,
    )
    assert response.status_code == 201, response.text
    return int(response.json()["data"]["id"])
