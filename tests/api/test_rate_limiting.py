"""Tests for per-user request rate limiting."""

from pathlib import Path

import pytest  # type: ignore[import-not-found]
from fastapi.testclient import TestClient  # type: ignore[import-untyped]

from time_ledger.api import create_app
from time_ledger.core.clock import FixedClock
from time_ledger.core.config import ConfigManager


@pytest.fixture
def limited_client(temp_dir: Path):  # type: ignore[no-untyped-def]
    """Factory for a client whose app is built with the given rate limit settings."""

    def build(**settings: object) -> tuple[TestClient, dict[str, str]]:
        config = ConfigManager(temp_dir / "config.yml")
        config.set("general.data_dir", str(temp_dir / "data"))
        for key, value in settings.items():
            config.set(f"api.rate_limiting.{key}", value)
        client = TestClient(create_app(config, FixedClock()))
        client.post(
            "/api/v1/register",
            json={"name": "Ada", "email": "ada@example.com", "password": "password123"},
        )
        response = client.post(
            "/api/v1/login", json={"email": "ada@example.com", "password": "password123"}
        )
        return client, {"Authorization": f"Bearer {response.json()['data']['token']}"}

    return build


class TestRateLimiting:
    """Test the per-minute request budget of authenticated routes."""

    def test_request_over_budget_is_rejected(
        self, api_client: TestClient, auth_headers: dict[str, str]
    ) -> None:
        for _ in range(30):
            response = api_client.get("/api/v1/clients", headers=auth_headers)
            assert response.status_code == 200

        response = api_client.get("/api/v1/clients", headers=auth_headers)
        assert response.status_code == 429
        assert response.json() == {"message": "Too Many Attempts.", "status": 429}
        assert response.headers["Retry-After"] == "60"

    def test_budget_is_shared_across_routes(
        self, api_client: TestClient, auth_headers: dict[str, str]
    ) -> None:
        for _ in range(15):
            api_client.get("/api/v1/clients", headers=auth_headers)
            api_client.get("/api/v1/projects", headers=auth_headers)

        response = api_client.get("/api/v1/report", headers=auth_headers)
        assert response.status_code == 429

    def test_budget_is_per_user(
        self,
        api_client: TestClient,
        auth_headers: dict[str, str],
        other_headers: dict[str, str],
    ) -> None:
        for _ in range(31):
            api_client.get("/api/v1/clients", headers=auth_headers)

        response = api_client.get("/api/v1/clients", headers=other_headers)
        assert response.status_code == 200

    def test_anonymous_requests_counted_by_address(self, api_client: TestClient) -> None:
        for _ in range(30):
            assert api_client.get("/api/v1/clients").status_code == 401

        assert api_client.get("/api/v1/clients").status_code == 429

    def test_public_routes_not_limited(self, api_client: TestClient) -> None:
        for _ in range(35):
            assert api_client.get("/api/v1/health").status_code == 200

    def test_limit_from_config(self, limited_client) -> None:  # type: ignore[no-untyped-def]
        client, headers = limited_client(per_minute=5)

        statuses = [client.get("/api/v1/user", headers=headers).status_code for _ in range(6)]
        assert statuses == [200] * 5 + [429]

    def test_disabled(self, limited_client) -> None:  # type: ignore[no-untyped-def]
        client, headers = limited_client(enabled=False)

        for _ in range(40):
            assert client.get("/api/v1/user", headers=headers).status_code == 200


@pytest.mark.parametrize("per_minute", [0, "many"])
def test_invalid_limit_rejected(temp_dir: Path, per_minute: object) -> None:
    config = ConfigManager(temp_dir / "config.yml")
    with pytest.raises(ValueError):
        config.set("api.rate_limiting.per_minute", per_minute)
