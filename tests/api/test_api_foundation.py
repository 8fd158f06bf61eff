"""Tests for API foundation (server, auth, error envelopes, middleware)."""

from datetime import timedelta
from pathlib import Path

import pytest  # type: ignore[import-not-found]
from fastapi import FastAPI  # type: ignore[import-untyped]
from fastapi.testclient import TestClient  # type: ignore[import-untyped]
from jose import jwt  # type: ignore[import-untyped]

from time_ledger.api import create_app
from time_ledger.api.auth import ALGORITHM, create_access_token, create_token_for_user
from time_ledger.api.models import Page
from time_ledger.core.config import ConfigManager
from time_ledger.core.models import User


class TestServerCreation:
    """Test FastAPI server creation."""

    def test_create_app_with_config(self, test_app: FastAPI) -> None:
        assert test_app.title == "Time Ledger API"
        assert test_app.version == "0.1.0"

    def test_create_app_generates_secret_key(self, test_config: ConfigManager) -> None:
        assert test_config.get("api.authentication.secret_key") is None
        create_app(test_config)
        assert test_config.get("api.authentication.secret_key")

    def test_app_has_routes(self, test_app: FastAPI) -> None:
        """Test that app has expected routes."""
        routes = [route.path for route in test_app.routes]
        assert "/api/v1/health" in routes
        assert "/api/v1/register" in routes
        assert "/api/v1/clients/{client_id}" in routes
        assert "/api/v1/project-timelogs/total-hours" in routes
        assert "/api/v1/project-timelogs/{project_id}/start" in routes
        assert "/api/v1/report" in routes

    def test_root(self, api_client: TestClient) -> None:
        response = api_client.get("/")
        assert response.status_code == 200
        assert response.json()["docs"] == "/docs"

    def test_health(self, api_client: TestClient) -> None:
        response = api_client.get("/api/v1/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["version"] == "0.1.0"


class TestAuthentication:
    """Test bearer token handling."""

    def test_missing_token(self, api_client: TestClient) -> None:
        response = api_client.get("/api/v1/clients")

        assert response.status_code == 401
        assert response.json() == {"message": "Unauthenticated.", "status": 401}
        assert response.headers["www-authenticate"] == "Bearer"

    def test_garbage_token(self, api_client: TestClient) -> None:
        response = api_client.get(
            "/api/v1/clients", headers={"Authorization": "Bearer not-a-token"}
        )
        assert response.status_code == 401
        assert "Invalid authentication credentials" in response.json()["message"]

    def test_token_signed_with_other_key(
        self, api_client: TestClient, auth_headers: dict[str, str]
    ) -> None:
        token = create_access_token({"sub": "1", "ver": 0}, secret_key="someone-else")
        response = api_client.get("/api/v1/user", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401

    def test_expired_token(
        self, api_client: TestClient, test_config: ConfigManager, auth_headers: dict[str, str]
    ) -> None:
        token = create_access_token(
            {"sub": "1", "ver": 0},
            secret_key=test_config.get("api.authentication.secret_key"),
            expires_delta=timedelta(seconds=-10),
        )
        response = api_client.get("/api/v1/user", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401

    def test_token_for_deleted_user_id(
        self, api_client: TestClient, test_config: ConfigManager
    ) -> None:
        token = create_token_for_user(
            test_config, User(id=42, name="Ghost", email="ghost@example.com", password_hash="-")
        )
        response = api_client.get(
            "/api/v1/user", headers={"Authorization": f"Bearer {token['access_token']}"}
        )
        assert response.status_code == 401

    def test_token_claims(self, test_config: ConfigManager) -> None:
        user = User(id=7, name="Ada", email="ada@example.com", password_hash="-", token_version=2)
        token = create_token_for_user(test_config, user)

        payload = jwt.decode(
            token["access_token"],
            test_config.get("api.authentication.secret_key"),
            algorithms=[ALGORITHM],
        )
        assert payload["sub"] == "7"
        assert payload["ver"] == 2
        assert token["token_type"] == "bearer"
        assert token["expires_in"] == 24 * 3600


class TestErrorEnvelopes:
    """Test the uniform error body."""

    def test_query_validation(self, api_client: TestClient, auth_headers: dict[str, str]) -> None:
        response = api_client.get("/api/v1/clients?page=0", headers=auth_headers)

        assert response.status_code == 422
        body = response.json()
        assert body["status"] == 422
        assert "page" in body["errors"]

    def test_path_validation(self, api_client: TestClient, auth_headers: dict[str, str]) -> None:
        response = api_client.get("/api/v1/clients/abc", headers=auth_headers)
        assert response.status_code == 422
        assert "client_id" in response.json()["errors"]

    def test_not_found(self, api_client: TestClient, auth_headers: dict[str, str]) -> None:
        response = api_client.get("/api/v1/clients/999", headers=auth_headers)
        assert response.status_code == 404
        assert response.json() == {"message": "Client not found", "status": 404}


class TestMiddleware:
    """Test CORS configuration."""

    def test_cors_allows_configured_origin(self, api_client: TestClient) -> None:
        response = api_client.get(
            "/api/v1/health", headers={"Origin": "http://localhost:3000"}
        )
        assert response.headers["access-control-allow-origin"] == "http://localhost:3000"

    def test_cors_disabled(self, temp_dir: Path) -> None:
        config = ConfigManager(temp_dir / "other.yml")
        config.set("general.data_dir", str(temp_dir / "data"))
        config.set("api.cors.enabled", False)

        response = TestClient(create_app(config)).get(
            "/api/v1/health", headers={"Origin": "http://localhost:3000"}
        )
        assert "access-control-allow-origin" not in response.headers


class TestPagination:
    """Test page slicing."""

    @pytest.mark.parametrize(
        "total,page,per_page,expected_len,last_page",
        [(0, 1, 10, 0, 1), (25, 1, 10, 10, 3), (25, 3, 10, 5, 3), (25, 4, 10, 0, 3)],
    )
    def test_build(
        self, total: int, page: int, per_page: int, expected_len: int, last_page: int
    ) -> None:
        result = Page[int].build(list(range(total)), page, per_page)
        assert len(result.data) == expected_len
        assert result.total == total
        assert result.last_page == last_page
        assert result.current_page == page
