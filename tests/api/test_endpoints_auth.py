"""Tests for account endpoints."""

from fastapi.testclient import TestClient  # type: ignore[import-untyped]


class TestRegister:
    """Test POST /register."""

    def test_register(self, api_client: TestClient) -> None:
        response = api_client.post(
            "/api/v1/register",
            json={"name": "Ada", "email": "Ada@Example.com", "password": "password123"},
        )

        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "User created successfully"
        assert body["status"] == 201
        assert body["data"]["email"] == "ada@example.com"
        assert "password" not in body["data"]
        assert "password_hash" not in body["data"]

    def test_short_password(self, api_client: TestClient) -> None:
        response = api_client.post(
            "/api/v1/register", json={"name": "Ada", "email": "ada@example.com", "password": "123"}
        )
        assert response.status_code == 422
        body = response.json()
        assert body["message"] == "Please provide a minimum 8 characters password"
        assert "password" in body["errors"]

    def test_missing_fields(self, api_client: TestClient) -> None:
        response = api_client.post("/api/v1/register", json={})
        assert response.status_code == 422
        assert set(response.json()["errors"]) == {"name", "email", "password"}

    def test_email_taken(self, api_client: TestClient, auth_headers: dict[str, str]) -> None:
        response = api_client.post(
            "/api/v1/register",
            json={"name": "Copy", "email": "ADA@example.com", "password": "password123"},
        )
        assert response.status_code == 422
        assert response.json()["message"] == "The email you provided is already in use!"


class TestLogin:
    """Test POST /login."""

    def test_login(self, api_client: TestClient, auth_headers: dict[str, str]) -> None:
        response = api_client.post(
            "/api/v1/login", json={"email": "ada@example.com", "password": "password123"}
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["user"]["name"] == "Ada"
        assert data["token_type"] == "bearer"
        assert data["expires_in"] == 86400
        assert data["token"]

    def test_wrong_password(self, api_client: TestClient, auth_headers: dict[str, str]) -> None:
        response = api_client.post(
            "/api/v1/login", json={"email": "ada@example.com", "password": "wrong-password"}
        )
        assert response.status_code == 401
        assert response.json()["message"] == "Invalid credentials"

    def test_unknown_user(self, api_client: TestClient) -> None:
        response = api_client.post(
            "/api/v1/login", json={"email": "nobody@example.com", "password": "password123"}
        )
        assert response.status_code == 404
        assert response.json()["message"] == "User not found"

    def test_missing_credentials(self, api_client: TestClient) -> None:
        response = api_client.post("/api/v1/login", json={"email": "ada@example.com"})
        assert response.status_code == 422


class TestSession:
    """Test GET /user and POST /logout."""

    def test_current_user(self, api_client: TestClient, auth_headers: dict[str, str]) -> None:
        response = api_client.get("/api/v1/user", headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["data"]["email"] == "ada@example.com"

    def test_logout_revokes_token(
        self, api_client: TestClient, auth_headers: dict[str, str]
    ) -> None:
        response = api_client.post("/api/v1/logout", headers=auth_headers)
        assert response.status_code == 200
        assert response.json() == {"message": "User logged out successfully", "status": 200}

        response = api_client.get("/api/v1/user", headers=auth_headers)
        assert response.status_code == 401

    def test_new_login_after_logout(
        self, api_client: TestClient, auth_headers: dict[str, str]
    ) -> None:
        api_client.post("/api/v1/logout", headers=auth_headers)
        response = api_client.post(
            "/api/v1/login", json={"email": "ada@example.com", "password": "password123"}
        )
        token = response.json()["data"]["token"]

        response = api_client.get("/api/v1/user", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 200

    def test_logout_requires_token(self, api_client: TestClient) -> None:
        assert api_client.post("/api/v1/logout").status_code == 401
