"""Tests for project time log endpoints."""

from fastapi.testclient import TestClient  # type: ignore[import-untyped]

from time_ledger.core.clock import FixedClock

BASE = "/api/v1/project-timelogs"


def store(
    api_client: TestClient,
    headers: dict[str, str],
    project_id: int,
    start: str,
    end: str | None = None,
    **extra: str,
) -> dict:  # type: ignore[type-arg]
    payload = {"project_id": project_id, "start_time": start, "end_time": end, **extra}
    return api_client.post(BASE, json=payload, headers=headers).json()  # type: ignore[no-any-return]


class TestTimer:
    """Test start/stop."""

    def test_start_and_stop(
        self,
        api_client: TestClient,
        api_clock: FixedClock,
        auth_headers: dict[str, str],
        project_id: int,
    ) -> None:
        response = api_client.post(
            f"{BASE}/{project_id}/start",
            json={"description": "Kickoff", "tag": "billable"},
            headers=auth_headers,
        )
        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "Project time log started successfully."
        assert body["data"]["start_time"] == "2025-06-01T12:00:00"
        assert body["data"]["end_time"] is None
        assert body["data"]["hours"] is None
        assert body["data"]["tag"] == "billable"

        api_clock.advance(minutes=90)
        response = api_client.post(f"{BASE}/{project_id}/stop", headers=auth_headers)
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["end_time"] == "2025-06-01T13:30:00"
        assert data["hours"] == 1.5

    def test_start_without_body(
        self, api_client: TestClient, auth_headers: dict[str, str], project_id: int
    ) -> None:
        response = api_client.post(f"{BASE}/{project_id}/start", headers=auth_headers)
        assert response.status_code == 201
        assert response.json()["data"]["description"] == ""

    def test_double_start(
        self, api_client: TestClient, auth_headers: dict[str, str], project_id: int
    ) -> None:
        api_client.post(f"{BASE}/{project_id}/start", headers=auth_headers)
        response = api_client.post(f"{BASE}/{project_id}/start", headers=auth_headers)

        assert response.status_code == 400
        assert response.json()["message"] == (
            "You have an ongoing time log for this project. "
            "Please end it before starting a new one."
        )

    def test_stop_without_timer(
        self, api_client: TestClient, auth_headers: dict[str, str], project_id: int
    ) -> None:
        response = api_client.post(f"{BASE}/{project_id}/stop", headers=auth_headers)
        assert response.status_code == 400
        assert response.json()["message"] == "No ongoing time log found for this project."

    def test_start_on_foreign_project(
        self, api_client: TestClient, project_id: int, other_headers: dict[str, str]
    ) -> None:
        response = api_client.post(f"{BASE}/{project_id}/start", headers=other_headers)
        assert response.status_code == 404


class TestManualEntries:
    """Test create/update/delete."""

    def test_create(
        self, api_client: TestClient, auth_headers: dict[str, str], project_id: int
    ) -> None:
        response = api_client.post(
            BASE,
            json={
                "project_id": project_id,
                "start_time": "2025-06-01T09:00:00",
                "end_time": "2025-06-01T10:30:00",
                "description": "Design",
                "tag": "non-billable",
            },
            headers=auth_headers,
        )
        assert response.status_code == 201
        data = response.json()["data"]
        assert data["hours"] == 1.5
        assert data["tag"] == "non-billable"
        assert data["client_id"] == 1
        assert data["user_id"] == 1

    def test_overlap(
        self, api_client: TestClient, auth_headers: dict[str, str], project_id: int
    ) -> None:
        store(api_client, auth_headers, project_id, "2025-06-01T09:00:00", "2025-06-01T11:00:00")
        response = api_client.post(
            BASE,
            json={
                "project_id": project_id,
                "start_time": "2025-06-01T10:00:00",
                "end_time": "2025-06-01T11:30:00",
            },
            headers=auth_headers,
        )
        assert response.status_code == 400
        assert response.json()["message"] == "Time log overlaps with an existing entry."

    def test_future_start(
        self, api_client: TestClient, auth_headers: dict[str, str], project_id: int
    ) -> None:
        response = api_client.post(
            BASE,
            json={"project_id": project_id, "start_time": "2025-06-02T09:00:00"},
            headers=auth_headers,
        )
        assert response.status_code == 422
        body = response.json()
        assert body["message"] == "Start time cannot be in the future."
        assert "start_time" in body["errors"]

    def test_end_before_start(
        self, api_client: TestClient, auth_headers: dict[str, str], project_id: int
    ) -> None:
        response = api_client.post(
            BASE,
            json={
                "project_id": project_id,
                "start_time": "2025-06-01T10:00:00",
                "end_time": "2025-06-01T09:00:00",
            },
            headers=auth_headers,
        )
        assert response.status_code == 422
        assert response.json()["message"] == "End time cannot be before start time."

    def test_offset_beyond_datetime_range(
        self, api_client: TestClient, auth_headers: dict[str, str], project_id: int
    ) -> None:
        response = api_client.post(
            BASE,
            json={"project_id": project_id, "start_time": "0001-01-01T00:00:00+14:00"},
            headers=auth_headers,
        )
        assert response.status_code == 422
        assert response.json()["errors"] == {"start_time": ["The start time is out of range."]}

    def test_non_string_tag_is_ignored(
        self, api_client: TestClient, auth_headers: dict[str, str], project_id: int
    ) -> None:
        created = store(
            api_client,
            auth_headers,
            project_id,
            "2025-06-01T09:00:00",
            "2025-06-01T10:00:00",
            tag="billable",
        )["data"]

        response = api_client.put(f"{BASE}/{created['id']}", json={"tag": 5}, headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["data"]["tag"] == "billable"

        response = api_client.patch(
            f"{BASE}/{created['id']}", json={"tag": ["non-billable"]}, headers=auth_headers
        )
        assert response.status_code == 200
        assert response.json()["data"]["tag"] == "billable"

        response = api_client.post(
            f"{BASE}/{project_id}/start", json={"tag": {"kind": "billable"}}, headers=auth_headers
        )
        assert response.status_code == 201
        assert response.json()["data"]["tag"] is None

    def test_missing_project(self, api_client: TestClient, auth_headers: dict[str, str]) -> None:
        response = api_client.post(
            BASE, json={"start_time": "2025-06-01T09:00:00"}, headers=auth_headers
        )
        assert response.status_code == 422
        assert "project_id" in response.json()["errors"]

    def test_update_is_lenient(
        self, api_client: TestClient, auth_headers: dict[str, str], project_id: int
    ) -> None:
        created = store(
            api_client,
            auth_headers,
            project_id,
            "2025-06-01T09:00:00",
            "2025-06-01T10:00:00",
            tag="billable",
            description="Draft",
        )["data"]

        response = api_client.put(
            f"{BASE}/{created['id']}",
            json={"tag": "overtime", "description": "", "end_time": "2025-06-01T11:00:00"},
            headers=auth_headers,
        )
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["tag"] == "billable"
        assert data["description"] == "Draft"
        assert data["hours"] == 2.0

    def test_get_and_delete(
        self, api_client: TestClient, auth_headers: dict[str, str], project_id: int
    ) -> None:
        created = store(
            api_client, auth_headers, project_id, "2025-06-01T09:00:00", "2025-06-01T10:00:00"
        )["data"]

        response = api_client.get(f"{BASE}/{created['id']}", headers=auth_headers)
        assert response.status_code == 200

        response = api_client.delete(f"{BASE}/{created['id']}", headers=auth_headers)
        assert response.json() == {
            "message": "Project time log deleted successfully.",
            "status": 200,
        }
        response = api_client.get(f"{BASE}/{created['id']}", headers=auth_headers)
        assert response.status_code == 404
        assert response.json()["message"] == "Project time log not found."

    def test_foreign_log_not_visible(
        self,
        api_client: TestClient,
        auth_headers: dict[str, str],
        other_headers: dict[str, str],
        project_id: int,
    ) -> None:
        created = store(
            api_client, auth_headers, project_id, "2025-06-01T09:00:00", "2025-06-01T10:00:00"
        )["data"]

        assert api_client.get(f"{BASE}/{created['id']}", headers=other_headers).status_code == 404
        response = api_client.put(
            f"{BASE}/{created['id']}", json={"description": "x"}, headers=other_headers
        )
        assert response.status_code == 404
        response = api_client.delete(f"{BASE}/{created['id']}", headers=other_headers)
        assert response.status_code == 404


class TestListing:
    """Test listing and total hours."""

    def test_list_with_filters(
        self, api_client: TestClient, auth_headers: dict[str, str], project_id: int
    ) -> None:
        store(api_client, auth_headers, project_id, "2025-05-30T09:00:00", "2025-05-30T10:00:00")
        store(api_client, auth_headers, project_id, "2025-06-01T09:00:00", "2025-06-01T10:00:00")

        page = api_client.get(BASE, headers=auth_headers).json()["data"]
        assert page["total"] == 2
        assert page["data"][0]["start_time"] == "2025-06-01T09:00:00"

        page = api_client.get(
            f"{BASE}?start_date=2025-06-01", headers=auth_headers
        ).json()["data"]
        assert page["total"] == 1

    def test_list_bad_date(self, api_client: TestClient, auth_headers: dict[str, str]) -> None:
        response = api_client.get(f"{BASE}?start_date=June", headers=auth_headers)
        assert response.status_code == 422
        assert "start_date" in response.json()["errors"]

    def test_total_hours_with_running_timer(
        self,
        api_client: TestClient,
        api_clock: FixedClock,
        auth_headers: dict[str, str],
        project_id: int,
    ) -> None:
        store(api_client, auth_headers, project_id, "2025-06-01T09:00:00", "2025-06-01T11:00:00")
        api_client.post(f"{BASE}/{project_id}/start", headers=auth_headers)
        api_clock.advance(minutes=30)

        response = api_client.get(f"{BASE}/total-hours", headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["data"] == {"total_hours": 2.5}

    def test_total_hours_filtered(
        self,
        api_client: TestClient,
        auth_headers: dict[str, str],
        project_id: int,
        client_id: int,
    ) -> None:
        store(api_client, auth_headers, project_id, "2025-06-01T09:00:00", "2025-06-01T10:15:00")
        response = api_client.get(
            f"{BASE}/total-hours?client_id={client_id + 1}", headers=auth_headers
        )
        assert response.json()["data"]["total_hours"] == 0.0

        response = api_client.get(f"{BASE}/total-hours?client_id={client_id}", headers=auth_headers)
        assert response.json()["data"]["total_hours"] == 1.25
