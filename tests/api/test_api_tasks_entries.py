"""Tests for task and entry endpoints."""

import asyncio
from datetime import datetime, timedelta
from unittest.mock import AsyncMock, Mock

import pytest  # type: ignore[import-not-found]
from fastapi.testclient import TestClient  # type: ignore[import-untyped]

from freelance_tracker.api.dependencies import get_repository
from freelance_tracker.core.exceptions import PersistenceError
from freelance_tracker.core.models import Project, Task, TimeEntry
from freelance_tracker.core.repository import Repository


@pytest.fixture
def logged_task(api_repository: Repository, sample_task: Task) -> Task:
    """Task with 7.25 hours logged in three entries."""
    start = datetime.now() - timedelta(days=1)
    for hours in (2, 3.25, 2):
        asyncio.run(
            api_repository.add_time_entry(
                TimeEntry(
                    owner_id=sample_task.owner_id,
                    project_id=sample_task.project_id,
                    task_id=sample_task.id,
                    hours=hours,
                    start_time=start,
                )
            )
        )
    return sample_task


class TestTasks:
    """Test task endpoints."""

    def test_create(self, client: TestClient, sample_project: Project) -> None:
        """Test creating a task starts pending with no hours."""
        response = client.post(
            "/api/v1/tasks/",
            json={
                "project_id": sample_project.id,
                "name": "Landing page",
                "estimated_hours": 10,
                "due_at": "2026-11-01T17:00:00",
                "tags": ["design"],
            },
        )
        assert response.status_code == 201
        data = response.json()
        assert data["status"] == "pending"
        assert data["actual_hours"] == 0
        assert data["hours_diff"] == -10

    def test_create_unknown_project(self, client: TestClient) -> None:
        """Test tasks need an existing project."""
        response = client.post(
            "/api/v1/tasks/",
            json={"project_id": "missing", "name": "x", "estimated_hours": 1},
        )
        assert response.status_code == 404

    def test_create_zero_estimate(self, client: TestClient, sample_project: Project) -> None:
        """Test the estimate must be positive."""
        response = client.post(
            "/api/v1/tasks/",
            json={"project_id": sample_project.id, "name": "x", "estimated_hours": 0},
        )
        assert response.status_code == 422

    def test_list_with_actuals(self, client: TestClient, logged_task: Task) -> None:
        """Test listed tasks carry actual hours and the variance."""
        response = client.get("/api/v1/tasks/", params={"project_id": logged_task.project_id})
        assert response.status_code == 200
        [data] = response.json()
        assert data["estimated_hours"] == 10
        assert data["actual_hours"] == pytest.approx(7.25)
        assert data["hours_diff"] == pytest.approx(-2.75)

    def test_list_filters(self, client: TestClient, logged_task: Task) -> None:
        """Test status and tag filters."""
        assert len(client.get("/api/v1/tasks/", params={"status": "inProgress"}).json()) == 1
        assert client.get("/api/v1/tasks/", params={"status": "completed"}).json() == []
        assert client.get("/api/v1/tasks/", params={"tag": "backend"}).json() == []
        assert len(client.get("/api/v1/tasks/", params={"tag": ["backend", "design"]}).json()) == 1

    def test_list_unknown_project(self, client: TestClient) -> None:
        """Test filtering by an unknown project gives 404."""
        response = client.get("/api/v1/tasks/", params={"project_id": "missing"})
        assert response.status_code == 404

    def test_get(self, client: TestClient, logged_task: Task) -> None:
        """Test reading one task with its actual hours."""
        response = client.get(f"/api/v1/tasks/{logged_task.id}")
        assert response.status_code == 200
        assert response.json()["actual_hours"] == pytest.approx(7.25)

    def test_update_status(self, client: TestClient, sample_task: Task) -> None:
        """Test changing the status."""
        response = client.put(
            f"/api/v1/tasks/{sample_task.id}/status", json={"status": "completed"}
        )
        assert response.status_code == 200
        assert response.json()["status"] == "completed"

    def test_update_invalid_status(self, client: TestClient, sample_task: Task) -> None:
        """Test unknown statuses fail request validation."""
        response = client.put(f"/api/v1/tasks/{sample_task.id}/status", json={"status": "paused"})
        assert response.status_code == 422

    def test_delete(self, client: TestClient, sample_task: Task) -> None:
        """Test deleting a task."""
        response = client.delete(f"/api/v1/tasks/{sample_task.id}")
        assert response.status_code == 204
        assert client.get(f"/api/v1/tasks/{sample_task.id}").status_code == 404

    def test_owner_isolation(self, client: TestClient, sample_task: Task) -> None:
        """Test tasks of other owners are invisible."""
        response = client.get("/api/v1/tasks/", headers={"X-Owner-Id": "someone-else"})
        assert response.json() == []


class TestEntries:
    """Test entry endpoints."""

    def test_log_hours(self, client: TestClient, sample_task: Task) -> None:
        """Test logging hours manually."""
        response = client.post(
            "/api/v1/entries/",
            json={
                "project_id": sample_task.project_id,
                "task_id": sample_task.id,
                "hours": 2.5,
            },
        )
        assert response.status_code == 201
        data = response.json()
        assert data["hours"] == 2.5
        assert data["project_name"] == "Website"
        assert data["task_name"] == "Landing page"

    def test_log_zero_hours(self, client: TestClient, sample_task: Task) -> None:
        """Test zero hours are a validation error."""
        response = client.post(
            "/api/v1/entries/",
            json={"project_id": sample_task.project_id, "task_id": sample_task.id, "hours": 0},
        )
        assert response.status_code == 422
        assert "greater than zero" in response.json()["detail"]

    def test_log_unknown_task(self, client: TestClient, sample_project: Project) -> None:
        """Test logging against an unknown task gives 404."""
        response = client.post(
            "/api/v1/entries/",
            json={"project_id": sample_project.id, "task_id": "missing", "hours": 1},
        )
        assert response.status_code == 404

    def test_list_newest_first(self, client: TestClient, sample_task: Task) -> None:
        """Test entries are listed newest first with names."""
        for day, hours in (("2026-10-01T09:00:00", 1), ("2026-10-03T09:00:00", 2)):
            client.post(
                "/api/v1/entries/",
                json={
                    "project_id": sample_task.project_id,
                    "task_id": sample_task.id,
                    "hours": hours,
                    "start_time": day,
                },
            )

        response = client.get("/api/v1/entries/")
        assert response.status_code == 200
        assert [e["hours"] for e in response.json()] == [2, 1]
        assert response.json()[0]["task_name"] == "Landing page"

    def test_list_date_filter(self, client: TestClient, sample_task: Task) -> None:
        """Test from_date and to_date bound the listing."""
        for day in ("2026-09-30T09:00:00", "2026-10-02T09:00:00"):
            client.post(
                "/api/v1/entries/",
                json={
                    "project_id": sample_task.project_id,
                    "task_id": sample_task.id,
                    "hours": 1,
                    "start_time": day,
                },
            )

        response = client.get(
            "/api/v1/entries/", params={"from_date": "2026-10-01", "to_date": "2026-10-31"}
        )
        assert [e["start_time"][:10] for e in response.json()] == ["2026-10-02"]


class TestStoreFailures:
    """Test store failures surface as 503."""

    def test_persistence_error(self, client: TestClient, test_app) -> None:  # type: ignore[no-untyped-def]
        """Test a failing store gives 503 with the error message."""
        repository = Mock()
        repository.list_projects = AsyncMock(side_effect=PersistenceError("disk unavailable"))
        test_app.dependency_overrides[get_repository] = lambda: repository

        response = client.get("/api/v1/projects/")

        assert response.status_code == 503
        assert response.json() == {"detail": "disk unavailable"}
