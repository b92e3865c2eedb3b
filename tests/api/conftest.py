"""Shared fixtures for API tests."""

import asyncio
from pathlib import Path

import pytest  # type: ignore[import-not-found]
from fastapi.testclient import TestClient  # type: ignore[import-untyped]

from freelance_tracker.api import create_app
from freelance_tracker.core.config import ConfigManager
from freelance_tracker.core.models import Project, Task, TaskStatus
from freelance_tracker.core.repository import Repository
from freelance_tracker.core.storage import StorageManager

OWNER = "user-1"


@pytest.fixture
def test_config(temp_dir: Path) -> ConfigManager:
    """Create a test configuration with a temporary data directory."""
    config = ConfigManager(temp_dir / "config.yml")
    config.set("general.data_dir", str(temp_dir / "data"))
    config.set("general.owner_id", OWNER)
    return config


@pytest.fixture
def test_app(test_config: ConfigManager):  # type: ignore[no-untyped-def]
    """Create a test FastAPI application."""
    return create_app(test_config)


@pytest.fixture
def client(test_app) -> TestClient:  # type: ignore[no-untyped-def]
    """Create a test client."""
    return TestClient(test_app)


@pytest.fixture
def api_repository(test_config: ConfigManager) -> Repository:
    """Repository over the data directory the API serves."""
    return Repository.from_storage(StorageManager(test_config.data_dir))


@pytest.fixture
def sample_project(api_repository: Repository) -> Project:
    """A project billed at 100000 per hour."""
    project = Project(owner_id=OWNER, name="Website", hourly_rate=100000)
    asyncio.run(api_repository.add_project(project))
    return project


@pytest.fixture
def sample_task(api_repository: Repository, sample_project: Project) -> Task:
    """An in-progress task estimated at 10 hours."""
    task = Task(
        owner_id=OWNER,
        project_id=sample_project.id,
        name="Landing page",
        estimated_hours=10,
        status=TaskStatus.IN_PROGRESS,
        tags=["design"],
    )
    asyncio.run(api_repository.add_task(task))
    return task
