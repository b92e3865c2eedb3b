"""Pytest configuration and shared fixtures."""

import tempfile
from pathlib import Path
from typing import Iterator

import pytest  # type: ignore[import-not-found]

from freelance_tracker.core.repository import Repository
from freelance_tracker.core.storage import StorageManager


def pytest_configure(config: pytest.Config) -> None:
    """Configure pytest."""
    config.addinivalue_line("markers", "integration: Integration tests")
    config.addinivalue_line("markers", "slow: Slow tests")


@pytest.fixture  # type: ignore[misc]
def temp_dir() -> Iterator[Path]:
    """Create temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture  # type: ignore[misc]
def temp_storage(temp_dir: Path) -> StorageManager:
    """Create a storage manager in a temporary directory."""
    return StorageManager(temp_dir / "data")


@pytest.fixture  # type: ignore[misc]
def repository(temp_storage: StorageManager) -> Repository:
    """Create a repository over temporary CSV stores."""
    return Repository.from_storage(temp_storage)
