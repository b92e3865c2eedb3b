"""Dependency injection for FastAPI endpoints.

These dependencies give endpoints access to the configuration, a repository
over the configured data directory and the owner a request acts for.
"""

from typing import Optional

from fastapi import Depends, Header, Request

from freelance_tracker.core.config import ConfigManager
from freelance_tracker.core.repository import Repository
from freelance_tracker.core.storage import StorageManager


def get_config(request: Request) -> ConfigManager:
    """Configuration manager stored on the application state.

    Note:
        Use with Depends(get_config) in endpoint parameters.
    """
    config: ConfigManager = request.app.state.config
    return config


def get_repository(config: ConfigManager = Depends(get_config)) -> Repository:
    """Repository over the CSV stores of the configured data directory."""
    return Repository.from_storage(StorageManager(config.data_dir))


def get_owner_id(
    x_owner_id: Optional[str] = Header(None),
    config: ConfigManager = Depends(get_config),
) -> str:
    """Owner taken from the X-Owner-Id header, else ``general.owner_id``."""
    if x_owner_id:
        return x_owner_id
    owner_id: str = config.get("general.owner_id", "local-user")
    return owner_id
