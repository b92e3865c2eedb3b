"""REST API for Freelance Tracker.

This module provides a FastAPI-based REST API over the same engine the CLI
uses: projects, tasks with actual hours, time entries and statistics.

Usage:
    # Start server
    freelance-tracker serve

    # Access API docs
    http://localhost:8000/docs

Requests act on behalf of the owner named in the ``X-Owner-Id`` header, or
``general.owner_id`` when the header is absent.
"""

__all__ = ["create_app", "run_server"]

from freelance_tracker.api.server import create_app, run_server  # noqa: F401
