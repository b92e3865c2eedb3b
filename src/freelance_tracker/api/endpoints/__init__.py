"""API endpoints.

Each module defines a FastAPI router that is included in the main application.

Available routers:
- system: Health checks
- projects: Project management
- tasks: Tasks with actual-versus-estimated hours
- entries: Time entries
- statistics: Dashboard and income statistics
"""

__all__ = ["system", "projects", "tasks", "entries", "statistics"]

from freelance_tracker.api.endpoints import (  # noqa: F401
    entries,
    projects,
    statistics,
    system,
    tasks,
)
