"""FastAPI application server.

This module contains the main FastAPI application setup and server runner.
"""

from typing import Optional

from fastapi import FastAPI
from fastapi.responses import JSONResponse

from freelance_tracker import __version__
from freelance_tracker.api.middleware import setup_middleware
from freelance_tracker.core.config import ConfigManager


def create_app(config: Optional[ConfigManager] = None) -> FastAPI:
    """Create and configure FastAPI application.

    Args:
        config: Optional configuration manager (creates default if None)

    Returns:
        Configured FastAPI application instance

    Example:
        >>> app = create_app()
        >>> # Or with custom config
        >>> app = create_app(ConfigManager(Path("/tmp/config.yml")))
    """
    if config is None:
        config = ConfigManager()

    app = FastAPI(
        title="Freelance Tracker API",
        description="REST API for freelance time and income tracking",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    # Store config in app state for dependency injection
    app.state.config = config

    setup_middleware(app, config)

    from freelance_tracker.api.endpoints import entries, projects, statistics, system, tasks

    app.include_router(system.router, prefix="/api/v1", tags=["system"])
    app.include_router(projects.router, prefix="/api/v1/projects", tags=["projects"])
    app.include_router(tasks.router, prefix="/api/v1/tasks", tags=["tasks"])
    app.include_router(entries.router, prefix="/api/v1/entries", tags=["entries"])
    app.include_router(statistics.router, prefix="/api/v1/statistics", tags=["statistics"])

    @app.get("/", include_in_schema=False)
    async def root() -> JSONResponse:
        """Root endpoint with pointers to docs and health."""
        return JSONResponse(
            {
                "message": "Freelance Tracker API",
                "version": __version__,
                "docs": "/docs",
                "health": "/api/v1/health",
            }
        )

    return app


def run_server(
    host: str = "localhost",
    port: int = 8000,
    reload: bool = False,
    config: Optional[ConfigManager] = None,
) -> None:
    """Run the API server using Uvicorn.

    Args:
        host: Host address to bind to
        port: Port number to bind to
        reload: Enable auto-reload for development
        config: Optional configuration manager

    Note:
        This function blocks until the server is stopped. With reload the
        application is rebuilt by uvicorn from the default config file.
    """
    import uvicorn

    if config is None:
        config = ConfigManager()

    log_level = config.get("api.advanced.log_level", "info")
    access_log = config.get("api.advanced.access_log", True)
    reload = reload or config.get("api.advanced.reload", False)

    if reload:
        uvicorn.run(
            "freelance_tracker.api.server:create_app",
            factory=True,
            host=host,
            port=port,
            reload=True,
            log_level=log_level,
            access_log=access_log,
        )
    else:
        uvicorn.run(
            create_app(config),
            host=host,
            port=port,
            log_level=log_level,
            access_log=access_log,
        )
