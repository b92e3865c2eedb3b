"""Middleware and error handlers for the FastAPI application."""

import logging

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from freelance_tracker.core.config import ConfigManager
from freelance_tracker.core.exceptions import (
    PersistenceError,
    RecordNotFoundError,
    ValidationError,
)

logger = logging.getLogger(__name__)


def setup_cors(app: FastAPI, config: ConfigManager) -> None:
    """Configure CORS middleware.

    Args:
        app: FastAPI application instance
        config: Configuration manager

    Note:
        CORS is configured based on the api.cors section in config.
        By default, only localhost origins are allowed.
    """
    if not config.get("api.cors.enabled", True):
        return

    origins = config.get("api.cors.origins", ["http://localhost:3000"])

    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """Map application errors to HTTP responses with a ``detail`` message.

    ValidationError becomes 422, RecordNotFoundError 404 and any other
    PersistenceError 503.
    """

    @app.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, content={"detail": str(exc)}
        )

    @app.exception_handler(RecordNotFoundError)
    async def not_found_handler(request: Request, exc: RecordNotFoundError) -> JSONResponse:
        return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": str(exc)})

    @app.exception_handler(PersistenceError)
    async def persistence_error_handler(request: Request, exc: PersistenceError) -> JSONResponse:
        logger.error(f"Storage failure on {request.method} {request.url.path}: {exc}")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content={"detail": str(exc)}
        )


def setup_middleware(app: FastAPI, config: ConfigManager) -> None:
    """Set up all middleware and error handlers for the application.

    Args:
        app: FastAPI application instance
        config: Configuration manager
    """
    setup_cors(app, config)
    setup_exception_handlers(app)
