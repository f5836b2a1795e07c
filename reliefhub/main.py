"""
ReliefHub - FastAPI Application Entry Point

Connects disaster victims, volunteers and relief organizations with
location-tagged aid resources and personalized guidance.

DESIGN PRINCIPLES:
- All state lives in explicit in-memory stores (process lifetime only)
- Recommendations come from a deterministic scoring formula, not a model
- The HTTP layer adds no business logic; it maps core errors to status codes
"""

from typing import Optional
import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from reliefhub.core.errors import (
    DuplicateIdError,
    InvalidChannelError,
    InvalidCoordinateError,
    LocationError,
    NotFoundError,
    PermissionDeniedError,
)
from reliefhub.core.logging_config import setup_logging
from reliefhub.core.settings import Settings, settings as default_settings
from reliefhub.routes import health, notifications, recommendations, relief_points, session
from reliefhub.services.container import ServiceContainer, build_container

logger = logging.getLogger(__name__)


def _error_response(status_code: int, exc: Exception) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"detail": str(exc)})


def register_exception_handlers(app: FastAPI) -> None:
    """Map core error kinds to HTTP responses."""

    @app.exception_handler(NotFoundError)
    async def not_found_handler(request: Request, exc: NotFoundError):
        return _error_response(status.HTTP_404_NOT_FOUND, exc)

    @app.exception_handler(DuplicateIdError)
    async def duplicate_id_handler(request: Request, exc: DuplicateIdError):
        return _error_response(status.HTTP_409_CONFLICT, exc)

    @app.exception_handler(InvalidChannelError)
    async def invalid_channel_handler(request: Request, exc: InvalidChannelError):
        return _error_response(status.HTTP_422_UNPROCESSABLE_ENTITY, exc)

    @app.exception_handler(InvalidCoordinateError)
    async def invalid_coordinate_handler(request: Request, exc: InvalidCoordinateError):
        return _error_response(status.HTTP_422_UNPROCESSABLE_ENTITY, exc)

    @app.exception_handler(LocationError)
    async def location_error_handler(request: Request, exc: LocationError):
        if isinstance(exc, PermissionDeniedError):
            code = status.HTTP_403_FORBIDDEN
        else:
            code = status.HTTP_503_SERVICE_UNAVAILABLE
        return JSONResponse(status_code=code, content={"detail": str(exc), "kind": exc.kind})

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        logger.warning(f"Validation error on {request.method} {request.url.path}: {exc.errors()}")
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={"detail": exc.errors()},
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled exception on {request.method} {request.url.path}: {exc}", exc_info=exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": f"Internal server error: {str(exc)}"},
        )


def create_app(
    settings: Optional[Settings] = None,
    container: Optional[ServiceContainer] = None,
) -> FastAPI:
    """
    Build the FastAPI app around a service container.

    Tests pass their own container to get isolated stores.
    """
    settings = settings or default_settings
    setup_logging(settings.LOG_LEVEL)

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="Relief points, alerts and personalized recommendations for disaster response",
        debug=settings.DEBUG,
    )
    app.state.container = container or build_container(settings)

    register_exception_handlers(app)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health.router)
    app.include_router(session.router)
    app.include_router(relief_points.router)
    app.include_router(recommendations.router)
    app.include_router(notifications.router)

    @app.get("/")
    async def root():
        """
        Root endpoint - API information.
        """
        return {
            "service": settings.APP_NAME,
            "version": settings.APP_VERSION,
            "status": "running",
            "docs": "/docs",
            "health": "/health",
        }

    logger.info(f"{settings.APP_NAME} v{settings.APP_VERSION} ready")
    return app


app = create_app()
