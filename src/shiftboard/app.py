"""
FastAPI application factory and main app configuration.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from redis.asyncio import Redis
from redis.exceptions import RedisError

from shiftboard.adapters.db.redis.client import create_redis_client
from shiftboard.adapters.db.redis.store import RedisStore
from shiftboard.api.routers import auth, health, patients, sessions
from shiftboard.core.config import Settings, get_settings
from shiftboard.core.logging_config import configure_logging
from shiftboard.domain.errors import (
    AuthenticationError,
    DomainError,
    NotFoundError,
    PermissionDeniedError,
    StateConflictError,
    ValidationError,
)

logger = logging.getLogger(__name__)


def status_for(exc: DomainError) -> int:
    """HTTP status for a domain error."""
    if isinstance(exc, ValidationError):
        return 422
    if isinstance(exc, AuthenticationError):
        return 401
    if isinstance(exc, PermissionDeniedError):
        return 403
    if isinstance(exc, NotFoundError):
        return 404
    if isinstance(exc, StateConflictError):
        return 409
    return 400


def bind_store(app: FastAPI, client: Redis, settings: Settings) -> None:
    app.state.redis = client
    app.state.store = RedisStore(client, ttl_seconds=settings.tracker.record_ttl_seconds)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    settings = app.state.settings
    configure_logging(settings.logging)
    logger.info(
        "Starting %s v%s (env=%s, debug=%s)",
        settings.app_name,
        settings.app_version,
        settings.app_env,
        settings.debug,
    )

    owns_client = getattr(app.state, "redis", None) is None
    if owns_client:
        bind_store(app, create_redis_client(settings.redis), settings)

    yield

    logger.info("Shutting down %s", settings.app_name)
    if owns_client:
        await app.state.redis.aclose()


def create_app(
    settings: Optional[Settings] = None, redis_client: Optional[Redis] = None
) -> FastAPI:
    """Create and configure FastAPI application.

    A ``redis_client`` passed in is bound immediately and never closed by the
    app; otherwise one is created from ``settings.redis`` at startup.
    """
    settings = settings or get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="Shift-handover task tracker for ward teams",
        version=settings.app_version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.redis = None
    if redis_client is not None:
        bind_store(app, redis_client, settings)

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors.allowed_origins,
        allow_credentials=settings.cors.allow_credentials,
        allow_methods=settings.cors.allowed_methods,
        allow_headers=settings.cors.allowed_headers,
    )

    # Include routers
    app.include_router(health.router)
    app.include_router(auth.router)
    app.include_router(sessions.router)
    app.include_router(patients.router)

    @app.exception_handler(DomainError)
    async def domain_error_handler(request: Request, exc: DomainError):
        return JSONResponse(
            status_code=status_for(exc),
            content={
                "error": exc.error_code or "DOMAIN_ERROR",
                "message": exc.message,
                "details": exc.details,
            },
        )

    @app.exception_handler(RedisError)
    async def store_error_handler(request: Request, exc: RedisError):
        logger.error("Store error on %s %s", request.method, request.url.path, exc_info=exc)
        return JSONResponse(
            status_code=503,
            content={
                "error": "STORE_UNAVAILABLE",
                "message": "The data store is temporarily unavailable",
                "details": {"type": exc.__class__.__name__},
            },
        )

    @app.get("/")
    async def root():
        """Root endpoint with API information."""
        return {
            "service": settings.app_name,
            "version": settings.app_version,
            "environment": settings.app_env,
            "status": "running",
            "docs": "/docs" if settings.debug else "disabled",
            "endpoints": {
                "health": "/health",
                "login": "POST /auth/login",
                "sessions": "GET /sessions",
                "join_session": "POST /sessions/{id}/join",
                "end_session": "POST /sessions/{id}/end",
                "session_patients": "GET /sessions/{id}/patients",
                "register_patient": "POST /sessions/{id}/patients",
                "toggle_task": "POST /tasks/{id}/toggle",
            },
        }

    return app


# Create the app instance
app = create_app()
