"""
User Service FastAPI Application
===============================

Main application entry point for the User Service microservice.
Handles registration, login, profiles and account deletion, which starts
the user.deleted cascade in the product and media services.
"""

import time
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import APIRouter, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from user_service.app.api.v1.auth import router as auth_router
from user_service.app.api.v1.health import router as health_router
from user_service.app.api.v1.users import router as users_router
from user_service.app.core.database import database_manager
from user_service.app.core.event_management import close_events, init_events
from user_service.app.core.settings import get_settings
from user_service.app.middleware.auth.auth_middleware import (
    setup_user_auth_middleware,
)
from user_service.app.middleware.error.error_handler import (
    setup_user_error_handling,
)
from user_service.app.utils.logging import setup_user_logging as setup_logging

settings = get_settings()
logger = setup_logging(
    "user_service",
    log_level=settings.LOG_LEVEL,
    enable_file_logging=settings.ENVIRONMENT.lower() in ("production", "staging"),
)

# (router, prefix, tag)
ROUTERS: list[tuple[APIRouter, str, str]] = [
    (health_router, "", "Health"),
    (auth_router, "/api/v1", "Authentication"),
    (users_router, "/api/v1", "Users"),
]


def _elapsed_ms(since: float) -> int:
    return int((time.monotonic() - since) * 1000)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    started = time.monotonic()
    logger.info(
        "Starting user service",
        extra={"environment": settings.ENVIRONMENT, "service_version": settings.APP_VERSION},
    )
    try:
        # Only the database is required; Kafka degrades
        await database_manager.create_tables()
        await init_events()
    except Exception as e:
        logger.error(
            "Failed to start user service",
            exc_info=True,
            extra={"error_type": type(e).__name__},
        )
        raise
    logger.info(
        "User service started", extra={"startup_duration_ms": _elapsed_ms(started)}
    )

    try:
        yield
    finally:
        stopping = time.monotonic()
        await close_events()
        await database_manager.close()
        logger.info(
            "User service stopped",
            extra={"shutdown_duration_ms": _elapsed_ms(stopping)},
        )


def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        debug=settings.DEBUG,
        lifespan=lifespan,
        openapi_url="/openapi.json" if settings.DEBUG else None,
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url="/redoc" if settings.DEBUG else None,
    )

    setup_user_auth_middleware(app)
    setup_user_error_handling(app)
    # Added last so it runs first and answers preflights without a token
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=settings.CORS_CREDENTIALS,
        allow_methods=settings.CORS_METHODS,
        allow_headers=settings.CORS_HEADERS,
    )

    for router, prefix, tag in ROUTERS:
        app.include_router(router, prefix=prefix, tags=[tag])
    logger.info(
        "API routes configured",
        extra={"routers": [tag for _, _, tag in ROUTERS], "cors_origins": settings.CORS_ORIGINS},
    )
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(  # type: ignore
        "user_service.app.main:app",
        host="0.0.0.0",
        port=8001,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower(),
        access_log=True,
    )
