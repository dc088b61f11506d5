"""
Media Service FastAPI Application
================================

Main application entry point for the Media Service microservice.
Stores and serves images, keeps the media side of product association and
applies the user.deleted and product.deleted cascades.
"""

import time
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import APIRouter, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from media_service.app.api.v1.health import router as health_router
from media_service.app.api.v1.internal import router as internal_router
from media_service.app.api.v1.media import router as media_router
from media_service.app.core.database import database_manager
from media_service.app.core.event_management import (
    close_events,
    close_product_client,
    get_storage,
    init_events,
    init_product_client,
)
from media_service.app.core.setting import get_settings
from media_service.app.middleware.auth.auth_middleware import (
    setup_media_auth_middleware,
)
from media_service.app.middleware.error.error_handler import (
    setup_media_error_handling,
)
from media_service.app.utils.logging import setup_media_logging as setup_logging

settings = get_settings()
logger = setup_logging(
    "media_service",
    log_level=settings.LOG_LEVEL,
    enable_file_logging=settings.ENVIRONMENT.lower() in ("production", "staging"),
)

# (router, prefix, tag)
ROUTERS: list[tuple[APIRouter, str, str]] = [
    (health_router, "", "Health"),
    (media_router, "/api/v1", "Media Management"),
    (internal_router, "/api/v1", "Internal"),
]


def _elapsed_ms(since: float) -> int:
    return int((time.monotonic() - since) * 1000)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    started = time.monotonic()
    logger.info(
        "Starting media service",
        extra={"environment": settings.ENVIRONMENT, "service_version": settings.APP_VERSION},
    )
    try:
        # Only the database and the upload directory are required
        await database_manager.create_tables()
        get_storage().root.mkdir(parents=True, exist_ok=True)
        init_product_client()
        await init_events()
    except Exception as e:
        logger.error(
            "Failed to start media service",
            exc_info=True,
            extra={"error_type": type(e).__name__},
        )
        raise
    logger.info(
        "Media service started", extra={"startup_duration_ms": _elapsed_ms(started)}
    )

    try:
        yield
    finally:
        stopping = time.monotonic()
        await close_events()
        await close_product_client()
        await database_manager.close()
        logger.info(
            "Media service stopped",
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

    setup_media_auth_middleware(app)
    setup_media_error_handling(app)
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
        "media_service.app.main:app",
        host="0.0.0.0",
        port=8003,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower(),
        access_log=True,
    )
