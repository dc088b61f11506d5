import traceback
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple, Type

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from ...core.exceptions import AuthorizationError, InvalidUploadError, NotFoundError
from ...utils.logging import setup_media_logging

logger = setup_media_logging("media_service_error_handler")

# Domain error -> (status code, error type in the envelope)
DOMAIN_ERRORS: Dict[Type[Exception], Tuple[int, str]] = {
    InvalidUploadError: (400, "invalid_upload"),
    AuthorizationError: (403, "permission_error"),
    NotFoundError: (404, "not_found"),
}


class MediaServiceErrorHandler:
    """Maps exceptions onto the shared JSON error envelope."""

    @staticmethod
    def setup_error_handlers(app: FastAPI) -> None:
        app.add_exception_handler(
            StarletteHTTPException, MediaServiceErrorHandler.http_error  # type: ignore
        )
        app.add_exception_handler(
            RequestValidationError, MediaServiceErrorHandler.validation_error  # type: ignore
        )
        for error_class in DOMAIN_ERRORS:
            app.add_exception_handler(error_class, MediaServiceErrorHandler.domain_error)
        app.add_exception_handler(Exception, MediaServiceErrorHandler.unhandled_error)

    @staticmethod
    async def http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return MediaServiceErrorHandler.error_response(
            request, exc.status_code, "http_error", str(exc.detail)
        )

    @staticmethod
    async def validation_error(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        errors = [
            {
                "field": ".".join(str(loc) for loc in error["loc"]),
                "message": error["msg"],
                "type": error["type"],
            }
            for error in exc.errors()
        ]
        return MediaServiceErrorHandler.error_response(
            request,
            422,
            "validation_error",
            "Request validation failed",
            details={"validation_errors": errors},
        )

    @staticmethod
    async def domain_error(request: Request, exc: Exception) -> JSONResponse:
        status_code, error_type = next(
            DOMAIN_ERRORS[cls] for cls in type(exc).__mro__ if cls in DOMAIN_ERRORS
        )
        return MediaServiceErrorHandler.error_response(
            request, status_code, error_type, str(exc) or error_type
        )

    @staticmethod
    async def unhandled_error(request: Request, exc: Exception) -> JSONResponse:
        logger.error(
            "Unhandled exception occurred",
            extra={
                "user_id": getattr(request.state, "user_id", "anonymous"),
                "path": request.url.path,
                "method": request.method,
                "exception_type": type(exc).__name__,
                "traceback": traceback.format_exc(),
                "event_type": "unhandled_exception",
            },
        )
        return MediaServiceErrorHandler.error_response(
            request,
            500,
            "internal_server_error",
            "An internal server error occurred",
            details={"exception_type": type(exc).__name__},
        )

    @staticmethod
    def error_response(
        request: Request,
        status_code: int,
        error_type: str,
        message: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> JSONResponse:
        correlation_id = request.headers.get("X-Correlation-ID", "unknown")
        user_id = getattr(request.state, "user_id", "anonymous")

        body: Dict[str, Any] = {
            "type": error_type,
            "message": message,
            "correlation_id": correlation_id,
            "user_id": user_id,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "path": request.url.path,
            "method": request.method,
        }
        if details:
            body["details"] = details

        if status_code < 500:
            logger.warning(
                f"Client error: {error_type}",
                extra={
                    "correlation_id": correlation_id,
                    "user_id": user_id,
                    "status_code": status_code,
                    "path": request.url.path,
                    "event_type": "client_error",
                },
            )

        return JSONResponse(status_code=status_code, content={"error": body})


def setup_media_error_handling(app: FastAPI) -> None:
    MediaServiceErrorHandler.setup_error_handlers(app)
