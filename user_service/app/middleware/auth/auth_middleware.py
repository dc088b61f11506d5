from typing import Any, Awaitable, Callable, Optional

from fastapi import FastAPI, HTTPException, Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from ...core.settings import get_settings
from ...utils.jwt_handler import JWTHandler, Principal
from ...utils.logging import setup_user_logging

logger = setup_user_logging("user_service_auth")
settings = get_settings()

PUBLIC_PATHS = ["/health", "/docs", "/redoc", "/openapi.json", "/api/v1/auth"]

USERS_PREFIX = "/api/v1/users/"
OWN_ACCOUNT_PATH = "/api/v1/users/me"


def extract_token(request: Request) -> Optional[str]:
    """Bearer header first, access_token cookie as fallback"""
    header = request.headers.get("Authorization", "")
    if header.startswith("Bearer "):
        token = header[len("Bearer ") :].strip()
    else:
        token = request.cookies.get("access_token") or ""

    if not token or token in ("null", "undefined"):
        return None
    return token


class UserServiceAuthMiddleware(BaseHTTPMiddleware):
    """Authenticates requests and attaches the Principal to request.state."""

    def __init__(self, app: Any, exclude_paths: Optional[list[str]] = None):
        super().__init__(app)
        self.exclude_paths = exclude_paths or PUBLIC_PATHS
        self.jwt_handler = JWTHandler(
            secret_key=settings.SECRET_KEY, algorithm=settings.ALGORITHM
        )

    def _should_skip_auth(self, request: Request) -> bool:
        path = request.url.path.rstrip("/") or "/"

        for exclude_path in self.exclude_paths:
            if path == exclude_path or path.startswith(exclude_path + "/"):
                return True

        # Seller profiles are public, the caller's own account is not
        return (
            request.method in ("GET", "HEAD")
            and path.startswith(USERS_PREFIX)
            and path != OWN_ACCOUNT_PATH
        )

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        if self._should_skip_auth(request):
            return await call_next(request)

        correlation_id = request.headers.get("X-Correlation-ID", "unknown")
        token = extract_token(request)
        if not token:
            return self._unauthorized(request, correlation_id, "missing_token")

        try:
            principal = self.jwt_handler.decode_token(token)
        except ValueError as e:
            logger.warning(
                f"Authentication failed: {e}",
                extra={
                    "correlation_id": correlation_id,
                    "path": request.url.path,
                    "method": request.method,
                    "event_type": "auth_failed",
                },
            )
            return self._unauthorized(request, correlation_id, "invalid_token")

        request.state.principal = principal
        request.state.user_id = principal.user_id
        return await call_next(request)

    @staticmethod
    def _unauthorized(request: Request, correlation_id: str, reason: str) -> JSONResponse:
        return JSONResponse(
            status_code=401,
            content={
                "error": {
                    "type": "authentication_error",
                    "message": "Authentication required",
                    "correlation_id": correlation_id,
                    "path": request.url.path,
                    "method": request.method,
                    "details": {"reason": reason},
                }
            },
        )


class AuthenticatedPrincipal:
    """Dependency returning the request's Principal."""

    async def __call__(self, request: Request) -> Principal:
        principal: Optional[Principal] = getattr(request.state, "principal", None)
        if principal is None:
            raise HTTPException(status_code=401, detail="Authentication required")
        return principal


def setup_user_auth_middleware(
    app: FastAPI, exclude_paths: Optional[list[str]] = None
) -> None:
    """Setup authentication middleware for the User Service."""
    app.add_middleware(UserServiceAuthMiddleware, exclude_paths=exclude_paths)

    logger.info(
        "User Service authentication middleware configured",
        extra={
            "excluded_paths": exclude_paths or PUBLIC_PATHS,
            "event_type": "auth_middleware_setup",
        },
    )


authenticated_principal = AuthenticatedPrincipal()
