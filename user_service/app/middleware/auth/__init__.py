"""
Authentication middleware package for User Service.
"""

from .auth_middleware import (
    AuthenticatedPrincipal,
    UserServiceAuthMiddleware,
    authenticated_principal,
    setup_user_auth_middleware,
)

__all__ = [
    "UserServiceAuthMiddleware",
    "AuthenticatedPrincipal",
    "setup_user_auth_middleware",
    "authenticated_principal",
]
