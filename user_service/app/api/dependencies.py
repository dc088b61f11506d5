"""
FastAPI dependency injection for User Service

Provides dependency injection for services, authentication, database sessions
and correlation ID management.
"""

from typing import AsyncGenerator, Optional

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.database import get_db_session
from ..core.event_management import get_event_producer
from ..events.event_producers import UserEventProducer
from ..middleware.auth.auth_middleware import authenticated_principal
from ..services.auth_service import AuthService
from ..services.user_service import UserService

# =====================================================
# DATABASE DEPENDENCIES
# =====================================================


async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    async for session in get_db_session():
        yield session


# =====================================================
# SERVICE DEPENDENCIES
# =====================================================


def get_user_event_producer() -> Optional[UserEventProducer]:
    return get_event_producer()


def get_auth_service(session: AsyncSession = Depends(get_async_session)) -> AuthService:
    return AuthService(session)


def get_user_service(
    session: AsyncSession = Depends(get_async_session),
    event_producer: Optional[UserEventProducer] = Depends(get_user_event_producer),
) -> UserService:
    """Provide UserService instance with database and the user.deleted producer"""
    return UserService(session, event_producer)


# =====================================================
# REQUEST CONTEXT DEPENDENCIES
# =====================================================


def get_correlation_id(request: Request) -> Optional[str]:
    """Correlation id propagated by the caller, if any"""
    return request.headers.get("X-Correlation-ID") or request.headers.get(
        "x-request-id"
    )


# =====================================================
# COMMON DEPENDENCY ALIASES
# =====================================================

CorrelationIdDep = Depends(get_correlation_id)
AuthenticatedPrincipalDep = Depends(authenticated_principal)
AuthServiceDep = Depends(get_auth_service)
UserServiceDep = Depends(get_user_service)
