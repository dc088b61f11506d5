"""
FastAPI dependency injection for Product Service

Provides dependency injection for services, authentication, database sessions,
the media service client and correlation ID management.
"""

from typing import AsyncGenerator, Optional

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.database import get_db_session
from ..core.event_management import get_event_producer, get_media_client
from ..core.setting import get_settings
from ..events.event_producers import ProductEventProducer
from ..middleware.auth.auth_middleware import authenticated_principal, seller_principal
from ..services.product_service import ProductService
from ..services.reconciliation_service import OrphanReconciler
from ..utils.media_client import MediaServiceClient

# =====================================================
# DATABASE DEPENDENCIES
# =====================================================


async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    async for session in get_db_session():
        yield session


# =====================================================
# EVENT PUBLISHER & CLIENT DEPENDENCIES
# =====================================================


def get_product_event_producer() -> Optional[ProductEventProducer]:
    """Provide ProductEventProducer instance"""
    return get_event_producer()


def get_media_service_client() -> Optional[MediaServiceClient]:
    return get_media_client()


# =====================================================
# SERVICE DEPENDENCIES
# =====================================================


def get_product_service(
    session: AsyncSession = Depends(get_async_session),
    event_producer: Optional[ProductEventProducer] = Depends(
        get_product_event_producer
    ),
    media_client: Optional[MediaServiceClient] = Depends(get_media_service_client),
) -> ProductService:
    """Provide ProductService instance with database, events and media bridge"""
    return ProductService(session, event_producer, media_client)


def get_orphan_reconciler(
    session: AsyncSession = Depends(get_async_session),
    media_client: Optional[MediaServiceClient] = Depends(get_media_service_client),
) -> OrphanReconciler:
    """Provide OrphanReconciler bound to the shared media client"""
    if media_client is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Media service client not available",
        )
    return OrphanReconciler(
        session,
        media_client,
        probe_concurrency=get_settings().RECONCILE_PROBE_CONCURRENCY,
    )


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
SellerPrincipalDep = Depends(seller_principal)
ProductServiceDep = Depends(get_product_service)
OrphanReconcilerDep = Depends(get_orphan_reconciler)
