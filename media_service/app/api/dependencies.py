"""
FastAPI dependency injection for Media Service
"""

from typing import AsyncGenerator, Optional

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.database import get_db_session
from ..core.event_management import get_product_client, get_storage
from ..middleware.auth.auth_middleware import authenticated_principal, seller_principal
from ..services.media_service import MediaService
from ..utils.file_storage import MediaStorage
from ..utils.product_client import ProductServiceClient


async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    """Provide async database session"""
    async for session in get_db_session():
        yield session


def get_media_storage() -> MediaStorage:
    return get_storage()


def get_product_service_client() -> Optional[ProductServiceClient]:
    return get_product_client()


def get_media_service(
    session: AsyncSession = Depends(get_async_session),
    storage: MediaStorage = Depends(get_media_storage),
    product_client: Optional[ProductServiceClient] = Depends(
        get_product_service_client
    ),
) -> MediaService:
    """Provide MediaService instance with database, storage and product client"""
    return MediaService(session, storage, product_client)


def get_correlation_id(request: Request) -> Optional[str]:
    return request.headers.get("X-Correlation-ID") or request.headers.get(
        "x-request-id"
    )


CorrelationIdDep = Depends(get_correlation_id)
AuthenticatedPrincipalDep = Depends(authenticated_principal)
SellerPrincipalDep = Depends(seller_principal)
MediaServiceDep = Depends(get_media_service)
