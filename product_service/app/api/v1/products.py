"""Product API endpoints"""

from typing import List, Optional

from fastapi import APIRouter, Query, status
from fastapi.responses import PlainTextResponse

from ...schemas.product import ProductCreate, ProductResponse, ProductUpdate
from ...services.product_service import ProductService
from ...services.reconciliation_service import OrphanReconciler
from ...utils.jwt_handler import Principal
from ...utils.logging import setup_product_logging as setup_logging
from ..dependencies import (
    CorrelationIdDep,
    OrphanReconcilerDep,
    ProductServiceDep,
    SellerPrincipalDep,
)

logger = setup_logging("products_api")
router = APIRouter(prefix="/products")


@router.get("/", response_model=List[ProductResponse])
async def list_products(
    seller_id: Optional[str] = Query(None),
    service: ProductService = ProductServiceDep,
):
    """List products, optionally filtered by seller"""
    return await service.list_products(seller_id)


@router.post("/", response_model=ProductResponse, status_code=status.HTTP_201_CREATED)
async def create_product(
    product_data: ProductCreate,
    correlation_id: Optional[str] = CorrelationIdDep,
    principal: Principal = SellerPrincipalDep,
    service: ProductService = ProductServiceDep,
):
    """Create a new product (seller only)"""
    return await service.create_product(
        product_data, principal, correlation_id=correlation_id
    )


@router.post(
    "/cleanup-orphaned-media",
    response_class=PlainTextResponse,
)
async def cleanup_orphaned_media(
    reconciler: OrphanReconciler = OrphanReconcilerDep,
):
    """Drop media references the media service confirms gone (internal)"""
    report = await reconciler.reconcile()
    return report.summary


@router.get("/{product_id}", response_model=ProductResponse)
async def get_product(
    product_id: str,
    service: ProductService = ProductServiceDep,
):
    """Get product details by ID"""
    return await service.get_product(product_id)


@router.put("/{product_id}", response_model=ProductResponse)
async def update_product(
    product_id: str,
    product_data: ProductUpdate,
    correlation_id: Optional[str] = CorrelationIdDep,
    principal: Principal = SellerPrincipalDep,
    service: ProductService = ProductServiceDep,
):
    """Update product (owner only)"""
    return await service.update_product(
        product_id, product_data, principal, correlation_id=correlation_id
    )


@router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_product(
    product_id: str,
    correlation_id: Optional[str] = CorrelationIdDep,
    principal: Principal = SellerPrincipalDep,
    service: ProductService = ProductServiceDep,
):
    """Delete product (owner only); its media is removed asynchronously"""
    await service.delete_product(product_id, principal, correlation_id=correlation_id)


@router.post("/{product_id}/media/{media_id}", response_model=ProductResponse)
async def associate_media(
    product_id: str,
    media_id: str,
    correlation_id: Optional[str] = CorrelationIdDep,
    principal: Principal = SellerPrincipalDep,
    service: ProductService = ProductServiceDep,
):
    """Attach an uploaded image to the product (owner only)"""
    return await service.associate_media(
        product_id, media_id, principal, correlation_id=correlation_id
    )


@router.delete(
    "/{product_id}/remove-media/{media_id}", status_code=status.HTTP_204_NO_CONTENT
)
async def remove_media_from_product(
    product_id: str,
    media_id: str,
    service: ProductService = ProductServiceDep,
):
    """Remove a media reference after the media was deleted (internal)"""
    await service.remove_media_from_product(product_id, media_id)
