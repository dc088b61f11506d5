"""
Internal media endpoints for service-to-service calls.

Not authenticated; reachable only on the internal network.
"""

from typing import List

from fastapi import APIRouter

from ...events.schemas import CascadeResult
from ...schemas.media import MediaIdsRequest, MediaResponse
from ...services.media_service import MediaService
from ..dependencies import MediaServiceDep

router = APIRouter(prefix="/media/internal")


@router.post("/by-ids", response_model=List[MediaResponse])
async def list_media_by_ids(
    body: MediaIdsRequest,
    service: MediaService = MediaServiceDep,
):
    return await service.list_by_ids(body.ids)


@router.get("/products/{product_id}", response_model=List[MediaResponse])
async def list_media_by_product(
    product_id: str,
    service: MediaService = MediaServiceDep,
):
    return await service.list_by_product(product_id)


@router.get("/users/{user_id}", response_model=List[MediaResponse])
async def list_media_by_user(
    user_id: str,
    service: MediaService = MediaServiceDep,
):
    return await service.list_by_user(user_id)


@router.post("/by-ids/delete", response_model=CascadeResult)
async def delete_media_by_ids(
    body: MediaIdsRequest,
    service: MediaService = MediaServiceDep,
):
    return await service.delete_media_by_ids(body.ids)


@router.delete("/products/{product_id}", response_model=CascadeResult)
async def delete_media_by_product(
    product_id: str,
    service: MediaService = MediaServiceDep,
):
    return await service.delete_media_by_product_id(product_id)


@router.delete("/users/{user_id}", response_model=CascadeResult)
async def delete_media_by_user(
    user_id: str,
    service: MediaService = MediaServiceDep,
):
    return await service.delete_media_by_user_id(user_id)
