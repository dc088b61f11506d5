"""Media API endpoints"""

from typing import List, Optional

from fastapi import APIRouter, File, Response, UploadFile, status
from fastapi.responses import FileResponse

from ...core.exceptions import InvalidUploadError
from ...core.setting import get_settings
from ...schemas.media import MediaResponse
from ...services.media_service import MediaService
from ...utils.jwt_handler import Principal
from ..dependencies import (
    AuthenticatedPrincipalDep,
    CorrelationIdDep,
    MediaServiceDep,
    SellerPrincipalDep,
)

router = APIRouter(prefix="/media")


@router.get("/images", response_model=List[MediaResponse])
async def list_own_media(
    principal: Principal = SellerPrincipalDep,
    service: MediaService = MediaServiceDep,
):
    """Images uploaded by the caller"""
    return await service.list_own(principal)


@router.post("/images", response_model=MediaResponse)
async def upload_image(
    file: UploadFile = File(...),
    principal: Principal = AuthenticatedPrincipalDep,
    service: MediaService = MediaServiceDep,
):
    """Upload an image (sellers for products, clients for avatars)"""
    max_size = get_settings().MAX_UPLOAD_SIZE
    data = await file.read(max_size + 1)
    if len(data) > max_size:
        raise InvalidUploadError(f"File exceeds maximum size of {max_size} bytes")

    return await service.upload(file.filename, file.content_type, data, principal)


@router.get("/images/{media_id}")
async def serve_image(
    media_id: str,
    service: MediaService = MediaServiceDep,
):
    path, content_type = await service.get_file(media_id)
    return FileResponse(path, media_type=content_type)


@router.api_route("/images/{media_id}", methods=["HEAD"])
async def image_exists(
    media_id: str,
    service: MediaService = MediaServiceDep,
):
    """Existence probe used by the orphan reconciler"""
    found = await service.exists(media_id)
    return Response(
        status_code=status.HTTP_200_OK if found else status.HTTP_404_NOT_FOUND
    )


@router.delete("/images/{media_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_image(
    media_id: str,
    correlation_id: Optional[str] = CorrelationIdDep,
    principal: Principal = SellerPrincipalDep,
    service: MediaService = MediaServiceDep,
):
    await service.delete_media(media_id, principal, correlation_id=correlation_id)


@router.put("/images/{media_id}/product/{product_id}", response_model=MediaResponse)
async def associate_with_product(
    media_id: str,
    product_id: str,
    principal: Principal = SellerPrincipalDep,
    service: MediaService = MediaServiceDep,
):
    """Set the product back-reference on an owned image"""
    return await service.associate_with_product(media_id, product_id, principal)
