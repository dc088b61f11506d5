"""Media service for business logic"""

from pathlib import Path
from typing import Iterable, List, Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import (
    AuthorizationError,
    InvalidUploadError,
    NotFoundError,
    TransportError,
)
from ..core.setting import get_settings
from ..events.schemas import CascadeResult
from ..models.base import new_id
from ..models.media import Media
from ..repository.media_repository import DeletedOwnerRepository, MediaRepository
from ..schemas.media import MediaResponse
from ..utils.file_storage import MediaStorage
from ..utils.jwt_handler import Principal
from ..utils.logging import setup_media_logging as setup_logging
from ..utils.product_client import ProductServiceClient

settings = get_settings()
logger = setup_logging("media_service", log_level=settings.LOG_LEVEL)

_EXTENSIONS = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/gif": ".gif",
    "image/webp": ".webp",
}


class MediaService:
    """Service class for media business logic"""

    def __init__(
        self,
        db: AsyncSession,
        storage: MediaStorage,
        product_client: Optional[ProductServiceClient] = None,
    ):
        self.db = db
        self.repository = MediaRepository(db)
        self.owners = DeletedOwnerRepository(db)
        self.storage = storage
        self.product_client = product_client

    async def _get_owned_media(self, media_id: str, principal: Principal) -> Media:
        media = await self.repository.get_media_by_id(media_id)
        if not media:
            raise NotFoundError(f"Media not found with id: {media_id}")
        if media.user_id != principal.user_id:
            raise AuthorizationError("You do not have permission to modify this media")
        if await self.owners.is_deleted(principal.user_id):
            raise AuthorizationError("Account has been deleted")
        return media

    # ------------------------------------------------------------------
    # Owner operations
    # ------------------------------------------------------------------

    async def upload(
        self,
        filename: str,
        content_type: Optional[str],
        data: bytes,
        principal: Principal,
    ) -> MediaResponse:
        """Store an uploaded image owned by the caller"""
        content_type = (content_type or "").lower()
        if not content_type.startswith("image/"):
            raise InvalidUploadError("Only image files are allowed")
        if not data:
            raise InvalidUploadError("Uploaded file is empty")
        if len(data) > settings.MAX_UPLOAD_SIZE:
            raise InvalidUploadError(
                f"File exceeds maximum size of {settings.MAX_UPLOAD_SIZE} bytes"
            )
        if await self.owners.is_deleted(principal.user_id):
            raise AuthorizationError("Account has been deleted")

        media_id = new_id()
        suffix = _EXTENSIONS.get(content_type) or Path(filename or "").suffix.lower()
        file_path = f"{principal.user_id}/{media_id}{suffix}"
        await self.storage.save(file_path, data)

        try:
            media = await self.repository.create_media(
                Media(
                    id=media_id,
                    original_filename=filename or media_id,
                    content_type=content_type,
                    size=len(data),
                    file_path=file_path,
                    user_id=principal.user_id,
                    url=f"{settings.MEDIA_PUBLIC_URL.rstrip('/')}/images/{media_id}",
                )
            )
        except Exception:
            await self.storage.remove(file_path)
            raise

        logger.info(
            "Media uploaded",
            extra={
                "media_id": media_id,
                "user_id": principal.user_id,
                "size": len(data),
                "content_type": content_type,
            },
        )
        return MediaResponse.model_validate(media)

    async def list_own(self, principal: Principal) -> List[MediaResponse]:
        media = await self.repository.list_by_user(principal.user_id)
        return [MediaResponse.model_validate(m) for m in media]

    async def get_file(self, media_id: str) -> Tuple[Path, str]:
        """Stored file and content type of a media item"""
        media = await self.repository.get_media_by_id(media_id)
        if not media:
            raise NotFoundError(f"Media not found with id: {media_id}")

        path = self.storage.resolve(media.file_path)
        if path is None:
            raise NotFoundError(f"File missing for media: {media_id}")
        return path, media.content_type

    async def exists(self, media_id: str) -> bool:
        return await self.repository.get_media_by_id(media_id) is not None

    async def delete_media(
        self,
        media_id: str,
        principal: Principal,
        correlation_id: Optional[str] = None,
    ) -> None:
        """
        Delete an image, then ask the product service to drop its reference.

        The removal call is advisory: if it fails the product keeps a dangling
        id until the orphan reconciler sweeps it.
        """
        media = await self._get_owned_media(media_id, principal)
        product_id = media.product_id
        file_path = media.file_path

        await self.repository.delete_media(media)
        await self.storage.remove(file_path)
        logger.info(
            "Media deleted",
            extra={
                "media_id": media_id,
                "user_id": principal.user_id,
                "product_id": product_id,
                "correlation_id": correlation_id,
            },
        )

        if product_id and self.product_client:
            try:
                await self.product_client.remove_media(product_id, media_id)
            except TransportError as e:
                logger.error(
                    "Failed to remove media reference from product",
                    extra={
                        "media_id": media_id,
                        "product_id": product_id,
                        "error": str(e),
                        "correlation_id": correlation_id,
                        "operation": "remove_media_reference_failed",
                    },
                )

    async def associate_with_product(
        self, media_id: str, product_id: str, principal: Principal
    ) -> MediaResponse:
        """Set the product back-reference; last association wins"""
        media = await self._get_owned_media(media_id, principal)

        previous = media.product_id
        if previous != product_id:
            if previous:
                logger.info(
                    "Media reassigned to another product",
                    extra={
                        "media_id": media_id,
                        "previous_product_id": previous,
                        "product_id": product_id,
                    },
                )
            media = await self.repository.set_product(media, product_id)

        return MediaResponse.model_validate(media)

    # ------------------------------------------------------------------
    # Internal lookups and cascade deletes
    # ------------------------------------------------------------------

    async def list_by_ids(self, media_ids: Iterable[str]) -> List[MediaResponse]:
        media = await self.repository.list_by_ids(media_ids)
        return [MediaResponse.model_validate(m) for m in media]

    async def list_by_product(self, product_id: str) -> List[MediaResponse]:
        media = await self.repository.list_by_product(product_id)
        return [MediaResponse.model_validate(m) for m in media]

    async def list_by_user(self, user_id: str) -> List[MediaResponse]:
        media = await self.repository.list_by_user(user_id)
        return [MediaResponse.model_validate(m) for m in media]

    async def delete_media_by_ids(
        self, media_ids: Iterable[str], topic: str = "internal"
    ) -> CascadeResult:
        ids = list(dict.fromkeys(media_ids))
        media = await self.repository.list_by_ids(ids)
        result = CascadeResult(topic=topic, target_id=",".join(ids), requested=len(ids))
        return await self._delete_all(media, result)

    async def delete_media_by_product_id(
        self, product_id: str, topic: str = "internal"
    ) -> CascadeResult:
        media = await self.repository.list_by_product(product_id)
        result = CascadeResult(topic=topic, target_id=product_id, requested=len(media))
        return await self._delete_all(media, result)

    async def delete_media_by_user_id(
        self, user_id: str, topic: str = "internal"
    ) -> CascadeResult:
        media = await self.repository.list_by_user(user_id)
        result = CascadeResult(topic=topic, target_id=user_id, requested=len(media))
        return await self._delete_all(media, result)

    async def _delete_all(self, media: List[Media], result: CascadeResult) -> CascadeResult:
        file_paths = [m.file_path for m in media]
        result.deleted = await self.repository.delete_many(media)
        result.already_absent = result.requested - result.deleted

        for file_path in file_paths:
            await self.storage.remove(file_path)
        return result
