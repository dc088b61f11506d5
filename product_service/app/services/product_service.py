"""Product service for business logic"""

from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import AuthorizationError, NotFoundError, TransportError
from ..core.setting import get_settings
from ..events.event_producers import ProductEventProducer
from ..events.schemas import USER_DELETED, CascadeResult
from ..models.product import Product
from ..repository.product_repository import DeletedOwnerRepository, ProductRepository
from ..schemas.product import ProductCreate, ProductResponse, ProductUpdate
from ..utils.jwt_handler import Principal
from ..utils.logging import setup_product_logging as setup_logging
from ..utils.media_client import MediaServiceClient

settings = get_settings()
logger = setup_logging("product_service", log_level=settings.LOG_LEVEL)


class ProductService:
    """Service class for product business logic"""

    def __init__(
        self,
        db: AsyncSession,
        event_producer: Optional[ProductEventProducer] = None,
        media_client: Optional[MediaServiceClient] = None,
    ):
        self.db = db
        self.repository = ProductRepository(db)
        self.owners = DeletedOwnerRepository(db)
        self.event_producer = event_producer
        self.media_client = media_client

    def _convert_to_product_response(self, product: Product) -> ProductResponse:
        media_ids = list(product.media_ids or [])
        public_url = settings.MEDIA_PUBLIC_URL.rstrip("/")
        return ProductResponse(
            id=product.id,
            name=product.name,
            description=product.description,
            price=product.price,
            stock=product.quantity,
            seller_id=product.user_id,
            media_ids=media_ids,
            image_urls=[f"{public_url}/images/{media_id}" for media_id in media_ids],
            created_at=product.created_at,
            updated_at=product.updated_at,
        )

    async def _get_owned_product(self, product_id: str, principal: Principal) -> Product:
        product = await self.repository.get_product_by_id(product_id)
        if not product:
            raise NotFoundError(f"Product not found with id: {product_id}")
        if product.user_id != principal.user_id:
            raise AuthorizationError("You do not have permission to modify this product")
        if await self.owners.is_deleted(principal.user_id):
            raise AuthorizationError("Account has been deleted")
        return product

    async def list_products(self, seller_id: Optional[str] = None) -> List[ProductResponse]:
        products = await self.repository.list_products(seller_id)
        return [self._convert_to_product_response(p) for p in products]

    async def get_product(self, product_id: str) -> ProductResponse:
        product = await self.repository.get_product_by_id(product_id)
        if not product:
            raise NotFoundError(f"Product not found with id: {product_id}")
        return self._convert_to_product_response(product)

    async def create_product(
        self,
        product_data: ProductCreate,
        principal: Principal,
        correlation_id: Optional[str] = None,
    ) -> ProductResponse:
        """Create a new product owned by the caller"""
        if await self.owners.is_deleted(principal.user_id):
            raise AuthorizationError("Account has been deleted")

        product = await self.repository.create_product(product_data, principal.user_id)
        logger.info(
            "Product created successfully",
            extra={
                "product_id": product.id,
                "user_id": principal.user_id,
                "correlation_id": correlation_id,
            },
        )
        return self._convert_to_product_response(product)

    async def update_product(
        self,
        product_id: str,
        product_data: ProductUpdate,
        principal: Principal,
        correlation_id: Optional[str] = None,
    ) -> ProductResponse:
        product = await self._get_owned_product(product_id, principal)
        product = await self.repository.update_product(product, product_data)
        logger.info(
            "Product updated successfully",
            extra={
                "product_id": product_id,
                "user_id": principal.user_id,
                "correlation_id": correlation_id,
            },
        )
        return self._convert_to_product_response(product)

    async def delete_product(
        self,
        product_id: str,
        principal: Principal,
        correlation_id: Optional[str] = None,
    ) -> None:
        """Delete the product, then announce it so its media is cascaded"""
        product = await self._get_owned_product(product_id, principal)
        media_ids = list(product.media_ids or [])

        await self.repository.delete_product(product)
        logger.info(
            "Product deleted successfully",
            extra={
                "product_id": product_id,
                "user_id": principal.user_id,
                "media_count": len(media_ids),
                "correlation_id": correlation_id,
            },
        )
        await self._announce_deletion(product_id, media_ids, correlation_id)

    async def delete_products_by_user(self, user_id: str) -> CascadeResult:
        """Cascade step for user.deleted: drop every product of the owner"""
        products = await self.repository.list_products_by_user(user_id)
        result = CascadeResult(topic=USER_DELETED, target_id=user_id)

        for product in products:
            product_id = product.id
            media_ids = list(product.media_ids or [])
            await self.repository.delete_product(product)
            result.deleted += 1
            if await self._announce_deletion(product_id, media_ids):
                result.published += 1

        return result

    async def _announce_deletion(
        self,
        product_id: str,
        media_ids: List[str],
        correlation_id: Optional[str] = None,
    ) -> bool:
        if not self.event_producer:
            logger.warning(
                "No event producer available, product.deleted not emitted",
                extra={
                    "product_id": product_id,
                    "media_ids": media_ids,
                    "correlation_id": correlation_id,
                    "operation": "publish_product_deleted_skipped",
                },
            )
            return False
        return await self.event_producer.publish_product_deleted(
            product_id, media_ids, correlation_id=correlation_id
        )

    async def associate_media(
        self,
        product_id: str,
        media_id: str,
        principal: Principal,
        correlation_id: Optional[str] = None,
    ) -> ProductResponse:
        """
        Link media to the product.

        The product-side list is authoritative and committed first; the
        back-reference on the media record is an advisory call whose failure
        leaves the link one-sided until a retry or reconciliation.
        """
        product = await self._get_owned_product(product_id, principal)
        added = await self.repository.add_media_id(product, media_id)

        if self.media_client:
            try:
                await self.media_client.associate_product(
                    media_id, product_id, token=principal.token
                )
            except TransportError as e:
                logger.error(
                    "Failed to update media productId, back-reference left unset",
                    extra={
                        "product_id": product_id,
                        "media_id": media_id,
                        "error": str(e),
                        "correlation_id": correlation_id,
                        "operation": "associate_media_bridge_failed",
                    },
                )

        logger.info(
            "Media associated with product",
            extra={
                "product_id": product_id,
                "media_id": media_id,
                "newly_added": added,
                "correlation_id": correlation_id,
            },
        )
        return self._convert_to_product_response(product)

    async def remove_media_from_product(self, product_id: str, media_id: str) -> None:
        """Idempotent set-removal requested by the media service"""
        removed = await self.repository.remove_media_ids(product_id, [media_id])
        if removed is None:
            raise NotFoundError(f"Product not found with id: {product_id}")

        logger.info(
            "Media reference removed from product",
            extra={
                "product_id": product_id,
                "media_id": media_id,
                "removed": bool(removed),
            },
        )
