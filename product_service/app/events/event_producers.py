"""
Product Service Event Producers
==============================

Publishes ``product.deleted`` so the media service can cascade the deletion
to the product's images. Publishing is best effort: the product row is
already gone when this runs, and a failure here only leaves the cascade
pending until the next reconciliation or a manual replay.
"""

from typing import List

from ..core.setting import get_settings
from ..utils.logging import setup_product_logging as setup_logging
from .base import EventPublisher
from .schemas import encode_product_deleted

settings = get_settings()
logger = setup_logging("product_service.events.producers", log_level=settings.LOG_LEVEL)


class ProductEventProducer:
    """Product service cascade publisher"""

    def __init__(self, kafka_publisher: EventPublisher):
        self.kafka_publisher = kafka_publisher
        self.topic = settings.KAFKA_TOPIC_PRODUCT_DELETED

    async def publish_product_deleted(
        self,
        product_id: str,
        media_ids: List[str],
        correlation_id: str | None = None,
    ) -> bool:
        """Emit exactly one product.deleted event; never raises"""
        payload = encode_product_deleted(product_id, media_ids)

        try:
            published = await self.kafka_publisher.publish(
                self.topic, payload, key=product_id
            )
        except Exception as e:
            logger.error(
                "Failed to publish product deleted event, cascade left pending",
                extra={
                    "product_id": product_id,
                    "media_ids": media_ids,
                    "payload": payload,
                    "error": str(e),
                    "correlation_id": correlation_id,
                    "operation": "publish_product_deleted_failed",
                },
            )
            return False

        logger.info(
            "Published product deleted event"
            if published
            else "Product deleted event not delivered, cascade left pending",
            extra={
                "product_id": product_id,
                "media_count": len(media_ids),
                "delivered": published,
                "correlation_id": correlation_id,
                "operation": "publish_product_deleted",
            },
        )
        return published
