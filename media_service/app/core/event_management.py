"""
Media Service Event Management
Starts the cascade consumer and holds the shared storage and product client.
"""

from typing import Optional

from ..events.event_consumers import MediaEventConsumer
from ..utils.file_storage import MediaStorage
from ..utils.logging import setup_media_logging as setup_logging
from ..utils.product_client import ProductServiceClient
from .database import database_manager
from .setting import get_settings

logger = setup_logging("media_service.events", log_level=get_settings().LOG_LEVEL)

# Global instances
_media_event_consumer: Optional[MediaEventConsumer] = None
_product_client: Optional[ProductServiceClient] = None
_storage: Optional[MediaStorage] = None


def get_storage() -> MediaStorage:
    """Shared file storage rooted at MEDIA_STORAGE_DIR"""
    global _storage

    if _storage is None:
        _storage = MediaStorage(get_settings().MEDIA_STORAGE_DIR)
    return _storage


async def init_events() -> None:
    """Subscribe to user.deleted and product.deleted"""
    global _media_event_consumer

    settings = get_settings()
    logger.info(
        "Initializing event consumption",
        extra={
            "operation": "init_events",
            "kafka_servers": settings.KAFKA_BOOTSTRAP_SERVERS,
            "group_id": settings.KAFKA_GROUP_ID,
            "event_type": "event_infrastructure_init",
        },
    )

    try:
        _media_event_consumer = MediaEventConsumer(
            database_manager.async_session_maker, get_storage()
        )
        await _media_event_consumer.start()
    except Exception as e:
        logger.warning(
            "Event consumption initialization failed - operating in degraded mode",
            extra={
                "operation": "init_events_failed",
                "error": str(e),
                "event_type": "event_infrastructure_failed",
                "degraded_mode": True,
            },
        )


async def close_events() -> None:
    global _media_event_consumer

    try:
        if _media_event_consumer:
            await _media_event_consumer.stop()
    except Exception as e:
        logger.error(
            "Error closing event infrastructure",
            extra={"operation": "close_events_error", "error": str(e)},
        )
    finally:
        _media_event_consumer = None


def is_consuming() -> bool:
    return bool(
        _media_event_consumer and _media_event_consumer.subscriber.is_connected
    )


def init_product_client() -> ProductServiceClient:
    """Create the shared product service client"""
    global _product_client

    settings = get_settings()
    _product_client = ProductServiceClient(
        settings.PRODUCT_SERVICE_URL, timeout=settings.SERVICE_CALL_TIMEOUT
    )
    return _product_client


async def close_product_client() -> None:
    global _product_client

    if _product_client:
        await _product_client.close()
    _product_client = None


def get_product_client() -> Optional[ProductServiceClient]:
    return _product_client
