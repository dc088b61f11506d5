"""
Product Service Event Management

Holds the process-wide Kafka publisher, the user.deleted consumer and the
media service client. Each piece degrades on its own: a service without
Kafka still serves the catalogue, and a service without media still
answers product reads.
"""

from typing import Optional

from ..events.base.kafka_client import KafkaEventPublisher
from ..events.event_consumers import ProductEventConsumer
from ..events.event_producers import ProductEventProducer
from ..utils.logging import setup_product_logging as setup_logging
from ..utils.media_client import MediaServiceClient
from .database import database_manager
from .setting import get_settings

logger = setup_logging("product_service.events", log_level=get_settings().LOG_LEVEL)

_publisher: Optional[KafkaEventPublisher] = None
_producer: Optional[ProductEventProducer] = None
_consumer: Optional[ProductEventConsumer] = None
_media_client: Optional[MediaServiceClient] = None


async def init_events() -> None:
    """Start publishing product.deleted and consuming user.deleted"""
    global _publisher, _producer, _consumer

    settings = get_settings()
    _publisher = KafkaEventPublisher(
        bootstrap_servers=settings.KAFKA_BOOTSTRAP_SERVERS,
        client_id=f"{settings.SERVICE_NAME}-producer",
    )
    _producer = ProductEventProducer(_publisher)
    try:
        await _publisher.start(timeout=30.0)
        _consumer = ProductEventConsumer(database_manager.async_session_maker, _producer)
        await _consumer.start()
    except Exception as e:
        logger.warning(
            "Kafka startup failed, cascades are disabled until restart",
            extra={"error": str(e), "operation": "init_events", "degraded_mode": True},
        )
        return

    logger.info(
        "Product event infrastructure ready",
        extra={
            "kafka_servers": settings.KAFKA_BOOTSTRAP_SERVERS,
            "publisher_connected": _publisher.is_connected,
            "consumer_connected": _consumer.subscriber.is_connected,
            "operation": "init_events",
        },
    )


async def close_events() -> None:
    global _publisher, _producer, _consumer

    consumer, publisher = _consumer, _publisher
    _publisher = _producer = _consumer = None
    try:
        if consumer is not None:
            await consumer.stop()
    finally:
        if publisher is not None:
            await publisher.stop()


def get_event_producer() -> Optional[ProductEventProducer]:
    return _producer


async def health_check_events() -> bool:
    return await _publisher.health_check() if _publisher else False


def init_media_client() -> MediaServiceClient:
    global _media_client

    settings = get_settings()
    _media_client = MediaServiceClient(
        settings.MEDIA_SERVICE_URL, timeout=settings.SERVICE_CALL_TIMEOUT
    )
    logger.info(
        "Media service client ready",
        extra={"base_url": settings.MEDIA_SERVICE_URL, "operation": "init_media_client"},
    )
    return _media_client


async def close_media_client() -> None:
    global _media_client

    client, _media_client = _media_client, None
    if client is not None:
        await client.close()


def get_media_client() -> Optional[MediaServiceClient]:
    return _media_client
