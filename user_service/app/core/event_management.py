"""
User Service Event Management
Owns the Kafka publisher behind the user.deleted producer.
"""

from typing import Optional

from ..events.base.kafka_client import KafkaEventPublisher
from ..events.event_producers import UserEventProducer
from ..utils.logging import setup_user_logging as setup_logging
from .settings import get_settings

logger = setup_logging("user_service.events", log_level=get_settings().LOG_LEVEL)

_publisher: Optional[KafkaEventPublisher] = None
_producer: Optional[UserEventProducer] = None


async def init_events() -> None:
    """Connect the publisher; a down broker leaves the service in degraded mode"""
    global _publisher, _producer

    settings = get_settings()
    _publisher = KafkaEventPublisher(
        bootstrap_servers=settings.KAFKA_BOOTSTRAP_SERVERS,
        client_id=f"{settings.SERVICE_NAME}-producer",
    )
    # The producer exists even when Kafka is down; it then logs undelivered events
    _producer = UserEventProducer(_publisher)
    try:
        await _publisher.start(timeout=30.0)
    except Exception as e:
        logger.warning(
            "Kafka publisher failed to start, user.deleted events will only be logged",
            extra={"error": str(e), "operation": "init_events", "degraded_mode": True},
        )
        return

    logger.info(
        "User event publishing ready",
        extra={
            "kafka_servers": settings.KAFKA_BOOTSTRAP_SERVERS,
            "connected": _publisher.is_connected,
            "operation": "init_events",
        },
    )


async def close_events() -> None:
    global _publisher, _producer

    publisher, _publisher, _producer = _publisher, None, None
    if publisher is not None:
        await publisher.stop()


def get_event_producer() -> Optional[UserEventProducer]:
    return _producer


async def health_check_events() -> bool:
    return await _publisher.health_check() if _publisher else False
