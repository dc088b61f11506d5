"""
User Service Event Producers
===========================

Publishes ``user.deleted`` once an account row is gone. The payload is the
bare user id and the key is the same id, so every event for one user lands
on the same partition. Product and media services consume it to remove the
user's products and media.
"""

from typing import Optional

from ..core.settings import get_settings
from ..utils.logging import setup_user_logging as setup_logging
from .base import EventPublisher

settings = get_settings()
logger = setup_logging("user_service.events.producers", log_level=settings.LOG_LEVEL)


class UserEventProducer:
    """User service cascade publisher"""

    def __init__(self, event_publisher: EventPublisher):
        self.event_publisher = event_publisher
        self.topic = settings.KAFKA_TOPIC_USER_DELETED

    async def publish_user_deleted(
        self, user_id: str, correlation_id: Optional[str] = None
    ) -> bool:
        """Emit exactly one user.deleted event; never raises"""
        try:
            published = await self.event_publisher.publish(
                self.topic, user_id, key=user_id
            )
        except Exception as e:
            logger.error(
                "Failed to publish user deleted event, cascade left pending",
                extra={
                    "user_id": user_id,
                    "topic": self.topic,
                    "payload": user_id,
                    "error": str(e),
                    "correlation_id": correlation_id,
                    "operation": "publish_user_deleted_failed",
                },
            )
            return False

        if published:
            logger.info(
                "Published user deleted event",
                extra={
                    "user_id": user_id,
                    "topic": self.topic,
                    "correlation_id": correlation_id,
                    "operation": "publish_user_deleted",
                },
            )
        else:
            logger.error(
                "User deleted event not delivered, cascade left pending",
                extra={
                    "user_id": user_id,
                    "topic": self.topic,
                    "payload": user_id,
                    "correlation_id": correlation_id,
                    "operation": "publish_user_deleted_undelivered",
                },
            )
        return published
