"""
Product Service Event Consumers
==============================

Applies ``user.deleted`` to the product store: the owner is tombstoned, each
of its products is deleted and a ``product.deleted`` event is re-emitted per
product so the media service cascades further.
"""

from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ..core.setting import get_settings
from ..repository.product_repository import DeletedOwnerRepository
from ..services.product_service import ProductService
from ..utils.logging import setup_product_logging as setup_logging
from .base import EventHandler
from .base.kafka_client import KafkaEventSubscriber
from .event_producers import ProductEventProducer
from .schemas import CascadeResult, parse_user_deleted

settings = get_settings()
logger = setup_logging("product_service.events.consumers", log_level=settings.LOG_LEVEL)


class UserDeletedHandler(EventHandler):
    """Delete every product owned by the deleted user"""

    def __init__(
        self,
        session_maker: async_sessionmaker[AsyncSession],
        event_producer: Optional[ProductEventProducer],
    ):
        self.session_maker = session_maker
        self.event_producer = event_producer

    async def handle(self, payload: str) -> CascadeResult:
        user_id = parse_user_deleted(payload)

        logger.info(
            "Processing user deleted event",
            extra={"user_id": user_id, "operation": "user_deleted_received"},
        )

        async with self.session_maker() as session:
            # Tombstone first so writes racing the cascade are refused
            newly_tombstoned = await DeletedOwnerRepository(session).record(user_id)
            service = ProductService(session, self.event_producer)
            result = await service.delete_products_by_user(user_id)

        logger.info(
            "No products left to delete for user"
            if result.was_noop
            else "Deleted products for deleted user",
            extra={
                "user_id": user_id,
                "deleted": result.deleted,
                "published": result.published,
                "newly_tombstoned": newly_tombstoned,
                "operation": "user_deleted_applied",
            },
        )
        return result


class ProductEventConsumer:
    """Product service event consumer using shared subscriber"""

    def __init__(
        self,
        session_maker: async_sessionmaker[AsyncSession],
        event_producer: Optional[ProductEventProducer],
        subscriber: Optional[KafkaEventSubscriber] = None,
    ):
        self.session_maker = session_maker
        self.event_producer = event_producer
        self.subscriber = subscriber or KafkaEventSubscriber(
            bootstrap_servers=settings.KAFKA_BOOTSTRAP_SERVERS,
            group_id=settings.KAFKA_GROUP_ID,
            client_id=f"{settings.SERVICE_NAME}-consumer",
            max_handler_attempts=settings.CONSUMER_MAX_ATTEMPTS,
            handler_retry_delay=settings.CONSUMER_RETRY_DELAY,
        )

    async def start(self):
        """Start consuming events using shared subscriber"""
        await self.subscriber.start()

        await self.subscriber.subscribe(
            topic=settings.KAFKA_TOPIC_USER_DELETED,
            handler=UserDeletedHandler(self.session_maker, self.event_producer),
        )

        logger.info(
            "Started consuming product service events",
            extra={
                "subscriptions": [settings.KAFKA_TOPIC_USER_DELETED],
                "group_id": self.subscriber.group_id,
            },
        )

    async def stop(self):
        """Stop event consumer"""
        await self.subscriber.stop()
