"""
Media Service Event Consumers
============================

Applies the deletion cascade to the media store:

``user.deleted``     tombstone the owner, delete all of its media.
``product.deleted``  delete the listed media ids, or every media pointing at
                     the product when no ids are listed.

Both handlers are idempotent: media already gone counts as already absent.
"""

from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ..core.setting import get_settings
from ..repository.media_repository import DeletedOwnerRepository
from ..services.media_service import MediaService
from ..utils.file_storage import MediaStorage
from ..utils.logging import setup_media_logging as setup_logging
from .base import EventHandler
from .base.kafka_client import KafkaEventSubscriber
from .schemas import (
    PRODUCT_DELETED,
    USER_DELETED,
    CascadeResult,
    parse_product_deleted,
    parse_user_deleted,
)

settings = get_settings()
logger = setup_logging("media_service.events.consumers", log_level=settings.LOG_LEVEL)


def _log_result(message: str, result: CascadeResult) -> None:
    logger.info(
        message,
        extra={
            "topic": result.topic,
            "target_id": result.target_id,
            "requested": result.requested,
            "deleted": result.deleted,
            "already_absent": result.already_absent,
            "noop": result.was_noop,
            "operation": "cascade_applied",
        },
    )


class UserDeletedHandler(EventHandler):
    """Delete every media owned by the deleted user"""

    def __init__(
        self, session_maker: async_sessionmaker[AsyncSession], storage: MediaStorage
    ):
        self.session_maker = session_maker
        self.storage = storage

    async def handle(self, payload: str) -> CascadeResult:
        user_id = parse_user_deleted(payload)

        async with self.session_maker() as session:
            await DeletedOwnerRepository(session).record(user_id)
            service = MediaService(session, self.storage)
            result = await service.delete_media_by_user_id(user_id, topic=USER_DELETED)

        _log_result("Applied user deleted event to media", result)
        return result


class ProductDeletedHandler(EventHandler):
    """Delete the media of a deleted product"""

    def __init__(
        self, session_maker: async_sessionmaker[AsyncSession], storage: MediaStorage
    ):
        self.session_maker = session_maker
        self.storage = storage

    async def handle(self, payload: str) -> CascadeResult:
        deletion = parse_product_deleted(payload)

        async with self.session_maker() as session:
            service = MediaService(session, self.storage)
            if deletion.media_ids:
                result = await service.delete_media_by_ids(
                    deletion.media_ids, topic=PRODUCT_DELETED
                )
            else:
                result = await service.delete_media_by_product_id(
                    deletion.product_id, topic=PRODUCT_DELETED
                )

        _log_result("Applied product deleted event to media", result)
        return result


class MediaEventConsumer:
    """Media service event consumer using shared subscriber"""

    def __init__(
        self,
        session_maker: async_sessionmaker[AsyncSession],
        storage: MediaStorage,
        subscriber: Optional[KafkaEventSubscriber] = None,
    ):
        self.session_maker = session_maker
        self.storage = storage
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
            handler=UserDeletedHandler(self.session_maker, self.storage),
        )
        await self.subscriber.subscribe(
            topic=settings.KAFKA_TOPIC_PRODUCT_DELETED,
            handler=ProductDeletedHandler(self.session_maker, self.storage),
        )

        logger.info(
            "Started consuming media service events",
            extra={
                "subscriptions": [
                    settings.KAFKA_TOPIC_USER_DELETED,
                    settings.KAFKA_TOPIC_PRODUCT_DELETED,
                ],
                "group_id": self.subscriber.group_id,
            },
        )

    async def stop(self):
        """Stop event consumer"""
        await self.subscriber.stop()
