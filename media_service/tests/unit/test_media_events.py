"""
Unit tests for the media cascade consumers and payload parsing.
"""

from unittest.mock import Mock

import pytest

from media_service.app.core.exceptions import MalformedPayloadError
from media_service.app.events.base.kafka_client import KafkaEventSubscriber
from media_service.app.events.event_consumers import (
    MediaEventConsumer,
    ProductDeletedHandler,
    UserDeletedHandler,
)
from media_service.app.events.schemas import parse_product_deleted, parse_user_deleted
from media_service.app.repository.media_repository import (
    DeletedOwnerRepository,
    MediaRepository,
)
from media_service.app.services.media_service import MediaService


class TestParseProductDeleted:
    def test_media_ids_take_precedence(self):
        deletion = parse_product_deleted('{"id": "p1", "mediaIds": ["m1", "m2"]}')

        assert deletion.media_ids == ["m1", "m2"]
        assert deletion.product_id == "p1"

    def test_empty_media_ids_fall_back_to_product_id(self):
        deletion = parse_product_deleted('{"id": "p1", "mediaIds": []}')

        assert deletion.media_ids == []
        assert deletion.product_id == "p1"

    @pytest.mark.parametrize("raw", ["p1", "  p1 ", '"p1"'])
    def test_bare_product_id(self, raw):
        deletion = parse_product_deleted(raw)

        assert deletion.product_id == "p1"
        assert deletion.media_ids == []

    @pytest.mark.parametrize(
        "raw",
        ["", "   ", "[]", '["p1"]', "{}", '{"mediaIds": []}', '{"id": "p1"', '""'],
    )
    def test_malformed(self, raw):
        with pytest.raises(MalformedPayloadError):
            parse_product_deleted(raw)

    def test_parse_user_deleted(self):
        assert parse_user_deleted(" u1 ") == "u1"
        with pytest.raises(MalformedPayloadError):
            parse_user_deleted('{"id": "u1"}')


class TestCascadeHandlers:
    @pytest.fixture
    async def seeded(self, db_session, storage, png_bytes, make_principal):
        """Two media on p1, one on p2, one unattached; all owned by u1"""
        service = MediaService(db_session, storage)
        owner = make_principal("u1")
        ids = {}
        for name, product_id in (("a", "p1"), ("b", "p1"), ("c", "p2"), ("d", None)):
            media = await service.upload(f"{name}.png", "image/png", png_bytes, owner)
            if product_id:
                await service.associate_with_product(media.id, product_id, owner)
            ids[name] = media.id
        return ids

    @pytest.mark.asyncio
    async def test_product_deleted_with_media_ids(
        self, test_session_maker, storage, db_session, seeded
    ):
        handler = ProductDeletedHandler(test_session_maker, storage)
        payload = '{"id": "p1", "mediaIds": ["%s", "%s"]}' % (seeded["a"], seeded["b"])

        result = await handler.handle(payload)

        assert result.deleted == 2
        remaining = {m.id for m in await MediaRepository(db_session).list_by_user("u1")}
        assert remaining == {seeded["c"], seeded["d"]}

    @pytest.mark.asyncio
    async def test_duplicate_product_deleted_is_idempotent(
        self, test_session_maker, storage, db_session, seeded
    ):
        handler = ProductDeletedHandler(test_session_maker, storage)
        payload = '{"id": "p1", "mediaIds": ["%s", "%s"]}' % (seeded["a"], seeded["b"])

        await handler.handle(payload)
        result = await handler.handle(payload)

        assert result.was_noop
        assert result.already_absent == 2
        remaining = await MediaRepository(db_session).list_by_user("u1")
        assert len(remaining) == 2

    @pytest.mark.asyncio
    async def test_bare_product_id_deletes_by_back_reference(
        self, test_session_maker, storage, db_session, seeded
    ):
        handler = ProductDeletedHandler(test_session_maker, storage)

        result = await handler.handle("p1")

        assert result.deleted == 2
        assert await MediaRepository(db_session).list_by_product("p1") == []
        assert len(await MediaRepository(db_session).list_by_product("p2")) == 1

    @pytest.mark.asyncio
    async def test_user_deleted_removes_all_media(
        self, test_session_maker, storage, db_session, seeded
    ):
        handler = UserDeletedHandler(test_session_maker, storage)

        result = await handler.handle("u1")
        again = await handler.handle("u1")

        assert result.deleted == 4
        assert again.was_noop
        assert await MediaRepository(db_session).list_by_user("u1") == []
        assert await DeletedOwnerRepository(db_session).is_deleted("u1")

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "product_first", [True, False], ids=["product_first", "user_first"]
    )
    async def test_cascade_outcome_independent_of_event_order(
        self, test_session_maker, storage, db_session, seeded, product_first
    ):
        product_handler = ProductDeletedHandler(test_session_maker, storage)
        user_handler = UserDeletedHandler(test_session_maker, storage)
        product_event = '{"id": "p1", "mediaIds": ["%s", "%s"]}' % (
            seeded["a"],
            seeded["b"],
        )

        if product_first:
            await product_handler.handle(product_event)
            await user_handler.handle("u1")
        else:
            await user_handler.handle("u1")
            await product_handler.handle(product_event)

        assert await MediaRepository(db_session).list_by_user("u1") == []
        assert await MediaRepository(db_session).list_by_product("p1") == []

    @pytest.mark.asyncio
    async def test_consumer_subscribes_both_topics(self, test_session_maker, storage):
        subscriber = Mock(spec=KafkaEventSubscriber)
        subscriber.group_id = "media-service-group"
        consumer = MediaEventConsumer(test_session_maker, storage, subscriber=subscriber)

        await consumer.start()

        topics = [call.kwargs["topic"] for call in subscriber.subscribe.await_args_list]
        assert topics == ["user.deleted", "product.deleted"]
        handlers = [call.kwargs["handler"] for call in subscriber.subscribe.await_args_list]
        assert isinstance(handlers[0], UserDeletedHandler)
        assert isinstance(handlers[1], ProductDeletedHandler)
