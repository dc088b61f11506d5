from unittest.mock import AsyncMock, Mock

import pytest

from product_service.app.core.exceptions import (
    AuthorizationError,
    NotFoundError,
    TransportError,
)
from product_service.app.events.event_producers import ProductEventProducer
from product_service.app.repository.product_repository import (
    DeletedOwnerRepository,
    ProductRepository,
)
from product_service.app.schemas.product import ProductCreate, ProductUpdate
from product_service.app.services.product_service import ProductService
from product_service.app.utils.media_client import MediaServiceClient


class TestProductService:
    """Unit tests for ProductService against an in-memory store."""

    @pytest.fixture
    def mock_event_producer(self):
        producer = Mock(spec=ProductEventProducer)
        producer.publish_product_deleted = AsyncMock(return_value=True)
        return producer

    @pytest.fixture
    def mock_media_client(self):
        client = Mock(spec=MediaServiceClient)
        client.associate_product = AsyncMock(return_value=None)
        return client

    @pytest.fixture
    def product_service(self, db_session, mock_event_producer, mock_media_client):
        return ProductService(db_session, mock_event_producer, mock_media_client)

    @pytest.fixture
    def sample_product_data(self):
        return ProductCreate(
            name="  Desk Lamp ", description="Warm light", price=19.5, quantity=4
        )

    @pytest.fixture
    async def owned_product(self, db_session, sample_product_data):
        repository = ProductRepository(db_session)
        return await repository.create_product(sample_product_data, "seller-1")

    @pytest.mark.asyncio
    async def test_create_product_success(
        self, product_service, sample_product_data, make_principal
    ):
        result = await product_service.create_product(
            sample_product_data, make_principal("seller-1")
        )

        assert result.name == "Desk Lamp"
        assert result.seller_id == "seller-1"
        assert result.stock == 4
        assert result.media_ids == []

    @pytest.mark.asyncio
    async def test_create_product_rejected_for_deleted_owner(
        self, product_service, db_session, sample_product_data, make_principal
    ):
        await DeletedOwnerRepository(db_session).record("seller-1")

        with pytest.raises(AuthorizationError):
            await product_service.create_product(
                sample_product_data, make_principal("seller-1")
            )

        assert await ProductRepository(db_session).list_products() == []

    @pytest.mark.asyncio
    async def test_get_product_not_found(self, product_service):
        with pytest.raises(NotFoundError):
            await product_service.get_product("missing")

    @pytest.mark.asyncio
    async def test_update_product_by_non_owner(
        self, product_service, owned_product, make_principal
    ):
        update = ProductUpdate(name="Other", price=1, quantity=1)

        with pytest.raises(AuthorizationError):
            await product_service.update_product(
                owned_product.id, update, make_principal("seller-2")
            )

    @pytest.mark.asyncio
    async def test_image_urls_follow_media_order(
        self, product_service, db_session, owned_product
    ):
        repository = ProductRepository(db_session)
        await repository.add_media_id(owned_product, "m1")
        await repository.add_media_id(owned_product, "m2")

        result = await product_service.get_product(owned_product.id)

        assert result.image_urls == [
            "http://localhost:8003/api/v1/media/images/m1",
            "http://localhost:8003/api/v1/media/images/m2",
        ]

    # Association bridge

    @pytest.mark.asyncio
    async def test_associate_media_appends_and_calls_bridge(
        self, product_service, owned_product, mock_media_client, make_principal
    ):
        principal = make_principal("seller-1")

        result = await product_service.associate_media(
            owned_product.id, "m1", principal
        )

        assert result.media_ids == ["m1"]
        mock_media_client.associate_product.assert_awaited_once_with(
            "m1", owned_product.id, token="token-of-seller-1"
        )

    @pytest.mark.asyncio
    async def test_associate_media_is_set_semantics(
        self, product_service, owned_product, make_principal
    ):
        principal = make_principal("seller-1")
        await product_service.associate_media(owned_product.id, "m1", principal)
        await product_service.associate_media(owned_product.id, "m2", principal)

        result = await product_service.associate_media(
            owned_product.id, "m1", principal
        )

        assert result.media_ids == ["m1", "m2"]

    @pytest.mark.asyncio
    async def test_associate_media_by_non_owner_leaves_list_unchanged(
        self, product_service, db_session, owned_product, mock_media_client, make_principal
    ):
        await ProductRepository(db_session).add_media_id(owned_product, "m1")

        with pytest.raises(AuthorizationError):
            await product_service.associate_media(
                owned_product.id, "m9", make_principal("seller-2")
            )

        stored = await ProductRepository(db_session).get_product_by_id(owned_product.id)
        assert stored.media_ids == ["m1"]
        mock_media_client.associate_product.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_associate_media_missing_product(self, product_service, make_principal):
        with pytest.raises(NotFoundError):
            await product_service.associate_media("missing", "m1", make_principal())

    @pytest.mark.asyncio
    async def test_associate_media_survives_bridge_timeout(
        self, product_service, db_session, owned_product, mock_media_client, make_principal
    ):
        mock_media_client.associate_product.side_effect = TransportError("timed out")

        result = await product_service.associate_media(
            owned_product.id, "m1", make_principal("seller-1")
        )

        assert result.media_ids == ["m1"]
        stored = await ProductRepository(db_session).get_product_by_id(owned_product.id)
        assert stored.media_ids == ["m1"]

    # Deletion and cascade

    @pytest.mark.asyncio
    async def test_delete_product_publishes_media_ids(
        self, product_service, db_session, owned_product, mock_event_producer, make_principal
    ):
        repository = ProductRepository(db_session)
        await repository.add_media_id(owned_product, "m1")
        await repository.add_media_id(owned_product, "m2")
        product_id = owned_product.id

        await product_service.delete_product(product_id, make_principal("seller-1"))

        assert await repository.get_product_by_id(product_id) is None
        mock_event_producer.publish_product_deleted.assert_awaited_once_with(
            product_id, ["m1", "m2"], correlation_id=None
        )

    @pytest.mark.asyncio
    async def test_delete_product_kept_deleted_when_publish_fails(
        self, product_service, db_session, owned_product, mock_event_producer, make_principal
    ):
        mock_event_producer.publish_product_deleted.return_value = False
        product_id = owned_product.id

        await product_service.delete_product(product_id, make_principal("seller-1"))

        assert await ProductRepository(db_session).get_product_by_id(product_id) is None

    @pytest.mark.asyncio
    async def test_delete_products_by_user(
        self, product_service, db_session, sample_product_data, mock_event_producer
    ):
        repository = ProductRepository(db_session)
        await repository.create_product(sample_product_data, "seller-1")
        await repository.create_product(sample_product_data, "seller-1")
        kept = await repository.create_product(sample_product_data, "seller-2")

        result = await product_service.delete_products_by_user("seller-1")

        assert result.deleted == 2
        assert result.published == 2
        assert mock_event_producer.publish_product_deleted.await_count == 2
        remaining = await repository.list_products()
        assert [p.id for p in remaining] == [kept.id]

    @pytest.mark.asyncio
    async def test_delete_products_by_user_twice_is_noop(self, product_service, db_session, sample_product_data):
        await ProductRepository(db_session).create_product(sample_product_data, "seller-1")
        await product_service.delete_products_by_user("seller-1")

        result = await product_service.delete_products_by_user("seller-1")

        assert result.was_noop

    @pytest.mark.asyncio
    async def test_delete_without_producer_still_deletes(
        self, db_session, owned_product, make_principal
    ):
        service = ProductService(db_session)

        await service.delete_product(owned_product.id, make_principal("seller-1"))

        assert await ProductRepository(db_session).list_products() == []

    # Reference removal requested by the media service

    @pytest.mark.asyncio
    async def test_remove_media_from_product_is_idempotent(
        self, product_service, db_session, owned_product
    ):
        repository = ProductRepository(db_session)
        for media_id in ("a", "b", "c"):
            await repository.add_media_id(owned_product, media_id)

        await product_service.remove_media_from_product(owned_product.id, "b")
        await product_service.remove_media_from_product(owned_product.id, "b")

        stored = await repository.get_product_by_id(owned_product.id)
        assert stored.media_ids == ["a", "c"]

    @pytest.mark.asyncio
    async def test_remove_media_from_missing_product(self, product_service):
        with pytest.raises(NotFoundError):
            await product_service.remove_media_from_product("missing", "m1")
