"""
API tests for the product routes, through the auth middleware and the
error handlers.
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, Mock

import httpx
import pytest
from jose import jwt

from product_service.app.api.dependencies import (
    get_async_session,
    get_media_service_client,
    get_product_event_producer,
)
from product_service.app.core.setting import get_settings
from product_service.app.events.event_producers import ProductEventProducer
from product_service.app.main import app
from product_service.app.repository.product_repository import ProductRepository
from product_service.app.schemas.product import ProductCreate
from product_service.app.utils.media_client import MediaProbeResult, MediaServiceClient


def bearer(user_id: str, roles=("SELLER",), expires_in: int = 3600) -> dict:
    settings = get_settings()
    claims = {
        "user_id": user_id,
        "email": f"{user_id}@example.com",
        "roles": list(roles),
        "exp": datetime.now(timezone.utc) + timedelta(seconds=expires_in),
        "type": "access",
    }
    token = jwt.encode(claims, settings.SECRET_KEY, algorithm=settings.ALGORITHM)
    return {"Authorization": f"Bearer {token}"}


class TestProductsApi:
    @pytest.fixture
    def mock_media_client(self):
        client = Mock(spec=MediaServiceClient)
        client.associate_product = AsyncMock(return_value=None)
        client.probe_media = AsyncMock(return_value=MediaProbeResult.EXISTS)
        return client

    @pytest.fixture
    def mock_event_producer(self):
        producer = Mock(spec=ProductEventProducer)
        producer.publish_product_deleted = AsyncMock(return_value=True)
        return producer

    @pytest.fixture
    async def client(self, test_session_maker, mock_media_client, mock_event_producer):
        async def override_session():
            async with test_session_maker() as session:
                yield session

        app.dependency_overrides[get_async_session] = override_session
        app.dependency_overrides[get_media_service_client] = lambda: mock_media_client
        app.dependency_overrides[get_product_event_producer] = (
            lambda: mock_event_producer
        )

        transport = httpx.ASGITransport(app=app)
        async with httpx.AsyncClient(
            transport=transport, base_url="http://product-service"
        ) as client:
            yield client

        app.dependency_overrides.clear()

    @pytest.fixture
    async def product(self, db_session):
        repository = ProductRepository(db_session)
        product = await repository.create_product(
            ProductCreate(name="Kettle", price=25, quantity=3), "seller-1"
        )
        for media_id in ("A", "B", "C"):
            await repository.add_media_id(product, media_id)
        return product

    @pytest.mark.asyncio
    async def test_health_is_public(self, client):
        response = await client.get("/health")

        assert response.status_code == 200
        assert response.json()["service"] == "product-service"

    @pytest.mark.asyncio
    async def test_list_products_is_public(self, client, product):
        response = await client.get("/api/v1/products/")

        assert response.status_code == 200
        body = response.json()
        assert [p["id"] for p in body] == [product.id]
        assert body[0]["media_ids"] == ["A", "B", "C"]

    @pytest.mark.asyncio
    async def test_create_requires_token(self, client):
        response = await client.post(
            "/api/v1/products/", json={"name": "Pan", "price": 5, "quantity": 1}
        )

        assert response.status_code == 401
        assert response.json()["error"]["type"] == "authentication_error"

    @pytest.mark.asyncio
    async def test_create_rejects_expired_token(self, client):
        response = await client.post(
            "/api/v1/products/",
            json={"name": "Pan", "price": 5, "quantity": 1},
            headers=bearer("seller-1", expires_in=-60),
        )

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_create_requires_seller_role(self, client):
        response = await client.post(
            "/api/v1/products/",
            json={"name": "Pan", "price": 5, "quantity": 1},
            headers=bearer("client-1", roles=("CLIENT",)),
        )

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_create_product(self, client):
        response = await client.post(
            "/api/v1/products/",
            json={"name": "Pan", "price": 5, "quantity": 1},
            headers=bearer("seller-1"),
        )

        assert response.status_code == 201
        assert response.json()["seller_id"] == "seller-1"

    @pytest.mark.asyncio
    async def test_create_product_validation_error(self, client):
        response = await client.post(
            "/api/v1/products/",
            json={"name": "P", "price": -1, "quantity": 1},
            headers=bearer("seller-1"),
        )

        assert response.status_code == 422
        assert response.json()["error"]["type"] == "validation_error"

    @pytest.mark.asyncio
    async def test_token_from_cookie(self, client):
        token = bearer("seller-1")["Authorization"].split(" ", 1)[1]
        client.cookies.set("access_token", token)

        response = await client.post(
            "/api/v1/products/", json={"name": "Pan", "price": 5, "quantity": 1}
        )

        assert response.status_code == 201

    @pytest.mark.asyncio
    async def test_get_missing_product(self, client):
        response = await client.get("/api/v1/products/missing")

        assert response.status_code == 404
        assert response.json()["error"]["type"] == "not_found"

    @pytest.mark.asyncio
    async def test_associate_media_by_non_owner(self, client, product, mock_media_client):
        response = await client.post(
            f"/api/v1/products/{product.id}/media/D", headers=bearer("seller-2")
        )

        assert response.status_code == 403
        mock_media_client.associate_product.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_associate_media(self, client, product, mock_media_client):
        response = await client.post(
            f"/api/v1/products/{product.id}/media/D", headers=bearer("seller-1")
        )

        assert response.status_code == 200
        assert response.json()["media_ids"] == ["A", "B", "C", "D"]
        mock_media_client.associate_product.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_delete_product(self, client, product, mock_event_producer):
        response = await client.delete(
            f"/api/v1/products/{product.id}", headers=bearer("seller-1")
        )

        assert response.status_code == 204
        mock_event_producer.publish_product_deleted.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_remove_media_is_internal_and_idempotent(self, client, product):
        url = f"/api/v1/products/{product.id}/remove-media/B"

        first = await client.delete(url)
        second = await client.delete(url)

        assert first.status_code == 204
        assert second.status_code == 204
        fetched = await client.get(f"/api/v1/products/{product.id}")
        assert fetched.json()["media_ids"] == ["A", "C"]

    @pytest.mark.asyncio
    async def test_remove_media_missing_product(self, client):
        response = await client.delete("/api/v1/products/missing/remove-media/B")

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_cleanup_orphaned_media(self, client, product, mock_media_client):
        async def probe(media_id):
            return MediaProbeResult.GONE if media_id == "B" else MediaProbeResult.EXISTS

        mock_media_client.probe_media.side_effect = probe

        response = await client.post("/api/v1/products/cleanup-orphaned-media")

        assert response.status_code == 200
        assert response.text == "Cleaned up 1 orphaned media references from products"
