from unittest.mock import AsyncMock, Mock

import pytest

from media_service.app.core.exceptions import (
    AuthorizationError,
    InvalidUploadError,
    NotFoundError,
    TransportError,
)
from media_service.app.repository.media_repository import (
    DeletedOwnerRepository,
    MediaRepository,
)
from media_service.app.services.media_service import MediaService
from media_service.app.utils.product_client import ProductServiceClient


class TestMediaService:
    """Unit tests for MediaService against an in-memory store and a temp dir."""

    @pytest.fixture
    def mock_product_client(self):
        client = Mock(spec=ProductServiceClient)
        client.remove_media = AsyncMock(return_value=True)
        return client

    @pytest.fixture
    def media_service(self, db_session, storage, mock_product_client):
        return MediaService(db_session, storage, mock_product_client)

    @pytest.fixture
    async def uploaded(self, media_service, png_bytes, make_principal):
        return await media_service.upload(
            "lamp.png", "image/png", png_bytes, make_principal("seller-1")
        )

    # Upload

    @pytest.mark.asyncio
    async def test_upload_stores_file_and_record(
        self, media_service, storage, png_bytes, make_principal
    ):
        result = await media_service.upload(
            "lamp.png", "image/png", png_bytes, make_principal("seller-1")
        )

        assert result.user_id == "seller-1"
        assert result.size == len(png_bytes)
        assert result.product_id is None
        assert result.url == f"http://localhost:8003/api/v1/media/images/{result.id}"
        path, content_type = await media_service.get_file(result.id)
        assert path.read_bytes() == png_bytes
        assert content_type == "image/png"

    @pytest.mark.asyncio
    async def test_upload_rejects_non_image(self, media_service, make_principal):
        with pytest.raises(InvalidUploadError):
            await media_service.upload(
                "notes.txt", "text/plain", b"hello", make_principal()
            )

    @pytest.mark.asyncio
    async def test_upload_rejects_oversized_file(self, media_service, make_principal):
        with pytest.raises(InvalidUploadError):
            await media_service.upload(
                "big.png", "image/png", b"x" * 2048, make_principal()
            )

    @pytest.mark.asyncio
    async def test_upload_rejected_for_deleted_owner(
        self, media_service, db_session, png_bytes, make_principal
    ):
        await DeletedOwnerRepository(db_session).record("seller-1")

        with pytest.raises(AuthorizationError):
            await media_service.upload(
                "lamp.png", "image/png", png_bytes, make_principal("seller-1")
            )

    # Lookups

    @pytest.mark.asyncio
    async def test_exists(self, media_service, uploaded):
        assert await media_service.exists(uploaded.id) is True
        assert await media_service.exists("missing") is False

    @pytest.mark.asyncio
    async def test_get_file_missing_media(self, media_service):
        with pytest.raises(NotFoundError):
            await media_service.get_file("missing")

    @pytest.mark.asyncio
    async def test_list_own_only_returns_callers_media(
        self, media_service, uploaded, png_bytes, make_principal
    ):
        await media_service.upload("b.png", "image/png", png_bytes, make_principal("other"))

        result = await media_service.list_own(make_principal("seller-1"))

        assert [m.id for m in result] == [uploaded.id]

    # Association back-reference

    @pytest.mark.asyncio
    async def test_associate_with_product(self, media_service, uploaded, make_principal):
        result = await media_service.associate_with_product(
            uploaded.id, "p1", make_principal("seller-1")
        )

        assert result.product_id == "p1"

    @pytest.mark.asyncio
    async def test_associate_by_non_owner(self, media_service, uploaded, make_principal):
        with pytest.raises(AuthorizationError):
            await media_service.associate_with_product(
                uploaded.id, "p1", make_principal("seller-2")
            )

        assert (await media_service.list_by_ids([uploaded.id]))[0].product_id is None

    @pytest.mark.asyncio
    async def test_reassociation_last_writer_wins(
        self, media_service, uploaded, make_principal
    ):
        principal = make_principal("seller-1")
        await media_service.associate_with_product(uploaded.id, "p1", principal)

        result = await media_service.associate_with_product(uploaded.id, "p2", principal)

        assert result.product_id == "p2"

    # Direct deletion

    @pytest.mark.asyncio
    async def test_delete_media_removes_reference_on_product(
        self, media_service, storage, uploaded, mock_product_client, make_principal
    ):
        principal = make_principal("seller-1")
        await media_service.associate_with_product(uploaded.id, "p1", principal)
        path, _ = await media_service.get_file(uploaded.id)

        await media_service.delete_media(uploaded.id, principal)

        assert await media_service.exists(uploaded.id) is False
        assert not path.exists()
        mock_product_client.remove_media.assert_awaited_once_with("p1", uploaded.id)

    @pytest.mark.asyncio
    async def test_delete_unassociated_media_skips_product_call(
        self, media_service, uploaded, mock_product_client, make_principal
    ):
        await media_service.delete_media(uploaded.id, make_principal("seller-1"))

        mock_product_client.remove_media.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_delete_media_survives_product_service_failure(
        self, media_service, uploaded, mock_product_client, make_principal
    ):
        principal = make_principal("seller-1")
        await media_service.associate_with_product(uploaded.id, "p1", principal)
        mock_product_client.remove_media.side_effect = TransportError("refused")

        await media_service.delete_media(uploaded.id, principal)

        assert await media_service.exists(uploaded.id) is False

    @pytest.mark.asyncio
    async def test_delete_media_by_non_owner(
        self, media_service, uploaded, make_principal
    ):
        with pytest.raises(AuthorizationError):
            await media_service.delete_media(uploaded.id, make_principal("seller-2"))

        assert await media_service.exists(uploaded.id) is True

    # Cascade deletes

    @pytest.mark.asyncio
    async def test_delete_by_ids_is_idempotent(
        self, media_service, png_bytes, make_principal
    ):
        principal = make_principal("seller-1")
        m1 = await media_service.upload("1.png", "image/png", png_bytes, principal)
        m2 = await media_service.upload("2.png", "image/png", png_bytes, principal)

        first = await media_service.delete_media_by_ids([m1.id, m2.id])
        second = await media_service.delete_media_by_ids([m1.id, m2.id])

        assert (first.requested, first.deleted, first.already_absent) == (2, 2, 0)
        assert (second.requested, second.deleted, second.already_absent) == (2, 0, 2)
        assert second.was_noop

    @pytest.mark.asyncio
    async def test_delete_by_product_leaves_other_products(
        self, media_service, png_bytes, make_principal
    ):
        principal = make_principal("seller-1")
        m1 = await media_service.upload("1.png", "image/png", png_bytes, principal)
        m2 = await media_service.upload("2.png", "image/png", png_bytes, principal)
        await media_service.associate_with_product(m1.id, "p1", principal)
        await media_service.associate_with_product(m2.id, "p2", principal)

        result = await media_service.delete_media_by_product_id("p1")

        assert result.deleted == 1
        assert [m.id for m in await media_service.list_by_product("p2")] == [m2.id]

    @pytest.mark.asyncio
    async def test_delete_by_user_removes_files(
        self, media_service, db_session, png_bytes, make_principal
    ):
        principal = make_principal("seller-1")
        m1 = await media_service.upload("1.png", "image/png", png_bytes, principal)
        path, _ = await media_service.get_file(m1.id)

        result = await media_service.delete_media_by_user_id("seller-1")

        assert result.deleted == 1
        assert await MediaRepository(db_session).list_by_user("seller-1") == []
        assert not path.exists()
