"""
Unit tests for the orphan media reconciler.
"""

from unittest.mock import AsyncMock, Mock

import pytest

from product_service.app.repository.product_repository import ProductRepository
from product_service.app.schemas.product import ProductCreate
from product_service.app.services.reconciliation_service import OrphanReconciler
from product_service.app.utils.media_client import MediaProbeResult, MediaServiceClient


def probe_table(results):
    """Fake probe answering from a media id -> result mapping"""

    async def _probe(media_id):
        return results.get(media_id, MediaProbeResult.EXISTS)

    return _probe


class TestOrphanReconciler:
    @pytest.fixture
    def mock_media_client(self):
        client = Mock(spec=MediaServiceClient)
        client.probe_media = AsyncMock(side_effect=probe_table({}))
        return client

    @pytest.fixture
    def reconciler(self, db_session, mock_media_client):
        return OrphanReconciler(db_session, mock_media_client, probe_concurrency=2)

    @pytest.fixture
    async def product_with_media(self, db_session):
        repository = ProductRepository(db_session)
        product = await repository.create_product(
            ProductCreate(name="Chair", price=40, quantity=1), "seller-1"
        )
        for media_id in ("A", "B", "C"):
            await repository.add_media_id(product, media_id)
        return product

    @pytest.mark.asyncio
    async def test_drops_only_confirmed_gone(
        self, reconciler, mock_media_client, db_session, product_with_media
    ):
        mock_media_client.probe_media.side_effect = probe_table(
            {"B": MediaProbeResult.GONE}
        )

        report = await reconciler.reconcile()

        stored = await ProductRepository(db_session).get_product_by_id(
            product_with_media.id
        )
        assert stored.media_ids == ["A", "C"]
        assert report.references_cleaned == 1
        assert report.products_updated == 1
        assert report.summary == "Cleaned up 1 orphaned media references from products"

    @pytest.mark.asyncio
    async def test_second_run_cleans_nothing(
        self, reconciler, mock_media_client, db_session, product_with_media
    ):
        gone = {"B": MediaProbeResult.GONE}
        mock_media_client.probe_media.side_effect = probe_table(gone)
        await reconciler.reconcile()

        report = await reconciler.reconcile()

        assert report.references_cleaned == 0
        assert report.summary == "Cleaned up 0 orphaned media references from products"
        stored = await ProductRepository(db_session).get_product_by_id(
            product_with_media.id
        )
        assert stored.media_ids == ["A", "C"]

    @pytest.mark.asyncio
    async def test_unknown_probe_keeps_reference(
        self, reconciler, mock_media_client, db_session, product_with_media
    ):
        mock_media_client.probe_media.side_effect = probe_table(
            {"A": MediaProbeResult.UNKNOWN, "C": MediaProbeResult.UNKNOWN}
        )

        report = await reconciler.reconcile()

        assert report.references_cleaned == 0
        stored = await ProductRepository(db_session).get_product_by_id(
            product_with_media.id
        )
        assert stored.media_ids == ["A", "B", "C"]

    @pytest.mark.asyncio
    async def test_association_during_sweep_survives(
        self, db_session, mock_media_client, product_with_media
    ):
        repository = ProductRepository(db_session)

        async def probe(media_id):
            if media_id == "B":
                # A seller attaches new media while the sweep is probing
                await repository.add_media_id(product_with_media, "D")
                return MediaProbeResult.GONE
            return MediaProbeResult.EXISTS

        mock_media_client.probe_media.side_effect = probe
        reconciler = OrphanReconciler(db_session, mock_media_client, probe_concurrency=1)

        report = await reconciler.reconcile()

        stored = await repository.get_product_by_id(product_with_media.id)
        assert stored.media_ids == ["A", "C", "D"]
        assert report.references_cleaned == 1

    @pytest.mark.asyncio
    async def test_products_without_media_are_not_probed(
        self, reconciler, mock_media_client, db_session
    ):
        await ProductRepository(db_session).create_product(
            ProductCreate(name="Bare", price=1, quantity=1), "seller-1"
        )

        report = await reconciler.reconcile()

        assert report.products_scanned == 1
        mock_media_client.probe_media.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_reference_removed_elsewhere_during_sweep_is_not_counted(
        self, db_session, mock_media_client, product_with_media
    ):
        repository = ProductRepository(db_session)

        async def probe(media_id):
            if media_id == "B":
                # The media service's own removal lands before the sweep writes
                await repository.remove_media_ids(product_with_media.id, ["B"])
                return MediaProbeResult.GONE
            return MediaProbeResult.EXISTS

        mock_media_client.probe_media.side_effect = probe
        reconciler = OrphanReconciler(db_session, mock_media_client, probe_concurrency=1)

        report = await reconciler.reconcile()

        stored = await repository.get_product_by_id(product_with_media.id)
        assert stored.media_ids == ["A", "C"]
        assert report.references_cleaned == 0
        assert report.products_updated == 0


class TestRemoveMediaIds:
    @pytest.mark.asyncio
    async def test_returns_number_actually_removed(self, db_session):
        repository = ProductRepository(db_session)
        product = await repository.create_product(
            ProductCreate(name="Lamp", price=12, quantity=3), "seller-1"
        )
        for media_id in ("A", "B"):
            await repository.add_media_id(product, media_id)

        assert await repository.remove_media_ids(product.id, ["B", "Z"]) == 1
        assert await repository.remove_media_ids(product.id, ["B"]) == 0
        assert await repository.remove_media_ids("missing", ["A"]) is None
