"""Orphan media reference reconciliation"""

import asyncio
from typing import List

from sqlalchemy.ext.asyncio import AsyncSession

from ..repository.product_repository import ProductRepository
from ..schemas.product import ReconciliationReport
from ..utils.logging import setup_product_logging as setup_logging
from ..utils.media_client import MediaProbeResult, MediaServiceClient

logger = setup_logging("product_service.reconciliation")


class OrphanReconciler:
    """
    Sweeps every product and drops media ids the media service confirms gone.

    Only a 404/403 probe drops an id. Timeouts, 5xx and network errors keep
    it, so a media service outage never erases valid references.
    """

    def __init__(
        self,
        db: AsyncSession,
        media_client: MediaServiceClient,
        probe_concurrency: int = 8,
    ):
        self.repository = ProductRepository(db)
        self.media_client = media_client
        self.probe_concurrency = max(1, probe_concurrency)

    async def reconcile(self) -> ReconciliationReport:
        report = ReconciliationReport()
        products = await self.repository.list_products()

        for product in products:
            report.products_scanned += 1
            product_id = product.id
            media_ids = list(product.media_ids or [])
            if not media_ids:
                continue

            gone = await self._find_gone(media_ids)
            if not gone:
                continue

            # One update per product, applied to its current list
            removed = await self.repository.remove_media_ids(product_id, gone)
            if not removed:
                # Product deleted, or the ids already removed by another path
                continue

            report.products_updated += 1
            report.references_cleaned += removed
            logger.info(
                "Cleaned orphaned media references from product",
                extra={
                    "product_id": product_id,
                    "removed_media_ids": gone,
                    "removed_count": removed,
                    "operation": "reconcile_product",
                },
            )

        logger.info(
            report.summary,
            extra={
                "products_scanned": report.products_scanned,
                "products_updated": report.products_updated,
                "references_cleaned": report.references_cleaned,
                "operation": "reconcile",
            },
        )
        return report

    async def _find_gone(self, media_ids: List[str]) -> List[str]:
        semaphore = asyncio.Semaphore(self.probe_concurrency)

        async def probe(media_id: str) -> MediaProbeResult:
            async with semaphore:
                return await self.media_client.probe_media(media_id)

        results = await asyncio.gather(*(probe(media_id) for media_id in media_ids))
        return [
            media_id
            for media_id, result in zip(media_ids, results)
            if result is MediaProbeResult.GONE
        ]
