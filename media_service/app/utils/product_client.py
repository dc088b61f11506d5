"""
API Client for the Product Service
Removes a deleted image from the product that referenced it.
"""

from typing import Optional

import httpx

from ..core.exceptions import TransportError
from .logging import setup_media_logging as setup_logging

logger = setup_logging("media_service.product_client")


class ProductServiceClient:
    """Client for internal calls into the Product Service API"""

    def __init__(
        self,
        product_service_url: str,
        timeout: float = 5.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.base_url = product_service_url.rstrip("/")
        self.timeout = timeout
        self.client = client or httpx.AsyncClient(timeout=timeout)

    async def remove_media(self, product_id: str, media_id: str) -> bool:
        """
        Ask the product service to drop media_id from the product's list.

        Returns False when the product no longer exists (nothing to do).
        """
        url = f"{self.base_url}/api/v1/products/{product_id}/remove-media/{media_id}"
        try:
            response = await self.client.delete(url)
        except httpx.HTTPError as e:
            raise TransportError(f"Reference removal call failed: {e!r}") from e

        if response.status_code == 404:
            logger.info(
                "Product already gone, no reference to remove",
                extra={"product_id": product_id, "media_id": media_id},
            )
            return False
        if response.status_code >= 400:
            raise TransportError(
                f"Reference removal rejected with status {response.status_code}"
            )
        return True

    async def close(self):
        """Close the HTTP client"""
        await self.client.aclose()
