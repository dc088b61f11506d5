"""
API Client for the Media Service
Used by the association bridge and the orphan reconciler. Every call has a
finite timeout; a hung media service must never stall a request or a sweep.
"""

from enum import Enum
from typing import Optional

import httpx

from ..core.exceptions import TransportError
from .logging import setup_product_logging as setup_logging

logger = setup_logging("product_service.media_client")


class MediaProbeResult(str, Enum):
    EXISTS = "exists"
    GONE = "gone"
    UNKNOWN = "unknown"


class MediaServiceClient:
    """Client for internal calls into the Media Service API"""

    def __init__(
        self,
        media_service_url: str,
        timeout: float = 5.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.base_url = media_service_url.rstrip("/")
        self.timeout = timeout
        self.client = client or httpx.AsyncClient(timeout=timeout)

    def _image_url(self, media_id: str) -> str:
        return f"{self.base_url}/api/v1/media/images/{media_id}"

    async def associate_product(
        self, media_id: str, product_id: str, token: Optional[str] = None
    ) -> None:
        """Stamp product_id on the media record, authorized as the caller"""
        headers = {"Authorization": f"Bearer {token}"} if token else {}
        try:
            response = await self.client.put(
                f"{self._image_url(media_id)}/product/{product_id}", headers=headers
            )
        except httpx.HTTPError as e:
            raise TransportError(f"Media association call failed: {e!r}") from e

        if response.status_code >= 400:
            raise TransportError(
                f"Media association rejected with status {response.status_code}"
            )

    async def probe_media(self, media_id: str) -> MediaProbeResult:
        """HEAD the media item; only 404/403 count as confirmed gone"""
        try:
            response = await self.client.head(self._image_url(media_id))
        except httpx.HTTPError as e:
            logger.warning(
                "Media existence probe failed",
                extra={
                    "media_id": media_id,
                    "error": repr(e),
                    "operation": "probe_media",
                },
            )
            return MediaProbeResult.UNKNOWN

        if response.is_success:
            return MediaProbeResult.EXISTS
        if response.status_code in (403, 404):
            return MediaProbeResult.GONE
        return MediaProbeResult.UNKNOWN

    async def close(self):
        """Close the HTTP client"""
        await self.client.aclose()
