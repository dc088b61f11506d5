import time
from typing import Any, Dict

from fastapi import APIRouter

from ...core.event_management import get_product_client, is_consuming
from ...core.setting import get_settings

router = APIRouter()


@router.get("/health")
async def health_check() -> Dict[str, Any]:
    """Liveness plus the state of the cascade consumer."""
    settings = get_settings()
    return {
        "service": settings.SERVICE_NAME,
        "version": settings.APP_VERSION,
        "status": "healthy",
        "checks": {
            "kafka_consumer": "consuming" if is_consuming() else "degraded",
            "product_client": "ready" if get_product_client() else "unavailable",
        },
        "timestamp": time.time(),
    }
