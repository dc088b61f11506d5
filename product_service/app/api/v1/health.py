import time
from typing import Any, Dict

from fastapi import APIRouter

from ...core.event_management import get_media_client, health_check_events
from ...core.setting import get_settings

router = APIRouter()


@router.get("/health")
async def health_check() -> Dict[str, Any]:
    """Liveness plus the state of the event channel and media bridge."""
    settings = get_settings()
    kafka_healthy = await health_check_events()
    return {
        "service": settings.SERVICE_NAME,
        "version": settings.APP_VERSION,
        "status": "healthy",
        "checks": {
            "kafka": "healthy" if kafka_healthy else "degraded",
            "media_client": "ready" if get_media_client() else "unavailable",
        },
        "timestamp": time.time(),
    }
