import time
from typing import Any, Dict

from fastapi import APIRouter

from ...core.event_management import health_check_events
from ...core.settings import get_settings

router = APIRouter()


@router.get("/health")
async def health_check() -> Dict[str, Any]:
    settings = get_settings()
    kafka_healthy = await health_check_events()
    return {
        "service": settings.SERVICE_NAME,
        "version": settings.APP_VERSION,
        "status": "healthy",
        "checks": {"kafka": "healthy" if kafka_healthy else "degraded"},
        "timestamp": time.time(),
    }
