"""Health check endpoint."""

from fastapi import APIRouter, Depends

from farmsync.application.services import ConnectivityMonitor
from farmsync.config import get_settings
from farmsync.infrastructure.dependencies import get_connectivity

router = APIRouter(tags=["Health"])


@router.get("/health")
async def health_check(
    monitor: ConnectivityMonitor = Depends(get_connectivity),
) -> dict:
    """Returns the edge health status and whether the origin is considered reachable."""
    settings = get_settings()
    return {
        "status": "healthy",
        "version": settings.app_version,
        "environment": settings.app_env,
        "online": monitor.is_online,
    }
