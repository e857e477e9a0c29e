"""FastAPI dependency injection — hands the startup-built services to the endpoints."""

from fastapi import HTTPException, Request, status

from farmsync.application.interfaces import Fetcher
from farmsync.application.services import (
    CacheLifecycleService,
    CacheStrategyRouter,
    ConnectivityMonitor,
    LocalMirrorService,
    OfflineActionQueue,
)
from farmsync.infrastructure.container import EdgeContainer


def get_container(request: Request) -> EdgeContainer:
    """Return the container built in the lifespan (or injected by tests)."""
    container = getattr(request.app.state, "container", None)
    if container is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Edge services are not initialized",
        )
    return container


def get_cache_router(request: Request) -> CacheStrategyRouter:
    return get_container(request).cache_router


def get_cache_lifecycle(request: Request) -> CacheLifecycleService:
    return get_container(request).cache_lifecycle


def get_fetcher(request: Request) -> Fetcher:
    return get_container(request).fetcher


def get_mirrors(request: Request) -> LocalMirrorService:
    return get_container(request).mirrors


def get_offline_queue(request: Request) -> OfflineActionQueue:
    return get_container(request).offline_queue


def get_connectivity(request: Request) -> ConnectivityMonitor:
    return get_container(request).connectivity
