"""V1 API router — aggregates all v1 endpoint routers."""

from fastapi import APIRouter

from farmsync.presentation.api.v1.endpoints.health import router as health_router
from farmsync.presentation.api.v1.endpoints.offline_queue import router as offline_router
from farmsync.presentation.api.v1.endpoints.mirrors import router as mirrors_router
from farmsync.presentation.api.v1.endpoints.connectivity import router as connectivity_router
from farmsync.presentation.api.v1.endpoints.cache import router as cache_router

router = APIRouter(prefix="/v1")
router.include_router(health_router)
router.include_router(offline_router)
router.include_router(mirrors_router)
router.include_router(connectivity_router)
router.include_router(cache_router)
