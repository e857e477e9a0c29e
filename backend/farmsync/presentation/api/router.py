"""Top-level edge control API router — includes versioned sub-routers."""

from fastapi import APIRouter

from farmsync.config import get_settings
from farmsync.presentation.api.v1.router import router as v1_router

router = APIRouter(prefix=f"{get_settings().edge_prefix}/api")
router.include_router(v1_router)
