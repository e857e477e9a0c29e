"""Cache partition endpoints — inspect, clear, activate, precache and routed fetch."""

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from farmsync.application.schemas import (
    ActivationResponse,
    CacheUrlsRequest,
    PartitionKeysResponse,
    PartitionSummaryResponse,
    PrecacheReportResponse,
)
from farmsync.application.services import CacheLifecycleService, CacheStrategyRouter
from farmsync.domain.entities import InterceptedRequest, PartitionKind
from farmsync.infrastructure.dependencies import get_cache_lifecycle, get_cache_router
from farmsync.presentation.edge.proxy import to_response

router = APIRouter(prefix="/cache", tags=["Cache"])


@router.get("/partitions", response_model=list[PartitionSummaryResponse])
async def list_partitions(
    lifecycle: CacheLifecycleService = Depends(get_cache_lifecycle),
) -> list[PartitionSummaryResponse]:
    summaries = await lifecycle.summaries()
    return [PartitionSummaryResponse.model_validate(s, from_attributes=True) for s in summaries]


@router.get("/partitions/{kind}/keys", response_model=PartitionKeysResponse)
async def list_partition_keys(
    kind: PartitionKind,
    lifecycle: CacheLifecycleService = Depends(get_cache_lifecycle),
    cache_router: CacheStrategyRouter = Depends(get_cache_router),
) -> PartitionKeysResponse:
    keys = await lifecycle.keys(kind)
    return PartitionKeysResponse(partition=cache_router.partitions.name(kind), keys=keys)


@router.delete("/partitions/{kind}", status_code=status.HTTP_204_NO_CONTENT)
async def clear_partition(
    kind: PartitionKind,
    lifecycle: CacheLifecycleService = Depends(get_cache_lifecycle),
) -> None:
    """Drop every entry in one current partition."""
    if not await lifecycle.clear(kind):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Cache partition '{kind.value}' is empty",
        )


@router.post("/activate", response_model=ActivationResponse)
async def activate_cache(
    lifecycle: CacheLifecycleService = Depends(get_cache_lifecycle),
) -> ActivationResponse:
    """Delete partitions left over from previous cache versions."""
    return ActivationResponse(deleted=await lifecycle.activate())


@router.post("/urls", response_model=PrecacheReportResponse)
async def cache_urls(
    data: CacheUrlsRequest,
    lifecycle: CacheLifecycleService = Depends(get_cache_lifecycle),
) -> PrecacheReportResponse:
    """Fetch and store the given URLs in the dynamic partition."""
    report = await lifecycle.cache_urls(data.urls)
    return PrecacheReportResponse.model_validate(report, from_attributes=True)


@router.get("/fetch")
async def routed_fetch(
    url: str = Query(..., description="Absolute URL to route through the cache strategies"),
    accept: str | None = Query(None),
    cache_router: CacheStrategyRouter = Depends(get_cache_router),
) -> Response:
    """Run any URL (including cross-origin ones) through the strategy router."""
    if not url.startswith(("http://", "https://")):
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="url must be absolute",
        )
    headers = {"accept": accept} if accept else {}
    response = await cache_router.handle(InterceptedRequest(url=url, headers=headers))
    return to_response(response)
