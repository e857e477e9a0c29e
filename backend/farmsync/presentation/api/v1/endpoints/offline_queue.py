"""Offline action queue endpoints — enqueue, inspect, drain, storage usage."""

from fastapi import APIRouter, Depends, HTTPException, status

from farmsync.application.schemas import (
    DrainResponse,
    QueuedActionCreate,
    QueuedActionResponse,
    StorageKeyUsage,
    StorageUsageResponse,
)
from farmsync.application.services import (
    ConnectivityMonitor,
    LocalMirrorService,
    OfflineActionQueue,
)
from farmsync.domain.exceptions import UnknownActionError
from farmsync.infrastructure.dependencies import (
    get_connectivity,
    get_mirrors,
    get_offline_queue,
)

router = APIRouter(prefix="/offline", tags=["Offline Queue"])


@router.post(
    "/actions",
    response_model=QueuedActionResponse,
    status_code=status.HTTP_201_CREATED,
)
async def enqueue_action(
    data: QueuedActionCreate,
    queue: OfflineActionQueue = Depends(get_offline_queue),
) -> QueuedActionResponse:
    """Queue a mutating farm action for the next drain."""
    try:
        item = await queue.enqueue(data.action, data.payload)
    except UnknownActionError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))
    return QueuedActionResponse.model_validate(item, from_attributes=True)


@router.get("/actions", response_model=list[QueuedActionResponse])
async def list_pending_actions(
    queue: OfflineActionQueue = Depends(get_offline_queue),
) -> list[QueuedActionResponse]:
    items = await queue.pending()
    return [QueuedActionResponse.model_validate(i, from_attributes=True) for i in items]


@router.post("/drain", response_model=DrainResponse)
async def drain_queue(
    queue: OfflineActionQueue = Depends(get_offline_queue),
    monitor: ConnectivityMonitor = Depends(get_connectivity),
) -> DrainResponse:
    """Apply every queued action once. Refused while the edge is offline."""
    if not monitor.is_online:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Edge is offline; queued actions will sync when connected",
        )
    result = await queue.drain()
    return DrainResponse.model_validate(result, from_attributes=True)


@router.get("/storage", response_model=StorageUsageResponse)
async def storage_usage(
    mirrors: LocalMirrorService = Depends(get_mirrors),
) -> StorageUsageResponse:
    """Approximate size of everything the edge keeps in local storage."""
    usage = await mirrors.storage_usage()
    return StorageUsageResponse(
        total_size=usage.total_size,
        total_size_formatted=usage.total_size_formatted,
        keys=[StorageKeyUsage(key=key, size=size) for key, size in usage.keys],
    )
