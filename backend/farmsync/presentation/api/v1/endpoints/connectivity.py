"""Connectivity endpoints — read or override the edge's online state."""

from fastapi import APIRouter, Depends

from farmsync.application.schemas import ConnectivityResponse, ConnectivityUpdate
from farmsync.application.services import ConnectivityMonitor, OfflineActionQueue
from farmsync.infrastructure.dependencies import get_connectivity, get_offline_queue

router = APIRouter(prefix="/connectivity", tags=["Connectivity"])


async def _state(monitor: ConnectivityMonitor, queue: OfflineActionQueue) -> ConnectivityResponse:
    return ConnectivityResponse(
        online=monitor.is_online,
        draining=queue.is_draining,
        pending_actions=len(await queue.pending()),
    )


@router.get("", response_model=ConnectivityResponse)
async def get_connectivity_state(
    monitor: ConnectivityMonitor = Depends(get_connectivity),
    queue: OfflineActionQueue = Depends(get_offline_queue),
) -> ConnectivityResponse:
    return await _state(monitor, queue)


@router.put("", response_model=ConnectivityResponse)
async def set_connectivity_state(
    data: ConnectivityUpdate,
    monitor: ConnectivityMonitor = Depends(get_connectivity),
    queue: OfflineActionQueue = Depends(get_offline_queue),
) -> ConnectivityResponse:
    """Going from offline to online drains the queue before responding."""
    await monitor.set_online(data.online)
    return await _state(monitor, queue)
