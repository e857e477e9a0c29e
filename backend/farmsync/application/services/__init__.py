from .cache_strategy_router import CacheStrategyRouter
from .cache_lifecycle_service import CacheLifecycleService, PartitionSummary, PrecacheReport
from .local_mirror_service import LocalMirrorService, StorageUsage
from .offline_action_queue import OfflineActionQueue
from .connectivity_monitor import ConnectivityMonitor

__all__ = [
    "CacheStrategyRouter",
    "CacheLifecycleService",
    "PartitionSummary",
    "PrecacheReport",
    "LocalMirrorService",
    "StorageUsage",
    "OfflineActionQueue",
    "ConnectivityMonitor",
]
