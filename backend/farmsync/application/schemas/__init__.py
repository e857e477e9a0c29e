from .offline import (
    ConnectivityResponse,
    ConnectivityUpdate,
    DrainResponse,
    MirrorReplace,
    MirrorResponse,
    QueuedActionCreate,
    QueuedActionResponse,
    StorageKeyUsage,
    StorageUsageResponse,
)
from .cache import (
    ActivationResponse,
    CacheUrlsRequest,
    PartitionKeysResponse,
    PartitionSummaryResponse,
    PrecacheReportResponse,
)

__all__ = [
    "ConnectivityResponse",
    "ConnectivityUpdate",
    "DrainResponse",
    "MirrorReplace",
    "MirrorResponse",
    "QueuedActionCreate",
    "QueuedActionResponse",
    "StorageKeyUsage",
    "StorageUsageResponse",
    "ActivationResponse",
    "CacheUrlsRequest",
    "PartitionKeysResponse",
    "PartitionSummaryResponse",
    "PrecacheReportResponse",
]
