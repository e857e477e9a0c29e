from .http_message import CACHED_DATE_HEADER, CachedResponse, InterceptedRequest
from .cache_partition import CachePartitions, CacheStrategy, PartitionKind, RouteDecision
from .queued_action import (
    ACTION_TARGETS,
    ActionType,
    DrainResult,
    MirrorName,
    MirrorOperation,
    QueuedAction,
)

__all__ = [
    "CACHED_DATE_HEADER",
    "CachedResponse",
    "InterceptedRequest",
    "CachePartitions",
    "CacheStrategy",
    "PartitionKind",
    "RouteDecision",
    "ACTION_TARGETS",
    "ActionType",
    "DrainResult",
    "MirrorName",
    "MirrorOperation",
    "QueuedAction",
]
