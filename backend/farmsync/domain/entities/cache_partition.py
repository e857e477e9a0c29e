"""Domain entities for versioned cache partitions and routing decisions."""

from dataclasses import dataclass
from enum import Enum


class PartitionKind(str, Enum):
    STATIC = "static"
    DYNAMIC = "dynamic"
    IMAGES = "images"
    API = "api"


class CacheStrategy(str, Enum):
    CACHE_FIRST = "cache_first"
    NETWORK_FIRST = "network_first"
    IMAGE_FIRST = "image_first"
    CROSS_ORIGIN = "cross_origin"


@dataclass(frozen=True)
class CachePartitions:
    """Physical partition names for one cache version.

    Names follow ``<prefix>-<kind>-<version>``; a version bump yields a
    completely new set and the old names become obsolete.
    """

    prefix: str = "adonai"
    version: str = "v1.0.0"

    def name(self, kind: PartitionKind) -> str:
        return f"{self.prefix}-{kind.value}-{self.version}"

    @property
    def all_names(self) -> list[str]:
        return [self.name(kind) for kind in PartitionKind]

    def is_current(self, name: str) -> bool:
        return name in self.all_names


@dataclass(frozen=True)
class RouteDecision:
    """Which strategy a request is dispatched to, and where it is stored."""

    strategy: CacheStrategy
    partition: PartitionKind
