"""Abstract port for partitioned response caching."""

from abc import ABC, abstractmethod

from farmsync.domain.entities import CachedResponse


class CacheStore(ABC):
    """Port for the edge response cache — implemented in the infrastructure layer.

    Entries are grouped into named partitions. Each partition can be
    enumerated and cleared on its own.
    """

    @abstractmethod
    async def match(self, key: str, partition: str | None = None) -> CachedResponse | None:
        """Return the entry for ``key``; searches every partition when none is given."""
        ...

    @abstractmethod
    async def put(self, partition: str, key: str, response: CachedResponse) -> None:
        """Store (or overwrite) an entry in a partition."""
        ...

    @abstractmethod
    async def keys(self, partition: str) -> list[str]:
        """List the keys stored in a partition, oldest first."""
        ...

    @abstractmethod
    async def partitions(self) -> list[str]:
        """List the names of every partition holding at least one entry."""
        ...

    @abstractmethod
    async def delete_partition(self, partition: str) -> bool:
        """Remove a partition and its entries. Returns False if it did not exist."""
        ...
