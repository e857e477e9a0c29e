"""Abstract port for durable key/value storage (the edge's local storage)."""

from abc import ABC, abstractmethod


class KeyValueStore(ABC):
    """Port for persisted string records keyed by name."""

    @abstractmethod
    async def get(self, key: str) -> str | None:
        ...

    @abstractmethod
    async def set(self, key: str, value: str) -> None:
        ...

    @abstractmethod
    async def remove(self, key: str) -> None:
        ...

    @abstractmethod
    async def items(self, prefix: str = "") -> dict[str, str]:
        """Return every record whose key starts with ``prefix``."""
        ...
