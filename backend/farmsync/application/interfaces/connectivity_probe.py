"""Abstract port for checking whether the origin is reachable."""

from abc import ABC, abstractmethod


class ConnectivityProbe(ABC):

    @abstractmethod
    async def is_reachable(self) -> bool:
        """Return True when the origin answers; never raises."""
        ...
