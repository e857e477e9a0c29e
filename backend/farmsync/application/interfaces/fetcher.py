"""Abstract port for network access from the edge."""

from abc import ABC, abstractmethod

from farmsync.domain.entities import CachedResponse, InterceptedRequest


class Fetcher(ABC):
    """Performs a request against the network.

    Implementations raise ``NetworkError`` when the destination cannot be
    reached. HTTP error statuses are *not* errors — they are returned as
    responses with ``ok`` set to False.
    """

    @abstractmethod
    async def fetch(self, request: InterceptedRequest, body: bytes | None = None) -> CachedResponse:
        ...
