"""Abstract port for replaying queued offline actions against the origin."""

from abc import ABC, abstractmethod

from farmsync.domain.entities import QueuedAction


class ActionReplayer(ABC):
    """Sends a queued action to the origin server.

    Raises ``ReplayError`` when the origin rejects it and ``NetworkError``
    when the origin is unreachable; either counts as a failed attempt.
    """

    @abstractmethod
    async def replay(self, item: QueuedAction) -> None:
        ...
