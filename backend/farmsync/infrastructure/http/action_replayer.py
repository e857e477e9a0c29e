"""Replays queued offline actions against the origin farm API over httpx."""

import logging

import httpx

from farmsync.application.interfaces import ActionReplayer
from farmsync.domain.entities import MirrorName, MirrorOperation, QueuedAction
from farmsync.domain.exceptions import NetworkError, ReplayError

logger = logging.getLogger(__name__)

# Origin collection endpoints per mirror
_ENDPOINTS: dict[MirrorName, str] = {
    MirrorName.ANIMALS: "/api/livestock",
    MirrorName.WORKERS: "/api/workers",
    MirrorName.INFRASTRUCTURE: "/api/infrastructure",
    MirrorName.GALLERY: "/api/gallery",
}


class HttpActionReplayer(ActionReplayer):
    """add → POST <collection>, update → PUT <collection>/<id>, delete → DELETE <collection>/<id>."""

    def __init__(self, http_client: httpx.AsyncClient, origin: str):
        self._http_client = http_client
        self._origin = origin.rstrip("/")

    def build_request(self, item: QueuedAction) -> tuple[str, str]:
        """Return the (method, url) an action is replayed with."""
        mirror, operation = item.action.target
        collection = f"{self._origin}{_ENDPOINTS[mirror]}"
        if operation is MirrorOperation.ADD:
            return "POST", collection
        record_id = item.payload.get("id")
        if record_id is None:
            raise ValueError(f"{item.action.value} payload has no 'id'")
        if operation is MirrorOperation.UPDATE:
            return "PUT", f"{collection}/{record_id}"
        return "DELETE", f"{collection}/{record_id}"

    async def replay(self, item: QueuedAction) -> None:
        method, url = self.build_request(item)
        json_body = None if method == "DELETE" else item.payload
        try:
            response = await self._http_client.request(method, url, json=json_body)
        except httpx.HTTPError as exc:
            raise NetworkError(url, str(exc) or type(exc).__name__) from exc

        if response.status_code >= 400:
            raise ReplayError(item.action.value, response.status_code, response.text[:200])
        logger.debug("Replayed %s → %s %s (%d)", item.action.value, method, url, response.status_code)
