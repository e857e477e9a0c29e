"""httpx-backed Fetcher — the edge's only way out to the network."""

import logging

import httpx

from farmsync.application.interfaces import Fetcher
from farmsync.domain.entities import CachedResponse, InterceptedRequest
from farmsync.domain.exceptions import NetworkError

logger = logging.getLogger(__name__)

# Never forwarded in either direction; httpx recomputes or decodes these
_HOP_BY_HOP = frozenset({
    "connection",
    "keep-alive",
    "proxy-authenticate",
    "proxy-authorization",
    "te",
    "trailers",
    "transfer-encoding",
    "upgrade",
})
_REQUEST_DROP = _HOP_BY_HOP | {"host", "content-length", "accept-encoding"}
_RESPONSE_DROP = _HOP_BY_HOP | {"content-length", "content-encoding"}


class HttpxFetcher(Fetcher):
    """Infrastructure adapter — performs requests with a shared httpx.AsyncClient.

    Transport errors (connection refused, DNS, timeouts) become NetworkError;
    HTTP error statuses come back as regular responses.
    """

    def __init__(self, http_client: httpx.AsyncClient):
        self._http_client = http_client

    async def fetch(self, request: InterceptedRequest, body: bytes | None = None) -> CachedResponse:
        headers = {k: v for k, v in request.headers.items() if k not in _REQUEST_DROP}
        try:
            response = await self._http_client.request(
                request.method,
                request.url,
                headers=headers,
                content=body or None,
            )
        except httpx.HTTPError as exc:
            reason = str(exc) or type(exc).__name__
            logger.debug("Fetch %s %s failed: %s", request.method, request.url, reason)
            raise NetworkError(request.url, reason) from exc

        return CachedResponse(
            status=response.status_code,
            status_text=response.reason_phrase,
            headers={k: v for k, v in response.headers.items() if k.lower() not in _RESPONSE_DROP},
            body=response.content,
            url=str(response.url),
        )
