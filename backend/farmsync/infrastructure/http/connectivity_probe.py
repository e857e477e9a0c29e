"""Checks origin reachability with a lightweight GET against its health endpoint."""

import logging

import httpx

from farmsync.application.interfaces import ConnectivityProbe

logger = logging.getLogger(__name__)


class HttpConnectivityProbe(ConnectivityProbe):
    """The origin counts as reachable when the health URL answers below 500."""

    def __init__(self, http_client: httpx.AsyncClient, health_url: str):
        self._http_client = http_client
        self._health_url = health_url

    async def is_reachable(self) -> bool:
        try:
            response = await self._http_client.get(self._health_url)
        except httpx.HTTPError as exc:
            logger.debug("Origin unreachable at %s: %s", self._health_url, exc)
            return False
        return response.status_code < 500
