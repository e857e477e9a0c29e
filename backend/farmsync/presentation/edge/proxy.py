"""Catch-all edge proxy — every non-control request the edge intercepts.

GET requests go through the cache strategy router. Every other method is
forwarded to the origin untouched; those never touch the cache.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status

from farmsync.application.interfaces import Fetcher
from farmsync.application.services import CacheStrategyRouter
from farmsync.config import get_settings
from farmsync.domain.entities import CachedResponse, InterceptedRequest
from farmsync.domain.exceptions import NetworkError
from farmsync.infrastructure.dependencies import get_cache_router, get_fetcher

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Edge"])

# Starlette computes its own framing headers
_STRIP_ON_RESPONSE = frozenset({"content-length", "transfer-encoding", "connection"})
_PASSTHROUGH_METHODS = ["HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


def to_response(cached: CachedResponse) -> Response:
    """Turn a CachedResponse into a Starlette response."""
    headers = {k: v for k, v in cached.headers.items() if k not in _STRIP_ON_RESPONSE}
    return Response(content=cached.body, status_code=cached.status, headers=headers)


def _intercept(request: Request, cache_router: CacheStrategyRouter) -> InterceptedRequest:
    path = request.url.path
    edge_prefix = get_settings().edge_prefix
    if path == edge_prefix or path.startswith(f"{edge_prefix}/"):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not Found")

    url = cache_router.absolute_url(path)
    if request.url.query:
        url = f"{url}?{request.url.query}"
    return InterceptedRequest(url=url, method=request.method, headers=dict(request.headers))


@router.get("/{path:path}", include_in_schema=False)
async def edge_get(
    path: str,
    request: Request,
    cache_router: CacheStrategyRouter = Depends(get_cache_router),
) -> Response:
    intercepted = _intercept(request, cache_router)
    return to_response(await cache_router.handle(intercepted))


@router.api_route("/{path:path}", methods=_PASSTHROUGH_METHODS, include_in_schema=False)
async def edge_passthrough(
    path: str,
    request: Request,
    cache_router: CacheStrategyRouter = Depends(get_cache_router),
    fetcher: Fetcher = Depends(get_fetcher),
) -> Response:
    """Forward any non-GET request to the origin as-is."""
    intercepted = _intercept(request, cache_router)
    body = await request.body()
    try:
        response = await fetcher.fetch(intercepted, body)
    except NetworkError as e:
        logger.info("Origin unreachable for %s %s: %s", intercepted.method, intercepted.url, e.reason)
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"Origin unreachable: {e.reason}",
        )
    return to_response(response)
