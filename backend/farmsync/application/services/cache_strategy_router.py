"""Cache strategy router — selects and runs one caching strategy per intercepted GET.

Dispatch for same-origin requests (first match wins):

    1. Accept: text/html          → network-first  (dynamic)
    2. /images/ + image request   → image-first    (images, 24h freshness)
    3. /static/ or .js/.css/.woff → cache-first    (static)
    4. /api/                      → network-first  (api)
    5. anything else              → network-first  (dynamic)

Cross-origin requests go network-first into the dynamic partition and fall
back to a 503 placeholder. Every strategy ends in a response: network and
storage failures are converted into cached copies or synthesized fallbacks.
"""

import asyncio
import logging
from collections.abc import Callable, Sequence
from datetime import datetime, timedelta, timezone
from urllib.parse import urlsplit

from farmsync.application.interfaces import CacheStore, Fetcher
from farmsync.application.services.offline_fallbacks import (
    offline_page,
    placeholder_image,
    service_unavailable,
)
from farmsync.domain.entities import (
    CACHED_DATE_HEADER,
    CachedResponse,
    CachePartitions,
    CacheStrategy,
    InterceptedRequest,
    PartitionKind,
    RouteDecision,
)
from farmsync.domain.exceptions import NetworkError

logger = logging.getLogger(__name__)

STATIC_EXTENSIONS = (".js", ".css", ".woff", ".woff2")
IMAGE_CACHE_CONTROL = "public, max-age=86400"
DEFAULT_FALLBACK_FAMILIES = ("adonai", "farm-")
DEFAULT_HERO_IMAGES = ("/images/hero-farm.jpg", "/images/farm-2.jpg", "/images/farm-3.jpg")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _normalise_origin(url: str) -> str:
    parts = urlsplit(url)
    return f"{parts.scheme.lower()}://{parts.netloc.lower()}"


async def fetch_with_timeout(
    fetcher: Fetcher, request: InterceptedRequest, timeout: float
) -> CachedResponse:
    """Race a fetch against a timer; a timeout is reported as a NetworkError."""
    try:
        return await asyncio.wait_for(fetcher.fetch(request), timeout=timeout)
    except asyncio.TimeoutError:
        raise NetworkError(request.url, f"timed out after {timeout:g}s") from None


class CacheStrategyRouter:
    """Routes intercepted GET requests to cache-first, network-first or image-first.

    Depends on the CacheStore and Fetcher ports (DI); the clock is injectable
    so image freshness can be tested without waiting a day.
    """

    def __init__(
        self,
        cache_store: CacheStore,
        fetcher: Fetcher,
        *,
        origin: str,
        partitions: CachePartitions | None = None,
        fetch_timeout: float = 10.0,
        image_max_age: timedelta = timedelta(hours=24),
        fallback_families: Sequence[str] = DEFAULT_FALLBACK_FAMILIES,
        hero_image_paths: Sequence[str] = DEFAULT_HERO_IMAGES,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self._store = cache_store
        self._fetcher = fetcher
        self._origin = _normalise_origin(origin)
        self._partitions = partitions or CachePartitions()
        self._fetch_timeout = fetch_timeout
        self._image_max_age = image_max_age
        self._fallback_families = tuple(fallback_families)
        self._hero_image_paths = tuple(hero_image_paths)
        self._clock = clock

    @property
    def origin(self) -> str:
        return self._origin

    @property
    def partitions(self) -> CachePartitions:
        return self._partitions

    def absolute_url(self, path: str) -> str:
        return f"{self._origin}{path}"

    def is_same_origin(self, request: InterceptedRequest) -> bool:
        return _normalise_origin(request.url) == self._origin

    # ── Dispatch ────────────────────────────────────────────────────

    def route(self, request: InterceptedRequest) -> RouteDecision:
        """Decide the strategy for a request without executing it."""
        if not self.is_same_origin(request):
            return RouteDecision(CacheStrategy.CROSS_ORIGIN, PartitionKind.DYNAMIC)

        path = request.path
        if request.accepts("text/html"):
            return RouteDecision(CacheStrategy.NETWORK_FIRST, PartitionKind.DYNAMIC)
        if "/images/" in path and request.is_image:
            return RouteDecision(CacheStrategy.IMAGE_FIRST, PartitionKind.IMAGES)
        if "/static/" in path or path.endswith(STATIC_EXTENSIONS):
            return RouteDecision(CacheStrategy.CACHE_FIRST, PartitionKind.STATIC)
        if "/api/" in path:
            return RouteDecision(CacheStrategy.NETWORK_FIRST, PartitionKind.API)
        return RouteDecision(CacheStrategy.NETWORK_FIRST, PartitionKind.DYNAMIC)

    async def handle(self, request: InterceptedRequest) -> CachedResponse:
        """Run the routed strategy. Always returns a response, never raises."""
        decision = self.route(request)
        logger.debug("%s %s → %s", request.method, request.url, decision.strategy.value)
        try:
            if decision.strategy is CacheStrategy.CROSS_ORIGIN:
                return await self.cross_origin(request)
            if decision.strategy is CacheStrategy.IMAGE_FIRST:
                return await self.image_first(request)
            if decision.strategy is CacheStrategy.CACHE_FIRST:
                return await self.cache_first(request, decision.partition)
            return await self.network_first(request, decision.partition)
        except Exception:
            logger.exception(
                "Strategy %s failed for %s — serving offline fallback",
                decision.strategy.value,
                request.url,
            )
            return await self.offline_fallback(request)

    # ── Strategies ──────────────────────────────────────────────────

    async def cache_first(
        self, request: InterceptedRequest, kind: PartitionKind = PartitionKind.STATIC
    ) -> CachedResponse:
        cached = await self._lookup(request.cache_key)
        if cached is not None:
            return cached

        try:
            response = await self._fetch(request)
        except NetworkError as exc:
            logger.info("Cache miss and network down for %s: %s", request.url, exc.reason)
            return await self.offline_fallback(request)

        if response.ok:
            await self._save(kind, request.cache_key, response.clone())
        return response

    async def network_first(
        self, request: InterceptedRequest, kind: PartitionKind = PartitionKind.DYNAMIC
    ) -> CachedResponse:
        try:
            response = await self._fetch(request)
        except NetworkError as exc:
            logger.info("Network down for %s (%s) — trying cache", request.url, exc.reason)
            cached = await self._lookup(request.cache_key)
            if cached is not None:
                return cached
            return await self.offline_fallback(request)

        if response.ok:
            await self._save(kind, request.cache_key, response.clone())
        return response

    async def image_first(self, request: InterceptedRequest) -> CachedResponse:
        images = self._partitions.name(PartitionKind.IMAGES)
        cached = await self._lookup(request.cache_key, images)
        if cached is not None and self.is_fresh(cached):
            return cached

        try:
            response = await self._fetch(request)
        except NetworkError as exc:
            if cached is not None:
                logger.info("Serving stale image for %s (%s)", request.url, exc.reason)
                return cached
            return await self.image_fallback(request)

        if response.ok:
            stamped = response.clone({
                "cache-control": IMAGE_CACHE_CONTROL,
                CACHED_DATE_HEADER: self._clock().isoformat(),
            })
            await self._save(PartitionKind.IMAGES, request.cache_key, stamped)
        return response

    async def cross_origin(self, request: InterceptedRequest) -> CachedResponse:
        try:
            response = await self._fetch(request)
        except NetworkError as exc:
            logger.info("Cross-origin fetch failed for %s: %s", request.url, exc.reason)
            cached = await self._lookup(request.cache_key)
            if cached is not None:
                return cached
            return service_unavailable(request.url)

        if response.ok:
            await self._save(PartitionKind.DYNAMIC, request.cache_key, response.clone())
        return response

    # ── Fallbacks ───────────────────────────────────────────────────

    def is_fresh(self, response: CachedResponse) -> bool:
        recorded = response.recorded_at
        if recorded is None:
            return False
        age = self._clock() - recorded
        # Future-dated entries (clock skew, bad Date headers) are stale
        return timedelta(0) <= age < self._image_max_age

    async def image_fallback(self, request: InterceptedRequest) -> CachedResponse:
        """Similar cached image → hero image → SVG placeholder."""
        filename = request.filename
        images = self._partitions.name(PartitionKind.IMAGES)

        for family in self._fallback_families:
            if not filename.startswith(family):
                continue
            for key in await self._keys(images):
                candidate = urlsplit(key).path.rsplit("/", 1)[-1]
                if candidate.startswith(family) and candidate != filename:
                    match = await self._lookup(key, images)
                    if match is not None:
                        logger.info("Substituting %s for unavailable %s", candidate, filename)
                        return match

        for path in self._hero_image_paths:
            match = await self._lookup(self.absolute_url(path))
            if match is not None:
                return match

        return placeholder_image(request.url)

    async def offline_fallback(self, request: InterceptedRequest) -> CachedResponse:
        if request.accepts("text/html"):
            shell = await self._lookup(self.absolute_url("/"))
            if shell is not None:
                return shell
            return offline_page(request.url)
        return service_unavailable(request.url)

    # ── Helpers ─────────────────────────────────────────────────────

    async def _fetch(self, request: InterceptedRequest) -> CachedResponse:
        return await fetch_with_timeout(self._fetcher, request, self._fetch_timeout)

    async def _lookup(self, key: str, partition: str | None = None) -> CachedResponse | None:
        try:
            return await self._store.match(key, partition)
        except Exception:
            logger.exception("Cache lookup failed for %s", key)
            return None

    async def _keys(self, partition: str) -> list[str]:
        try:
            return await self._store.keys(partition)
        except Exception:
            logger.exception("Could not enumerate cache partition %s", partition)
            return []

    async def _save(self, kind: PartitionKind, key: str, response: CachedResponse) -> None:
        partition = self._partitions.name(kind)
        try:
            await self._store.put(partition, key, response)
        except Exception:
            logger.exception("Could not store %s in %s", key, partition)
