"""Cache lifecycle — precache on install, prune old versions on activate, inspect partitions."""

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

from farmsync.application.interfaces import CacheStore, Fetcher
from farmsync.application.services.cache_strategy_router import fetch_with_timeout
from farmsync.domain.entities import CachePartitions, InterceptedRequest, PartitionKind
from farmsync.domain.exceptions import NetworkError

logger = logging.getLogger(__name__)


@dataclass
class PrecacheReport:
    """Which URLs made it into a partition and which did not."""

    partition: str
    cached: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)


@dataclass
class PartitionSummary:
    name: str
    kind: PartitionKind | None
    entries: int
    current: bool


class CacheLifecycleService:
    """Owns the partition lifecycle around the strategy router."""

    def __init__(
        self,
        cache_store: CacheStore,
        fetcher: Fetcher,
        *,
        origin: str,
        partitions: CachePartitions | None = None,
        fetch_timeout: float = 10.0,
    ):
        self._store = cache_store
        self._fetcher = fetcher
        self._origin = origin.rstrip("/")
        self._partitions = partitions or CachePartitions()
        self._fetch_timeout = fetch_timeout

    def _absolute(self, url: str) -> str:
        if url.startswith(("http://", "https://")):
            return url
        return f"{self._origin}/{url.lstrip('/')}"

    async def install(self, urls: Sequence[str]) -> PrecacheReport:
        """Precache the app shell into the static partition."""
        report = await self.cache_urls(urls, PartitionKind.STATIC)
        if report.failed:
            logger.warning(
                "Precache incomplete: %d of %d URLs failed (%s)",
                len(report.failed),
                len(urls),
                ", ".join(report.failed),
            )
        else:
            logger.info("Precached %d URLs into %s", len(report.cached), report.partition)
        return report

    async def cache_urls(
        self, urls: Sequence[str], kind: PartitionKind = PartitionKind.DYNAMIC
    ) -> PrecacheReport:
        """Fetch each URL and store successful responses; failures are reported, not raised."""
        partition = self._partitions.name(kind)
        report = PrecacheReport(partition=partition)

        for url in urls:
            request = InterceptedRequest(url=self._absolute(url))
            try:
                response = await fetch_with_timeout(self._fetcher, request, self._fetch_timeout)
            except NetworkError as exc:
                logger.debug("Precache fetch failed for %s: %s", request.url, exc.reason)
                report.failed.append(url)
                continue

            if not response.ok:
                report.failed.append(url)
                continue

            try:
                await self._store.put(partition, request.cache_key, response)
            except Exception:
                logger.exception("Could not store precached %s", request.url)
                report.failed.append(url)
                continue
            report.cached.append(url)

        return report

    async def activate(self) -> list[str]:
        """Delete every partition that does not belong to the current cache version."""
        deleted: list[str] = []
        for name in await self._store.partitions():
            if self._partitions.is_current(name):
                continue
            if await self._store.delete_partition(name):
                logger.info("Deleted obsolete cache partition %s", name)
                deleted.append(name)
        return deleted

    async def summaries(self) -> list[PartitionSummary]:
        """Every stored partition plus the (possibly empty) current ones."""
        kinds = {self._partitions.name(kind): kind for kind in PartitionKind}
        names = list(kinds)
        for name in await self._store.partitions():
            if name not in kinds:
                names.append(name)

        result = []
        for name in names:
            keys = await self._store.keys(name)
            result.append(
                PartitionSummary(
                    name=name,
                    kind=kinds.get(name),
                    entries=len(keys),
                    current=name in kinds,
                )
            )
        return result

    async def keys(self, kind: PartitionKind) -> list[str]:
        return await self._store.keys(self._partitions.name(kind))

    async def clear(self, kind: PartitionKind) -> bool:
        name = self._partitions.name(kind)
        cleared = await self._store.delete_partition(name)
        if cleared:
            logger.info("Cleared cache partition %s", name)
        return cleared
