"""Edge service container — builds every service once at startup and wires the ports."""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import httpx
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from farmsync.application.interfaces import (
    ActionReplayer,
    CacheStore,
    ConnectivityProbe,
    Fetcher,
    KeyValueStore,
)
from farmsync.application.services import (
    CacheLifecycleService,
    CacheStrategyRouter,
    ConnectivityMonitor,
    LocalMirrorService,
    OfflineActionQueue,
)
from farmsync.config import Settings
from farmsync.domain.entities import CachePartitions
from farmsync.infrastructure.database.repositories import (
    SQLAlchemyCacheStore,
    SQLAlchemyKeyValueStore,
)
from farmsync.infrastructure.http.action_replayer import HttpActionReplayer
from farmsync.infrastructure.http.connectivity_probe import HttpConnectivityProbe
from farmsync.infrastructure.http.httpx_fetcher import HttpxFetcher

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class EdgeContainer:
    """Explicitly constructed service graph, stored on ``app.state.container``."""

    settings: Settings
    fetcher: Fetcher
    cache_router: CacheStrategyRouter
    cache_lifecycle: CacheLifecycleService
    mirrors: LocalMirrorService
    offline_queue: OfflineActionQueue
    connectivity: ConnectivityMonitor
    http_client: httpx.AsyncClient | None = None
    clock: Callable[[], datetime] = _utcnow

    async def startup(self) -> None:
        """Install → activate → offline support → queue load → connectivity (drain if online)."""
        settings = self.settings

        if settings.precache_on_startup:
            await self.cache_lifecycle.install(settings.precache_urls)
        deleted = await self.cache_lifecycle.activate()
        if deleted:
            logger.info("Activated cache %s, removed %d old partitions", settings.cache_version, len(deleted))

        await self.initialize_offline_support()
        pending = await self.offline_queue.load()
        logger.info("Offline queue loaded with %d pending actions", pending)

        await self.connectivity.start()

    async def initialize_offline_support(self) -> None:
        """Snapshot essential data, expire old queue items and snapshots, restore if needed."""
        cutoff = self.clock() - timedelta(days=self.settings.queue_retention_days)
        await self.mirrors.cache_essential_data()
        await self.offline_queue.cleanup(cutoff)
        await self.mirrors.cleanup_snapshot(cutoff)
        restored = await self.mirrors.restore_cached_data()
        logger.info("Offline support initialized (restored snapshot: %s)", restored)

    async def shutdown(self) -> None:
        await self.connectivity.stop()
        try:
            await self.mirrors.record_session(origin=self.settings.origin_url)
        except Exception:
            logger.exception("Could not record last edge session")
        if self.http_client is not None:
            await self.http_client.aclose()


def build_container(
    settings: Settings,
    *,
    cache_store: CacheStore,
    storage: KeyValueStore,
    fetcher: Fetcher,
    replayer: ActionReplayer | None = None,
    probe: ConnectivityProbe | None = None,
    http_client: httpx.AsyncClient | None = None,
    initially_online: bool = True,
    clock: Callable[[], datetime] = _utcnow,
) -> EdgeContainer:
    """Wire the services around the given ports."""
    partitions = CachePartitions(prefix=settings.cache_prefix, version=settings.cache_version)

    cache_router = CacheStrategyRouter(
        cache_store,
        fetcher,
        origin=settings.origin_url,
        partitions=partitions,
        fetch_timeout=settings.fetch_timeout_seconds,
        image_max_age=timedelta(seconds=settings.image_max_age_seconds),
        fallback_families=settings.image_fallback_families,
        hero_image_paths=settings.hero_image_paths,
        clock=clock,
    )
    cache_lifecycle = CacheLifecycleService(
        cache_store,
        fetcher,
        origin=settings.origin_url,
        partitions=partitions,
        fetch_timeout=settings.fetch_timeout_seconds,
    )
    mirrors = LocalMirrorService(
        storage,
        snapshot_max_age=timedelta(hours=settings.snapshot_max_age_hours),
        clock=clock,
    )
    offline_queue = OfflineActionQueue(
        storage,
        mirrors,
        replayer=replayer,
        max_retries=settings.queue_max_retries,
        clock=clock,
    )
    connectivity = ConnectivityMonitor(
        initially_online=initially_online,
        probe=probe,
        probe_interval=settings.connectivity_probe_interval,
    )
    connectivity.on_online(offline_queue.drain)

    return EdgeContainer(
        settings=settings,
        fetcher=fetcher,
        cache_router=cache_router,
        cache_lifecycle=cache_lifecycle,
        mirrors=mirrors,
        offline_queue=offline_queue,
        connectivity=connectivity,
        http_client=http_client,
        clock=clock,
    )


def build_default_container(
    settings: Settings,
    session_factory: async_sessionmaker[AsyncSession],
) -> EdgeContainer:
    """Production wiring: SQLAlchemy stores and httpx adapters sharing one client."""
    http_client = httpx.AsyncClient(
        timeout=settings.fetch_timeout_seconds,
        follow_redirects=True,
    )

    replayer = None
    if settings.replay_to_origin:
        replayer = HttpActionReplayer(http_client, settings.origin_url)

    probe = None
    if settings.connectivity_probe_enabled:
        probe = HttpConnectivityProbe(
            http_client,
            f"{settings.origin_url}{settings.connectivity_probe_path}",
        )

    return build_container(
        settings,
        cache_store=SQLAlchemyCacheStore(session_factory),
        storage=SQLAlchemyKeyValueStore(session_factory),
        fetcher=HttpxFetcher(http_client),
        replayer=replayer,
        probe=probe,
        http_client=http_client,
    )
