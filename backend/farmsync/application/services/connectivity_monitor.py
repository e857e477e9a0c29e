"""Connectivity monitor — tracks online/offline state and fires on reconnect."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any

from farmsync.application.interfaces import ConnectivityProbe

logger = logging.getLogger(__name__)

OnlineCallback = Callable[[], Awaitable[Any]]


class ConnectivityMonitor:
    """Owns the edge's online flag.

    State changes come from explicit notifications (``set_online``) or from
    an optional background probe of the origin. Callbacks registered with
    ``on_online`` run once per offline → online transition, and once at
    ``start()`` when the edge is already online.
    """

    def __init__(
        self,
        *,
        initially_online: bool = True,
        probe: ConnectivityProbe | None = None,
        probe_interval: float = 15.0,
    ) -> None:
        self._online = initially_online
        self._probe = probe
        self._probe_interval = probe_interval
        self._callbacks: list[OnlineCallback] = []
        self._running = False
        self._task: asyncio.Task | None = None

    @property
    def is_online(self) -> bool:
        return self._online

    def on_online(self, callback: OnlineCallback) -> None:
        self._callbacks.append(callback)

    async def set_online(self, online: bool) -> bool:
        """Record the new state. Returns True only on an offline → online transition."""
        previous = self._online
        self._online = online
        if online == previous:
            return False

        if online:
            logger.info("Back online — running reconnect callbacks")
            await self._fire()
            return True

        logger.info("Offline mode — changes will sync when connected")
        return False

    async def start(self) -> None:
        """Take an initial reading, fire callbacks if online, and start probing."""
        if self._probe is not None:
            self._online = await self._probe.is_reachable()

        if self._online:
            await self._fire()

        if self._probe is not None:
            self._running = True
            self._task = asyncio.create_task(self._loop())
            logger.info("ConnectivityMonitor probing every %.0fs", self._probe_interval)

    async def stop(self) -> None:
        self._running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        logger.info("ConnectivityMonitor stopped")

    async def _loop(self) -> None:
        while self._running:
            await asyncio.sleep(self._probe_interval)
            try:
                reachable = await self._probe.is_reachable()
                await self.set_online(reachable)
            except asyncio.CancelledError:
                break
            except Exception:
                logger.exception("Connectivity probe error")

    async def _fire(self) -> None:
        for callback in self._callbacks:
            try:
                await callback()
            except Exception:
                logger.exception("Reconnect callback failed")
