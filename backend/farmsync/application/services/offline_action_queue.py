"""Offline action queue — persists mutating farm actions and drains them on reconnect.

Items are drained in enqueue order. A failing item never blocks the ones
after it: its retry counter is bumped and it stays queued until it either
succeeds or exceeds the retry ceiling, at which point it is dropped.
"""

import asyncio
import json
import logging
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any

from farmsync.application.interfaces import ActionReplayer, KeyValueStore
from farmsync.application.services.local_mirror_service import LocalMirrorService
from farmsync.domain.entities import ActionType, DrainResult, QueuedAction
from farmsync.domain.exceptions import UnknownActionError
from farmsync.infrastructure.logging.colored_logger import SyncLogger, SyncStage

logger = logging.getLogger(__name__)
plog = SyncLogger("OfflineActionQueue")

QUEUE_KEY = "adonai_offline_queue"
DEFAULT_MAX_RETRIES = 3


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class OfflineActionQueue:
    """Owns the QueuedAction lifecycle: enqueue, persist, drain, retry, drop.

    The queue is loaded lazily from the key/value store and rewritten after
    every enqueue and every drain pass. Only one drain runs at a time;
    an overlapping request returns a skipped result without touching state.
    """

    def __init__(
        self,
        storage: KeyValueStore,
        mirrors: LocalMirrorService,
        *,
        replayer: ActionReplayer | None = None,
        max_retries: int = DEFAULT_MAX_RETRIES,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self._storage = storage
        self._mirrors = mirrors
        self._replayer = replayer
        self._max_retries = max_retries
        self._clock = clock
        self._items: list[QueuedAction] = []
        self._loaded = False
        self._drain_lock = asyncio.Lock()

    @property
    def is_draining(self) -> bool:
        return self._drain_lock.locked()

    # ── Persistence ─────────────────────────────────────────────────

    async def load(self) -> int:
        """(Re)read the persisted queue. Unreadable entries are skipped."""
        raw = await self._storage.get(QUEUE_KEY)
        items: list[QueuedAction] = []

        if raw:
            try:
                entries = json.loads(raw)
            except json.JSONDecodeError:
                logger.warning("Persisted offline queue is malformed — starting empty")
                entries = []
            if not isinstance(entries, list):
                logger.warning("Persisted offline queue is not a list — starting empty")
                entries = []

            for entry in entries:
                try:
                    items.append(QueuedAction.from_dict(entry))
                except (KeyError, TypeError, ValueError, UnknownActionError) as exc:
                    logger.warning("Skipping unreadable queued action %r: %s", entry, exc)

        self._items = items
        self._loaded = True
        return len(items)

    async def _ensure_loaded(self) -> None:
        if not self._loaded:
            await self.load()

    async def _persist(self) -> None:
        payload = json.dumps([item.to_dict() for item in self._items])
        try:
            await self._storage.set(QUEUE_KEY, payload)
        except Exception:
            logger.exception("Could not persist offline queue (%d items)", len(self._items))

    # ── Public operations ───────────────────────────────────────────

    async def pending(self) -> list[QueuedAction]:
        await self._ensure_loaded()
        return list(self._items)

    async def enqueue(self, action: "str | ActionType", payload: dict[str, Any]) -> QueuedAction:
        """Append an action with retry_count 0 and persist the whole queue.

        Payloads are not de-duplicated; callers must not double-submit.
        """
        action_type = ActionType.parse(action)
        await self._ensure_loaded()

        item = QueuedAction(
            action=action_type,
            payload=dict(payload),
            enqueued_at=self._clock(),
        )
        self._items.append(item)
        await self._persist()

        plog.step_start(
            SyncStage.ENQUEUE,
            f"Queued {action_type.value}",
            id=item.id,
            queue_length=len(self._items),
        )
        return item

    async def drain(self) -> DrainResult:
        """Apply every queued action once, in enqueue order."""
        if self._drain_lock.locked():
            logger.warning("Drain already in progress — ignoring overlapping request")
            return DrainResult(skipped=True, remaining=len(self._items))

        async with self._drain_lock:
            await self._ensure_loaded()
            snapshot = list(self._items)
            if not snapshot:
                return DrainResult()

            result = DrainResult()
            finished: set[str] = set()

            with plog.timed_step(SyncStage.DRAIN, f"Draining {len(snapshot)} queued actions"):
                for item in snapshot:
                    try:
                        await self._process(item)
                    except Exception as exc:
                        attempts = item.record_failure()
                        if attempts > self._max_retries:
                            finished.add(item.id)
                            result.dropped += 1
                            plog.step_warning(
                                SyncStage.DROP,
                                f"Removing {item.action.value} after {self._max_retries} retries",
                                id=item.id,
                                error=exc,
                            )
                        else:
                            result.failed += 1
                            plog.step_warning(
                                SyncStage.RETRY,
                                f"{item.action.value} failed, will retry",
                                id=item.id,
                                retry_count=attempts,
                                error=exc,
                            )
                        continue

                    finished.add(item.id)
                    result.applied += 1

            # Items enqueued while draining are kept: filter the live list, not the snapshot
            self._items = [item for item in self._items if item.id not in finished]
            await self._persist()

            result.remaining = len(self._items)
            plog.stats(
                applied=result.applied,
                failed=result.failed,
                dropped=result.dropped,
                remaining=result.remaining,
            )
            return result

    async def cleanup(self, cutoff: datetime) -> int:
        """Drop queued actions enqueued before ``cutoff``. Returns how many were removed."""
        await self._ensure_loaded()
        kept = [item for item in self._items if item.enqueued_at > cutoff]
        removed = len(self._items) - len(kept)
        if removed:
            self._items = kept
            await self._persist()
            logger.info("Removed %d expired offline actions", removed)
        return removed

    # ── Internals ───────────────────────────────────────────────────

    async def _process(self, item: QueuedAction) -> None:
        mirror, operation = item.action.target
        self._mirrors.validate(operation, item.payload)

        # The origin must never see the same action twice
        if self._replayer is not None and not item.replayed:
            plog.step_start(SyncStage.REPLAY, f"Replaying {item.action.value} to origin", id=item.id)
            await self._replayer.replay(item)
            item.replayed = True

        changed = await self._mirrors.apply(mirror, operation, item.payload)
        plog.step_complete(
            SyncStage.APPLY,
            f"{item.action.value} → {mirror.value}",
            id=item.id,
            changed=changed,
        )
