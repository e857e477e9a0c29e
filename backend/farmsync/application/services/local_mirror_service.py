"""Local mirrors — persisted copies of the farm collections readable while offline.

Each mirror (animals, workers, infrastructure, gallery) is one JSON list in
the key/value store under ``adonai_<name>``. Mirrors are reconciled by
overwrite: the last write wins, there is no conflict detection.
"""

import json
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any

from farmsync.application.interfaces import KeyValueStore
from farmsync.domain.entities import MirrorName, MirrorOperation
from farmsync.domain.exceptions import UnknownMirrorError

logger = logging.getLogger(__name__)

STORAGE_PREFIX = "adonai_"
SNAPSHOT_KEY = "adonai_offline_cache"
SESSION_KEY = "adonai_last_session"
ESSENTIAL_KEYS = (
    "adonai_animals",
    "adonai_workers",
    "adonai_infrastructure",
    "adonai_users",
    "adonai_gallery",
    "adonai_current_user",
    "adonai_notifications",
)

_MIRROR_ALIASES = {"photos": MirrorName.GALLERY}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _parse_timestamp(value: str) -> datetime:
    parsed = datetime.fromisoformat(value)
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)


def format_bytes(size: int) -> str:
    """Human-readable size: ``0 Bytes``, ``512 Bytes``, ``1.5 KB``, ``2 MB``."""
    if size == 0:
        return "0 Bytes"
    units = ["Bytes", "KB", "MB", "GB"]
    value = float(size)
    index = 0
    while value >= 1024 and index < len(units) - 1:
        value /= 1024
        index += 1
    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return f"{text} {units[index]}"


@dataclass
class StorageUsage:
    total_size: int
    total_size_formatted: str
    keys: list[tuple[str, int]] = field(default_factory=list)


class LocalMirrorService:
    """Reads, writes and reconciles the local mirrors. Depends on the KeyValueStore port."""

    def __init__(
        self,
        storage: KeyValueStore,
        *,
        snapshot_max_age: timedelta = timedelta(hours=24),
        clock: Callable[[], datetime] = _utcnow,
    ):
        self._storage = storage
        self._snapshot_max_age = snapshot_max_age
        self._clock = clock

    @staticmethod
    def resolve(name: "str | MirrorName") -> MirrorName:
        if isinstance(name, MirrorName):
            return name
        if name in _MIRROR_ALIASES:
            return _MIRROR_ALIASES[name]
        try:
            return MirrorName(name)
        except ValueError:
            raise UnknownMirrorError(name) from None

    # ── Reads / writes ──────────────────────────────────────────────

    async def read(self, name: "str | MirrorName") -> list[dict[str, Any]]:
        """Return the mirror's records; missing or corrupted data reads as empty."""
        mirror = self.resolve(name)
        raw = await self._storage.get(mirror.storage_key)
        if raw is None:
            return []
        try:
            records = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Mirror %s holds malformed JSON — treating as empty", mirror.value)
            return []
        if not isinstance(records, list):
            logger.warning("Mirror %s is not a list — treating as empty", mirror.value)
            return []
        return records

    async def write(self, name: "str | MirrorName", records: list[dict[str, Any]]) -> None:
        mirror = self.resolve(name)
        await self._storage.set(mirror.storage_key, json.dumps(records))

    async def is_data_available(self, name: "str | MirrorName") -> bool:
        return len(await self.read(name)) > 0

    @staticmethod
    def validate(operation: MirrorOperation, record: dict[str, Any]) -> None:
        """Raise ValueError for a record that can never be merged into a mirror."""
        if not isinstance(record, dict) or "id" not in record:
            raise ValueError(f"Cannot {operation.value} a record without an 'id'")

    async def apply(
        self,
        name: "str | MirrorName",
        operation: MirrorOperation,
        record: dict[str, Any],
    ) -> bool:
        """Merge one record into a mirror by id. Returns True if the mirror changed.

        add: append unless the id is already present; update: replace the
        matching record; delete: remove the matching record. Update and
        delete of an unknown id are no-ops.
        """
        self.validate(operation, record)

        records = await self.read(name)
        index = next(
            (
                i
                for i, existing in enumerate(records)
                if isinstance(existing, dict) and existing.get("id") == record["id"]
            ),
            None,
        )

        if operation is MirrorOperation.ADD:
            if index is not None:
                return False
            records.append(record)
        elif operation is MirrorOperation.UPDATE:
            if index is None:
                return False
            records[index] = record
        elif operation is MirrorOperation.DELETE:
            if index is None:
                return False
            del records[index]

        await self.write(name, records)
        return True

    # ── Essential-data snapshot ─────────────────────────────────────

    async def cache_essential_data(self) -> int:
        """Copy the essential keys into one timestamped snapshot record."""
        data: dict[str, Any] = {}
        for key in ESSENTIAL_KEYS:
            raw = await self._storage.get(key)
            if not raw:
                continue
            try:
                data[key] = json.loads(raw)
            except json.JSONDecodeError:
                logger.warning("Skipping malformed %s in offline snapshot", key)

        snapshot = {"data": data, "timestamp": self._clock().isoformat()}
        await self._storage.set(SNAPSHOT_KEY, json.dumps(snapshot))
        return len(data)

    async def restore_cached_data(self) -> bool:
        """Restore absent keys from a snapshot younger than the max age."""
        raw = await self._storage.get(SNAPSHOT_KEY)
        if not raw:
            return False

        try:
            snapshot = json.loads(raw)
            data = snapshot["data"]
            taken_at = _parse_timestamp(snapshot["timestamp"])
        except (json.JSONDecodeError, KeyError, TypeError, ValueError) as exc:
            logger.error("Failed to restore cached data: %s", exc)
            return False

        if not isinstance(data, dict):
            logger.error("Failed to restore cached data: snapshot data is not an object")
            return False

        if self._clock() - taken_at >= self._snapshot_max_age:
            return False

        for key, value in data.items():
            if await self._storage.get(key) is None:
                await self._storage.set(key, json.dumps(value))
        return True

    async def cleanup_snapshot(self, cutoff: datetime) -> bool:
        """Remove a snapshot taken before ``cutoff`` (or one that cannot be read)."""
        raw = await self._storage.get(SNAPSHOT_KEY)
        if not raw:
            return False
        try:
            taken_at = _parse_timestamp(json.loads(raw)["timestamp"])
        except (json.JSONDecodeError, KeyError, TypeError, ValueError):
            await self._storage.remove(SNAPSHOT_KEY)
            return True
        if taken_at < cutoff:
            await self._storage.remove(SNAPSHOT_KEY)
            return True
        return False

    # ── Housekeeping ────────────────────────────────────────────────

    async def record_session(self, **details: Any) -> None:
        payload = {"timestamp": self._clock().isoformat(), **details}
        await self._storage.set(SESSION_KEY, json.dumps(payload))

    async def storage_usage(self) -> StorageUsage:
        records = await self._storage.items(STORAGE_PREFIX)
        sizes = sorted(
            ((key, len(value)) for key, value in records.items()),
            key=lambda item: item[1],
            reverse=True,
        )
        total = sum(size for _, size in sizes)
        return StorageUsage(
            total_size=total,
            total_size_formatted=format_bytes(total),
            keys=sizes,
        )
