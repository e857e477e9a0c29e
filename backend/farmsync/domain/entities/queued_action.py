"""Domain entity for offline actions — persisted queue of mutating farm actions."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any
from uuid import uuid4

from farmsync.domain.exceptions import UnknownActionError


class MirrorName(str, Enum):
    """Local mirrors of server-owned farm collections."""

    ANIMALS = "animals"
    WORKERS = "workers"
    INFRASTRUCTURE = "infrastructure"
    GALLERY = "gallery"

    @property
    def storage_key(self) -> str:
        return f"adonai_{self.value}"


class MirrorOperation(str, Enum):
    ADD = "add"
    UPDATE = "update"
    DELETE = "delete"


class ActionType(str, Enum):
    """The fixed set of actions that may be queued while offline."""

    ADD_ANIMAL = "add_animal"
    UPDATE_ANIMAL = "update_animal"
    DELETE_ANIMAL = "delete_animal"
    ADD_WORKER = "add_worker"
    UPDATE_WORKER = "update_worker"
    ADD_INFRASTRUCTURE = "add_infrastructure"
    UPDATE_INFRASTRUCTURE = "update_infrastructure"
    UPLOAD_PHOTO = "upload_photo"

    @classmethod
    def parse(cls, value: "str | ActionType") -> "ActionType":
        try:
            return cls(value)
        except ValueError:
            raise UnknownActionError(str(value)) from None

    @property
    def target(self) -> tuple[MirrorName, MirrorOperation]:
        return ACTION_TARGETS[self]


ACTION_TARGETS: dict[ActionType, tuple[MirrorName, MirrorOperation]] = {
    ActionType.ADD_ANIMAL: (MirrorName.ANIMALS, MirrorOperation.ADD),
    ActionType.UPDATE_ANIMAL: (MirrorName.ANIMALS, MirrorOperation.UPDATE),
    ActionType.DELETE_ANIMAL: (MirrorName.ANIMALS, MirrorOperation.DELETE),
    ActionType.ADD_WORKER: (MirrorName.WORKERS, MirrorOperation.ADD),
    ActionType.UPDATE_WORKER: (MirrorName.WORKERS, MirrorOperation.UPDATE),
    ActionType.ADD_INFRASTRUCTURE: (MirrorName.INFRASTRUCTURE, MirrorOperation.ADD),
    ActionType.UPDATE_INFRASTRUCTURE: (MirrorName.INFRASTRUCTURE, MirrorOperation.UPDATE),
    ActionType.UPLOAD_PHOTO: (MirrorName.GALLERY, MirrorOperation.ADD),
}


@dataclass
class QueuedAction:
    """A mutating action recorded while offline, waiting to be drained.

    Only ``retry_count`` and ``replayed`` change after creation; the item
    is removed from the queue once applied or once it exceeds the retry ceiling.
    """

    action: ActionType
    payload: dict[str, Any]
    id: str = field(default_factory=lambda: uuid4().hex)
    enqueued_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    retry_count: int = 0
    replayed: bool = False

    def record_failure(self) -> int:
        self.retry_count += 1
        return self.retry_count

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "action": self.action.value,
            "payload": self.payload,
            "enqueued_at": self.enqueued_at.isoformat(),
            "retry_count": self.retry_count,
            "replayed": self.replayed,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "QueuedAction":
        enqueued_at = datetime.fromisoformat(data["enqueued_at"])
        if enqueued_at.tzinfo is None:
            enqueued_at = enqueued_at.replace(tzinfo=timezone.utc)
        return cls(
            id=str(data["id"]),
            action=ActionType.parse(data["action"]),
            payload=dict(data.get("payload") or {}),
            enqueued_at=enqueued_at,
            retry_count=int(data.get("retry_count", 0)),
            replayed=bool(data.get("replayed", False)),
        )


@dataclass
class DrainResult:
    """Outcome of one pass over the offline queue."""

    applied: int = 0
    failed: int = 0
    dropped: int = 0
    remaining: int = 0
    skipped: bool = False

    @property
    def processed(self) -> int:
        """Items removed from the queue in this pass."""
        return self.applied + self.dropped
