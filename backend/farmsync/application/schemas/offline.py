"""Pydantic schemas for the offline queue, local mirrors and connectivity API."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from farmsync.domain.entities import ActionType


# ── Offline Queue Schemas ────────────────────────────────────────────


class QueuedActionCreate(BaseModel):
    """Request body for queueing a mutating farm action."""

    action: ActionType = Field(..., examples=["add_animal"])
    payload: dict[str, Any] = Field(
        ..., examples=[{"id": 42, "name": "Bella", "type": "Cattle"}],
    )


class QueuedActionResponse(BaseModel):
    """A queued action as returned to clients."""

    id: str
    action: ActionType
    payload: dict[str, Any]
    enqueued_at: datetime
    retry_count: int

    model_config = {"from_attributes": True}


class DrainResponse(BaseModel):
    applied: int
    failed: int
    dropped: int
    remaining: int
    skipped: bool

    model_config = {"from_attributes": True}


class StorageKeyUsage(BaseModel):
    key: str
    size: int


class StorageUsageResponse(BaseModel):
    total_size: int
    total_size_formatted: str
    keys: list[StorageKeyUsage]


# ── Local Mirror Schemas ─────────────────────────────────────────────


class MirrorResponse(BaseModel):
    name: str
    available: bool
    records: list[dict[str, Any]]


class MirrorReplace(BaseModel):
    """Request body for overwriting a mirror with a local edit."""

    records: list[dict[str, Any]] = Field(default_factory=list)


# ── Connectivity Schemas ─────────────────────────────────────────────


class ConnectivityUpdate(BaseModel):
    online: bool


class ConnectivityResponse(BaseModel):
    online: bool
    draining: bool
    pending_actions: int
