"""Pydantic schemas for cache partition inspection and maintenance."""

from pydantic import BaseModel, Field

from farmsync.domain.entities import PartitionKind


class PartitionSummaryResponse(BaseModel):
    name: str
    kind: PartitionKind | None
    entries: int
    current: bool

    model_config = {"from_attributes": True}


class PartitionKeysResponse(BaseModel):
    partition: str
    keys: list[str]


class CacheUrlsRequest(BaseModel):
    """Request body for caching a list of URLs on demand."""

    urls: list[str] = Field(min_length=1)


class PrecacheReportResponse(BaseModel):
    partition: str
    cached: list[str]
    failed: list[str]

    model_config = {"from_attributes": True}


class ActivationResponse(BaseModel):
    deleted: list[str]
