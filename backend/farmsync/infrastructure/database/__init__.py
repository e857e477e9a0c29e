from .base import Base
from .session import engine, async_session_factory, build_engine, build_session_factory
from .models import CacheEntryModel, StorageRecordModel

__all__ = [
    "Base",
    "engine",
    "async_session_factory",
    "build_engine",
    "build_session_factory",
    "CacheEntryModel",
    "StorageRecordModel",
]
