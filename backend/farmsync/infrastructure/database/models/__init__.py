from .cache_entry import CacheEntryModel
from .storage_record import StorageRecordModel

__all__ = [
    "CacheEntryModel",
    "StorageRecordModel",
]
