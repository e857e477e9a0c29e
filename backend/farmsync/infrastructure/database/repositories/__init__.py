from .cache_store import SQLAlchemyCacheStore
from .key_value_store import SQLAlchemyKeyValueStore

__all__ = [
    "SQLAlchemyCacheStore",
    "SQLAlchemyKeyValueStore",
]
