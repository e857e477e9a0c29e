from .cache_store import CacheStore
from .key_value_store import KeyValueStore
from .fetcher import Fetcher
from .action_replayer import ActionReplayer
from .connectivity_probe import ConnectivityProbe

__all__ = [
    "CacheStore",
    "KeyValueStore",
    "Fetcher",
    "ActionReplayer",
    "ConnectivityProbe",
]
