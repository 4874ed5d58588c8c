# Persistence layer
from .snapshot import read_snapshot, write_snapshot
from .subscriber_registry import SubscriberRegistry
from .watchlist_store import WatchlistStore

__all__ = [
    "read_snapshot",
    "write_snapshot",
    "SubscriberRegistry",
    "WatchlistStore",
]
