"""
Offline-first storage: the on-device cache and the remote pull engine.
"""

from .local_cache import CacheKey, LocalCache
from .sync_engine import PullResult, SyncEngine, SyncState, SyncStatus

__all__ = [
    "CacheKey",
    "LocalCache",
    "PullResult",
    "SyncEngine",
    "SyncState",
    "SyncStatus",
]
