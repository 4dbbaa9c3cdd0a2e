"""Runtime support: per-key locking and the resolution cache.

Exports:
    RWLock, KeyLockRegistry: Readers-writer locking scoped to keys
    ResolutionCache: Thread-safe LRU cache of resolutions
    CacheConfig: Immutable cache configuration

Python 3.13+.
"""

from .cache import ResolutionCache
from .cache_config import CacheConfig
from .rwlock import KeyLockRegistry, RWLock

__all__ = ["CacheConfig", "KeyLockRegistry", "RWLock", "ResolutionCache"]
