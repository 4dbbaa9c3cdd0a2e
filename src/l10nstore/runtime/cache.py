"""Thread-safe LRU cache of locale resolutions.

Maps a resolution request fingerprint to the Resolution computed for it
and keeps that mapping consistent with the store across all mutations.

Architecture:
    - Thread-safe using threading.RLock
    - LRU eviction via OrderedDict
    - Per-key index for coarse invalidation by key
    - Per-key version counters so a result computed against state that was
      invalidated meanwhile is never written back. A key keeps a counter
      only while it has cached entries or a miss in flight

Cache Key Structure:
    (key, requested_locale, caller_default)
    - key: str
    - requested_locale: LocaleTag | None (None means "default locale")
    - caller_default: str | None (None means "use the key itself")

Invalidation:
    The cache registers itself as a change listener on the store. Any
    mutation of a key drops every fingerprint of that key, regardless of
    locale, because a removal or a default switch changes the outcome of
    every fallback chain for the key. clear() drops everything and is the
    hook for bulk repository changes made outside the store.

Python 3.13+.
"""

from __future__ import annotations

import logging
from collections import OrderedDict
from dataclasses import dataclass
from threading import RLock
from typing import TYPE_CHECKING

from l10nstore.chain import build_chain
from l10nstore.enums import ResolutionSource
from l10nstore.runtime.cache_config import CacheConfig
from l10nstore.types import Resolution

if TYPE_CHECKING:
    from l10nstore.chain import ChainBuilder
    from l10nstore.store import LocalizationStore
    from l10nstore.types import ChangeEvent, LocaleTag, LocalizationKey

__all__ = ["ResolutionCache"]

logger = logging.getLogger(__name__)

type _Fingerprint = tuple[str, LocaleTag | None, str | None]

# (clear generation, per-key invalidation count)
type _Version = tuple[int, int]


@dataclass(frozen=True, slots=True)
class _CacheEntry:
    resolution: Resolution
    version: _Version


class ResolutionCache:
    """Caching resolver over a LocalizationStore.

    Resolution policy on a miss:
        1. If a locale is requested, probe each tag of its chain in order
           and return the first stored value.
        2. Otherwise, or if nothing matched, return the key's default entry.
        3. Otherwise return the caller default if given, else the key.

    Attributes:
        maxsize: Maximum number of cache entries
        hits: Number of cache hits (for metrics)
        misses: Number of cache misses (for metrics)
    """

    __slots__ = (
        "_chain_builder",
        "_entries",
        "_generation",
        "_hits",
        "_index",
        "_invalidations",
        "_lock",
        "_maxsize",
        "_misses",
        "_pending",
        "_stale_writes",
        "_store",
        "_versions",
    )

    def __init__(
        self,
        store: LocalizationStore,
        config: CacheConfig | None = None,
        *,
        chain_builder: ChainBuilder = build_chain,
    ) -> None:
        """Initialize the cache and subscribe to store changes.

        Args:
            store: Store the resolutions are computed from
            config: Cache configuration (default: CacheConfig())
            chain_builder: Function producing the locale chain to probe
        """
        config = config if config is not None else CacheConfig()
        self._store = store
        self._chain_builder = chain_builder
        self._maxsize = config.size
        self._entries: OrderedDict[_Fingerprint, _CacheEntry] = OrderedDict()
        self._index: dict[LocalizationKey, set[_Fingerprint]] = {}
        self._versions: dict[LocalizationKey, int] = {}
        # key -> misses being computed
        self._pending: dict[LocalizationKey, int] = {}
        self._generation = 0
        self._lock = RLock()
        self._hits = 0
        self._misses = 0
        self._invalidations = 0
        self._stale_writes = 0
        store.add_change_listener(self._on_change)

    def resolve(
        self,
        key: LocalizationKey,
        locale: LocaleTag | None,
        fallback: str | None = None,
    ) -> Resolution:
        """Resolve key for locale, serving from cache when possible.

        Args:
            key: Validated key
            locale: Requested locale, or None for the key's default
            fallback: Value of last resort; None means the key itself

        Returns:
            Resolution describing the value and where it came from
        """
        fingerprint: _Fingerprint = (key, locale, fallback)

        with self._lock:
            cached = self._entries.get(fingerprint)
            if cached is not None and cached.version == self._current_version(key):
                self._entries.move_to_end(fingerprint)
                self._hits += 1
                return cached.resolution
            self._misses += 1
            self._pending[key] = self._pending.get(key, 0) + 1

        # The read lock excludes writers, so the version read here matches
        # the state the resolution is computed from
        try:
            with self._store.read_locked(key):
                version = self._current_version(key)
                resolution = self._compute(key, locale, fallback)
            self._put(fingerprint, resolution, version)
        finally:
            with self._lock:
                self._release_pending(key)
        return resolution

    def _compute(
        self,
        key: LocalizationKey,
        locale: LocaleTag | None,
        fallback: str | None,
    ) -> Resolution:
        for position, tag in enumerate(self._chain_builder(locale)):
            value = self._store.get_exact_value(key, tag)
            if value is not None:
                source = ResolutionSource.EXACT if position == 0 else ResolutionSource.FALLBACK
                return Resolution(key, value, tag, source)

        default = self._store.get_default_entry(key)
        if default is not None:
            return Resolution(key, default.value, default.locale, ResolutionSource.DEFAULT)

        if fallback is not None:
            return Resolution(key, fallback, None, ResolutionSource.CALLER_DEFAULT)
        return Resolution(key, key, None, ResolutionSource.KEY)

    def _current_version(self, key: LocalizationKey) -> _Version:
        with self._lock:
            return (self._generation, self._versions.get(key, 0))

    def _put(self, fingerprint: _Fingerprint, resolution: Resolution, version: _Version) -> None:
        """Store a computed resolution unless its key changed meanwhile.

        Concurrent misses for the same fingerprint computed against the same
        version produce the same result; last write wins.
        """
        key = fingerprint[0]
        with self._lock:
            if version != (self._generation, self._versions.get(key, 0)):
                self._stale_writes += 1
                return

            if fingerprint in self._entries:
                self._entries.move_to_end(fingerprint)
            elif len(self._entries) >= self._maxsize:
                evicted, _ = self._entries.popitem(last=False)
                self._unindex(evicted)

            self._entries[fingerprint] = _CacheEntry(resolution, version)
            self._index.setdefault(key, set()).add(fingerprint)

    def _unindex(self, fingerprint: _Fingerprint) -> None:
        key = fingerprint[0]
        fingerprints = self._index.get(key)
        if fingerprints is None:
            return
        fingerprints.discard(fingerprint)
        if not fingerprints:
            del self._index[key]
            self._forget_version(key)

    def _release_pending(self, key: LocalizationKey) -> None:
        remaining = self._pending[key] - 1
        if remaining:
            self._pending[key] = remaining
        else:
            del self._pending[key]
            if key not in self._index:
                self._forget_version(key)

    def _forget_version(self, key: LocalizationKey) -> None:
        """Drop the counter of a key with nothing cached and no miss in flight.

        Safe because no entry or pending write can still carry the old version.
        """
        if key not in self._pending:
            self._versions.pop(key, None)

    def _on_change(self, event: ChangeEvent) -> None:
        self.invalidate(event.key)

    def invalidate(self, key: LocalizationKey) -> int:
        """Drop every cached resolution for key.

        Thread-safe. Called automatically on every store mutation.

        Args:
            key: The mutated key

        Returns:
            Number of cache entries dropped
        """
        with self._lock:
            fingerprints = self._index.pop(key, set())
            for fingerprint in fingerprints:
                del self._entries[fingerprint]
            if key in self._pending:
                # A miss in flight must see the bump and discard its result
                self._versions[key] = self._versions.get(key, 0) + 1
            else:
                self._forget_version(key)
            self._invalidations += 1
        if fingerprints:
            logger.debug("Invalidated %d cached resolutions for %r", len(fingerprints), key)
        return len(fingerprints)

    def clear(self) -> None:
        """Clear all cached entries and reset metrics.

        Thread-safe. Required after bulk repository updates that bypass the
        store. Resolutions still being computed when clear() runs are not
        written back.
        """
        with self._lock:
            self._entries.clear()
            self._index.clear()
            self._versions.clear()
            self._generation += 1
            self._hits = 0
            self._misses = 0
            self._invalidations = 0
            self._stale_writes = 0
        logger.debug("Resolution cache cleared")

    def get_stats(self) -> dict[str, int | float]:
        """Get cache statistics.

        Thread-safe. Returns current metrics.

        Returns:
            Dict with keys:
            - size (int): Current number of cached entries
            - maxsize (int): Maximum cache capacity
            - hits (int): Number of cache hits
            - misses (int): Number of cache misses
            - hit_rate (float): Hit rate as percentage (0.0-100.0)
            - invalidations (int): Number of per-key invalidations
            - stale_writes (int): Computed results discarded because their
              key changed during computation
        """
        with self._lock:
            total = self._hits + self._misses
            hit_rate = (self._hits / total * 100) if total > 0 else 0.0

            return {
                "size": len(self._entries),
                "maxsize": self._maxsize,
                "hits": self._hits,
                "misses": self._misses,
                "hit_rate": round(hit_rate, 2),
                "invalidations": self._invalidations,
                "stale_writes": self._stale_writes,
            }

    def __len__(self) -> int:
        """Get current cache size. Thread-safe."""
        with self._lock:
            return len(self._entries)

    def __contains__(self, fingerprint: object) -> bool:
        """Check whether a (key, locale, fallback) fingerprint is cached."""
        with self._lock:
            return fingerprint in self._entries

    @property
    def maxsize(self) -> int:
        """Maximum cache size."""
        return self._maxsize

    @property
    def hits(self) -> int:
        """Number of cache hits. Thread-safe."""
        with self._lock:
            return self._hits

    @property
    def misses(self) -> int:
        """Number of cache misses. Thread-safe."""
        with self._lock:
            return self._misses
