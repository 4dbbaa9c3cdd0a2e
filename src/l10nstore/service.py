"""Public facade for storing and resolving localized values.

LocalizationService composes the chain builder, the store and the
resolution cache. It adds no behavior of its own beyond argument
normalization, choosing the value of last resort, and fallback
observability.

Python 3.13+.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

from l10nstore.chain import build_chain
from l10nstore.enums import ResolutionSource
from l10nstore.errors import InvalidArgumentError
from l10nstore.runtime.cache import ResolutionCache
from l10nstore.store import LocalizationStore
from l10nstore.types import FallbackInfo, LocaleTag, validate_key

if TYPE_CHECKING:
    from l10nstore.chain import ChainBuilder
    from l10nstore.repository import EntryRepository
    from l10nstore.runtime.cache_config import CacheConfig
    from l10nstore.types import (
        ChangeListener,
        FallbackListener,
        LocaleInput,
        LocalizationKey,
        Resolution,
    )

__all__ = ["Localization", "LocalizationService"]


@runtime_checkable
class Localization(Protocol):
    """Capability interface of a localized key-value store.

    LocalizationService is the implementation shipped with this package;
    code that only consumes localized strings should depend on this
    protocol instead.
    """

    def add_value(self, key: LocalizationKey, locale: LocaleInput, value: str) -> None:
        """Store a value; the first value of a key becomes its default."""
        ...

    def update_value(self, key: LocalizationKey, locale: LocaleInput, value: str) -> None:
        """Replace the value of an existing entry."""
        ...

    def remove_value(self, key: LocalizationKey, locale: LocaleInput) -> None:
        """Remove one entry; the default cannot be removed while others exist."""
        ...

    def remove_key(self, key: LocalizationKey) -> int:
        """Remove every entry of a key and return how many were removed."""
        ...

    def switch_default_locale(self, key: LocalizationKey, locale: LocaleInput) -> None:
        """Make an existing entry the default of its key."""
        ...

    def get_exact_value(self, key: LocalizationKey, locale: LocaleInput) -> str | None:
        """Return the value at (key, locale) without fallback."""
        ...

    def get_supported_locales_for_key(self, key: LocalizationKey) -> frozenset[LocaleTag]:
        """Return every locale with an entry for key."""
        ...

    def get_value(
        self,
        key: LocalizationKey,
        locale: LocaleInput | None = None,
        default_value: str | None = None,
    ) -> str:
        """Resolve key for locale through the fallback chain."""
        ...

    def clear_cache(self) -> None:
        """Drop every cached resolution."""
        ...


class LocalizationService:
    """Localized key-value store with locale fallback and caching.

    Each key has translations in one or more locales, exactly one of which
    is the key's default. get_value() walks the requested locale's
    truncation chain (en-GB-oxendict -> en-GB -> en), then the key's
    default locale, then the caller default, then the key itself.

    Thread Safety:
        All methods are thread-safe. Mutations of one key are serialized;
        mutations of different keys run in parallel. Cached resolutions of
        a key are dropped before a mutation of that key returns.

    Example:
        >>> service = LocalizationService(InMemoryEntryRepository())
        >>> service.add_value("greeting", "en", "Hello")
        >>> service.add_value("greeting", "en-GB", "Hiya")
        >>> service.get_value("greeting", "en-GB")
        'Hiya'
        >>> service.get_value("greeting", "en-US")
        'Hello'
        >>> service.get_value("greeting", "fr", "?")
        'Hello'
        >>> service.get_value("farewell", "fr")
        'farewell'
    """

    __slots__ = ("_cache", "_cache_config", "_on_fallback", "_store")

    def __init__(
        self,
        repository: EntryRepository,
        *,
        cache: CacheConfig | None = None,
        chain_builder: ChainBuilder = build_chain,
        on_fallback: FallbackListener | None = None,
        on_change: ChangeListener | None = None,
        lock_timeout: float | None = None,
    ) -> None:
        """Initialize the service.

        Args:
            repository: Persistence backend implementing EntryRepository
            cache: Cache configuration; None uses ``CacheConfig()`` defaults
            chain_builder: Function producing the locale chain to probe
            on_fallback: Optional callback invoked when a requested locale is
                answered by anything other than an exact match. Useful for
                monitoring missing translations. Receives a FallbackInfo.
            on_change: Optional callback receiving a ChangeEvent after every
                effective mutation. Runs while the key's write lock is held.
            lock_timeout: Per-key lock acquisition timeout in seconds.
                None (default) waits indefinitely.
        """
        self._store = LocalizationStore(repository, lock_timeout=lock_timeout)
        self._cache = ResolutionCache(self._store, cache, chain_builder=chain_builder)
        self._cache_config = cache
        self._on_fallback = on_fallback
        if on_change is not None:
            self._store.add_change_listener(on_change)

    @property
    def store(self) -> LocalizationStore:
        """The underlying store (mutations and uncached lookups)."""
        return self._store

    @property
    def cache_config(self) -> CacheConfig | None:
        """Cache configuration passed at construction (None means defaults)."""
        return self._cache_config

    def add_value(self, key: LocalizationKey, locale: LocaleInput, value: str) -> None:
        """Store a value; see LocalizationStore.add_value()."""
        self._store.add_value(key, locale, value)

    def update_value(self, key: LocalizationKey, locale: LocaleInput, value: str) -> None:
        """Replace an existing value; see LocalizationStore.update_value()."""
        self._store.update_value(key, locale, value)

    def remove_value(self, key: LocalizationKey, locale: LocaleInput) -> None:
        """Remove one entry; see LocalizationStore.remove_value()."""
        self._store.remove_value(key, locale)

    def remove_key(self, key: LocalizationKey) -> int:
        """Remove every entry of a key; see LocalizationStore.remove_key()."""
        return self._store.remove_key(key)

    def switch_default_locale(self, key: LocalizationKey, locale: LocaleInput) -> None:
        """Move the default; see LocalizationStore.switch_default_locale()."""
        self._store.switch_default_locale(key, locale)

    def get_exact_value(self, key: LocalizationKey, locale: LocaleInput) -> str | None:
        """Return the value at (key, locale), bypassing fallback and cache."""
        return self._store.get_exact_value(key, locale)

    def get_supported_locales_for_key(self, key: LocalizationKey) -> frozenset[LocaleTag]:
        """Return every locale with an entry for key (empty if unknown)."""
        return self._store.get_supported_locales_for_key(key)

    def get_value(
        self,
        key: LocalizationKey,
        locale: LocaleInput | None = None,
        default_value: str | None = None,
    ) -> str:
        """Resolve key for locale through the fallback chain.

        Args:
            key: The key to resolve
            locale: Requested locale. None means the key's default locale.
            default_value: Returned when no entry matches. When omitted the
                key itself is returned instead.

        Returns:
            The resolved value

        Raises:
            InvalidArgumentError: If key is absent, locale is malformed, or
                default_value is not a string
        """
        return self.resolve(key, locale, default_value).value

    def resolve(
        self,
        key: LocalizationKey,
        locale: LocaleInput | None = None,
        default_value: str | None = None,
    ) -> Resolution:
        """Resolve key like get_value() but report where the value came from.

        Returns:
            Resolution with the value, the supplying locale and the source

        Example:
            >>> resolution = service.resolve("greeting", "en-US")
            >>> str(resolution.locale), resolution.source
            ('en', <ResolutionSource.FALLBACK: 'fallback'>)
        """
        key = validate_key(key)
        requested = LocaleTag.parse(locale) if locale is not None else None
        if default_value is not None and not isinstance(default_value, str):
            msg = f"Default value must be a string, got {type(default_value).__name__}"
            raise InvalidArgumentError(msg)

        resolution = self._cache.resolve(key, requested, default_value)

        if (
            self._on_fallback is not None
            and requested is not None
            and resolution.source is not ResolutionSource.EXACT
        ):
            self._on_fallback(
                FallbackInfo(
                    key=key,
                    requested_locale=requested,
                    resolved_locale=resolution.locale,
                    source=resolution.source,
                )
            )
        return resolution

    def clear_cache(self) -> None:
        """Drop every cached resolution.

        Only necessary after bulk updates applied to the repository directly
        (for example switching the default locale of many keys with one SQL
        statement), which bypass per-key invalidation.
        """
        self._cache.clear()

    def get_cache_stats(self) -> dict[str, int | float]:
        """Get resolution cache statistics; see ResolutionCache.get_stats()."""
        return self._cache.get_stats()

    def __repr__(self) -> str:
        """Return string representation for debugging."""
        return f"LocalizationService(cached={len(self._cache)}, store={self._store!r})"
