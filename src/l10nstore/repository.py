"""Persistence contract for localized entries.

The store depends on durable storage only through the narrow
EntryRepository protocol. Each repository call must be individually
atomic; LocalizationStore supplies the cross-call locking needed to
compose them safely.

Components:
    EntryRepository - Protocol for entry persistence (structural typing)
    InMemoryEntryRepository - Dict-backed, lock-guarded implementation

Python 3.13+.
"""

from __future__ import annotations

import threading
from dataclasses import replace
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from l10nstore.types import Entry, LocaleTag, LocalizationKey

if TYPE_CHECKING:
    from collections.abc import Iterator

__all__ = ["EntryRepository", "InMemoryEntryRepository"]


@runtime_checkable
class EntryRepository(Protocol):
    """Protocol for storing (key, locale) -> value plus a per-key default flag.

    This is a Protocol (structural typing) rather than ABC so database,
    key-value or remote backends can satisfy it without inheriting from
    this package.

    Implementations report I/O failures by raising; the store propagates
    them unchanged and does not retry.
    """

    def get(self, key: LocalizationKey, locale: LocaleTag) -> str | None:
        """Return the value at (key, locale), or None if there is no entry."""
        ...

    def put(
        self, key: LocalizationKey, locale: LocaleTag, value: str, is_default: bool
    ) -> None:
        """Create or overwrite the entry at (key, locale)."""
        ...

    def delete(self, key: LocalizationKey, locale: LocaleTag) -> None:
        """Delete the entry at (key, locale). No-op if absent."""
        ...

    def list_locales(self, key: LocalizationKey) -> frozenset[LocaleTag]:
        """Return every locale that has an entry for key."""
        ...

    def find_default(self, key: LocalizationKey) -> tuple[LocaleTag, str] | None:
        """Return (locale, value) of the key's default entry, if any."""
        ...

    def atomic_switch_default(
        self,
        key: LocalizationKey,
        old_locale: LocaleTag | None,
        new_locale: LocaleTag,
    ) -> None:
        """Clear the default flag on old_locale and set it on new_locale atomically.

        old_locale is None when the key currently has no default entry.
        """
        ...


class InMemoryEntryRepository:
    """Dict-backed EntryRepository guarded by a single lock.

    Suitable for tests, embedding and as a reference for real backends.
    Every method holds the lock for its whole duration, so each call is
    atomic with respect to the others.

    Example:
        >>> repo = InMemoryEntryRepository()
        >>> en = LocaleTag.parse("en")
        >>> repo.put("greeting", en, "Hello", True)
        >>> repo.find_default("greeting")
        (LocaleTag(language='en', script=None, territory=None, variant=None), 'Hello')
    """

    __slots__ = ("_entries", "_lock")

    def __init__(self) -> None:
        """Initialize an empty repository."""
        self._entries: dict[LocalizationKey, dict[LocaleTag, Entry]] = {}
        self._lock = threading.Lock()

    def get(self, key: LocalizationKey, locale: LocaleTag) -> str | None:
        with self._lock:
            entry = self._entries.get(key, {}).get(locale)
            return entry.value if entry is not None else None

    def put(
        self, key: LocalizationKey, locale: LocaleTag, value: str, is_default: bool
    ) -> None:
        # Construct outside the lock: Entry validation may raise
        entry = Entry(key, locale, value, is_default)
        with self._lock:
            self._entries.setdefault(key, {})[locale] = entry

    def delete(self, key: LocalizationKey, locale: LocaleTag) -> None:
        with self._lock:
            group = self._entries.get(key)
            if group is None:
                return
            group.pop(locale, None)
            if not group:
                del self._entries[key]

    def list_locales(self, key: LocalizationKey) -> frozenset[LocaleTag]:
        with self._lock:
            return frozenset(self._entries.get(key, ()))

    def find_default(self, key: LocalizationKey) -> tuple[LocaleTag, str] | None:
        with self._lock:
            for entry in self._entries.get(key, {}).values():
                if entry.is_default:
                    return (entry.locale, entry.value)
            return None

    def atomic_switch_default(
        self,
        key: LocalizationKey,
        old_locale: LocaleTag | None,
        new_locale: LocaleTag,
    ) -> None:
        """Move the default flag within one lock acquisition.

        Raises:
            KeyError: If there is no entry at (key, new_locale)
        """
        with self._lock:
            group = self._entries.get(key, {})
            if new_locale not in group:
                msg = f"No entry for key '{key}' in locale '{new_locale}'"
                raise KeyError(msg)
            if old_locale is not None and old_locale in group:
                group[old_locale] = replace(group[old_locale], is_default=False)
            group[new_locale] = replace(group[new_locale], is_default=True)

    def entries(self, key: LocalizationKey) -> tuple[Entry, ...]:
        """Snapshot of every entry stored for key."""
        with self._lock:
            return tuple(self._entries.get(key, {}).values())

    def keys(self) -> Iterator[LocalizationKey]:
        """Iterate over a snapshot of the stored keys."""
        with self._lock:
            snapshot = tuple(self._entries)
        yield from snapshot

    def __len__(self) -> int:
        """Total number of stored entries across all keys."""
        with self._lock:
            return sum(len(group) for group in self._entries.values())
