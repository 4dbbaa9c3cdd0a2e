"""Default-locale invariant enforcement on top of an EntryRepository.

LocalizationStore owns every mutation of localized entries. For each key
with at least one entry, exactly one entry is the default. All mutations
of one key run under that key's write lock together with their invariant
check; reads run under the key's read lock and therefore see either the
state before or after a mutation, never a mix.

Change listeners are notified while the write lock is still held, so a
resolution cache can drop the key's results before any reader observes the
new state.

Python 3.13+.
"""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING

from l10nstore.enums import ChangeKind
from l10nstore.errors import DeletingNotAllowedError, EntryNotFoundError
from l10nstore.runtime.rwlock import KeyLockRegistry
from l10nstore.types import (
    ChangeEvent,
    Entry,
    LocaleTag,
    validate_key,
    validate_value,
)

if TYPE_CHECKING:
    from contextlib import AbstractContextManager

    from l10nstore.repository import EntryRepository
    from l10nstore.types import ChangeListener, LocaleInput, LocalizationKey

__all__ = ["LocalizationStore"]

logger = logging.getLogger(__name__)


class LocalizationStore:
    """Mutation and direct-lookup API that preserves the default-locale invariant.

    Does not cache. Callers that need fallback resolution or caching go
    through LocalizationService.

    Thread Safety:
        Mutations on the same key are mutually exclusive; mutations on
        different keys run in parallel. Change listeners run inside the
        key's write lock and must not call back into the store for the
        same key (RWLock downgrade is prohibited and raises RuntimeError).

    Example:
        >>> store = LocalizationStore(InMemoryEntryRepository())
        >>> store.add_value("greeting", "en", "Hello")
        >>> store.add_value("greeting", "de", "Hallo")
        >>> str(store.get_default_locale("greeting"))
        'en'
        >>> store.remove_value("greeting", "en")
        Traceback (most recent call last):
        ...
        l10nstore.errors.DeletingNotAllowedError: Cannot remove default locale ...
    """

    __slots__ = ("_listeners", "_listeners_lock", "_locks", "_repository")

    def __init__(
        self,
        repository: EntryRepository,
        *,
        lock_timeout: float | None = None,
    ) -> None:
        """Initialize the store.

        Args:
            repository: Persistence backend implementing EntryRepository
            lock_timeout: Per-key lock acquisition timeout in seconds.
                None (default) waits indefinitely.
        """
        self._repository = repository
        self._locks = KeyLockRegistry(timeout=lock_timeout)
        # Copy-on-write so notification iterates without holding a lock
        self._listeners: tuple[ChangeListener, ...] = ()
        self._listeners_lock = threading.Lock()

    @property
    def repository(self) -> EntryRepository:
        """The underlying persistence backend."""
        return self._repository

    # ------------------------------------------------------------------
    # Change notification
    # ------------------------------------------------------------------

    def add_change_listener(self, listener: ChangeListener) -> None:
        """Register a callable receiving a ChangeEvent after each mutation."""
        with self._listeners_lock:
            self._listeners = (*self._listeners, listener)

    def remove_change_listener(self, listener: ChangeListener) -> None:
        """Unregister a listener. No-op if it was not registered."""
        with self._listeners_lock:
            self._listeners = tuple(item for item in self._listeners if item != listener)

    def _notify(self, event: ChangeEvent) -> None:
        for listener in self._listeners:
            listener(event)

    def read_locked(self, key: LocalizationKey) -> AbstractContextManager[None]:
        """Hold the read lock of key so several lookups see one snapshot.

        The read lock is reentrant; store lookups made inside the block
        do not deadlock.
        """
        return self._locks.read(key)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def add_value(self, key: LocalizationKey, locale: LocaleInput, value: str) -> None:
        """Store a value; the first value of a key becomes its default.

        Adding to an existing (key, locale) overwrites the value in place
        without changing its default status.

        Args:
            key: The key of the entry
            locale: The locale of the entry
            value: The text, at most MAX_VALUE_LENGTH characters

        Raises:
            InvalidArgumentError: If key, locale or value is absent or invalid
        """
        key = validate_key(key)
        tag = LocaleTag.parse(locale)
        value = validate_value(value)

        with self._locks.write(key):
            default = self._repository.find_default(key)
            if self._repository.get(key, tag) is not None:
                is_default = default is not None and default[0] == tag
                kind = ChangeKind.UPDATED
            else:
                # Also repairs a key-group left without a default by external writes
                is_default = default is None
                kind = ChangeKind.ADDED
            self._repository.put(key, tag, value, is_default)
            logger.debug("%s %r in %s (default=%s)", kind, key, tag, is_default)
            self._notify(ChangeEvent(key, kind, tag))

    def update_value(self, key: LocalizationKey, locale: LocaleInput, value: str) -> None:
        """Replace the value of an existing entry.

        Args:
            key: The key of the entry
            locale: The locale of the entry
            value: The new text, at most MAX_VALUE_LENGTH characters

        Raises:
            InvalidArgumentError: If key, locale or value is absent or invalid
            EntryNotFoundError: If there is no entry at (key, locale)
        """
        key = validate_key(key)
        tag = LocaleTag.parse(locale)
        value = validate_value(value)

        with self._locks.write(key):
            if self._repository.get(key, tag) is None:
                raise EntryNotFoundError(key, tag)
            default = self._repository.find_default(key)
            is_default = default is not None and default[0] == tag
            self._repository.put(key, tag, value, is_default)
            logger.debug("updated %r in %s", key, tag)
            self._notify(ChangeEvent(key, ChangeKind.UPDATED, tag))

    def remove_value(self, key: LocalizationKey, locale: LocaleInput) -> None:
        """Remove one entry. No-op if there is no such entry.

        Args:
            key: The key of the entry
            locale: The locale of the entry

        Raises:
            InvalidArgumentError: If key or locale is absent or invalid
            DeletingNotAllowedError: If the entry is the key's default and
                other entries exist for the key
        """
        key = validate_key(key)
        tag = LocaleTag.parse(locale)

        with self._locks.write(key):
            locales = self._repository.list_locales(key)
            if tag not in locales:
                return
            default = self._repository.find_default(key)
            if default is not None and default[0] == tag and len(locales) > 1:
                raise DeletingNotAllowedError(key, tag)
            self._repository.delete(key, tag)
            logger.debug("removed %r in %s", key, tag)
            self._notify(ChangeEvent(key, ChangeKind.REMOVED, tag))

    def remove_key(self, key: LocalizationKey) -> int:
        """Remove every entry of a key regardless of default status.

        Args:
            key: The key to remove

        Returns:
            Number of entries removed (0 if the key is unknown)

        Raises:
            InvalidArgumentError: If key is absent or invalid
        """
        key = validate_key(key)

        with self._locks.write(key):
            locales = self._repository.list_locales(key)
            if not locales:
                return 0
            # Non-default entries first: a failure midway never leaves
            # remaining entries without a default
            default = self._repository.find_default(key)
            default_locale = default[0] if default is not None else None
            ordered = sorted(locales, key=lambda tag: tag == default_locale)
            for tag in ordered:
                self._repository.delete(key, tag)
            logger.debug("removed key %r (%d entries)", key, len(ordered))
            self._notify(ChangeEvent(key, ChangeKind.KEY_REMOVED))
            return len(ordered)

    def switch_default_locale(self, key: LocalizationKey, locale: LocaleInput) -> None:
        """Make an existing entry the default of its key.

        Args:
            key: The key of the entry
            locale: The new default locale

        Raises:
            InvalidArgumentError: If key or locale is absent or invalid
            EntryNotFoundError: If there is no entry at (key, locale)
        """
        key = validate_key(key)
        tag = LocaleTag.parse(locale)

        with self._locks.write(key):
            if self._repository.get(key, tag) is None:
                raise EntryNotFoundError(key, tag)
            default = self._repository.find_default(key)
            old_locale = default[0] if default is not None else None
            if old_locale == tag:
                return
            self._repository.atomic_switch_default(key, old_locale, tag)
            logger.debug("default of %r switched from %s to %s", key, old_locale, tag)
            self._notify(ChangeEvent(key, ChangeKind.DEFAULT_SWITCHED, tag))

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def get_exact_value(self, key: LocalizationKey, locale: LocaleInput) -> str | None:
        """Return the value at (key, locale) without fallback or caching.

        Raises:
            InvalidArgumentError: If key or locale is absent or invalid
        """
        key = validate_key(key)
        tag = LocaleTag.parse(locale)
        with self._locks.read(key):
            return self._repository.get(key, tag)

    def get_supported_locales_for_key(self, key: LocalizationKey) -> frozenset[LocaleTag]:
        """Return every locale with an entry for key (empty if unknown).

        Raises:
            InvalidArgumentError: If key is absent or invalid
        """
        key = validate_key(key)
        with self._locks.read(key):
            return frozenset(self._repository.list_locales(key))

    def get_default_entry(self, key: LocalizationKey) -> Entry | None:
        """Return the key's default entry, or None if the key is unknown.

        Raises:
            InvalidArgumentError: If key is absent or invalid
        """
        key = validate_key(key)
        with self._locks.read(key):
            default = self._repository.find_default(key)
        if default is None:
            return None
        locale, value = default
        return Entry(key, locale, value, is_default=True)

    def get_default_locale(self, key: LocalizationKey) -> LocaleTag | None:
        """Return the key's default locale, or None if the key is unknown."""
        entry = self.get_default_entry(key)
        return entry.locale if entry is not None else None

    def __repr__(self) -> str:
        """Return string representation for debugging."""
        return (
            f"LocalizationStore(repository={type(self._repository).__name__}, "
            f"listeners={len(self._listeners)})"
        )
