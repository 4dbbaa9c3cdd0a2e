"""Exception hierarchy for l10nstore.

All errors are reported to the immediate caller. Nothing here is logged
or recovered internally.

Hierarchy:
    LocalizationError (base)
    ├─ InvalidArgumentError (also a ValueError)
    ├─ EntryNotFoundError (also a LookupError)
    └─ DeletingNotAllowedError

Python 3.13+. Zero external dependencies.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from l10nstore.types import LocaleTag

__all__ = [
    "DeletingNotAllowedError",
    "EntryNotFoundError",
    "InvalidArgumentError",
    "LocalizationError",
]


class LocalizationError(Exception):
    """Base exception for all l10nstore errors."""


class InvalidArgumentError(LocalizationError, ValueError):
    """A required key, locale or value is absent or malformed.

    Also raised when a value exceeds the maximum entry length. Subclasses
    ValueError so callers that only know the builtin taxonomy still catch it.
    """


class EntryNotFoundError(LocalizationError, LookupError):
    """Operation requires a (key, locale) entry that does not exist.

    Raised by update_value() and switch_default_locale().

    Attributes:
        key: The key that was targeted
        locale: The locale that has no entry for the key
    """

    def __init__(self, key: str, locale: LocaleTag) -> None:
        """Initialize EntryNotFoundError.

        Args:
            key: The key that was targeted
            locale: The locale that has no entry for the key
        """
        super().__init__(f"No entry for key '{key}' in locale '{locale}'")
        self.key = key
        self.locale = locale


class DeletingNotAllowedError(LocalizationError):
    """Attempt to remove the default entry while other entries remain.

    It cannot be decided which of the remaining locales should become the
    default. Call switch_default_locale() first, then remove the entry.

    Attributes:
        key: The key whose default entry was targeted
        locale: The current default locale of the key
    """

    def __init__(self, key: str, locale: LocaleTag) -> None:
        """Initialize DeletingNotAllowedError.

        Args:
            key: The key whose default entry was targeted
            locale: The current default locale of the key
        """
        super().__init__(
            f"Cannot remove default locale '{locale}' of key '{key}' while other "
            "locales exist. Switch the default locale first."
        )
        self.key = key
        self.locale = locale
