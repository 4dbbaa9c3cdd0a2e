"""Enumerations for l10nstore type-safe constants.

Uses StrEnum so members are plain strings in logs and serialized output.

Python 3.13+.
"""

from enum import StrEnum


class ChangeKind(StrEnum):
    """Kind of mutation applied to a key-group.

    StrEnum provides automatic string conversion: str(ChangeKind.ADDED) == "added"
    """

    ADDED = "added"
    """A new (key, locale) entry was created."""

    UPDATED = "updated"
    """The value of an existing entry was replaced."""

    REMOVED = "removed"
    """A single (key, locale) entry was deleted."""

    KEY_REMOVED = "key_removed"
    """Every entry of a key was deleted."""

    DEFAULT_SWITCHED = "default_switched"
    """The default flag moved to another locale of the key."""


class ResolutionSource(StrEnum):
    """Where a resolved value came from.

    StrEnum provides automatic string conversion: str(ResolutionSource.EXACT) == "exact"
    """

    EXACT = "exact"
    """Entry for the requested locale itself."""

    FALLBACK = "fallback"
    """Entry for a truncated form of the requested locale (en-GB -> en)."""

    DEFAULT = "default"
    """The key's default-locale entry."""

    CALLER_DEFAULT = "caller_default"
    """Default value supplied by the caller; no entry matched."""

    KEY = "key"
    """The key itself, returned as the value of last resort."""


__all__ = [
    "ChangeKind",
    "ResolutionSource",
]
