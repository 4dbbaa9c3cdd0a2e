"""Locale utilities for BCP-47 / POSIX identifier handling.

Centralizes locale format normalization used throughout the codebase.
Subtag parsing is delegated to Babel so that script, territory and variant
recognition follows CLDR conventions instead of ad-hoc string splitting.

Python 3.13+.
"""

from __future__ import annotations

import functools
from typing import TYPE_CHECKING

from babel.core import parse_locale

from l10nstore.constants import MAX_LOCALE_CACHE_SIZE
from l10nstore.errors import InvalidArgumentError

if TYPE_CHECKING:
    from babel import Locale

__all__ = [
    "clear_locale_cache",
    "get_babel_locale",
    "normalize_locale",
    "parse_locale_code",
]

type Subtags = tuple[str, str | None, str | None, str | None]


def normalize_locale(locale_code: str) -> str:
    """Convert a BCP-47 locale code to the POSIX form Babel parses.

    BCP-47 uses hyphens (en-US), while Babel/POSIX uses underscores (en_US).
    Surrounding whitespace is stripped.

    Args:
        locale_code: BCP-47 or POSIX locale code (e.g., "en-US", "pt_BR")

    Returns:
        POSIX-formatted locale code (e.g., "en_US", "pt_BR")

    Example:
        >>> normalize_locale("en-US")
        'en_US'
        >>> normalize_locale(" zh-Hant-TW ")
        'zh_Hant_TW'
    """
    return locale_code.strip().replace("-", "_")


@functools.lru_cache(maxsize=MAX_LOCALE_CACHE_SIZE)
def parse_locale_code(locale_code: str) -> Subtags:
    """Split a locale code into normalized (language, script, territory, variant).

    Thread-safe via lru_cache internal locking. Encoding and modifier
    suffixes (".UTF-8", "@euro") are discarded by Babel.

    Args:
        locale_code: Locale code (BCP-47 or POSIX format accepted)

    Returns:
        Tuple of language, script, territory and variant. Missing subtags
        are None. Casing follows Babel: lowercase language, title-case
        script, uppercase territory and variant.

    Raises:
        InvalidArgumentError: If the code is empty or not a valid identifier

    Example:
        >>> parse_locale_code("zh-Hant-TW")
        ('zh', 'Hant', 'TW', None)
    """
    normalized = normalize_locale(locale_code)
    if not normalized:
        msg = "Locale code cannot be empty"
        raise InvalidArgumentError(msg)

    try:
        parts = parse_locale(normalized)
    except ValueError as e:
        msg = f"Invalid locale code: {locale_code!r}"
        raise InvalidArgumentError(msg) from e

    language, territory, script, variant = parts[:4]
    return (language, script, territory, variant)


def clear_locale_cache() -> None:
    """Clear the locale parse caches.

    Use this to free memory or reset state in tests.
    """
    parse_locale_code.cache_clear()
    get_babel_locale.cache_clear()


@functools.lru_cache(maxsize=MAX_LOCALE_CACHE_SIZE)
def get_babel_locale(locale_code: str) -> Locale:
    """Get a Babel Locale object with caching.

    Args:
        locale_code: Locale code (BCP-47 or POSIX format accepted)

    Returns:
        Babel Locale object

    Raises:
        babel.core.UnknownLocaleError: If CLDR has no data for the locale
        InvalidArgumentError: If the code is not a valid identifier
    """
    # Lazy import: Babel loads CLDR data on first Locale use; defer until needed
    from babel import Locale  # noqa: PLC0415

    language, script, territory, variant = parse_locale_code(locale_code)
    return Locale(language, territory=territory, script=script, variant=variant)
