"""Shared constants for l10nstore.

Centralizes limits and defaults used across the store, cache and
locale layers. Placing constants here avoids circular imports and
provides a single source of truth.

Python 3.13+. Zero external dependencies.
"""

# ruff: noqa: RUF022 - __all__ organized by category for readability
__all__ = [
    # Entry limits
    "MAX_VALUE_LENGTH",
    # Cache limits
    "DEFAULT_CACHE_SIZE",
    "MAX_LOCALE_CACHE_SIZE",
]

# ============================================================================
# ENTRY LIMITS
# ============================================================================

# Maximum length of a stored value, measured in characters (code points).
MAX_VALUE_LENGTH: int = 2000

# ============================================================================
# CACHE LIMITS
# ============================================================================

# Default maximum number of cached resolutions.
# Sized for a UI with a few hundred keys requested in a handful of locales.
DEFAULT_CACHE_SIZE: int = 1000

# Maximum parsed locale identifiers kept by the locale parse cache.
# 128 covers typical multi-region applications (major locales + variants).
MAX_LOCALE_CACHE_SIZE: int = 128
