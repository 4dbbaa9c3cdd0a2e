"""Hypothesis strategies for l10nstore property-based testing.

Usage:
    from tests.strategies import locale_tags, keys, values
"""

from .locales import (
    KEY_POOL,
    LOCALE_POOL,
    keys,
    locale_codes,
    locale_tags,
    pooled_locales,
    values,
)

__all__ = [
    "KEY_POOL",
    "LOCALE_POOL",
    "keys",
    "locale_codes",
    "locale_tags",
    "pooled_locales",
    "values",
]
