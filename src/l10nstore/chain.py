"""Locale resolution chains.

Turns a requested locale into the ordered candidates probed during
lookup, following java.util.ResourceBundle-style truncation: drop the
variant, then the territory, then the script, down to the bare language.

Only truncations of the requested tag are produced. No "similar" locale
is ever substituted (pt-BR never falls back to pt-PT).

Python 3.13+.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from l10nstore.types import LocaleTag

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

__all__ = ["ChainBuilder", "build_chain"]

type ChainBuilder = Callable[[LocaleTag | None], tuple[LocaleTag, ...]]
"""Signature of a chain builder; build_chain is the default implementation."""


def _truncations(tag: LocaleTag) -> Iterator[LocaleTag]:
    """Yield tag and its progressively coarser truncations."""
    yield tag
    yield LocaleTag(tag.language, tag.script, tag.territory)
    yield LocaleTag(tag.language, tag.script)
    yield LocaleTag(tag.language)


def build_chain(requested: LocaleTag | None) -> tuple[LocaleTag, ...]:
    """Build the resolution chain for a requested locale.

    Args:
        requested: Requested locale, or None when the caller wants the
            key's default locale

    Returns:
        Deduplicated tags, most specific first. Empty when requested is None.

    Example:
        >>> [str(t) for t in build_chain(LocaleTag.parse("zh-Hant-TW"))]
        ['zh-Hant-TW', 'zh-Hant', 'zh']
        >>> build_chain(None)
        ()
    """
    if requested is None:
        return ()
    # dict.fromkeys() removes duplicates while maintaining insertion order
    return tuple(dict.fromkeys(_truncations(requested)))
