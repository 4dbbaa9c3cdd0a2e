"""Tests for locale resolution chain building.

Python 3.13+.
"""

from hypothesis import event, given

from l10nstore import LocaleTag, build_chain
from tests.strategies import locale_tags


def _codes(tag: LocaleTag | None) -> list[str]:
    return [str(t) for t in build_chain(tag)]


class TestBuildChain:
    """Concrete truncation examples."""

    def test_none_is_empty(self) -> None:
        """No requested locale yields an empty chain."""
        assert build_chain(None) == ()

    def test_bare_language(self) -> None:
        """A bare language is its own chain."""
        assert _codes(LocaleTag("en")) == ["en"]

    def test_territory_dropped(self) -> None:
        """Territory truncates to the language."""
        assert _codes(LocaleTag.parse("en-GB")) == ["en-GB", "en"]

    def test_script_kept_until_last(self) -> None:
        """Territory goes before script."""
        assert _codes(LocaleTag.parse("zh-Hant-TW")) == ["zh-Hant-TW", "zh-Hant", "zh"]

    def test_variant_first(self) -> None:
        """Variant is the least significant subtag."""
        assert _codes(LocaleTag.parse("en_US_POSIX")) == ["en-US-POSIX", "en-US", "en"]

    def test_all_subtags(self) -> None:
        """Each subtag is dropped in turn."""
        tag = LocaleTag("sr", "Latn", "RS", "POSIX")
        assert _codes(tag) == ["sr-Latn-RS-POSIX", "sr-Latn-RS", "sr-Latn", "sr"]

    def test_variant_without_territory(self) -> None:
        """Missing middle subtags do not produce duplicates."""
        assert _codes(LocaleTag("de", variant="1901")) == ["de-1901", "de"]

    def test_no_similar_locale_substitution(self) -> None:
        """pt-BR never probes pt-PT."""
        assert LocaleTag.parse("pt-PT") not in build_chain(LocaleTag.parse("pt-BR"))


class TestBuildChainProperties:
    """Property invariants for any requested tag."""

    @given(tag=locale_tags())
    def test_starts_with_requested_ends_with_language(self, tag: LocaleTag) -> None:
        """Most specific first, bare language last."""
        chain = build_chain(tag)
        event(f"chain_len={len(chain)}")
        assert chain[0] == tag
        assert chain[-1] == LocaleTag(tag.language)

    @given(tag=locale_tags())
    def test_deduplicated(self, tag: LocaleTag) -> None:
        """No tag appears twice."""
        chain = build_chain(tag)
        assert len(chain) == len(set(chain))

    @given(tag=locale_tags())
    def test_strictly_coarser(self, tag: LocaleTag) -> None:
        """Each candidate has fewer subtags than the previous one."""
        chain = build_chain(tag)
        sizes = [len(t.subtags) for t in chain]
        assert sizes == sorted(sizes, reverse=True)
        assert len(set(sizes)) == len(sizes)

    @given(tag=locale_tags())
    def test_only_truncations(self, tag: LocaleTag) -> None:
        """Every candidate keeps the requested subtags it has."""
        for candidate in build_chain(tag):
            assert candidate.language == tag.language
            assert candidate.script in (None, tag.script)
            assert candidate.territory in (None, tag.territory)
            assert candidate.variant in (None, tag.variant)

    @given(tag=locale_tags())
    def test_length_matches_subtag_count(self, tag: LocaleTag) -> None:
        """One candidate per present subtag."""
        assert len(build_chain(tag)) == len(tag.subtags)
