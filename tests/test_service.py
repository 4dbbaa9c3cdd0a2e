"""Tests for LocalizationService: the public facade.

Covers the documented behavioral properties end to end: the default
invariant, fallback resolution, default switching, cache coherence and
remove_key idempotence, plus observers and argument handling.

Python 3.13+.
"""

import pytest
from babel import Locale

from l10nstore import (
    CacheConfig,
    ChangeEvent,
    ChangeKind,
    DeletingNotAllowedError,
    EntryNotFoundError,
    FallbackInfo,
    InMemoryEntryRepository,
    InvalidArgumentError,
    LocaleTag,
    Localization,
    LocalizationService,
    ResolutionSource,
)

EN = LocaleTag("en")
DE = LocaleTag("de")


@pytest.fixture
def repo() -> InMemoryEntryRepository:
    return InMemoryEntryRepository()


@pytest.fixture
def service(repo: InMemoryEntryRepository) -> LocalizationService:
    return LocalizationService(repo)


def _default_count(repo: InMemoryEntryRepository, key: str) -> int:
    return sum(entry.is_default for entry in repo.entries(key))


class TestDefaultInvariant:
    """Exactly one default per non-empty key."""

    def test_first_add_creates_singleton_default(
        self, service: LocalizationService, repo: InMemoryEntryRepository
    ) -> None:
        """A fresh key has one entry and it is default."""
        service.add_value("greeting", "en", "Hello")
        assert service.get_supported_locales_for_key("greeting") == frozenset({EN})
        assert _default_count(repo, "greeting") == 1

    def test_removing_sole_entry_empties_key(self, service: LocalizationService) -> None:
        """The last entry can be removed."""
        service.add_value("greeting", "en", "Hello")
        service.remove_value("greeting", "en")
        assert service.get_supported_locales_for_key("greeting") == frozenset()

    def test_removing_default_with_siblings(
        self, service: LocalizationService, repo: InMemoryEntryRepository
    ) -> None:
        """DeletingNotAllowedError leaves every entry in place."""
        service.add_value("greeting", "en", "Hello")
        service.add_value("greeting", "de", "Hallo")
        with pytest.raises(DeletingNotAllowedError):
            service.remove_value("greeting", "en")
        assert service.get_supported_locales_for_key("greeting") == frozenset({EN, DE})
        assert _default_count(repo, "greeting") == 1


class TestFallbackResolution:
    """get_value walks chain, default, caller default, key."""

    def test_greeting_walkthrough(self, service: LocalizationService) -> None:
        """Resolution changes as entries are removed."""
        service.add_value("greeting", "en", "Hello")
        service.add_value("greeting", "en-GB", "Hiya")
        service.add_value("greeting", "de", "Hallo")

        assert service.get_value("greeting", "en-GB") == "Hiya"
        assert service.get_value("greeting", "en-US") == "Hello"
        assert service.get_value("greeting", "fr", "?") == "Hello"
        assert service.get_value("greeting", "de-AT") == "Hallo"

        service.remove_value("greeting", "en-GB")
        assert service.get_value("greeting", "en-GB") == "Hello"

        service.switch_default_locale("greeting", "de")
        service.remove_value("greeting", "en")
        assert service.get_value("greeting", "en-GB") == "Hallo"

        service.remove_value("greeting", "de")
        assert service.get_value("greeting", "fr", "?") == "?"
        assert service.get_value("greeting", "fr") == "greeting"

    def test_no_locale_returns_default(self, service: LocalizationService) -> None:
        """Omitting the locale yields the default value."""
        service.add_value("greeting", "de", "Hallo")
        service.add_value("greeting", "en", "Hello")
        assert service.get_value("greeting") == "Hallo"

    def test_unknown_key_two_argument_form(self, service: LocalizationService) -> None:
        """The key is returned when nothing matches."""
        assert service.get_value("farewell", "en") == "farewell"

    def test_babel_locale_accepted(self, service: LocalizationService) -> None:
        """babel.Locale instances work wherever locales are accepted."""
        service.add_value("greeting", Locale.parse("de_AT"), "Servus")
        assert service.get_value("greeting", "de-AT") == "Servus"
        assert service.get_exact_value("greeting", LocaleTag("de", territory="AT")) == "Servus"

    def test_resolve_reports_source(self, service: LocalizationService) -> None:
        """resolve() exposes where the value came from."""
        service.add_value("greeting", "en", "Hello")
        resolution = service.resolve("greeting", "en-US")
        assert resolution.locale == EN
        assert resolution.source is ResolutionSource.FALLBACK

    def test_custom_chain_builder(self, repo: InMemoryEntryRepository) -> None:
        """An exact-only chain resolves en-US straight to the default."""
        service = LocalizationService(
            repo, chain_builder=lambda tag: () if tag is None else (tag,)
        )
        service.add_value("greeting", "de", "Hallo")
        service.add_value("greeting", "en", "Hello")
        assert service.get_value("greeting", "en-US") == "Hallo"
        assert service.get_value("greeting", "en") == "Hello"


class TestSwitchDefault:
    """switch_default_locale through the facade."""

    def test_switch_moves_default(
        self, service: LocalizationService, repo: InMemoryEntryRepository
    ) -> None:
        """The target becomes the only default and the old one is removable."""
        service.add_value("greeting", "en", "Hello")
        service.add_value("greeting", "de", "Hallo")
        service.switch_default_locale("greeting", "de")
        assert _default_count(repo, "greeting") == 1
        assert service.store.get_default_locale("greeting") == DE
        service.remove_value("greeting", "en")

    def test_switch_to_absent_locale(self, service: LocalizationService) -> None:
        """Missing target raises EntryNotFoundError."""
        service.add_value("greeting", "en", "Hello")
        with pytest.raises(EntryNotFoundError):
            service.switch_default_locale("greeting", "de")


class TestCacheCoherence:
    """Every mutation is visible to the next lookup."""

    def test_add_after_cached_fallback(self, service: LocalizationService) -> None:
        """A new exact entry replaces a cached fallback."""
        service.add_value("greeting", "en", "Hello")
        assert service.get_value("greeting", "en-US") == "Hello"
        service.add_value("greeting", "en-US", "Howdy")
        assert service.get_value("greeting", "en-US") == "Howdy"

    def test_update_after_cached(self, service: LocalizationService) -> None:
        """Updated values are served immediately."""
        service.add_value("greeting", "en", "Hello")
        assert service.get_value("greeting", "en") == "Hello"
        service.update_value("greeting", "en", "Hi")
        assert service.get_value("greeting", "en") == "Hi"

    def test_switch_after_cached_default(self, service: LocalizationService) -> None:
        """Cached default-step results follow a switch."""
        service.add_value("greeting", "en", "Hello")
        service.add_value("greeting", "de", "Hallo")
        assert service.get_value("greeting", "fr") == "Hello"
        service.switch_default_locale("greeting", "de")
        assert service.get_value("greeting", "fr") == "Hallo"

    def test_clear_cache_after_bulk_edit(
        self, service: LocalizationService, repo: InMemoryEntryRepository
    ) -> None:
        """clear_cache() exposes writes made directly to the repository."""
        service.add_value("greeting", "en", "Hello")
        service.add_value("greeting", "de", "Hallo")
        assert service.get_value("greeting", "fr") == "Hello"
        repo.atomic_switch_default("greeting", EN, DE)
        service.clear_cache()
        assert service.get_value("greeting", "fr") == "Hallo"

    def test_cache_stats(self, repo: InMemoryEntryRepository) -> None:
        """Stats reflect the configured size and lookups."""
        service = LocalizationService(repo, cache=CacheConfig(size=10))
        service.add_value("greeting", "en", "Hello")
        service.get_value("greeting", "en")
        service.get_value("greeting", "en")
        stats = service.get_cache_stats()
        assert (stats["maxsize"], stats["hits"], stats["misses"]) == (10, 1, 1)
        assert service.cache_config == CacheConfig(size=10)


class TestRemoveKey:
    """remove_key through the facade."""

    def test_idempotent(self, service: LocalizationService) -> None:
        """Second call reports zero."""
        service.add_value("greeting", "en", "Hello")
        service.add_value("greeting", "de", "Hallo")
        assert service.remove_key("greeting") == 2
        assert service.remove_key("greeting") == 0
        assert service.get_value("greeting", "en") == "greeting"


class TestObservers:
    """on_fallback and on_change callbacks."""

    def test_on_fallback(self, repo: InMemoryEntryRepository) -> None:
        """Non-exact answers for a requested locale are reported."""
        infos: list[FallbackInfo] = []
        service = LocalizationService(repo, on_fallback=infos.append)
        service.add_value("greeting", "en", "Hello")

        service.get_value("greeting", "en")
        service.get_value("greeting")
        service.get_value("greeting", "en-US")
        service.get_value("greeting", "en-US")
        service.get_value("farewell", "fr", "?")

        assert infos == [
            FallbackInfo("greeting", LocaleTag.parse("en-US"), EN, ResolutionSource.FALLBACK),
            FallbackInfo("greeting", LocaleTag.parse("en-US"), EN, ResolutionSource.FALLBACK),
            FallbackInfo("farewell", LocaleTag("fr"), None, ResolutionSource.CALLER_DEFAULT),
        ]

    def test_on_change(self, repo: InMemoryEntryRepository) -> None:
        """Mutations are reported with their kind."""
        events: list[ChangeEvent] = []
        service = LocalizationService(repo, on_change=events.append)
        service.add_value("greeting", "en", "Hello")
        service.remove_key("greeting")
        assert [event.kind for event in events] == [ChangeKind.ADDED, ChangeKind.KEY_REMOVED]


class TestArguments:
    """Argument validation at the facade."""

    @pytest.mark.parametrize("key", [None, ""])
    def test_invalid_key(self, service: LocalizationService, key: object) -> None:
        """get_value rejects absent keys."""
        with pytest.raises(InvalidArgumentError):
            service.get_value(key, "en")  # type: ignore[arg-type]

    def test_empty_locale(self, service: LocalizationService) -> None:
        """An empty locale string is an error, not "no locale"."""
        with pytest.raises(InvalidArgumentError):
            service.get_value("greeting", "")

    def test_non_string_default(self, service: LocalizationService) -> None:
        """default_value must be a string."""
        with pytest.raises(InvalidArgumentError, match="Default value"):
            service.get_value("greeting", "en", 42)  # type: ignore[arg-type]

    def test_negative_lock_timeout(self, repo: InMemoryEntryRepository) -> None:
        """Negative lock timeouts are rejected at construction."""
        with pytest.raises(ValueError, match="non-negative"):
            LocalizationService(repo, lock_timeout=-1)


class TestProtocol:
    """Structural capability interface."""

    def test_service_is_localization(self, service: LocalizationService) -> None:
        """LocalizationService satisfies the Localization protocol."""
        assert isinstance(service, Localization)

    def test_store_is_not_localization(self, service: LocalizationService) -> None:
        """The uncached store lacks get_value and clear_cache."""
        assert not isinstance(service.store, Localization)

    def test_repr(self, service: LocalizationService) -> None:
        """repr shows cache size and store."""
        service.add_value("greeting", "en", "Hello")
        service.get_value("greeting", "en")
        assert repr(service).startswith("LocalizationService(cached=1, store=LocalizationStore(")
