"""Value types for the localization store.

Provides the normalized LocaleTag, the immutable Entry record, and the
semantic type aliases used by store, cache and service signatures.

Python 3.13+.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from babel import Locale

from l10nstore.constants import MAX_VALUE_LENGTH
from l10nstore.enums import ChangeKind, ResolutionSource
from l10nstore.errors import InvalidArgumentError
from l10nstore.locale_utils import get_babel_locale, parse_locale_code

if TYPE_CHECKING:
    from collections.abc import Callable

# ruff: noqa: RUF022 - __all__ organized by category for readability
__all__ = [
    # Type aliases
    "LocalizationKey",
    "LocaleInput",
    "ChangeListener",
    "FallbackListener",
    # Value types
    "LocaleTag",
    "Entry",
    "Resolution",
    "ChangeEvent",
    "FallbackInfo",
    # Validation
    "validate_key",
    "validate_value",
]

type LocalizationKey = str
"""Logical key shared by all translations of one string (e.g., 'greeting')."""

type LocaleInput = LocaleTag | str | Locale
"""Anything accepted where a locale is expected: a tag, a code or a Babel Locale."""

type ChangeListener = Callable[[ChangeEvent], None]
"""Observer invoked after every effective mutation of a key-group."""

type FallbackListener = Callable[[FallbackInfo], None]
"""Observer invoked when a requested locale is not answered exactly."""


@dataclass(frozen=True, slots=True)
class LocaleTag:
    """Normalized locale identifier.

    Two tags are equal iff their normalized subtags are equal, so
    ``LocaleTag.parse("en-gb") == LocaleTag.parse("en_GB")``.

    Use LocaleTag.parse() to build tags from codes or Babel locales. Direct
    construction normalizes casing and accepts the same subtag shapes as
    parse(), so every tag round-trips through its string form.

    Attributes:
        language: Lowercase language subtag (e.g., 'en', 'zh')
        script: Title-case script subtag (e.g., 'Hant') or None
        territory: Uppercase region subtag (e.g., 'GB', '419') or None
        variant: Uppercase variant subtag (e.g., 'POSIX') or None

    Example:
        >>> tag = LocaleTag.parse("zh-Hant-TW")
        >>> tag.language, tag.script, tag.territory
        ('zh', 'Hant', 'TW')
        >>> str(tag)
        'zh-Hant-TW'
    """

    language: str
    script: str | None = None
    territory: str | None = None
    variant: str | None = None

    def __post_init__(self) -> None:
        """Normalize subtag casing and validate subtag shapes.

        Raises:
            InvalidArgumentError: If language is empty or not alphabetic, or
                a subtag does not fit its position (e.g. territory "G-B")
        """
        if not isinstance(self.language, str) or not self.language.isalpha():
            msg = f"Invalid language subtag: {self.language!r}"
            raise InvalidArgumentError(msg)
        object.__setattr__(self, "language", self.language.lower())
        if self.script:
            object.__setattr__(self, "script", self.script.title())
        else:
            object.__setattr__(self, "script", None)
        if self.territory:
            object.__setattr__(self, "territory", self.territory.upper())
        else:
            object.__setattr__(self, "territory", None)
        if self.variant:
            object.__setattr__(self, "variant", self.variant.upper())
        else:
            object.__setattr__(self, "variant", None)

        # Direct construction accepts exactly what parse() accepts
        subtags = (self.language, self.script, self.territory, self.variant)
        if parse_locale_code(self.posix) != subtags:
            msg = f"Invalid locale subtags: {subtags!r}"
            raise InvalidArgumentError(msg)

    @classmethod
    def parse(cls, value: LocaleInput) -> LocaleTag:
        """Build a LocaleTag from a tag, a locale code or a Babel Locale.

        Args:
            value: LocaleTag (returned unchanged), BCP-47/POSIX code, or
                babel.Locale instance

        Returns:
            Normalized LocaleTag

        Raises:
            InvalidArgumentError: If value is None, of an unsupported type,
                or not a valid locale identifier
        """
        match value:
            case LocaleTag():
                return value
            case Locale():
                return cls(value.language, value.script, value.territory, value.variant)
            case str():
                return cls(*parse_locale_code(value))
            case None:
                msg = "Locale is required"
                raise InvalidArgumentError(msg)
            case _:
                msg = f"Unsupported locale type: {type(value).__name__}"
                raise InvalidArgumentError(msg)

    @property
    def subtags(self) -> tuple[str, ...]:
        """Present subtags in BCP-47 order (language, script, territory, variant)."""
        return tuple(
            part
            for part in (self.language, self.script, self.territory, self.variant)
            if part is not None
        )

    @property
    def posix(self) -> str:
        """POSIX form of the tag (e.g., 'zh_Hant_TW')."""
        return "_".join(self.subtags)

    def to_babel(self) -> Locale:
        """Get the matching Babel Locale.

        Raises:
            babel.core.UnknownLocaleError: If CLDR has no data for the tag
        """
        return get_babel_locale(self.posix)

    def __str__(self) -> str:
        """BCP-47 form of the tag (e.g., 'zh-Hant-TW')."""
        return "-".join(self.subtags)


def validate_key(key: object) -> LocalizationKey:
    """Check that a key is a non-empty string.

    Raises:
        InvalidArgumentError: If key is None, not a string, or empty
    """
    if key is None:
        msg = "Key is required"
        raise InvalidArgumentError(msg)
    if not isinstance(key, str):
        msg = f"Key must be a string, got {type(key).__name__}"
        raise InvalidArgumentError(msg)
    if not key:
        msg = "Key cannot be empty"
        raise InvalidArgumentError(msg)
    return key


def validate_value(value: object) -> str:
    """Check that a value is a string within MAX_VALUE_LENGTH characters.

    Raises:
        InvalidArgumentError: If value is None, not a string, or too long
    """
    if value is None:
        msg = "Value is required"
        raise InvalidArgumentError(msg)
    if not isinstance(value, str):
        msg = f"Value must be a string, got {type(value).__name__}"
        raise InvalidArgumentError(msg)
    if len(value) > MAX_VALUE_LENGTH:
        msg = f"Value length {len(value)} exceeds maximum of {MAX_VALUE_LENGTH} characters"
        raise InvalidArgumentError(msg)
    return value


@dataclass(frozen=True, slots=True)
class Entry:
    """One stored translation: the value of a key in a locale.

    Validated at construction: the key must be non-empty and the value
    must not exceed MAX_VALUE_LENGTH characters.

    Attributes:
        key: Logical key of the entry
        locale: Locale of the entry
        value: Stored text
        is_default: True if this is the key's default-locale entry
    """

    key: LocalizationKey
    locale: LocaleTag
    value: str
    is_default: bool = False

    def __post_init__(self) -> None:
        """Validate key, locale and value.

        Raises:
            InvalidArgumentError: If any field is absent or invalid
        """
        validate_key(self.key)
        if not isinstance(self.locale, LocaleTag):
            msg = f"Entry locale must be a LocaleTag, got {type(self.locale).__name__}"
            raise InvalidArgumentError(msg)
        validate_value(self.value)


@dataclass(frozen=True, slots=True)
class Resolution:
    """Outcome of resolving a key for a requested locale.

    Attributes:
        key: The key that was resolved
        value: The resolved text
        locale: Locale of the entry that supplied the value, or None when
            the caller default or the key itself was returned
        source: Which step of the resolution policy produced the value
    """

    key: LocalizationKey
    value: str
    locale: LocaleTag | None
    source: ResolutionSource

    @property
    def is_found(self) -> bool:
        """True if a stored entry supplied the value."""
        return self.locale is not None


@dataclass(frozen=True, slots=True)
class ChangeEvent:
    """Record of an effective mutation, passed to change listeners.

    Attributes:
        key: The mutated key
        kind: What happened to the key-group
        locale: Locale of the affected entry (None for KEY_REMOVED)
    """

    key: LocalizationKey
    kind: ChangeKind
    locale: LocaleTag | None = None


@dataclass(frozen=True, slots=True)
class FallbackInfo:
    """Information about a locale fallback event.

    Provided to the on_fallback callback when a lookup for a requested
    locale is answered by anything other than an exact match.

    Attributes:
        key: The key that was resolved
        requested_locale: The locale the caller asked for
        resolved_locale: The locale that supplied the value (None if no
            entry matched)
        source: Which resolution step produced the value

    Example:
        >>> def log_fallback(info: FallbackInfo) -> None:
        ...     print(f"Fallback: {info.key} resolved from "
        ...           f"{info.resolved_locale} (requested {info.requested_locale})")
        >>> service = LocalizationService(repo, on_fallback=log_fallback)
    """

    key: LocalizationKey
    requested_locale: LocaleTag
    resolved_locale: LocaleTag | None
    source: ResolutionSource
