"""l10nstore - Localized key-value store with locale fallback resolution.

Stores short text values keyed by (key, locale) and resolves the best value
for a requested locale by walking its truncation chain, then the key's
default locale. Exactly one locale per key is the default, so lookups never
fail outright.

Public API:
    LocalizationService - Facade: mutations, lookups and cached resolution
    Localization - Protocol describing the service capability
    LocalizationStore - Invariant-enforcing store (no cache)
    EntryRepository - Persistence protocol
    InMemoryEntryRepository - Dict-backed repository
    LocaleTag - Normalized locale identifier
    build_chain - Locale truncation chain builder
    CacheConfig - Resolution cache configuration

Exceptions:
    LocalizationError - Base exception class
    InvalidArgumentError - Absent or malformed key, locale or value
    EntryNotFoundError - Required (key, locale) entry does not exist
    DeletingNotAllowedError - Removing a default entry that has siblings

Submodules:
    l10nstore.types - Value types (LocaleTag, Entry, Resolution, ...)
    l10nstore.runtime - Per-key locking and the resolution cache
    l10nstore.locale_utils - Locale code normalization and parsing
"""

from .chain import build_chain
from .enums import ChangeKind, ResolutionSource
from .errors import (
    DeletingNotAllowedError,
    EntryNotFoundError,
    InvalidArgumentError,
    LocalizationError,
)
from .repository import EntryRepository, InMemoryEntryRepository
from .runtime.cache_config import CacheConfig
from .service import Localization, LocalizationService
from .store import LocalizationStore
from .types import ChangeEvent, Entry, FallbackInfo, LocaleTag, Resolution

# Version information - Auto-populated from package metadata
# SINGLE SOURCE OF TRUTH: pyproject.toml [project] version
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as _get_version

try:
    __version__ = _get_version("l10nstore")
except PackageNotFoundError:
    # Development mode: package not installed yet
    __version__ = "0.0.0+dev"

__all__ = [
    "CacheConfig",
    "ChangeEvent",
    "ChangeKind",
    "DeletingNotAllowedError",
    "Entry",
    "EntryNotFoundError",
    "EntryRepository",
    "FallbackInfo",
    "InMemoryEntryRepository",
    "InvalidArgumentError",
    "LocaleTag",
    "Localization",
    "LocalizationError",
    "LocalizationService",
    "LocalizationStore",
    "Resolution",
    "ResolutionSource",
    "__version__",
    "build_chain",
]
