"""Cache configuration for LocalizationService.

Provides a frozen dataclass that encapsulates resolution cache parameters.

Python 3.13+. Zero external dependencies.
"""

from __future__ import annotations

from dataclasses import dataclass

from l10nstore.constants import DEFAULT_CACHE_SIZE

__all__ = ["CacheConfig"]


@dataclass(frozen=True, slots=True)
class CacheConfig:
    """Immutable configuration for resolution caching.

    Constructing ``CacheConfig()`` with no arguments produces a usable
    configuration.

    Attributes:
        size: Maximum cached resolutions before least-recently-used
            eviction (default: 1000).

    Example:
        >>> config = CacheConfig(size=500)
        >>> service = LocalizationService(repo, cache=config)
        >>> service.get_cache_stats()["maxsize"]
        500
    """

    size: int = DEFAULT_CACHE_SIZE

    def __post_init__(self) -> None:
        """Validate configuration values at construction time.

        Raises:
            ValueError: If size is not positive
        """
        if self.size <= 0:
            msg = "size must be positive"
            raise ValueError(msg)
