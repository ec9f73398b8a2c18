"""Time-bounded caching of field metadata."""

import logging
import time
from abc import ABC, abstractmethod
from functools import lru_cache
from typing import Callable

from cachetools import TTLCache

from .models import FieldSet, ObjectType

logger = logging.getLogger(__name__)

FIELDS_TTL_SECONDS = 60 * 60


def field_cache_key(integration_id: int, object_type: ObjectType) -> str:
    """Build the cache key for an integration's fields of one object type."""
    return f"{integration_id}_{object_type.value}_fields"


class FieldCache(ABC):
    """Keyed store for FieldSet values with an expiry window."""

    @abstractmethod
    def get(self, key: str) -> FieldSet | None:
        """Return the cached FieldSet, or None on a miss or after expiry."""
        pass

    @abstractmethod
    def set(self, key: str, value: FieldSet) -> None:
        """Store a FieldSet under key for the cache's TTL."""
        pass


class TTLFieldCache(FieldCache):
    """
    In-process FieldCache backed by cachetools.TTLCache.

    Concurrent writers for the same key are not coordinated; the last
    write wins.
    """

    def __init__(
        self,
        ttl: float = FIELDS_TTL_SECONDS,
        maxsize: int = 1024,
        timer: Callable[[], float] = time.monotonic,
    ):
        self.ttl = ttl
        self._cache: TTLCache = TTLCache(maxsize=maxsize, ttl=ttl, timer=timer)

    def get(self, key: str) -> FieldSet | None:
        value = self._cache.get(key)
        if value is not None:
            logger.debug(f"Field cache hit for {key}")
        return value

    def set(self, key: str, value: FieldSet) -> None:
        self._cache[key] = value
        logger.debug(f"Cached fields for {key} for {self.ttl}s")

    def clear(self) -> None:
        self._cache.clear()

    def __len__(self) -> int:
        return len(self._cache)


@lru_cache(maxsize=1)
def get_default_field_cache() -> TTLFieldCache:
    """Return the process-wide field cache."""
    return TTLFieldCache()
