"""Per-owner fetch cache with a time-to-live"""

import logging
import time
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Dict, Generic, List, Optional, TypeVar
from coop_notify.infrastructure.observability.metrics import cache_lookup_counter

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class CacheEntry(Generic[T]):
    """Last fetch result for one owner"""

    data: List[T] = field(default_factory=list)
    last_fetched: Optional[float] = None
    loading: bool = False
    error: Optional[Exception] = None


class FetchCache(Generic[T]):
    """
    Serve an owner's list from memory while it is fresh, otherwise reload it.

    An entry is served from memory only when it is younger than the TTL and
    non-empty, and the caller did not force a refresh. Concurrent misses are
    not coalesced: each one calls the loader.
    """

    def __init__(
        self,
        name: str,
        ttl_seconds: float = 300.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.name = name
        self.ttl_seconds = ttl_seconds
        self.clock = clock
        self.entries: Dict[str, CacheEntry[T]] = {}

    def entry(self, owner_id: str) -> CacheEntry[T]:
        """Entry for an owner, created empty on first access"""
        return self.entries.setdefault(owner_id, CacheEntry())

    def is_fresh(self, entry: CacheEntry[T]) -> bool:
        if entry.last_fetched is None or not entry.data:
            return False
        return self.clock() - entry.last_fetched < self.ttl_seconds

    async def fetch(
        self,
        owner_id: str,
        loader: Callable[[], Awaitable[List[T]]],
        force_refresh: bool = False,
    ) -> List[T]:
        """
        Return the owner's list, calling loader on a miss.

        A failed load keeps the previous data, records the error on the
        entry and re-raises.
        """
        entry = self.entry(owner_id)
        if not force_refresh and self.is_fresh(entry):
            cache_lookup_counter.labels(cache=self.name, result="hit").inc()
            logger.debug(f"Serving cached {self.name}", extra={"owner_id": owner_id, "count": len(entry.data)})
            return list(entry.data)

        cache_lookup_counter.labels(cache=self.name, result="miss").inc()
        entry.loading = True
        entry.error = None
        try:
            data = await loader()
        except Exception as e:
            entry.loading = False
            entry.error = e
            raise

        self.entries[owner_id] = CacheEntry(data=list(data), last_fetched=self.clock())
        return list(data)

    def invalidate(self, owner_id: Optional[str] = None) -> None:
        """Drop one owner's entry, or every entry when owner_id is None"""
        if owner_id is None:
            self.clear()
            return
        self.entries.pop(owner_id, None)

    def clear(self) -> None:
        self.entries.clear()
