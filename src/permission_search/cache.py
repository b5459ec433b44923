"""Result cache keyed by normalized query and filter state."""

import json
from collections import OrderedDict
from typing import Optional

from loguru import logger

from permission_search.models import SearchFilters, SearchResult


def cache_key(query: str, filters: SearchFilters) -> str:
    """Deterministic key; set fields are sorted so member order never matters."""
    return f"{query}_{json.dumps(filters.to_dict(), sort_keys=True)}"


class ResultCache:
    """Memoizes ranked result lists for one search session.

    Unbounded by default. ``max_entries`` turns it into an LRU for large catalogs;
    lookups and stores behave the same either way.
    """

    def __init__(self, max_entries: Optional[int] = None):
        self.max_entries = max_entries
        self._entries: OrderedDict[str, list[SearchResult]] = OrderedDict()
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, query: str, filters: SearchFilters) -> Optional[list[SearchResult]]:
        """Return a copy of the cached results, or None on a miss."""
        key = cache_key(query, filters)
        results = self._entries.get(key)
        if results is None:
            self.misses += 1
            return None

        self.hits += 1
        self._entries.move_to_end(key)
        logger.debug(f"Cache hit for query '{query}'")
        return list(results)

    def put(self, query: str, filters: SearchFilters, results: list[SearchResult]) -> None:
        key = cache_key(query, filters)
        self._entries[key] = list(results)
        self._entries.move_to_end(key)

        if self.max_entries is not None:
            while len(self._entries) > self.max_entries:
                self._entries.popitem(last=False)

    def invalidate_all(self) -> None:
        if self._entries:
            logger.debug(f"Invalidating {len(self._entries)} cached result lists")
        self._entries.clear()
