"""Search history and saved searches.

History is a bounded log, newest first, deduplicated by query text: running
a query that is already in the log moves it to the front. Saved searches are
named query + filter bundles whose usage counters change only when loaded.
"""

from collections import deque
from dataclasses import replace
from datetime import datetime
from typing import Deque, Iterable, Optional

from permission_search.errors import SearchValidationError
from permission_search.models import SavedSearch, SearchFilters, SearchHistoryEntry

DEFAULT_HISTORY_LIMIT = 20


class SearchHistory:
    """Bounded, newest-first log of past queries."""

    def __init__(
        self,
        max_entries: int = DEFAULT_HISTORY_LIMIT,
        entries: Optional[Iterable[SearchHistoryEntry]] = None,
    ):
        self.max_entries = max_entries
        self._entries: Deque[SearchHistoryEntry] = deque(maxlen=max_entries)
        for entry in entries or ():
            if len(self._entries) == max_entries:
                break
            if not any(existing.query == entry.query for existing in self._entries):
                self._entries.append(entry)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self):
        return iter(self._entries)

    def add(
        self,
        query: str,
        result_count: int,
        filters: Optional[SearchFilters] = None,
        timestamp: Optional[datetime] = None,
    ) -> Optional[SearchHistoryEntry]:
        """Record a query at the front of the log.

        Blank queries are ignored and return None.
        """
        if not query.strip():
            return None

        entry = SearchHistoryEntry(
            query=query,
            result_count=result_count,
            filters=filters or SearchFilters(),
            timestamp=timestamp or datetime.now(),
        )

        # Drop any previous occurrence so the query only appears once
        remaining = [existing for existing in self._entries if existing.query != query]
        self._entries.clear()
        self._entries.extend([entry, *remaining][: self.max_entries])
        return entry

    def clear(self) -> None:
        self._entries.clear()

    def snapshot(self) -> tuple[SearchHistoryEntry, ...]:
        return tuple(self._entries)


class SavedSearchStore:
    """Saved searches in creation order."""

    def __init__(self, searches: Optional[Iterable[SavedSearch]] = None):
        self._searches: list[SavedSearch] = list(searches or ())

    def __len__(self) -> int:
        return len(self._searches)

    def __iter__(self):
        return iter(self._searches)

    def add(
        self,
        name: str,
        query: str,
        filters: SearchFilters,
        description: Optional[str] = None,
    ) -> SavedSearch:
        """Create a saved search.

        Raises:
            SearchValidationError: If ``name`` is blank. Nothing is stored.
        """
        if not name or not name.strip():
            raise SearchValidationError("Saved search name must not be empty")

        saved = SavedSearch(
            name=name.strip(),
            query=query,
            filters=filters,
            description=description,
        )
        self._searches.append(saved)
        return saved

    def get(self, search_id: str) -> Optional[SavedSearch]:
        for saved in self._searches:
            if saved.id == search_id:
                return saved
        return None

    def find_by_name(self, name: str) -> Optional[SavedSearch]:
        for saved in self._searches:
            if saved.name == name:
                return saved
        return None

    def delete(self, search_id: str) -> bool:
        """Remove a saved search. Returns False if the id is unknown."""
        before = len(self._searches)
        self._searches = [saved for saved in self._searches if saved.id != search_id]
        return len(self._searches) != before

    def mark_used(self, search_id: str, when: Optional[datetime] = None) -> Optional[SavedSearch]:
        """Increment ``use_count`` and set ``last_used`` for one saved search."""
        for index, saved in enumerate(self._searches):
            if saved.id == search_id:
                updated = replace(
                    saved,
                    use_count=saved.use_count + 1,
                    last_used=when or datetime.now(),
                )
                self._searches[index] = updated
                return updated
        return None

    def snapshot(self) -> tuple[SavedSearch, ...]:
        return tuple(self._searches)

    def ordered(self) -> list[SavedSearch]:
        """Most recently used first; never-used searches follow, most used first."""
        used = sorted(
            (s for s in self._searches if s.last_used is not None),
            key=lambda s: s.last_used,
            reverse=True,
        )
        unused = sorted(
            (s for s in self._searches if s.last_used is None),
            key=lambda s: s.use_count,
            reverse=True,
        )
        return used + unused
