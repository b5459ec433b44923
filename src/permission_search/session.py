"""Search session: the state machine that drives the search pipeline.

  idle --(catalog loaded, empty query)--> browsing
  any  --(search(q))--> searching --(debounce elapsed)--> results-ready | browsing
  any  --(update_filters / reset_filters / load_saved_search)--> searching (no debounce)
  any  --(catalog load failure)--> error --(refresh_permissions succeeds)--> ...

Each search cycle runs filter -> cache -> score -> rank synchronously and
publishes a new immutable SearchSessionState. Only two things suspend: the
debounce timer and the catalog provider call. A cycle scheduled for an older
query never publishes after a newer query; every state-changing call bumps a
generation counter and stale timers exit without touching state.

Selection operations only touch ``selected_permissions`` and never interact
with the search state machine.
"""

import asyncio
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Callable, Optional, Union

from loguru import logger

from permission_search.cache import ResultCache
from permission_search.catalog import CatalogProvider
from permission_search.config import PermissionSearchConfig
from permission_search.errors import ScoringError
from permission_search.export import export_json, name_list
from permission_search.filters import apply_filters
from permission_search.history import DEFAULT_HISTORY_LIMIT, SavedSearchStore, SearchHistory
from permission_search.indexer import PermissionIndexer, popular_permissions, recent_permissions
from permission_search.lookups import DEFAULT_LOOKUPS, LookupTables
from permission_search.models import (
    IndexEntry,
    SavedSearch,
    SearchFilters,
    SearchHistoryEntry,
    SearchOptions,
    SearchResult,
)
from permission_search.ranker import rank
from permission_search.scorer import Scorer, normalize_query
from permission_search.stores import SearchStore

CATALOG_LOAD_FAILED = "Failed to load permissions"
SEARCH_FAILED = "Search failed"


class SearchStatus(str, Enum):
    IDLE = "idle"
    BROWSING = "browsing"
    SEARCHING = "searching"
    RESULTS_READY = "results-ready"
    ERROR = "error"


@dataclass(frozen=True)
class SearchSessionState:
    """Immutable snapshot of everything a host renders."""

    query: str = ""
    filters: SearchFilters = field(default_factory=SearchFilters)
    results: tuple[SearchResult, ...] = ()
    selected_permissions: frozenset[str] = frozenset()
    status: SearchStatus = SearchStatus.IDLE
    error: Optional[str] = None
    is_loading: bool = False
    show_dropdown: bool = False
    selected_index: int = -1
    search_history: tuple[SearchHistoryEntry, ...] = ()
    saved_searches: tuple[SavedSearch, ...] = ()
    popular_permissions: tuple[IndexEntry, ...] = ()
    recent_permissions: tuple[IndexEntry, ...] = ()


PermissionRef = Union[IndexEntry, str]
StateListener = Callable[[SearchSessionState], Any]


def _name_of(permission: PermissionRef) -> str:
    return permission if isinstance(permission, str) else permission.name


class SearchSession:
    """One search surface's engine instance.

    Owns its index, cache, history and saved searches exclusively. Sessions
    sharing a catalog provider re-index independently.
    """

    def __init__(
        self,
        provider: CatalogProvider,
        options: Optional[SearchOptions] = None,
        lookups: LookupTables = DEFAULT_LOOKUPS,
        *,
        context: str = "generic",
        debounce_seconds: float = 0.3,
        enable_cache: bool = True,
        enable_history: bool = True,
        history_limit: int = DEFAULT_HISTORY_LIMIT,
        popular_limit: int = 10,
        recent_limit: int = 8,
        cache_max_entries: Optional[int] = None,
        store: Optional[SearchStore] = None,
        clipboard: Optional[Callable[[str], Any]] = None,
        initial_query: str = "",
        initial_filters: Optional[SearchFilters] = None,
        scorer: Optional[Scorer] = None,
    ):
        self.provider = provider
        self.options = options or SearchOptions()
        self.lookups = lookups
        self.context = context
        self.debounce_seconds = debounce_seconds
        self.enable_cache = enable_cache
        self.enable_history = enable_history
        self.popular_limit = popular_limit
        self.recent_limit = recent_limit
        self.store = store
        self.clipboard = clipboard

        self._indexer = PermissionIndexer(lookups)
        self._scorer = scorer or Scorer(lookups)
        self._cache = ResultCache(max_entries=cache_max_entries)
        self._history = SearchHistory(max_entries=history_limit)
        self._saved = SavedSearchStore()
        self._index: Optional[list[IndexEntry]] = None
        self._pending: Optional[asyncio.Task] = None
        self._generation = 0
        self._listeners: list[StateListener] = []
        self._state = SearchSessionState(
            query=initial_query,
            filters=initial_filters or SearchFilters(),
        )

    @classmethod
    def from_config(
        cls,
        provider: CatalogProvider,
        config: PermissionSearchConfig,
        **kwargs: Any,
    ) -> "SearchSession":
        """Build a session from settings. ``kwargs`` override config values."""
        settings: dict[str, Any] = {
            "context": config.context,
            "debounce_seconds": config.debounce_seconds,
            "enable_cache": config.enable_cache,
            "enable_history": config.enable_history,
            "history_limit": config.history_limit,
            "popular_limit": config.popular_limit,
            "recent_limit": config.recent_limit,
            "cache_max_entries": config.cache_max_entries,
        }
        settings.update(kwargs)
        options = settings.pop("options", None) or config.search_options()
        return cls(provider, options, **settings)

    # --- State ---

    @property
    def state(self) -> SearchSessionState:
        return self._state

    @property
    def index(self) -> list[IndexEntry]:
        return list(self._index or ())

    @property
    def cache(self) -> ResultCache:
        return self._cache

    @property
    def is_loading(self) -> bool:
        return self._state.is_loading

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Call ``listener`` with every new state snapshot. Returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _set_state(self, **changes: Any) -> None:
        self._state = replace(self._state, **changes)
        for listener in list(self._listeners):
            try:
                listener(self._state)
            except Exception as e:
                logger.error(f"State listener {listener!r} failed: {e}")

    # --- Catalog ---

    async def start(self) -> None:
        """Restore persisted searches (if a store is attached) and load the catalog."""
        if self.store is not None:
            await self.restore()
        await self.refresh_permissions()

    async def refresh_permissions(self) -> None:
        """Fetch and re-index the catalog, then re-run the current query.

        Failures never propagate: the session moves to ``error`` with
        "Failed to load permissions" and stays there until a refresh succeeds.
        """
        self._cache.invalidate_all()
        self._set_state(is_loading=True)

        try:
            records = await self.provider.fetch_permissions()
            index = self._indexer.build_index(records)
        except Exception as e:
            logger.error(f"{CATALOG_LOAD_FAILED}: {e}")
            self._index = None
            self._set_state(
                is_loading=False,
                status=SearchStatus.ERROR,
                error=CATALOG_LOAD_FAILED,
                results=(),
            )
            return

        self._index = index
        # Cycles that ran during the fetch cached results from the old index
        self._cache.invalidate_all()
        logger.info(f"Loaded {len(index)} permissions into the search index")
        self._set_state(
            is_loading=False,
            error=None,
            popular_permissions=tuple(popular_permissions(index, self.popular_limit)),
            recent_permissions=tuple(recent_permissions(index, self.lookups, self.recent_limit)),
        )

        self._generation += 1
        self._cancel_pending()
        self._run_cycle()

    # --- Scheduling ---

    def _cancel_pending(self) -> None:
        if self._pending is not None and not self._pending.done():
            self._pending.cancel()
            logger.debug("Cancelled pending search cycle")
        self._pending = None

    def _schedule(self, delay: float) -> None:
        """Run a search cycle after ``delay`` seconds.

        Without a running event loop the cycle runs immediately.
        """
        self._cancel_pending()
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self._run_cycle()
            return
        self._pending = loop.create_task(self._delayed_cycle(self._generation, delay))

    async def _delayed_cycle(self, generation: int, delay: float) -> None:
        try:
            await asyncio.sleep(delay)
        except asyncio.CancelledError:
            return

        if generation != self._generation:
            logger.debug("Discarding stale search cycle")
            return
        self._run_cycle()

    async def flush(self) -> None:
        """Wait until no search cycle is pending."""
        while self._pending is not None and not self._pending.done():
            task = self._pending
            try:
                await task
            except asyncio.CancelledError:
                if task is self._pending:
                    raise

    def close(self) -> None:
        """Cancel pending work. The session should not be used afterwards."""
        self._generation += 1
        self._cancel_pending()
        self._listeners.clear()

    # --- Pipeline ---

    def _run_cycle(self) -> None:
        if self._index is None:
            # Catalog not loaded yet; refresh_permissions re-runs the query
            if self._state.error:
                self._set_state(status=SearchStatus.ERROR, results=())
            else:
                logger.debug("Search deferred until the catalog is loaded")
            return

        query = normalize_query(self._state.query)
        try:
            if query:
                results = self._search(query)
                status = SearchStatus.RESULTS_READY
            else:
                results = self._browse()
                status = SearchStatus.BROWSING
        except Exception as e:
            logger.error(f"{SEARCH_FAILED} for query '{query}': {e}")
            self._set_state(status=SearchStatus.ERROR, error=SEARCH_FAILED, results=())
            return

        self._set_state(
            results=tuple(results),
            status=status,
            error=None,
            show_dropdown=bool(query) or bool(results),
            selected_index=-1,
        )

    def _browse(self) -> list[SearchResult]:
        """Popularity-ranked defaults for an empty query."""
        candidates = apply_filters(self._index or [], self._state.filters)
        return [
            SearchResult(
                permission=entry,
                score=entry.popularity / 100,
                matched_fields=["popularity"],
            )
            for entry in popular_permissions(candidates, self.popular_limit)
        ]

    def _search(self, query: str) -> list[SearchResult]:
        filters = self._state.filters

        if self.enable_cache:
            cached = self._cache.get(query, filters)
            if cached is not None:
                return cached

        candidates = apply_filters(self._index or [], filters)
        scored: list[SearchResult] = []
        for entry in candidates:
            try:
                result = self._scorer.score(entry, query, self.context)
            except Exception as e:
                logger.warning(str(ScoringError(entry.name, e)))
                continue
            if result.score >= self.options.min_score:
                scored.append(result)

        ranked = rank(
            scored,
            sort_by=self.options.sort_by,
            sort_order=self.options.sort_order,
            max_results=self.options.max_results,
        )
        logger.debug(
            f"Search '{query}': {len(candidates)} candidates, {len(scored)} scored, "
            f"{len(ranked)} returned"
        )

        if self.enable_cache:
            self._cache.put(query, filters, ranked)
        return ranked

    # --- Query ---

    def search(self, query: str) -> None:
        """Set the query and schedule a debounced search cycle."""
        self._generation += 1
        self._set_state(query=query, status=SearchStatus.SEARCHING)
        self._schedule(self.debounce_seconds)

    def set_query(self, query: str) -> None:
        self.search(query)

    def clear_search(self) -> None:
        """Empty the query, drop cached results and return to browsing."""
        self._generation += 1
        self._cache.invalidate_all()
        self._set_state(
            query="",
            results=(),
            status=SearchStatus.BROWSING,
            show_dropdown=False,
            selected_index=-1,
        )
        self._schedule(0)

    # --- Filters ---

    def _apply_filter_change(self, filters: SearchFilters) -> None:
        self._generation += 1
        self._cache.invalidate_all()
        self._set_state(filters=filters, status=SearchStatus.SEARCHING)
        self._schedule(0)

    def update_filters(self, partial: Optional[dict[str, Any]] = None, **changes: Any) -> None:
        """Merge filter changes, e.g. ``update_filters(resources=["document"])``."""
        merged = {**(partial or {}), **changes}
        self._apply_filter_change(self._state.filters.merged(**merged))

    def reset_filters(self) -> None:
        self._apply_filter_change(SearchFilters())

    def set_resource_filter(self, resources: list[str]) -> None:
        self.update_filters(resources=resources)

    def set_category_filter(self, categories: list[str]) -> None:
        self.update_filters(categories=categories)

    # --- Selection ---

    def select_permission(self, permission: PermissionRef) -> None:
        name = _name_of(permission)
        self._set_state(selected_permissions=self._state.selected_permissions | {name})

    def deselect_permission(self, permission: PermissionRef) -> None:
        name = _name_of(permission)
        self._set_state(selected_permissions=self._state.selected_permissions - {name})

    def toggle_selection(self, permission: PermissionRef) -> None:
        if _name_of(permission) in self._state.selected_permissions:
            self.deselect_permission(permission)
        else:
            self.select_permission(permission)

    def select_all(self) -> None:
        """Select every permission in the current result list."""
        names = frozenset(result.permission.name for result in self._state.results)
        self._set_state(selected_permissions=names)

    def clear_selection(self) -> None:
        self._set_state(selected_permissions=frozenset())

    # --- History ---

    def add_to_history(self, query: str, result_count: int) -> Optional[SearchHistoryEntry]:
        """Record a query. No-op when history is disabled or the query is blank."""
        if not self.enable_history:
            return None
        entry = self._history.add(query, result_count, filters=self._state.filters)
        if entry is not None:
            self._set_state(search_history=self._history.snapshot())
        return entry

    def clear_history(self) -> None:
        self._history.clear()
        self._set_state(search_history=())

    # --- Saved Searches ---

    def save_search(self, name: str, description: Optional[str] = None) -> SavedSearch:
        """Save the current query and filters under ``name``.

        Raises:
            SearchValidationError: If ``name`` is blank.
        """
        saved = self._saved.add(name, self._state.query, self._state.filters, description)
        self._set_state(saved_searches=self._saved.snapshot())
        logger.info(f"Saved search '{saved.name}'")
        return saved

    def delete_saved_search(self, search_id: str) -> bool:
        deleted = self._saved.delete(search_id)
        if deleted:
            self._set_state(saved_searches=self._saved.snapshot())
        return deleted

    def load_saved_search(self, saved: Union[SavedSearch, str]) -> Optional[SavedSearch]:
        """Restore a saved search's query and filters and record its use.

        Accepts the SavedSearch or its id. Returns the updated SavedSearch, or
        None for an unknown id.
        """
        if isinstance(saved, str):
            found = self._saved.get(saved)
            if found is None:
                return None
            saved = found

        updated = self._saved.mark_used(saved.id) or saved
        self._generation += 1
        self._cache.invalidate_all()
        self._set_state(
            query=saved.query,
            filters=saved.filters,
            saved_searches=self._saved.snapshot(),
            status=SearchStatus.SEARCHING,
        )
        self._schedule(0)
        return updated

    # --- Persistence ---

    async def restore(self) -> None:
        """Load history and saved searches from the attached store."""
        if self.store is None:
            return
        history, saved = await self.store.load()
        self._history = SearchHistory(self._history.max_entries, history)
        self._saved = SavedSearchStore(saved)
        self._set_state(
            search_history=self._history.snapshot(),
            saved_searches=self._saved.snapshot(),
        )

    async def persist(self) -> None:
        """Write history and saved searches to the attached store."""
        if self.store is None:
            return
        await self.store.save(list(self._history), list(self._saved))

    # --- Views and Export ---

    def get_popular_permissions(self) -> list[IndexEntry]:
        return list(self._state.popular_permissions)

    def get_recent_permissions(self) -> list[IndexEntry]:
        return list(self._state.recent_permissions)

    def export_results(self) -> str:
        """Pretty-printed JSON of the current query, filters and results."""
        return export_json(self._state.query, self._state.filters, self._state.results)

    def copy_permission_names(self) -> str:
        """Hand the selected names, one per line, to the clipboard sink."""
        names = name_list(self._state.selected_permissions)
        if self.clipboard is not None:
            self.clipboard(names)
        return names
