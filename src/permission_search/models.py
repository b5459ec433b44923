"""Data model for permission search.

The catalog record is external input and is validated with pydantic. Everything
derived from it (index entries, filters, results, history) is a plain dataclass
owned by the engine:

  PermissionRecord  -> IndexEntry      (Indexer, once per catalog load)
  IndexEntry        -> SearchResult    (Scorer, once per query)
  query + filters   -> SearchHistoryEntry / SavedSearch
"""

import uuid
from dataclasses import dataclass, field, fields, replace
from datetime import datetime
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

SortBy = Literal["relevance", "alphabetical", "category", "popularity"]
SortOrder = Literal["asc", "desc"]

SET_FILTER_FIELDS = ("resources", "actions", "scopes", "categories")


def new_id() -> str:
    """Identifier for history entries and saved searches."""
    return uuid.uuid4().hex


# --- Catalog Input ---


class PermissionRecord(BaseModel):
    """A permission as supplied by the catalog provider. Never mutated."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str = Field(..., description="Provider identifier (not stable across reloads)")
    resource: str = Field(..., min_length=1, description="Resource, e.g. 'user'")
    action: str = Field(..., min_length=1, description="Action, e.g. 'create'")
    scope: str = Field(..., min_length=1, description="Scope, e.g. 'department'")
    description: Optional[str] = Field(None, description="Human readable description")
    conditions: Optional[Any] = Field(None, description="Conditional grant rules, if any")
    is_system: bool = Field(True, description="Built-in permission shipped with the platform")

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> str:
        return str(value)


# --- Index ---


@dataclass(frozen=True)
class IndexEntry:
    """Search-optimized projection of one PermissionRecord.

    ``name`` (resource.action.scope) is the stable identity used by selection,
    history and export.
    """

    id: str
    name: str
    resource: str
    action: str
    scope: str
    description: str
    category: str
    keywords: tuple[str, ...]
    popularity: int
    searchable_text: str
    display_name: str
    icon: str = "CogIcon"
    is_system_permission: bool = True
    is_conditional: bool = False


# --- Filters and Options ---


@dataclass(frozen=True)
class SearchFilters:
    """Candidate restrictions applied before scoring.

    Empty set fields mean "no restriction", not "exclude everything".
    """

    resources: frozenset[str] = frozenset()
    actions: frozenset[str] = frozenset()
    scopes: frozenset[str] = frozenset()
    categories: frozenset[str] = frozenset()
    include_system_permissions: bool = True
    include_conditional_permissions: bool = True
    popularity_threshold: Optional[int] = None

    def __post_init__(self):
        # Accept any iterable of strings for the set fields; a bare string is one value
        for name in SET_FILTER_FIELDS:
            value = getattr(self, name)
            if isinstance(value, str):
                object.__setattr__(self, name, frozenset({value} if value else ()))
            elif not isinstance(value, frozenset):
                object.__setattr__(self, name, frozenset(value or ()))

    def merged(self, **changes: Any) -> "SearchFilters":
        """Return a copy with ``changes`` applied. Unknown keys raise TypeError."""
        return replace(self, **changes)

    @property
    def is_default(self) -> bool:
        return self == SearchFilters()

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready form with set fields as sorted lists."""
        data: dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            data[f.name] = sorted(value) if isinstance(value, frozenset) else value
        return data

    @classmethod
    def from_dict(cls, data: Optional[dict[str, Any]]) -> "SearchFilters":
        """Build filters from a possibly partial dict, defaulting missing fields."""
        data = data or {}
        known = {f.name for f in fields(cls)}
        values = {k: v for k, v in data.items() if k in known and v is not None}
        return cls(**values)


@dataclass
class SearchOptions:
    """Per-session search behavior.

    ``mode``, ``case_sensitive``, ``exact_match`` and ``search_scope`` are carried
    for callers that pass the full option bag; scoring is always the
    case-insensitive multi-field algorithm.
    """

    max_results: int = 50
    min_score: float = 0.1
    sort_by: SortBy = "relevance"
    sort_order: SortOrder = "desc"
    mode: str = "simple"
    include_descriptions: bool = True
    case_sensitive: bool = False
    exact_match: bool = False
    search_scope: str = "all"


# --- Results ---


@dataclass(frozen=True)
class SearchResult:
    """One scored match. Recomputed per query, never persisted."""

    permission: IndexEntry
    score: float
    matched_fields: list[str] = field(default_factory=list)
    highlighted_text: Optional[str] = None


# --- History and Saved Searches ---


@dataclass(frozen=True)
class SearchHistoryEntry:
    """A past query with the filters that were active when it ran."""

    query: str
    result_count: int
    filters: SearchFilters = field(default_factory=SearchFilters)
    timestamp: datetime = field(default_factory=datetime.now)
    id: str = field(default_factory=new_id)


@dataclass(frozen=True)
class SavedSearch:
    """A named, reusable query + filters bundle.

    ``use_count`` and ``last_used`` only change when the search is loaded.
    """

    name: str
    query: str
    filters: SearchFilters = field(default_factory=SearchFilters)
    description: Optional[str] = None
    created_at: datetime = field(default_factory=datetime.now)
    last_used: Optional[datetime] = None
    use_count: int = 0
    id: str = field(default_factory=new_id)

    @property
    def has_filters(self) -> bool:
        return not self.filters.is_default
