"""Persistence collaborators for search history and saved searches.

The session never touches storage directly; it is handed a ``SearchStore``
and calls ``load``/``save`` from ``restore()``/``persist()``.

JSON layout (``searches.json``):

  {
    "history": [{"id", "query", "timestamp", "result_count", "filters"}],
    "saved_searches": [{"id", "name", "query", "description", "filters",
                        "created_at", "last_used", "use_count"}]
  }

Timestamps are ISO-8601; filter set fields are sorted lists.
"""

import json
from datetime import datetime
from pathlib import Path
from typing import Any, Optional, Protocol, Union

import aiofiles
from loguru import logger

from permission_search.errors import StoreError
from permission_search.models import SavedSearch, SearchFilters, SearchHistoryEntry

StoredSearches = tuple[list[SearchHistoryEntry], list[SavedSearch]]


class SearchStore(Protocol):
    """Durable home for history and saved searches."""

    async def load(self) -> StoredSearches: ...

    async def save(
        self, history: list[SearchHistoryEntry], saved_searches: list[SavedSearch]
    ) -> None: ...


class InMemorySearchStore:
    """Store that keeps the last saved state in memory. Useful for tests."""

    def __init__(self):
        self.history: list[SearchHistoryEntry] = []
        self.saved_searches: list[SavedSearch] = []
        self.save_count = 0

    async def load(self) -> StoredSearches:
        return list(self.history), list(self.saved_searches)

    async def save(
        self, history: list[SearchHistoryEntry], saved_searches: list[SavedSearch]
    ) -> None:
        self.history = list(history)
        self.saved_searches = list(saved_searches)
        self.save_count += 1


# --- Serialization ---


def _dt(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def _parse_dt(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None


def history_to_dict(entry: SearchHistoryEntry) -> dict[str, Any]:
    return {
        "id": entry.id,
        "query": entry.query,
        "timestamp": _dt(entry.timestamp),
        "result_count": entry.result_count,
        "filters": entry.filters.to_dict(),
    }


def history_from_dict(data: dict[str, Any]) -> SearchHistoryEntry:
    return SearchHistoryEntry(
        id=data["id"],
        query=data["query"],
        timestamp=_parse_dt(data.get("timestamp")) or datetime.now(),
        result_count=int(data.get("result_count", 0)),
        filters=SearchFilters.from_dict(data.get("filters")),
    )


def saved_search_to_dict(saved: SavedSearch) -> dict[str, Any]:
    return {
        "id": saved.id,
        "name": saved.name,
        "query": saved.query,
        "description": saved.description,
        "filters": saved.filters.to_dict(),
        "created_at": _dt(saved.created_at),
        "last_used": _dt(saved.last_used),
        "use_count": saved.use_count,
    }


def saved_search_from_dict(data: dict[str, Any]) -> SavedSearch:
    return SavedSearch(
        id=data["id"],
        name=data["name"],
        query=data.get("query", ""),
        description=data.get("description"),
        filters=SearchFilters.from_dict(data.get("filters")),
        created_at=_parse_dt(data.get("created_at")) or datetime.now(),
        last_used=_parse_dt(data.get("last_used")),
        use_count=int(data.get("use_count", 0)),
    )


class JsonFileSearchStore:
    """Stores history and saved searches in a single JSON file."""

    def __init__(self, path: Union[Path, str]):
        self.path = Path(path)

    async def load(self) -> StoredSearches:
        """Read the store. A missing file is an empty store."""
        if not self.path.exists():
            return [], []

        try:
            async with aiofiles.open(self.path, mode="r", encoding="utf-8") as f:
                data = json.loads(await f.read())
            if not isinstance(data, dict):
                raise ValueError(f"expected a JSON object, got {type(data).__name__}")
            history = [history_from_dict(item) for item in data.get("history", [])]
            saved = [saved_search_from_dict(item) for item in data.get("saved_searches", [])]
        except (OSError, ValueError, KeyError, TypeError) as e:
            logger.error(f"Failed to load search store {self.path}: {e}")
            raise StoreError(f"Failed to load search store {self.path}: {e}") from e

        logger.debug(f"Loaded {len(history)} history entries and {len(saved)} saved searches")
        return history, saved

    async def save(
        self, history: list[SearchHistoryEntry], saved_searches: list[SavedSearch]
    ) -> None:
        """Write the store atomically via a temporary file."""
        content = json.dumps(
            {
                "history": [history_to_dict(entry) for entry in history],
                "saved_searches": [saved_search_to_dict(saved) for saved in saved_searches],
            },
            indent=2,
        )
        temp_path = self.path.with_suffix(".tmp")

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(temp_path, mode="w", encoding="utf-8") as f:
                await f.write(content)
            temp_path.replace(self.path)
        except OSError as e:
            temp_path.unlink(missing_ok=True)
            logger.error(f"Failed to write search store {self.path}: {e}")
            raise StoreError(f"Failed to write search store {self.path}: {e}") from e
