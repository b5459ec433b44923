"""Payload construction for export and clipboard sinks.

The engine only builds strings; writing them to a clipboard or file is the
host's job.
"""

import json
from datetime import datetime, timezone
from typing import Any, Iterable, Optional

from permission_search.models import SearchFilters, SearchResult


def result_summary(result: SearchResult) -> dict[str, Any]:
    entry = result.permission
    return {
        "permission": entry.name,
        "displayName": entry.display_name,
        "description": entry.description,
        "category": entry.category,
        "score": result.score,
    }


def export_payload(
    query: str,
    filters: SearchFilters,
    results: Iterable[SearchResult],
    timestamp: Optional[datetime] = None,
) -> dict[str, Any]:
    return {
        "query": query,
        "filters": filters.to_dict(),
        "results": [result_summary(result) for result in results],
        "timestamp": (timestamp or datetime.now(timezone.utc)).isoformat(),
    }


def export_json(
    query: str,
    filters: SearchFilters,
    results: Iterable[SearchResult],
    timestamp: Optional[datetime] = None,
) -> str:
    """Pretty-printed JSON with the query, filters and result summaries."""
    return json.dumps(export_payload(query, filters, results, timestamp), indent=2)


def name_list(names: Iterable[str]) -> str:
    """Newline-joined permission names, sorted for a stable clipboard payload."""
    return "\n".join(sorted(names))
