"""Result ranking.

A comparator is selected once per search cycle from ``COMPARATORS`` and applied
with a stable sort:

  relevance     score, direction per sort_order (default)
  alphabetical  display name, direction per sort_order
  category      category name per sort_order, then score descending always
  popularity    (b - a), negated for "asc"
"""

from functools import cmp_to_key
from typing import Callable

from permission_search.models import SearchResult, SortBy, SortOrder

Comparator = Callable[[SearchResult, SearchResult], float]


def _text_compare(a: str, b: str) -> int:
    """Case-insensitive comparison with a case-sensitive tie-break."""
    left, right = a.casefold(), b.casefold()
    if left != right:
        return -1 if left < right else 1
    if a != b:
        return -1 if a < b else 1
    return 0


def _relevance(order: SortOrder) -> Comparator:
    if order == "asc":
        return lambda a, b: a.score - b.score
    return lambda a, b: b.score - a.score


def _alphabetical(order: SortOrder) -> Comparator:
    sign = 1 if order == "asc" else -1

    def compare(a: SearchResult, b: SearchResult) -> float:
        return sign * _text_compare(a.permission.display_name, b.permission.display_name)

    return compare


def _category(order: SortOrder) -> Comparator:
    sign = 1 if order == "asc" else -1

    def compare(a: SearchResult, b: SearchResult) -> float:
        result = _text_compare(a.permission.category, b.permission.category)
        if result != 0:
            return sign * result
        # Relevance within a category is always descending
        return b.score - a.score

    return compare


def _popularity(order: SortOrder) -> Comparator:
    def compare(a: SearchResult, b: SearchResult) -> float:
        result = b.permission.popularity - a.permission.popularity
        return -result if order == "asc" else result

    return compare


COMPARATORS: dict[str, Callable[[SortOrder], Comparator]] = {
    "relevance": _relevance,
    "alphabetical": _alphabetical,
    "category": _category,
    "popularity": _popularity,
}


def comparator_for(sort_by: SortBy, sort_order: SortOrder) -> Comparator:
    """Select the comparator for a sort mode. Unknown modes fall back to relevance."""
    factory = COMPARATORS.get(sort_by, _relevance)
    return factory(sort_order)


def rank(
    results: list[SearchResult],
    sort_by: SortBy = "relevance",
    sort_order: SortOrder = "desc",
    max_results: int = 50,
) -> list[SearchResult]:
    """Sort results by the selected strategy and truncate to ``max_results``."""
    compare = comparator_for(sort_by, sort_order)
    ranked = sorted(results, key=cmp_to_key(compare))
    return ranked[:max_results]


def group_by_category(results: list[SearchResult]) -> dict[str, list[SearchResult]]:
    """Group ranked results by category, keeping rank order inside each group.

    Categories appear in the order of their first result.
    """
    groups: dict[str, list[SearchResult]] = {}
    for result in results:
        groups.setdefault(result.permission.category, []).append(result)
    return groups
