"""Filter engine: narrows the candidate set before scoring."""

from typing import Iterable

from permission_search.models import IndexEntry, SearchFilters


def matches_filters(entry: IndexEntry, filters: SearchFilters) -> bool:
    """True if the entry passes every active filter.

    A set filter is active only when non-empty; the entry's value must then be
    a member. The popularity threshold applies only when set.
    """
    if filters.resources and entry.resource not in filters.resources:
        return False

    if filters.actions and entry.action not in filters.actions:
        return False

    if filters.scopes and entry.scope not in filters.scopes:
        return False

    if filters.categories and entry.category not in filters.categories:
        return False

    if not filters.include_system_permissions and entry.is_system_permission:
        return False

    if not filters.include_conditional_permissions and entry.is_conditional:
        return False

    if filters.popularity_threshold is not None and entry.popularity < filters.popularity_threshold:
        return False

    return True


def apply_filters(entries: Iterable[IndexEntry], filters: SearchFilters) -> list[IndexEntry]:
    """Return the entries that pass ``filters``, preserving order."""
    return [entry for entry in entries if matches_filters(entry, filters)]
