"""Permission indexer.

Turns raw catalog records into IndexEntry values with a display name, category,
popularity heuristic and concatenated searchable text. Indexing is pure: the
same catalog always produces the same entries, in catalog order.
"""

from typing import Iterable

from loguru import logger

from permission_search.keywords import KeywordExpander
from permission_search.lookups import DEFAULT_LOOKUPS, LookupTables
from permission_search.models import IndexEntry, PermissionRecord


class PermissionIndexer:
    """Builds search index entries from PermissionRecords."""

    def __init__(
        self,
        lookups: LookupTables = DEFAULT_LOOKUPS,
        expander: KeywordExpander | None = None,
    ):
        self.lookups = lookups
        self.expander = expander or KeywordExpander(lookups)

    def build_index(self, catalog: Iterable[PermissionRecord]) -> list[IndexEntry]:
        """Index every record in the catalog.

        Args:
            catalog: Records from the catalog provider.

        Returns:
            A new list of IndexEntry values in catalog order.
        """
        entries = [self.index_record(record) for record in catalog]
        logger.debug(f"Indexed {len(entries)} permissions")
        return entries

    def index_record(self, record: PermissionRecord) -> IndexEntry:
        resource, action, scope = record.resource, record.action, record.scope
        description = record.description or f"{action} {resource} with {scope} scope"
        keywords = self.expander.keywords_for(resource, action, scope)

        # Uses the raw description so generated text does not add match terms
        searchable_text = " ".join(
            [resource, action, scope, record.description or "", *keywords]
        ).lower()

        return IndexEntry(
            id=record.id,
            name=f"{resource}.{action}.{scope}",
            resource=resource,
            action=action,
            scope=scope,
            description=description,
            category=self.lookups.category_for(resource),
            keywords=keywords,
            popularity=self.lookups.popularity_for(resource, action),
            searchable_text=searchable_text,
            display_name=self.display_name(resource, action, scope),
            icon=self.lookups.icon_for(resource),
            is_system_permission=record.is_system,
            is_conditional=bool(record.conditions),
        )

    def display_name(self, resource: str, action: str, scope: str) -> str:
        """Human readable name, e.g. "Create Users (Department)".

        Values missing from the lookup tables pass through capitalized.
        """
        action_name = self.lookups.action_names.get(action) or _capitalize(action)
        resource_name = self.lookups.resource_names.get(resource) or _capitalize(resource)
        scope_name = self.lookups.scope_names.get(scope) or _capitalize(scope)
        return f"{action_name} {resource_name} ({scope_name})"


def _capitalize(value: str) -> str:
    return value[:1].upper() + value[1:]


def build_index(
    catalog: Iterable[PermissionRecord], lookups: LookupTables = DEFAULT_LOOKUPS
) -> list[IndexEntry]:
    """Convenience wrapper around PermissionIndexer.build_index."""
    return PermissionIndexer(lookups).build_index(catalog)


# --- Snapshot Views ---


def popular_permissions(entries: list[IndexEntry], limit: int = 10) -> list[IndexEntry]:
    """Most popular entries first. Ties keep catalog order."""
    return sorted(entries, key=lambda entry: entry.popularity, reverse=True)[:limit]


def recent_permissions(
    entries: list[IndexEntry],
    lookups: LookupTables = DEFAULT_LOOKUPS,
    limit: int = 8,
) -> list[IndexEntry]:
    """Entries on commonly revisited resources, in catalog order.

    An approximation based on resource type, not tracked usage.
    """
    recent = set(lookups.recent_resources)
    return [entry for entry in entries if entry.resource in recent][:limit]
