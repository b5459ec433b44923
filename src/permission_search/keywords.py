"""Keyword expansion for permission indexing.

Maps a resource/action pair to static synonyms so that "staff" finds
``user.*`` permissions and "edit" finds ``*.update.*`` permissions:

  user + update -> staff, employee, person, member, edit, modify, change, ...

Expansion happens once at indexing time; queries are never rewritten.
"""

from permission_search.lookups import DEFAULT_LOOKUPS, LookupTables


class KeywordExpander:
    """Looks up resource and action synonyms from injected tables."""

    def __init__(self, lookups: LookupTables = DEFAULT_LOOKUPS):
        self.lookups = lookups

    def expand(self, resource: str, action: str) -> list[str]:
        """Return resource synonyms followed by action synonyms.

        Unknown resources or actions contribute nothing.
        """
        keywords: list[str] = []
        keywords.extend(self.lookups.resource_synonyms.get(resource, ()))
        keywords.extend(self.lookups.action_synonyms.get(action, ()))
        return keywords

    def keywords_for(self, resource: str, action: str, scope: str) -> tuple[str, ...]:
        """Full keyword list for an index entry: the triple plus synonyms, deduplicated in order."""
        seen: dict[str, None] = {}
        for keyword in (resource, action, scope, *self.expand(resource, action)):
            seen.setdefault(keyword, None)
        return tuple(seen)
