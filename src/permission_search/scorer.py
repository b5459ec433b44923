"""Relevance scoring for permission search.

Additive point scoring, normalized to [0, 1] by dividing by 100 and clamping:

  Match                                   Points
  -----------------------------------------------
  exact name (resource.action.scope)      100  (no further field checks)
  exact display name                       95  (no further field checks)
  resource substring                       80
  action substring                         75
  scope substring                          70
  description substring                    60
  any keyword substring (once)             50
  category substring                       40
  each query token (len >= 2) in text      30  per token
  popularity                               popularity * 0.1, always
  context boost                            from LookupTables.context_boosts

Empty queries never reach the scorer; the session browses by popularity instead.
"""

import re

from permission_search.lookups import DEFAULT_LOOKUPS, LookupTables
from permission_search.models import IndexEntry, SearchResult

EXACT_NAME_POINTS = 100.0
EXACT_DISPLAY_NAME_POINTS = 95.0

# Field -> points for independent substring matches, in reporting order
FIELD_POINTS = (
    ("resource", 80.0),
    ("action", 75.0),
    ("scope", 70.0),
    ("description", 60.0),
)
KEYWORD_POINTS = 50.0
CATEGORY_POINTS = 40.0
TOKEN_POINTS = 30.0
MIN_TOKEN_LENGTH = 2
POPULARITY_WEIGHT = 0.1

HIGHLIGHT_OPEN = "<mark>"
HIGHLIGHT_CLOSE = "</mark>"


def normalize_query(query: str) -> str:
    """Lowercase and strip a raw query."""
    return query.strip().lower()


def highlight_matches(text: str, query: str) -> str:
    """Wrap case-insensitive occurrences of ``query`` in ``text`` with <mark> tags.

    The query is regex-escaped, so characters like '.' or '(' match literally.
    """
    if not query.strip():
        return text
    pattern = re.compile(f"({re.escape(query)})", re.IGNORECASE)
    return pattern.sub(f"{HIGHLIGHT_OPEN}\\1{HIGHLIGHT_CLOSE}", text)


class Scorer:
    """Scores index entries against a normalized query."""

    def __init__(self, lookups: LookupTables = DEFAULT_LOOKUPS):
        self.lookups = lookups

    def score(self, entry: IndexEntry, query: str, context: str = "generic") -> SearchResult:
        """Score one entry.

        Args:
            entry: The index entry to score.
            query: Normalized (lowercased, stripped) non-empty query.
            context: Hosting context, e.g. "role-creation" or "user-management".

        Returns:
            A SearchResult with the normalized score and matched fields in check order.
        """
        matched_fields: list[str] = []
        total = 0.0

        if entry.name.lower() == query:
            matched_fields.append("name")
            total += EXACT_NAME_POINTS
        elif entry.display_name.lower() == query:
            matched_fields.append("displayName")
            total += EXACT_DISPLAY_NAME_POINTS
        else:
            total += self._field_points(entry, query, matched_fields)

        total += entry.popularity * POPULARITY_WEIGHT
        total += self.lookups.context_boost(context, entry.resource)

        return SearchResult(
            permission=entry,
            score=min(total / 100, 1.0),
            matched_fields=matched_fields,
            highlighted_text=highlight_matches(entry.display_name or entry.name, query),
        )

    def _field_points(self, entry: IndexEntry, query: str, matched_fields: list[str]) -> float:
        total = 0.0

        for field_name, points in FIELD_POINTS:
            if query in getattr(entry, field_name).lower():
                matched_fields.append(field_name)
                total += points

        if any(query in keyword.lower() for keyword in entry.keywords):
            matched_fields.append("keywords")
            total += KEYWORD_POINTS

        if query in entry.category.lower():
            matched_fields.append("category")
            total += CATEGORY_POINTS

        # Token matches stack and are not reported as a field
        for token in query.split():
            if len(token) >= MIN_TOKEN_LENGTH and token in entry.searchable_text:
                total += TOKEN_POINTS

        return total
