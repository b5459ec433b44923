"""Shared fixtures for permission search tests."""

import pytest

from permission_search.catalog import StaticCatalogProvider
from permission_search.indexer import build_index
from permission_search.models import IndexEntry, PermissionRecord, SearchResult


def make_record(
    resource: str,
    action: str,
    scope: str = "department",
    description: str | None = None,
    conditions=None,
    record_id: str | None = None,
) -> PermissionRecord:
    return PermissionRecord(
        id=record_id or f"{resource}-{action}-{scope}",
        resource=resource,
        action=action,
        scope=scope,
        description=description,
        conditions=conditions,
    )


@pytest.fixture
def hotel_records() -> list[PermissionRecord]:
    """A small hospitality catalog spanning every category."""
    return [
        make_record("user", "read", "department", "View staff profiles"),
        make_record("user", "update", "department"),
        make_record("user", "create", "property"),
        make_record("vacation", "approve", "department", "Approve vacation requests"),
        make_record("vacation", "read", "own"),
        make_record("payslip", "read", "own"),
        make_record("document", "read", "property"),
        make_record("document", "create", "department"),
        make_record("training", "read", "organization"),
        make_record("reservation", "update", "property", conditions={"status": "pending"}),
        make_record("audit", "read", "platform"),
        make_record("role", "assign", "organization"),
    ]


@pytest.fixture
def hotel_index(hotel_records):
    return build_index(hotel_records)


@pytest.fixture
def provider(hotel_records) -> StaticCatalogProvider:
    return StaticCatalogProvider(hotel_records)


def make_result(name, score, category="HR", popularity=50, display_name=None) -> SearchResult:
    """A scored result around a minimal entry, for ranking and caching tests."""
    entry = IndexEntry(
        id=name,
        name=name,
        resource=name.split(".")[0],
        action="read",
        scope="own",
        description="",
        category=category,
        keywords=(),
        popularity=popularity,
        searchable_text=name,
        display_name=display_name or name,
    )
    return SearchResult(permission=entry, score=score)
