"""Tests for permission_search.indexer -- index entry construction."""

from types import MappingProxyType

from permission_search.indexer import (
    PermissionIndexer,
    build_index,
    popular_permissions,
    recent_permissions,
)
from permission_search.lookups import LookupTables

from conftest import make_record


class TestIndexRecord:
    def test_name_and_display_name(self):
        entry = PermissionIndexer().index_record(make_record("user", "create", "department"))

        assert entry.name == "user.create.department"
        assert entry.display_name == "Create Users (Department)"

    def test_unknown_values_pass_through_capitalized(self):
        entry = PermissionIndexer().index_record(make_record("spaceship", "launch", "galaxy"))

        assert entry.display_name == "Launch Spaceship (Galaxy)"
        assert entry.category == "Operations"
        assert entry.popularity == 50
        assert entry.icon == "CogIcon"

    def test_category_popularity_and_icon_from_tables(self):
        entry = PermissionIndexer().index_record(make_record("payslip", "read", "own"))

        assert entry.category == "HR"
        assert entry.popularity == 90
        assert entry.icon == "CurrencyDollarIcon"

    def test_missing_description_is_generated(self):
        entry = PermissionIndexer().index_record(make_record("document", "approve", "property"))
        assert entry.description == "approve document with property scope"

    def test_searchable_text_is_lowercase_and_contains_keywords(self):
        record = make_record("user", "read", "own", description="View Staff PROFILES")
        entry = PermissionIndexer().index_record(record)

        assert entry.searchable_text == entry.searchable_text.lower()
        assert "view staff profiles" in entry.searchable_text
        assert "employee" in entry.searchable_text

    def test_keywords_hold_triple_and_synonyms(self):
        entry = PermissionIndexer().index_record(make_record("task", "delete", "own"))

        assert {"task", "delete", "own"} <= set(entry.keywords)
        assert {"todo", "remove"} <= set(entry.keywords)

    def test_flags(self):
        indexer = PermissionIndexer()
        plain = indexer.index_record(make_record("user", "read"))
        conditional = indexer.index_record(make_record("user", "read", conditions={"own": True}))
        empty_conditions = indexer.index_record(make_record("user", "read", conditions={}))

        assert plain.is_system_permission is True
        assert plain.is_conditional is False
        assert conditional.is_conditional is True
        assert empty_conditions.is_conditional is False

    def test_custom_lookups(self):
        lookups = LookupTables(
            resource_categories=MappingProxyType({"ship": "Fleet"}),
            popularity_scores=MappingProxyType({"ship.sail": 99}),
            default_category="Misc",
        )
        indexer = PermissionIndexer(lookups)

        assert indexer.index_record(make_record("ship", "sail")).category == "Fleet"
        assert indexer.index_record(make_record("ship", "sail")).popularity == 99
        assert indexer.index_record(make_record("dock", "sail")).category == "Misc"


class TestBuildIndex:
    def test_preserves_catalog_order(self, hotel_records):
        index = build_index(hotel_records)
        assert [e.id for e in index] == [r.id for r in hotel_records]

    def test_idempotent(self, hotel_records):
        assert build_index(hotel_records) == build_index(hotel_records)

    def test_does_not_mutate_records(self, hotel_records):
        before = [r.model_dump() for r in hotel_records]
        build_index(hotel_records)
        assert [r.model_dump() for r in hotel_records] == before

    def test_empty_catalog(self):
        assert build_index([]) == []


class TestSnapshots:
    def test_popular_sorted_descending_and_limited(self, hotel_index):
        popular = popular_permissions(hotel_index, limit=3)

        assert len(popular) == 3
        assert [p.popularity for p in popular] == sorted(
            (p.popularity for p in popular), reverse=True
        )
        assert popular[0].popularity == 90

    def test_popular_ties_keep_catalog_order(self, hotel_index):
        popular = popular_permissions(hotel_index)
        # user.read and payslip.read both score 90; user.read comes first in the catalog
        assert [p.name for p in popular[:2]] == ["user.read.department", "payslip.read.own"]

    def test_recent_filters_by_resource(self, hotel_index):
        recent = recent_permissions(hotel_index, limit=8)

        assert len(recent) <= 8
        assert all(
            e.resource in {"user", "vacation", "document", "payslip", "training"} for e in recent
        )
        assert "audit.read.platform" not in [e.name for e in recent]
