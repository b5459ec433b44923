"""Tests for permission_search.filters."""

import random

import pytest

from permission_search.filters import apply_filters, matches_filters
from permission_search.indexer import build_index
from permission_search.models import PermissionRecord, SearchFilters

from conftest import make_record


class TestSetFilters:
    def test_empty_filters_pass_everything(self, hotel_index):
        assert apply_filters(hotel_index, SearchFilters()) == hotel_index

    def test_resource_filter(self, hotel_index):
        results = apply_filters(hotel_index, SearchFilters(resources={"document"}))

        assert [e.name for e in results] == ["document.read.property", "document.create.department"]

    def test_filters_combine_with_and(self, hotel_index):
        filters = SearchFilters(resources={"user", "vacation"}, actions={"read"})
        names = [e.name for e in apply_filters(hotel_index, filters)]

        assert names == ["user.read.department", "vacation.read.own"]

    def test_category_and_scope(self, hotel_index):
        filters = SearchFilters(categories={"HR"}, scopes={"own"})
        names = {e.name for e in apply_filters(hotel_index, filters)}

        assert names == {"vacation.read.own", "payslip.read.own"}

    def test_unknown_value_excludes_everything(self, hotel_index):
        assert apply_filters(hotel_index, SearchFilters(resources={"spaceship"})) == []


class TestFilterValues:
    def test_bare_string_is_one_value(self, hotel_index):
        filters = SearchFilters(resources="document", scopes="")

        assert filters.resources == frozenset({"document"})
        assert filters.scopes == frozenset()
        assert len(apply_filters(hotel_index, filters)) == 2

    def test_merged_string_value(self):
        filters = SearchFilters().merged(categories="HR")
        assert filters.categories == frozenset({"HR"})


class TestFlagFilters:
    def test_exclude_conditional(self, hotel_index):
        filters = SearchFilters(include_conditional_permissions=False)
        names = [e.name for e in apply_filters(hotel_index, filters)]

        assert "reservation.update.property" not in names
        assert len(names) == len(hotel_index) - 1

    def test_exclude_system(self, hotel_index):
        # Every catalog permission is a system permission
        assert apply_filters(hotel_index, SearchFilters(include_system_permissions=False)) == []

    def test_exclude_system_keeps_custom(self):
        records = [
            make_record("user", "read"),
            PermissionRecord(id="c1", resource="task", action="read", scope="own", is_system=False),
        ]
        filters = SearchFilters(include_system_permissions=False)
        assert [e.id for e in apply_filters(build_index(records), filters)] == ["c1"]

    def test_popularity_threshold(self, hotel_index):
        results = apply_filters(hotel_index, SearchFilters(popularity_threshold=85))

        assert results
        assert all(e.popularity >= 85 for e in results)

    def test_zero_threshold_is_active(self, hotel_index):
        assert apply_filters(hotel_index, SearchFilters(popularity_threshold=0)) == hotel_index


class TestRandomizedFilters:
    """Check the filter invariants over randomly generated catalogs and filters."""

    RESOURCES = ["user", "document", "vacation", "task", "guest", "audit"]
    ACTIONS = ["create", "read", "update", "delete", "approve"]
    SCOPES = ["own", "department", "property"]

    @pytest.mark.parametrize("seed", range(10))
    def test_results_are_ordered_subset_satisfying_filters(self, seed):
        rng = random.Random(seed)
        records = [
            make_record(
                rng.choice(self.RESOURCES),
                rng.choice(self.ACTIONS),
                rng.choice(self.SCOPES),
                conditions={"x": 1} if rng.random() < 0.3 else None,
                record_id=str(i),
            )
            for i in range(40)
        ]
        index = build_index(records)
        filters = SearchFilters(
            resources=rng.sample(self.RESOURCES, rng.randint(0, 3)),
            actions=rng.sample(self.ACTIONS, rng.randint(0, 2)),
            include_conditional_permissions=rng.random() < 0.5,
            popularity_threshold=rng.choice([None, 50, 80]),
        )

        results = apply_filters(index, filters)

        positions = [index.index(e) for e in results]
        assert positions == sorted(positions)
        for entry in results:
            assert not filters.resources or entry.resource in filters.resources
            assert not filters.actions or entry.action in filters.actions
            assert filters.include_conditional_permissions or not entry.is_conditional
            if filters.popularity_threshold is not None:
                assert entry.popularity >= filters.popularity_threshold
        for entry in index:
            if entry not in results:
                assert not matches_filters(entry, filters)
