"""Tests for permission_search.ranker."""

import pytest

from permission_search.ranker import comparator_for, group_by_category, rank

from conftest import make_result


def names(results):
    return [r.permission.name for r in results]


class TestRelevance:
    def test_descending_by_default(self):
        results = [make_result("a", 0.2), make_result("b", 0.9), make_result("c", 0.5)]
        assert names(rank(results)) == ["b", "c", "a"]

    def test_ascending(self):
        results = [make_result("a", 0.2), make_result("b", 0.9), make_result("c", 0.5)]
        assert names(rank(results, sort_order="asc")) == ["a", "c", "b"]

    def test_ties_keep_input_order(self):
        results = [make_result("x", 0.5), make_result("y", 0.5), make_result("z", 0.5)]
        assert names(rank(results)) == ["x", "y", "z"]

    def test_truncates_to_max_results(self):
        results = [make_result(str(i), i / 100) for i in range(60)]
        ranked = rank(results, max_results=50)

        assert len(ranked) == 50
        assert ranked[0].score == 0.59

    def test_does_not_mutate_input(self):
        results = [make_result("a", 0.2), make_result("b", 0.9)]
        rank(results)
        assert names(results) == ["a", "b"]


class TestAlphabetical:
    def test_case_insensitive(self):
        results = [
            make_result("1", 0.1, display_name="beta"),
            make_result("2", 0.1, display_name="Alpha"),
            make_result("3", 0.1, display_name="Gamma"),
        ]
        ranked = rank(results, sort_by="alphabetical", sort_order="asc")
        assert [r.permission.display_name for r in ranked] == ["Alpha", "beta", "Gamma"]

    def test_descending(self):
        results = [
            make_result("1", 0.1, display_name="beta"),
            make_result("2", 0.1, display_name="Alpha"),
        ]
        ranked = rank(results, sort_by="alphabetical", sort_order="desc")
        assert [r.permission.display_name for r in ranked] == ["beta", "Alpha"]


class TestCategory:
    def test_groups_categories_with_score_descending_within(self):
        results = [
            make_result("hr-low", 0.2, category="HR"),
            make_result("admin", 0.5, category="Admin"),
            make_result("hr-high", 0.8, category="HR"),
        ]
        ranked = rank(results, sort_by="category", sort_order="asc")
        assert names(ranked) == ["admin", "hr-high", "hr-low"]

    def test_descending_categories_keep_score_descending(self):
        results = [
            make_result("hr-low", 0.2, category="HR"),
            make_result("admin", 0.5, category="Admin"),
            make_result("hr-high", 0.8, category="HR"),
        ]
        ranked = rank(results, sort_by="category", sort_order="desc")
        assert names(ranked) == ["hr-high", "hr-low", "admin"]


class TestPopularity:
    def test_desc_puts_most_popular_first(self):
        results = [
            make_result("mid", 0.1, popularity=50),
            make_result("high", 0.1, popularity=90),
            make_result("low", 0.1, popularity=25),
        ]
        assert names(rank(results, sort_by="popularity", sort_order="desc")) == ["high", "mid", "low"]

    def test_asc_puts_least_popular_first(self):
        results = [
            make_result("mid", 0.1, popularity=50),
            make_result("high", 0.1, popularity=90),
            make_result("low", 0.1, popularity=25),
        ]
        assert names(rank(results, sort_by="popularity", sort_order="asc")) == ["low", "mid", "high"]


class TestComparatorSelection:
    def test_unknown_mode_falls_back_to_relevance(self):
        a, b = make_result("a", 0.2), make_result("b", 0.9)
        compare = comparator_for("nonsense", "desc")  # type: ignore[arg-type]
        assert compare(a, b) > 0

    @pytest.mark.parametrize("sort_by", ["relevance", "alphabetical", "category", "popularity"])
    def test_every_mode_returns_all_results(self, sort_by):
        results = [make_result(str(i), i / 10, popularity=i * 10) for i in range(5)]
        assert len(rank(results, sort_by=sort_by)) == 5


class TestGroupByCategory:
    def test_keeps_rank_order_inside_groups(self):
        results = [
            make_result("a", 0.9, category="HR"),
            make_result("b", 0.8, category="Admin"),
            make_result("c", 0.7, category="HR"),
        ]
        groups = group_by_category(results)

        assert list(groups) == ["HR", "Admin"]
        assert names(groups["HR"]) == ["a", "c"]

    def test_empty(self):
        assert group_by_category([]) == {}
