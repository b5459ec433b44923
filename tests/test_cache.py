"""Tests for permission_search.cache."""

from permission_search.cache import ResultCache, cache_key
from permission_search.models import SearchFilters

from conftest import make_result


class TestCacheKey:
    def test_member_order_does_not_matter(self):
        a = SearchFilters(resources=["user", "document"], scopes=["own", "department"])
        b = SearchFilters(resources=["document", "user"], scopes=["department", "own"])
        assert cache_key("staff", a) == cache_key("staff", b)

    def test_different_filters_different_keys(self):
        assert cache_key("staff", SearchFilters()) != cache_key(
            "staff", SearchFilters(resources={"user"})
        )

    def test_different_queries_different_keys(self):
        assert cache_key("staff", SearchFilters()) != cache_key("staf", SearchFilters())

    def test_key_starts_with_query(self):
        assert cache_key("approve", SearchFilters()).startswith("approve_{")


class TestResultCache:
    def test_miss_then_hit(self):
        cache = ResultCache()
        filters = SearchFilters()
        results = [make_result("a", 0.5)]

        assert cache.get("a", filters) is None
        cache.put("a", filters, results)

        assert cache.get("a", filters) == results
        assert (cache.hits, cache.misses) == (1, 1)

    def test_get_returns_copy(self):
        cache = ResultCache()
        cache.put("a", SearchFilters(), [make_result("a", 0.5)])

        cache.get("a", SearchFilters()).clear()
        assert len(cache.get("a", SearchFilters())) == 1

    def test_cached_empty_list_is_a_hit(self):
        cache = ResultCache()
        cache.put("zzz", SearchFilters(), [])
        assert cache.get("zzz", SearchFilters()) == []

    def test_invalidate_all(self):
        cache = ResultCache()
        cache.put("a", SearchFilters(), [])
        cache.put("b", SearchFilters(), [])

        cache.invalidate_all()

        assert len(cache) == 0
        assert cache.get("a", SearchFilters()) is None

    def test_unbounded_by_default(self):
        cache = ResultCache()
        for i in range(500):
            cache.put(str(i), SearchFilters(), [])
        assert len(cache) == 500

    def test_lru_eviction(self):
        cache = ResultCache(max_entries=2)
        filters = SearchFilters()
        cache.put("a", filters, [])
        cache.put("b", filters, [])
        cache.get("a", filters)
        cache.put("c", filters, [])

        assert cache.get("b", filters) is None
        assert cache.get("a", filters) == []
        assert cache.get("c", filters) == []
