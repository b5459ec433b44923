"""Tests for permission_search.catalog."""

import json

import pytest

from permission_search.catalog import (
    JsonFileCatalogProvider,
    StaticCatalogProvider,
    parse_catalog,
)
from permission_search.errors import CatalogLoadError
from permission_search.models import PermissionRecord


class TestParseCatalog:
    def test_list_of_records(self):
        records = parse_catalog(
            [{"id": 1, "resource": "user", "action": "read", "scope": "own", "extra": True}]
        )

        assert records == [
            PermissionRecord(id="1", resource="user", action="read", scope="own")
        ]

    def test_summary_dict(self):
        data = {
            "permissions": [{"id": "a", "resource": "user", "action": "read", "scope": "own"}],
            "total": 1,
        }
        assert len(parse_catalog(data)) == 1

    @pytest.mark.parametrize("data", [None, "users", {"items": []}, 42])
    def test_not_a_list(self, data):
        with pytest.raises(CatalogLoadError):
            parse_catalog(data)

    def test_invalid_record(self):
        with pytest.raises(CatalogLoadError, match="Invalid permission record"):
            parse_catalog([{"id": "a", "resource": "", "action": "read", "scope": "own"}])


class TestStaticCatalogProvider:
    @pytest.mark.asyncio
    async def test_returns_copy_and_counts_fetches(self):
        provider = StaticCatalogProvider(
            [{"id": "a", "resource": "user", "action": "read", "scope": "own"}]
        )

        first = await provider.fetch_permissions()
        first.clear()
        second = await provider.fetch_permissions()

        assert len(second) == 1
        assert provider.fetch_count == 2


class TestJsonFileCatalogProvider:
    @pytest.mark.asyncio
    async def test_reads_file(self, tmp_path):
        path = tmp_path / "catalog.json"
        path.write_text(
            json.dumps([{"id": "a", "resource": "document", "action": "create", "scope": "own"}])
        )

        records = await JsonFileCatalogProvider(path).fetch_permissions()
        assert records[0].resource == "document"

    @pytest.mark.asyncio
    async def test_missing_file(self, tmp_path):
        with pytest.raises(CatalogLoadError, match="Could not read catalog"):
            await JsonFileCatalogProvider(tmp_path / "nope.json").fetch_permissions()

    @pytest.mark.asyncio
    async def test_invalid_json(self, tmp_path):
        path = tmp_path / "catalog.json"
        path.write_text("[{")
        with pytest.raises(CatalogLoadError):
            await JsonFileCatalogProvider(path).fetch_permissions()
