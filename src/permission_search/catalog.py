"""Catalog providers.

A provider has one operation, ``fetch_permissions()``, awaited on session start
and on every refresh. Any exception it raises is surfaced by the session as a
catalog load error.
"""

import json
from pathlib import Path
from typing import Any, Iterable, Protocol, Union

import aiofiles
from pydantic import ValidationError

from permission_search.errors import CatalogLoadError
from permission_search.models import PermissionRecord


class CatalogProvider(Protocol):
    async def fetch_permissions(self) -> list[PermissionRecord]: ...


def parse_catalog(data: Any) -> list[PermissionRecord]:
    """Validate raw catalog data.

    Accepts a list of records or a permission summary dict with a
    ``permissions`` list.

    Raises:
        CatalogLoadError: If the data does not describe a list of permissions.
    """
    if isinstance(data, dict):
        data = data.get("permissions")
    if not isinstance(data, list):
        raise CatalogLoadError("Catalog must be a list of permissions")

    try:
        return [PermissionRecord.model_validate(item) for item in data]
    except ValidationError as e:
        raise CatalogLoadError(f"Invalid permission record: {e}") from e


class StaticCatalogProvider:
    """Serves a fixed in-memory catalog."""

    def __init__(self, records: Iterable[Union[PermissionRecord, dict]]):
        self.records = [
            r if isinstance(r, PermissionRecord) else PermissionRecord.model_validate(r)
            for r in records
        ]
        self.fetch_count = 0

    async def fetch_permissions(self) -> list[PermissionRecord]:
        self.fetch_count += 1
        return list(self.records)


class JsonFileCatalogProvider:
    """Reads the catalog from a JSON file on every fetch."""

    def __init__(self, path: Union[Path, str]):
        self.path = Path(path)

    async def fetch_permissions(self) -> list[PermissionRecord]:
        try:
            async with aiofiles.open(self.path, mode="r", encoding="utf-8") as f:
                data = json.loads(await f.read())
        except (OSError, ValueError) as e:
            raise CatalogLoadError(f"Could not read catalog {self.path}: {e}") from e
        return parse_catalog(data)
