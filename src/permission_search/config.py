"""Configuration for permission search.

Settings come from three layers, later layers winning:

  1. Field defaults below
  2. ``config.json`` in the data directory (written by ConfigManager)
  3. ``PERMISSION_SEARCH_*`` environment variables
"""

import json
import os
from pathlib import Path
from typing import Any, Literal, Optional

from loguru import logger
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from permission_search.models import SearchOptions

DATA_DIR_NAME = ".permission-search"
CONFIG_FILE_NAME = "config.json"
STORE_FILE_NAME = "searches.json"


def default_data_dir() -> Path:
    home = os.getenv("PERMISSION_SEARCH_HOME")
    return Path(home) if home else Path.home() / DATA_DIR_NAME


class PermissionSearchConfig(BaseSettings):
    """Search engine settings."""

    model_config = SettingsConfigDict(
        env_prefix="PERMISSION_SEARCH_",
        extra="ignore",
    )

    max_results: int = Field(default=50, ge=1, description="Results kept after ranking")
    min_score: float = Field(default=0.1, ge=0.0, le=1.0, description="Scores below are dropped")
    sort_by: Literal["relevance", "alphabetical", "category", "popularity"] = "relevance"
    sort_order: Literal["asc", "desc"] = "desc"
    debounce_ms: int = Field(default=300, ge=0, description="Delay between keystroke and search")
    enable_cache: bool = True
    enable_history: bool = True
    history_limit: int = Field(default=20, ge=1)
    popular_limit: int = Field(default=10, ge=0)
    recent_limit: int = Field(default=8, ge=0)
    cache_max_entries: Optional[int] = Field(
        default=None, ge=1, description="LRU bound for the result cache; None is unbounded"
    )
    context: str = "generic"
    log_level: str = "INFO"
    data_dir: Path = Field(default_factory=default_data_dir)

    @field_validator("log_level")
    @classmethod
    def _upper_log_level(cls, value: str) -> str:
        return value.upper()

    @property
    def debounce_seconds(self) -> float:
        return self.debounce_ms / 1000

    @property
    def store_path(self) -> Path:
        return self.data_dir / STORE_FILE_NAME

    def search_options(self) -> SearchOptions:
        return SearchOptions(
            max_results=self.max_results,
            min_score=self.min_score,
            sort_by=self.sort_by,
            sort_order=self.sort_order,
        )


class ConfigManager:
    """Loads and saves ``config.json``; environment variables still take precedence."""

    def __init__(self, data_dir: Optional[Path] = None):
        self.data_dir = Path(data_dir) if data_dir else default_data_dir()
        self.config_file = self.data_dir / CONFIG_FILE_NAME

    @property
    def config(self) -> PermissionSearchConfig:
        return self.load_config()

    def _file_values(self) -> dict[str, Any]:
        if not self.config_file.exists():
            return {}
        try:
            return json.loads(self.config_file.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable config file {self.config_file}: {e}")
            return {}

    def load_config(self) -> PermissionSearchConfig:
        # Environment variables override values from the file
        values = {
            key: value
            for key, value in self._file_values().items()
            if f"PERMISSION_SEARCH_{key.upper()}" not in os.environ
        }
        if "PERMISSION_SEARCH_DATA_DIR" not in os.environ:
            values.setdefault("data_dir", self.data_dir)
        return PermissionSearchConfig(**values)

    def save_config(self, config: PermissionSearchConfig) -> None:
        self.data_dir.mkdir(parents=True, exist_ok=True)
        data = config.model_dump(mode="json", exclude={"data_dir"})
        self.config_file.write_text(json.dumps(data, indent=2), encoding="utf-8")
