from __future__ import annotations

"""Runtime settings for the rich cell editor."""

import logging
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .cache import DEFAULT_CAPACITY

_LEVEL_NAMES = frozenset({"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"})


class RichCellSettings(BaseSettings):
    """Settings read from ``RICHCELL_*`` environment variables or ``.env``."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore", populate_by_name=True)

    cache_capacity: int = Field(DEFAULT_CAPACITY, ge=1, alias="RICHCELL_CACHE_CAPACITY")
    workbook: Optional[Path] = Field(None, alias="RICHCELL_WORKBOOK")
    sheet: Optional[str] = Field(None, min_length=1, alias="RICHCELL_SHEET")
    templates_path: Path = Field(Path("richcell_templates.json"), alias="RICHCELL_TEMPLATES")
    log_level: str = Field("INFO", alias="RICHCELL_LOG_LEVEL")
    log_json: bool = Field(False, alias="RICHCELL_LOG_JSON")

    @field_validator("log_level")
    @classmethod
    def _normalize_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in _LEVEL_NAMES:
            raise ValueError(f"unknown log level: {value!r}")
        return level

    @property
    def log_level_number(self) -> int:
        return logging.getLevelName(self.log_level)


@lru_cache(maxsize=1)
def get_settings(**overrides: object) -> RichCellSettings:
    """Return cached settings object with optional overrides for tests."""

    if overrides:
        return RichCellSettings(**overrides)
    return RichCellSettings()


__all__ = ["RichCellSettings", "get_settings"]
