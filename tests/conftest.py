"""Common fixtures for cell editing tests."""
from __future__ import annotations

import logging
from typing import Callable, Iterator

import pytest
from prometheus_client import CollectorRegistry

from richcell.cache import CoordinateCache
from richcell.config import get_settings
from richcell.contracts import Coordinate
from richcell.metrics import EditorMetrics
from richcell.stores.memory import InMemoryCellStore

A1 = Coordinate(1, 1)
B2 = Coordinate(2, 2)
C3 = Coordinate(3, 3)


@pytest.fixture
def cache() -> CoordinateCache:
    return CoordinateCache(capacity=50)


@pytest.fixture
def store() -> InMemoryCellStore:
    return InMemoryCellStore()


@pytest.fixture
def metrics() -> EditorMetrics:
    return EditorMetrics(registry=CollectorRegistry())


@pytest.fixture
def column_cells() -> Callable[[int], list[Coordinate]]:
    def _build(count: int) -> list[Coordinate]:
        return [Coordinate(row, 1) for row in range(1, count + 1)]

    return _build


@pytest.fixture
def clean_settings(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    for name in (
        "RICHCELL_CACHE_CAPACITY",
        "RICHCELL_WORKBOOK",
        "RICHCELL_SHEET",
        "RICHCELL_TEMPLATES",
        "RICHCELL_LOG_LEVEL",
        "RICHCELL_LOG_JSON",
    ):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def restore_root_logging() -> Iterator[None]:
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    for handler in list(root.handlers):
        if handler not in handlers and type(handler) is logging.StreamHandler:
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)
