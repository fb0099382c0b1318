"""Cell store adapters."""
from __future__ import annotations

from .memory import InMemoryCellStore
from .workbook import WorkbookCellStore

__all__ = ["InMemoryCellStore", "WorkbookCellStore"]
