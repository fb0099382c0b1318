"""Sanitized rich-content editing for spreadsheet cells."""
from __future__ import annotations

from .batch import BatchWriter
from .cache import CoordinateCache
from .contracts import BatchResult, CellStore, Coordinate, EditUpdate
from .errors import BatchWriteError, RichCellError, StoreReadError, StoreWriteError, TemplateNotFoundError
from .sanitizer import ALLOWED_TAGS, is_allowed_tag, sanitize
from .session import EditSession

__all__ = [
    "ALLOWED_TAGS",
    "BatchResult",
    "BatchWriteError",
    "BatchWriter",
    "CellStore",
    "Coordinate",
    "CoordinateCache",
    "EditSession",
    "EditUpdate",
    "RichCellError",
    "StoreReadError",
    "StoreWriteError",
    "TemplateNotFoundError",
    "is_allowed_tag",
    "sanitize",
]
