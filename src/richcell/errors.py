"""Error taxonomy for cell store and batch write failures."""
from __future__ import annotations

from typing import Mapping


class RichCellError(RuntimeError):
    """Base error carrying a machine readable code and context details."""

    code = "RICHCELL_ERROR"

    def __init__(self, message: str, *, details: Mapping[str, object] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details: dict[str, object] = dict(details or {})

    def __str__(self) -> str:  # pragma: no cover - trivial
        return f"{self.code}: {self.message}"


class StoreReadError(RichCellError):
    """The cell store could not read a coordinate."""

    code = "STORE_READ_FAILED"


class StoreWriteError(RichCellError):
    """The cell store rejected or failed a write."""

    code = "STORE_WRITE_FAILED"


class BatchWriteError(RichCellError):
    """One update of a batch failed; carries how many were applied before it."""

    code = "BATCH_WRITE_FAILED"

    def __init__(
        self,
        message: str,
        *,
        applied_count: int,
        details: Mapping[str, object] | None = None,
    ) -> None:
        super().__init__(message, details=details)
        self.applied_count = applied_count


class TemplateNotFoundError(RichCellError):
    code = "TEMPLATE_NOT_FOUND"

    def __init__(self, name: str) -> None:
        super().__init__(f"template {name!r} does not exist", details={"name": name})
        self.name = name


__all__ = [
    "BatchWriteError",
    "RichCellError",
    "StoreReadError",
    "StoreWriteError",
    "TemplateNotFoundError",
]
