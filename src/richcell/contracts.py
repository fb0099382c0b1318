"""Core contracts: coordinates, updates and the cell store protocol."""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Protocol, Sequence, runtime_checkable

_A1_PATTERN = re.compile(r"^\s*([A-Za-z]{1,3})([1-9][0-9]*)\s*$")


def _column_letters(column: int) -> str:
    letters = ""
    while column > 0:
        column, remainder = divmod(column - 1, 26)
        letters = chr(ord("A") + remainder) + letters
    return letters


@dataclass(frozen=True, slots=True)
class Coordinate:
    """One-based (row, column) address of a single cell."""

    row: int
    column: int

    def __post_init__(self) -> None:
        for label, value in (("row", self.row), ("column", self.column)):
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"{label} must be an integer, got {value!r}")
            if value < 1:
                raise ValueError(f"{label} must be positive, got {value}")

    @classmethod
    def from_a1(cls, reference: str) -> "Coordinate":
        """Parse an A1-style reference such as ``"B3"``."""

        match = _A1_PATTERN.match(reference or "")
        if match is None:
            raise ValueError(f"invalid cell reference: {reference!r}")
        letters, digits = match.groups()
        column = 0
        for char in letters.upper():
            column = column * 26 + (ord(char) - ord("A") + 1)
        return cls(row=int(digits), column=column)

    @property
    def a1(self) -> str:
        return f"{_column_letters(self.column)}{self.row}"

    def __str__(self) -> str:  # pragma: no cover - trivial
        return self.a1


@dataclass(frozen=True, slots=True)
class EditUpdate:
    """Instruction to replace the content of one cell."""

    coordinate: Coordinate
    content: str


@dataclass(frozen=True, slots=True)
class BatchResult:
    applied_count: int


@runtime_checkable
class CellStore(Protocol):
    """Narrow capability set consumed from the host document."""

    def read_cell(self, coordinate: Coordinate) -> str:
        """Return the raw text stored at *coordinate*."""

    def write_cell(self, coordinate: Coordinate, text: str) -> None:
        """Store *text* at *coordinate* or raise ``StoreWriteError``."""

    def read_cells(self, coordinates: Sequence[Coordinate]) -> List[str]:
        """Return raw texts in the same order as *coordinates*."""

    def set_recalculation_suspended(self, suspended: bool) -> None:
        """Pause or resume dependent recalculation; idempotent."""

    def is_recalculation_suspended(self) -> bool:
        """Report whether recalculation is currently paused."""

    def flush(self) -> None:
        """Block until previously issued writes are durable."""


__all__ = ["BatchResult", "CellStore", "Coordinate", "EditUpdate"]
