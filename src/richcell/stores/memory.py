"""Dictionary backed cell store used by tests and embedding hosts."""
from __future__ import annotations

from typing import Dict, Iterable, List, Mapping, Sequence, Tuple

from ..contracts import Coordinate
from ..errors import StoreReadError, StoreWriteError


class InMemoryCellStore:
    """Cell store keeping values in a dict and journaling every call.

    ``fail_reads``/``fail_writes`` name coordinates whose read or write
    raises, and ``fail_flush``/``fail_resume`` make the matching capability
    raise, which lets callers exercise failure paths.
    """

    def __init__(
        self,
        cells: Mapping[Coordinate, str] | None = None,
        *,
        fail_reads: Iterable[Coordinate] = (),
        fail_writes: Iterable[Coordinate] = (),
        fail_flush: bool = False,
        fail_resume: bool = False,
    ) -> None:
        self.cells: Dict[Coordinate, str] = dict(cells or {})
        self.durable: Dict[Coordinate, str] = dict(self.cells)
        self.fail_reads = set(fail_reads)
        self.fail_writes = set(fail_writes)
        self.fail_flush = fail_flush
        self.fail_resume = fail_resume
        self.recalculation_suspended = False
        self.flush_count = 0
        self.calls: List[Tuple[str, object]] = []

    def read_cell(self, coordinate: Coordinate) -> str:
        self.calls.append(("read_cell", coordinate))
        if coordinate in self.fail_reads:
            raise StoreReadError(f"read of {coordinate.a1} refused", details={"cell": coordinate.a1})
        return self.cells.get(coordinate, "")

    def read_cells(self, coordinates: Sequence[Coordinate]) -> List[str]:
        self.calls.append(("read_cells", tuple(coordinates)))
        values: List[str] = []
        for coordinate in coordinates:
            if coordinate in self.fail_reads:
                raise StoreReadError(f"read of {coordinate.a1} refused", details={"cell": coordinate.a1})
            values.append(self.cells.get(coordinate, ""))
        return values

    def write_cell(self, coordinate: Coordinate, text: str) -> None:
        self.calls.append(("write_cell", coordinate))
        if coordinate in self.fail_writes:
            raise StoreWriteError(f"write to {coordinate.a1} refused", details={"cell": coordinate.a1})
        self.cells[coordinate] = text

    def set_recalculation_suspended(self, suspended: bool) -> None:
        self.calls.append(("set_recalculation_suspended", suspended))
        if not suspended and self.fail_resume:
            raise RuntimeError("recalculation could not be resumed")
        self.recalculation_suspended = suspended

    def is_recalculation_suspended(self) -> bool:
        return self.recalculation_suspended

    def flush(self) -> None:
        self.calls.append(("flush", None))
        if self.fail_flush:
            raise StoreWriteError("flush refused")
        self.flush_count += 1
        self.durable = dict(self.cells)

    def call_names(self) -> List[str]:
        return [name for name, _ in self.calls]


__all__ = ["InMemoryCellStore"]
