"""openpyxl backed cell store for ``.xlsx`` workbooks."""
from __future__ import annotations

import logging
from io import BytesIO
from pathlib import Path
from typing import List, Optional, Sequence
from zipfile import BadZipFile

from openpyxl import Workbook, load_workbook
from openpyxl.utils.exceptions import IllegalCharacterError, InvalidFileException
from openpyxl.workbook.properties import CalcProperties
from openpyxl.worksheet.worksheet import Worksheet

from ..contracts import Coordinate
from ..errors import StoreReadError, StoreWriteError
from ..io_utils import write_atomic

logger = logging.getLogger(__name__)

MANUAL_CALC_MODE = "manual"
_UNSET = object()


class WorkbookCellStore:
    """Cell store over one worksheet of a workbook on disk.

    Recalculation suspension switches the workbook calculation mode to
    ``manual`` and back. Writes stay in memory until :meth:`flush`, which
    replaces the file atomically.
    """

    def __init__(self, path: Path, *, sheet: Optional[str] = None) -> None:
        self.path = Path(path)
        self.workbook = self._open(self.path)
        self.worksheet = self._select_sheet(sheet)
        if self.workbook.calculation is None:
            self.workbook.calculation = CalcProperties()
        self._resume_mode: object = _UNSET
        self._suspended = self.workbook.calculation.calcMode == MANUAL_CALC_MODE

    @staticmethod
    def _open(path: Path) -> Workbook:
        if not path.exists():
            return Workbook()
        try:
            return load_workbook(path)
        except (OSError, BadZipFile, InvalidFileException, KeyError, ValueError) as exc:
            raise StoreReadError(
                f"cannot open workbook {path}",
                details={"path": str(path), "cause": repr(exc)},
            ) from exc

    def _select_sheet(self, sheet: Optional[str]) -> Worksheet:
        if sheet is None:
            worksheet = self.workbook.active
            if worksheet is None:
                worksheet = self.workbook.create_sheet()
            return worksheet
        if sheet in self.workbook.sheetnames:
            return self.workbook[sheet]
        logger.info("workbook.sheet_created", extra={"sheet": sheet, "path": str(self.path)})
        return self.workbook.create_sheet(title=sheet)

    def read_cell(self, coordinate: Coordinate) -> str:
        if coordinate.row > self.worksheet.max_row or coordinate.column > self.worksheet.max_column:
            return ""
        value = self.worksheet.cell(row=coordinate.row, column=coordinate.column).value
        if value is None:
            return ""
        return value if isinstance(value, str) else str(value)

    def read_cells(self, coordinates: Sequence[Coordinate]) -> List[str]:
        return [self.read_cell(coordinate) for coordinate in coordinates]

    def write_cell(self, coordinate: Coordinate, text: str) -> None:
        try:
            cell = self.worksheet.cell(row=coordinate.row, column=coordinate.column)
            cell.value = text
        except (IllegalCharacterError, ValueError) as exc:
            raise StoreWriteError(
                f"cannot store value in {coordinate.a1}",
                details={"cell": coordinate.a1, "cause": repr(exc)},
            ) from exc
        # Content starting with "=" must stay text, never a formula.
        cell.data_type = "s"

    def set_recalculation_suspended(self, suspended: bool) -> None:
        if suspended == self._suspended:
            return
        calculation = self.workbook.calculation
        if suspended:
            self._resume_mode = calculation.calcMode
            calculation.calcMode = MANUAL_CALC_MODE
        else:
            calculation.calcMode = None if self._resume_mode is _UNSET else self._resume_mode
            self._resume_mode = _UNSET
        self._suspended = suspended

    def is_recalculation_suspended(self) -> bool:
        return self._suspended

    def flush(self) -> None:
        calculation = self.workbook.calculation
        current_mode = calculation.calcMode
        if self._resume_mode is not _UNSET:
            # The file on disk never records a suspension made by this store.
            calculation.calcMode = self._resume_mode
        buffer = BytesIO()
        try:
            self.workbook.save(buffer)
            write_atomic(self.path, buffer.getvalue())
        except OSError as exc:
            raise StoreWriteError(
                f"cannot save workbook {self.path}",
                details={"path": str(self.path), "cause": repr(exc)},
            ) from exc
        finally:
            calculation.calcMode = current_mode
        logger.debug("workbook.flushed", extra={"path": str(self.path)})


__all__ = ["MANUAL_CALC_MODE", "WorkbookCellStore"]
