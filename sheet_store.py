"""Workbook-backed tabular store (openpyxl) with 1-based range access."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from openpyxl import Workbook, load_workbook
from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE
from openpyxl.styles import Font, PatternFill
from openpyxl.worksheet.worksheet import Worksheet

LOGGER = logging.getLogger(__name__)


class SheetStore:
    """One worksheet addressed by 1-based (row, column) ranges.

    Writes stay in memory until save(), so an aborted run never leaves a
    half-written range on disk.
    """

    def __init__(self, workbook: Workbook, worksheet: Worksheet, path: str | Path | None = None) -> None:
        self.workbook = workbook
        self.worksheet = worksheet
        self.path = Path(path) if path is not None else None
        self.dirty = False

    @property
    def name(self) -> str:
        return self.worksheet.title

    def last_row(self) -> int:
        """Index of the last row holding a value, 0 for an empty sheet."""
        last = 0
        for index, row in enumerate(self.worksheet.iter_rows(values_only=True), start=1):
            if any(not _is_blank(value) for value in row):
                last = index
        return last

    def last_column(self) -> int:
        """Index of the last column holding a value, 0 for an empty sheet."""
        last = 0
        for index, column in enumerate(self.worksheet.iter_cols(values_only=True), start=1):
            if any(not _is_blank(value) for value in column):
                last = index
        return last

    def get_values(self, row: int, column: int, num_rows: int, num_columns: int) -> list[list[Any]]:
        if num_rows < 1 or num_columns < 1:
            return []
        return [
            list(values)
            for values in self.worksheet.iter_rows(
                min_row=row,
                max_row=row + num_rows - 1,
                min_col=column,
                max_col=column + num_columns - 1,
                values_only=True,
            )
        ]

    def set_values(self, row: int, column: int, values: list[list[Any]]) -> None:
        """Write a rectangular block whose top-left cell is (row, column)."""
        widths = {len(line) for line in values}
        if len(widths) > 1:
            raise ValueError(f"Range rows must share one width, got {sorted(widths)}")

        for row_offset, line in enumerate(values):
            for col_offset, value in enumerate(line):
                self.worksheet.cell(
                    row=row + row_offset,
                    column=column + col_offset,
                    value=sanitize_cell_value(value),
                )
        self.dirty = True

    def set_font_weight(self, row: int, column: int, weight: str) -> None:
        self.worksheet.cell(row=row, column=column).font = Font(bold=weight == "bold")
        self.dirty = True

    def set_background(self, row: int, column: int, num_rows: int, num_columns: int, color: str) -> None:
        rgb = color.lstrip("#").upper()
        fill = PatternFill(start_color=rgb, end_color=rgb, fill_type="solid")
        for r in range(row, row + num_rows):
            for c in range(column, column + num_columns):
                self.worksheet.cell(row=r, column=c).fill = fill
        self.dirty = True

    def save(self) -> None:
        """Persist the workbook; in-memory stores (no path) are left as-is."""
        if self.path is None:
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.workbook.save(self.path)
        self.dirty = False
        LOGGER.info("Saved workbook to %s", self.path)


def open_sheet(path: str | Path, sheet_name: str) -> SheetStore:
    """Load the workbook at path and return the named sheet, creating either if absent."""
    workbook_path = Path(path)
    created = False
    if workbook_path.exists():
        workbook = load_workbook(workbook_path)
    else:
        LOGGER.info("Workbook %s not found. Creating it...", workbook_path)
        workbook = Workbook()
        created = True

    return _sheet_from_workbook(workbook, sheet_name, workbook_path, created)


def memory_sheet(sheet_name: str = "Sheet1") -> SheetStore:
    """Return a store backed by a fresh in-memory workbook (never saved).

    Used by the tests and for dry runs that must not touch a workbook on disk.
    """
    return _sheet_from_workbook(Workbook(), sheet_name, None, created=True)


def sanitize_cell_value(value: Any) -> Any:
    """Strip the control characters openpyxl refuses to store in a cell."""
    if not isinstance(value, str):
        return value
    return ILLEGAL_CHARACTERS_RE.sub("", value)


def _sheet_from_workbook(
    workbook: Workbook,
    sheet_name: str,
    path: Path | None,
    created: bool,
) -> SheetStore:
    if sheet_name in workbook.sheetnames:
        store = SheetStore(workbook, workbook[sheet_name], path)
        store.dirty = created
        return store

    if created:
        # A brand-new workbook carries one empty default sheet; reuse it.
        worksheet = workbook.active
        worksheet.title = sheet_name
    else:
        LOGGER.info('Sheet "%s" not found. Creating it...', sheet_name)
        worksheet = workbook.create_sheet(title=sheet_name)

    store = SheetStore(workbook, worksheet, path)
    store.dirty = True
    return store


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value == "")
