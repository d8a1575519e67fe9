"""Spreadsheet side of the converter: column reconciliation, writing and reading."""

from .columns import reconcile_columns
from .reader import read_grid, read_sheets, read_workbook
from .writer import assign_sheet_titles, build_grid, build_grids, sheet_title, write_workbook

__all__ = [
    "assign_sheet_titles",
    "build_grid",
    "build_grids",
    "read_grid",
    "read_sheets",
    "read_workbook",
    "reconcile_columns",
    "sheet_title",
    "write_workbook",
]
