from __future__ import annotations

from dataclasses import dataclass, field

from .errors import SchemaMismatch
from .row_group import RowRecord

"""Spreadsheet-facing models.

WorksheetGrid: what the writer produces (header row + aligned data rows).
SheetData: what the grid reader produces for one worksheet.
"""

__all__ = [
    "WorksheetGrid",
    "SheetData",
]


@dataclass(frozen=True)
class WorksheetGrid:
    """1-indexed grid of cell text. Row 1 is the header, blank cells are ``None``."""
    title: str
    header: list[str]
    rows: list[list[str | None]]

    def cell(self, row: int, column: int) -> str | None:
        if row < 1 or column < 1:
            raise IndexError(f"grid is 1-indexed: ({row}, {column})")
        if row == 1:
            line: list[str | None] = list(self.header)
        else:
            line = self.rows[row - 2]
        if column > len(line):
            return None
        return line[column - 1]

    @property
    def row_count(self) -> int:
        """Total rows including the header row."""
        return len(self.rows) + 1


@dataclass(frozen=True)
class SheetData:
    sheet_name: str
    columns: list[str]
    records: list[RowRecord]
    issues: list[SchemaMismatch] = field(default_factory=list)
