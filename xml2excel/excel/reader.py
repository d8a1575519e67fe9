from __future__ import annotations

import logging
import math
from datetime import date, datetime, time
from pathlib import Path
from typing import Any

import pandas as pd

from ..models.errors import ParseError, SchemaMismatch
from ..models.row_group import RowRecord, unique_key
from ..models.worksheet import SheetData

"""Grid reader: .xlsx worksheets -> ordered RowRecords.

Row 1 is the header row, rows 2.. are data rows.

- blank header cells inside the header span get a synthetic ``Column<N>``
  name (1-based column index); the span ends at the last non-blank header
- only non-blank cells are stored, so a blank cell reads back as "key absent"
- rows without any non-blank cell are dropped
- cells to the right of the header span are dropped with a SchemaMismatch
  warning instead of failing the workbook
- an empty worksheet yields no records (and a SchemaMismatch) but never fails
"""

__all__ = [
    "SYNTHETIC_COLUMN",
    "cell_text",
    "read_workbook",
    "read_grid",
    "read_sheets",
]

logger = logging.getLogger(__name__)

SYNTHETIC_COLUMN = "Column{}"


def cell_text(value: Any) -> str | None:
    """Convert a raw cell value to text; ``None`` means blank."""
    if value is None:
        return None
    if isinstance(value, str):
        return value if value != "" else None
    if isinstance(value, float):
        if math.isnan(value):
            return None
        if value.is_integer():
            return str(int(value))
        return str(value)
    if pd.isna(value):
        return None
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    return str(value)


def read_workbook(path: Path) -> dict[str, pd.DataFrame]:
    """Read every worksheet raw (no header inference, no NA-string conversion)."""
    frames: dict[str, pd.DataFrame] = {}
    try:
        with pd.ExcelFile(path, engine="openpyxl") as xls:
            for name in xls.sheet_names:
                # ヘッダなしで生読み, "NA" 等の文字列もそのまま保持
                frames[str(name)] = xls.parse(
                    name, header=None, dtype=object, keep_default_na=False, na_values=[]
                )
    except Exception as e:
        raise ParseError(f"cannot read workbook {path.name}: {e}") from e
    return frames


def _header_columns(header_cells: list[str | None]) -> list[str]:
    span = 0
    for idx, text in enumerate(header_cells):
        if text is not None:
            span = idx + 1
    columns: list[str] = []
    seen: set[str] = set()
    for idx in range(span):
        name = header_cells[idx] or SYNTHETIC_COLUMN.format(idx + 1)
        name = unique_key(name, seen)
        seen.add(name)
        columns.append(name)
    return columns


def read_grid(frame: pd.DataFrame, sheet_name: str) -> SheetData:
    """Turn one raw worksheet frame into RowRecords (row 1 = header)."""
    if frame.empty or all(cell_text(v) is None for v in frame.to_numpy().ravel()):
        issue = SchemaMismatch(sheet=sheet_name, detail="worksheet has no addressable dimension")
        logger.warning("%s", issue)
        return SheetData(sheet_name=sheet_name, columns=[], records=[], issues=[issue])

    header_cells: list[str | None] = []
    for value in frame.iloc[0].tolist():
        text = cell_text(value)
        if text is not None:
            text = text.strip() or None
        header_cells.append(text)
    columns = _header_columns(header_cells)
    span = len(columns)

    records: list[RowRecord] = []
    dropped_cells = 0
    for values in frame.iloc[1:].itertuples(index=False, name=None):
        record = RowRecord()
        for column, value in zip(columns, values):
            text = cell_text(value)
            if text is not None:
                record.fields[column] = text
        dropped_cells += sum(1 for value in values[span:] if cell_text(value) is not None)
        if record:
            records.append(record)

    issues: list[SchemaMismatch] = []
    if dropped_cells:
        issue = SchemaMismatch(
            sheet=sheet_name,
            detail=f"{dropped_cells} cell(s) beyond the {span} header column(s) dropped",
        )
        logger.warning("%s", issue)
        issues.append(issue)
    return SheetData(sheet_name=sheet_name, columns=columns, records=records, issues=issues)


def read_sheets(path: Path) -> list[SheetData]:
    """Read a workbook into SheetData, one per worksheet in workbook order."""
    return [read_grid(frame, name) for name, frame in read_workbook(path).items()]
