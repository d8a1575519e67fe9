from __future__ import annotations

import io
import logging
import re
from collections.abc import Iterable, Sequence
from pathlib import Path

import pandas as pd
from openpyxl.utils.exceptions import IllegalCharacterError
from openpyxl.worksheet.worksheet import Worksheet

from ..fileio import atomic_destination
from ..models.errors import WriteError
from ..models.row_group import RowGroup
from ..models.worksheet import WorksheetGrid
from .columns import reconcile_columns

"""Worksheet writer: RowGroups -> WorksheetGrids -> .xlsx workbook.

Sheet titles follow spreadsheet constraints: at most 31 characters, none of
``: \\ / ? * [ ]`` (such characters are stripped), no leading/trailing
apostrophe, unique ignoring case.
Collisions after sanitization get a ``_2``, ``_3``... suffix.

The workbook is rendered in memory with pandas (openpyxl engine) and then
written atomically, so a failed write never leaves a partial file under the
destination name.
"""

__all__ = [
    "MAX_TITLE_LENGTH",
    "DEFAULT_TITLE",
    "sheet_title",
    "assign_sheet_titles",
    "build_grid",
    "build_grids",
    "render_workbook",
    "write_workbook",
]

logger = logging.getLogger(__name__)

MAX_TITLE_LENGTH = 31
DEFAULT_TITLE = "Sheet"
_FORBIDDEN_TITLE_CHARS = re.compile(r"[:\\/?*\[\]]")


def sheet_title(name: str) -> str:
    """Sanitize ``name`` into a legal worksheet title (no uniqueness handling)."""
    title = _FORBIDDEN_TITLE_CHARS.sub("", name).strip("'")
    title = title[:MAX_TITLE_LENGTH].rstrip("'")
    return title or DEFAULT_TITLE


def _suffixed(title: str, n: int) -> str:
    suffix = f"_{n}"
    return title[: MAX_TITLE_LENGTH - len(suffix)] + suffix


def assign_sheet_titles(names: Iterable[str]) -> dict[str, str]:
    """Map each group name to a unique, legal sheet title (input order kept)."""
    titles: dict[str, str] = {}
    used: set[str] = set()  # casefold 済み
    for name in names:
        base = sheet_title(name)
        title = base
        n = 2
        while title.casefold() in used:
            title = _suffixed(base, n)
            n += 1
        if title != base:
            logger.info("sheet title collision: group=%s title=%s", name, title)
        used.add(title.casefold())
        titles[name] = title
    return titles


def _cell(value: str | None) -> str | None:
    # 空文字は空セルとして出力 (読み戻し時は「キーなし」になる)
    if value is None or value == "":
        return None
    return value


def build_grid(group: RowGroup, title: str | None = None) -> WorksheetGrid:
    """Header = ColumnSet; one row per record, blank where the key is absent."""
    columns = reconcile_columns(group)
    rows = [[_cell(record.get(c)) for c in columns] for record in group.records]
    return WorksheetGrid(title=title or sheet_title(group.group_name), header=columns, rows=rows)


def build_grids(groups: dict[str, RowGroup]) -> list[WorksheetGrid]:
    titles = assign_sheet_titles(groups.keys())
    return [build_grid(group, titles[name]) for name, group in groups.items()]


def _keep_text_cells(sheet: Worksheet) -> None:
    # openpyxl は "=" 始まりの文字列を数式として扱うため文字列型に戻す
    for row in sheet.iter_rows():
        for cell in row:
            if cell.data_type == "f" and isinstance(cell.value, str):
                cell.data_type = "s"


def render_workbook(grids: Sequence[WorksheetGrid], empty_title: str = DEFAULT_TITLE) -> bytes:
    """Render grids to .xlsx bytes. With no grids, a single empty sheet is written.

    Every cell is written as text; values starting with ``=`` are never formulas.
    """
    buffer = io.BytesIO()
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        if not grids:
            pd.DataFrame().to_excel(writer, sheet_name=sheet_title(empty_title), index=False)
        for grid in grids:
            frame = pd.DataFrame(grid.rows, columns=grid.header, dtype=object)
            frame.to_excel(writer, sheet_name=grid.title, index=False)
            _keep_text_cells(writer.sheets[grid.title])
    return buffer.getvalue()


def write_workbook(
    grids: Sequence[WorksheetGrid], destination: Path, empty_title: str = DEFAULT_TITLE
) -> Path:
    """Write grids to ``destination`` atomically. Raises WriteError on failure."""
    try:
        payload = render_workbook(grids, empty_title=empty_title)
    except (ValueError, TypeError, IllegalCharacterError) as e:
        raise WriteError(f"cannot render workbook {destination.name}: {e}") from e
    with atomic_destination(destination) as tmp:
        tmp.write_bytes(payload)
    logger.debug("wrote workbook %s sheets=%d", destination, len(grids))
    return destination
