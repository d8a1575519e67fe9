from __future__ import annotations

from ..models.row_group import RowGroup

"""Column reconciler: the ordered, de-duplicated header list for a RowGroup."""

__all__ = [
    "reconcile_columns",
]


def reconcile_columns(group: RowGroup) -> list[str]:
    """Union of record keys in record order, first-seen order preserved.

    Records sharing no keys with the others simply add their own columns;
    those columns render blank for every other row.
    """
    seen: set[str] = set()
    columns: list[str] = []
    for record in group.records:
        for key in record.fields:
            if key not in seen:
                seen.add(key)
                columns.append(key)
    return columns
