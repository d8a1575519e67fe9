from __future__ import annotations

from dataclasses import dataclass, field

"""Tabular side of the data model: RowRecord and RowGroup.

A RowRecord is one flat row (column name -> cell text). A RowGroup is the
ordered set of records that end up on one worksheet tab.
"""

__all__ = [
    "RowRecord",
    "RowGroup",
    "unique_key",
]


def unique_key(key: str, existing: dict[str, object] | set[str]) -> str:
    """Return ``key`` or the first free ``key_2``, ``key_3``... not in ``existing``."""
    if key not in existing:
        return key
    n = 2
    while f"{key}_{n}" in existing:
        n += 1
    return f"{key}_{n}"


@dataclass
class RowRecord:
    """One flat row.

    A missing key means "no value for this row", which is distinct from a key
    present with an empty string.
    """
    fields: dict[str, str | None] = field(default_factory=dict)

    def add(self, key: str, value: str | None) -> str:
        """Store ``value`` under ``key`` (suffixed if already taken); return the key used."""
        used = unique_key(key, self.fields)
        self.fields[used] = value
        return used

    def get(self, key: str) -> str | None:
        return self.fields.get(key)

    def __len__(self) -> int:
        return len(self.fields)


@dataclass
class RowGroup:
    """Named collection of RowRecords (one worksheet tab)."""
    group_name: str
    records: list[RowRecord] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.group_name:
            raise ValueError("group_name must be non-empty")
