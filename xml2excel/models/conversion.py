from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from .errors import SchemaMismatch

"""Per-file conversion result.

The orchestrator inspects a ConversionResult instead of catching exceptions:
status tells success / parse failure / write failure, issues lists the
worksheets or columns skipped along the way.
"""

__all__ = [
    "Direction",
    "ConversionStatus",
    "ConversionResult",
]


class Direction(Enum):
    """Which pipeline to run.

    - FLATTEN:   XML document -> workbook (.xml -> .xlsx)
    - UNFLATTEN: workbook -> XML document (.xlsx -> .xml)
    """
    FLATTEN = "flatten"
    UNFLATTEN = "unflatten"

    @property
    def source_suffix(self) -> str:
        return ".xml" if self is Direction.FLATTEN else ".xlsx"

    @property
    def target_suffix(self) -> str:
        return ".xlsx" if self is Direction.FLATTEN else ".xml"


class ConversionStatus(Enum):
    SUCCESS = "success"
    PARSE_ERROR = "parse_error"
    WRITE_ERROR = "write_error"


@dataclass(frozen=True)
class ConversionResult:
    source: Path
    direction: Direction
    status: ConversionStatus
    destination: Path | None = None
    sheets: int = 0  # 書き出し/読み込みしたワークシート数
    issues: list[SchemaMismatch] = field(default_factory=list)
    document: str | None = None  # 成功時のみ: XML テキスト (flatten は変換元, unflatten は出力)
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.status is ConversionStatus.SUCCESS
