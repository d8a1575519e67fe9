from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

"""Processing result models for a batch run.

FileStat holds one line of detail per converted file; ProcessingResult
aggregates a whole sweep and feeds the SUMMARY line.
"""


@dataclass(frozen=True)
class FileStat:
    """Per-file processing statistics (internal helper for ProcessingResult)."""
    file_name: str  # ファイル名
    status: str  # success / parse_error / write_error
    sheets: int  # 書き出し/読み込みシート数
    elapsed_seconds: float  # ファイル処理時間
    destination: str | None = None
    issues: int = 0  # SchemaMismatch 件数
    error: str | None = None


@dataclass(frozen=True)
class ProcessingResult:
    """Aggregated results for one batch sweep."""
    success_files: int
    failed_files: int
    total_sheets: int
    schema_issues: int
    start_time: datetime
    end_time: datetime
    elapsed_seconds: float
    file_stats: list[FileStat] | None = None

    @property
    def total_files(self) -> int:
        return self.success_files + self.failed_files
