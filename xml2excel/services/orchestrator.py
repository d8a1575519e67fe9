from __future__ import annotations

import logging
from datetime import UTC, datetime
from pathlib import Path

from ..db.document_log import DocumentLogEntry, DocumentSink
from ..logging.error_log import FILE_LEVEL, ErrorLogBuffer, ErrorRecord
from ..models.config_models import ConvertConfig
from ..models.conversion import ConversionResult, Direction
from ..models.processing_result import FileStat, ProcessingResult
from .converter import ConvertOptions, convert_file
from .progress import ProgressTracker

"""Batch orchestration.

process_all sweeps the source directory once:
1. scan for source files of the configured direction (non-recursive)
2. convert each file independently; a failure is recorded, never fatal
3. hand successful documents to the optional DocumentSink
4. aggregate a ProcessingResult for the SUMMARY line

process_path is the single-file step, shared with the directory watcher.
"""

logger = logging.getLogger(__name__)


class ProcessingError(Exception):
    """Fatal errors that prevent a sweep from starting (e.g. missing directory)."""
    pass


def scan_source_files(directory: Path, direction: Direction) -> list[Path]:
    """List source files for ``direction`` in ``directory`` (sorted, hidden files skipped).

    Raises:
        ProcessingError: If directory doesn't exist or can't be read
    """
    if not directory.exists():
        raise ProcessingError(f"Directory not found: {directory}")

    if not directory.is_dir():
        raise ProcessingError(f"Path is not a directory: {directory}")

    suffix = direction.source_suffix
    try:
        return sorted(
            p
            for p in directory.iterdir()
            if p.is_file() and p.suffix.lower() == suffix and not p.name.startswith(".")
        )
    except OSError as e:
        raise ProcessingError(f"Error reading directory {directory}: {e}") from e


def _record_errors(result: ConversionResult, error_log: ErrorLogBuffer) -> None:
    name = result.source.name
    if not result.ok:
        error_log.append(
            ErrorRecord.create(
                file=name,
                sheet=FILE_LEVEL,
                error_type=result.status.name,
                message=result.error or "",
            )
        )
    for issue in result.issues:
        error_log.append(
            ErrorRecord.create(
                file=name, sheet=issue.sheet, error_type=issue.error_type, message=issue.detail
            )
        )


def _log_document(result: ConversionResult, sink: DocumentSink, error_log: ErrorLogBuffer | None) -> None:
    if result.document is None:
        return
    entry = DocumentLogEntry(
        file_name=result.source.name,
        document=result.document,
        logged_at=datetime.now(UTC),
    )
    try:
        sink.record(entry)
    except Exception as e:
        # document log の失敗は変換結果に影響させない
        logger.warning("document log failed file=%s: %s", entry.file_name, e)
        if error_log is not None:
            error_log.append(
                ErrorRecord.create(
                    file=entry.file_name, sheet=FILE_LEVEL, error_type="SINK_ERROR", message=str(e)
                )
            )


def process_path(
    path: Path,
    config: ConvertConfig,
    sink: DocumentSink | None = None,
    error_log: ErrorLogBuffer | None = None,
    options: ConvertOptions | None = None,
) -> ConversionResult:
    """Convert one file, record its errors and log its document."""
    result = convert_file(path, config.direction, options or ConvertOptions.from_config(config))
    if error_log is not None:
        _record_errors(result, error_log)
    if result.ok and sink is not None:
        _log_document(result, sink, error_log)
    return result


def process_all(config: ConvertConfig, sink: DocumentSink | None = None) -> ProcessingResult:
    """Convert every source file in the configured directory.

    Args:
        config: conversion configuration
        sink: optional document log (None = no persistence)

    Returns:
        ProcessingResult with aggregated counts and per-file stats

    Raises:
        ProcessingError: when the source directory cannot be scanned
    """
    start_time = datetime.now(UTC)
    error_log = ErrorLogBuffer()
    options = ConvertOptions.from_config(config)

    file_paths = scan_source_files(Path(config.source_directory), config.direction)

    file_stats: list[FileStat] = []
    success_count = 0
    failed_count = 0
    total_sheets = 0
    total_issues = 0

    with ProgressTracker(len(file_paths), description=config.direction.value) as progress:
        for file_path in file_paths:
            progress.start_file(file_path)

            file_start = datetime.now(UTC)
            result = process_path(file_path, config, sink, error_log, options)
            file_elapsed = (datetime.now(UTC) - file_start).total_seconds()

            if result.ok:
                success_count += 1
                total_sheets += result.sheets
            else:
                failed_count += 1
            total_issues += len(result.issues)

            progress.set_postfix(success=success_count, failed=failed_count)
            progress.finish_file()

            file_stats.append(
                FileStat(
                    file_name=file_path.name,
                    status=result.status.value,
                    sheets=result.sheets,
                    elapsed_seconds=file_elapsed,
                    destination=str(result.destination) if result.destination else None,
                    issues=len(result.issues),
                    error=result.error,
                )
            )

    try:
        log_path = error_log.flush()
    except OSError as e:
        # Don't fail the entire run if the error log cannot be written
        logger.warning("error log flush failed: %s", e)
    else:
        if log_path is not None:
            logger.info("error log written: %s", log_path)

    end_time = datetime.now(UTC)
    return ProcessingResult(
        success_files=success_count,
        failed_files=failed_count,
        total_sheets=total_sheets,
        schema_issues=total_issues,
        start_time=start_time,
        end_time=end_time,
        elapsed_seconds=(end_time - start_time).total_seconds(),
        file_stats=file_stats,
    )
