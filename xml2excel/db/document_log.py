from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Protocol

from psycopg2.extras import execute_values

"""Persistence sink for converted documents.

The conversion core knows nothing about databases: the orchestrator is
handed a DocumentSink (or None) by its caller and passes each completed XML
document to it. PostgresDocumentSink stores rows of
(file_name, document, logged_at) with psycopg2's execute_values.

Expected table::

    CREATE TABLE converted_documents (
        id         serial PRIMARY KEY,
        file_name  text NOT NULL,
        document   text NOT NULL,
        logged_at  timestamptz NOT NULL
    );
"""

__all__ = [
    "DocumentLogEntry",
    "DocumentLogError",
    "DocumentSink",
    "InsertResult",
    "insert_documents",
    "PostgresDocumentSink",
]

logger = logging.getLogger(__name__)

COLUMNS = ("file_name", "document", "logged_at")


class DocumentLogError(Exception):
    pass


@dataclass(frozen=True)
class DocumentLogEntry:
    file_name: str
    document: str  # シリアライズ済み XML
    logged_at: datetime


@dataclass(frozen=True)
class InsertResult:
    inserted_rows: int


class DocumentSink(Protocol):
    def record(self, entry: DocumentLogEntry) -> None: ...


def insert_documents(
    cursor: Any,
    table: str,
    entries: Iterable[DocumentLogEntry],
    page_size: int = 100,
) -> InsertResult:
    """Batched INSERT of document log entries.

    Parameters
    ----------
    cursor: psycopg2 cursor
    table: 対象テーブル名 (config schema で識別子パターン検証済み)
    entries: 挿入する行
    page_size: execute_values の page_size
    """
    rows = [(e.file_name, e.document, e.logged_at) for e in entries]
    if not rows:
        return InsertResult(inserted_rows=0)

    cols_sql = ",".join(f'"{c}"' for c in COLUMNS)
    sql = f"INSERT INTO {table} ({cols_sql}) VALUES %s"
    try:
        execute_values(cursor, sql, rows, page_size=page_size)
    except Exception as e:
        raise DocumentLogError(str(e)) from e
    return InsertResult(inserted_rows=len(rows))


class PostgresDocumentSink:
    """DocumentSink committing one transaction per recorded document."""

    def __init__(self, connection: Any, table: str = "converted_documents") -> None:
        self.connection = connection
        self.table = table

    def record(self, entry: DocumentLogEntry) -> None:
        try:
            with self.connection.cursor() as cursor:
                insert_documents(cursor, self.table, [entry])
            self.connection.commit()
        except Exception:
            self.connection.rollback()
            raise
        logger.debug("logged document file=%s table=%s", entry.file_name, self.table)
