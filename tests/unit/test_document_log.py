from __future__ import annotations

from datetime import UTC, datetime

import pytest

import xml2excel.db.document_log as dl
from xml2excel.db.document_log import (
    DocumentLogEntry,
    DocumentLogError,
    PostgresDocumentSink,
    insert_documents,
)


class DummyCursor:
    def __init__(self) -> None:
        self.queries: list[str] = []
        self.rows: list[tuple] = []

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False


class DummyConnection:
    def __init__(self) -> None:
        self.cursor_obj = DummyCursor()
        self.commits = 0
        self.rollbacks = 0

    def cursor(self):
        return self.cursor_obj

    def commit(self):
        self.commits += 1

    def rollback(self):
        self.rollbacks += 1


# execute_values をモジュール内で差し替え (実 DB 不要)
@pytest.fixture(autouse=True)
def patch_execute_values(monkeypatch):
    def fake_execute_values(cursor, sql, rows, page_size=100):
        if "fail" in sql:
            raise RuntimeError("relation does not exist")
        cursor.queries.append(sql)
        cursor.rows.extend(rows)

    monkeypatch.setattr(dl, "execute_values", fake_execute_values)
    return fake_execute_values


def _entry(name: str = "a.xml") -> DocumentLogEntry:
    return DocumentLogEntry(file_name=name, document="<r/>", logged_at=datetime(2024, 1, 1, tzinfo=UTC))


def test_insert_documents_basic() -> None:
    cur = DummyCursor()
    res = insert_documents(cur, "converted_documents", [_entry("a.xml"), _entry("b.xml")])
    assert res.inserted_rows == 2
    assert cur.queries == [
        'INSERT INTO converted_documents ("file_name","document","logged_at") VALUES %s'
    ]
    assert [r[0] for r in cur.rows] == ["a.xml", "b.xml"]


def test_insert_documents_empty() -> None:
    cur = DummyCursor()
    assert insert_documents(cur, "t", []).inserted_rows == 0
    assert cur.queries == []


def test_insert_documents_wraps_driver_errors() -> None:
    with pytest.raises(DocumentLogError, match="relation does not exist"):
        insert_documents(DummyCursor(), "fail_table", [_entry()])


def test_sink_commits_per_entry() -> None:
    conn = DummyConnection()
    sink = PostgresDocumentSink(conn, table="doc_log")
    sink.record(_entry("a.xml"))
    sink.record(_entry("b.xml"))
    assert conn.commits == 2
    assert conn.rollbacks == 0
    assert len(conn.cursor_obj.rows) == 2


def test_sink_rolls_back_on_failure() -> None:
    conn = DummyConnection()
    sink = PostgresDocumentSink(conn, table="fail_log")
    with pytest.raises(DocumentLogError):
        sink.record(_entry())
    assert conn.rollbacks == 1
    assert conn.commits == 0
