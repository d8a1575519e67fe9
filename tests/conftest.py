# Shared pytest fixtures
from __future__ import annotations

from pathlib import Path

import pandas as pd
import pytest

from xml2excel.logging.init import reset_logging


@pytest.fixture(autouse=True)
def _clean_logging():
    reset_logging()
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _no_database(monkeypatch):
    # テストでは実 DB に接続しない
    monkeypatch.setenv("DISABLE_DB_CONNECT", "1")
    for key in ("DATABASE_URL", "PGDSN", "PGHOST", "PGDATABASE"):
        monkeypatch.delenv(key, raising=False)


@pytest.fixture()
def temp_workdir(tmp_path: Path, monkeypatch) -> Path:
    (tmp_path / "config").mkdir()
    (tmp_path / "data").mkdir()
    (tmp_path / "logs").mkdir()
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture()
def sample_config_yaml() -> str:
    return """source_directory: ./data
direction: flatten
destination_directory: ./out
group_naming: path
root_name: Root
singular_names:
  People: Person
settle_seconds: 0.0
poll_interval_seconds: 0.05
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "convert.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


@pytest.fixture()
def invoices_xml() -> str:
    return """<?xml version="1.0" encoding="utf-8"?>
<Invoices>
  <Invoice>
    <DocEntry>1</DocEntry>
    <CardCode>C001</CardCode>
  </Invoice>
  <Invoice>
    <DocEntry>2</DocEntry>
    <CardCode>C002</CardCode>
  </Invoice>
</Invoices>
"""


@pytest.fixture()
def write_xml(temp_workdir: Path):
    def _write(name: str, content: str, directory: str = "data") -> Path:
        path = temp_workdir / directory / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return path
    return _write


def build_workbook(path: Path, sheets: dict[str, list[list[object]]]) -> Path:
    """Write raw rows (row 1 = header) per sheet with pandas/openpyxl."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        for name, rows in sheets.items():
            pd.DataFrame(rows).to_excel(writer, sheet_name=name, index=False, header=False)
    return path


@pytest.fixture()
def workbook_builder(temp_workdir: Path):
    def _build(name: str, sheets: dict[str, list[list[object]]], directory: str = "data") -> Path:
        return build_workbook(temp_workdir / directory / name, sheets)
    return _build
