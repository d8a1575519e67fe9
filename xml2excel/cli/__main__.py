from __future__ import annotations

import argparse
import logging
import os
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import replace
from pathlib import Path

import psycopg2
from dotenv import load_dotenv

from ..config.loader import DEFAULT_CONFIG_PATH, ConfigError, load_config
from ..db.document_log import DocumentSink, PostgresDocumentSink
from ..excel.reader import read_sheets
from ..logging.init import log_summary, setup_logging
from ..models.config_models import ConvertConfig
from ..models.conversion import Direction
from ..models.errors import ConversionError
from ..services.orchestrator import ProcessingError, process_all, scan_source_files
from ..services.summary import render_summary_line
from ..services.watcher import watch
from ..tree.document import parse_xml_file
from ..tree.flattener import flatten_tree

"""CLI entrypoint.

Flow:
- load .env (database settings) and the YAML config
- sweep the source directory once (process_all) and print the SUMMARY line
- with --watch, keep converting files as they appear until interrupted

Exit codes: 0 every file converted (or none found), 1 fatal startup error,
2 at least one file failed.
"""

EXIT_SUCCESS_ALL = 0
EXIT_FATAL = 1
EXIT_PARTIAL_FAILURE = 2

SAMPLE_ROWS = 3


def _build_dsn(cfg: ConvertConfig) -> str:
    """Resolve connection parameters.

    優先順位:
        1. DATABASE_URL / PGDSN (DSN 全体)
        2. 個別 PGHOST / PGPORT / PGUSER / PGPASSWORD / PGDATABASE
        3. config の database セクション (不足分のフォールバック)
    """
    db_cfg = cfg.database
    dsn = os.getenv("DATABASE_URL") or os.getenv("PGDSN") or db_cfg.dsn
    if dsn:
        return dsn
    host = os.getenv("PGHOST", db_cfg.host or "localhost")
    port = os.getenv("PGPORT", str(db_cfg.port) if db_cfg.port else "5432")
    user = os.getenv("PGUSER", db_cfg.user or "postgres")
    password = os.getenv("PGPASSWORD", db_cfg.password or "")
    database = os.getenv("PGDATABASE", db_cfg.database or "postgres")
    dsn = f"host={host} port={port} user={user} dbname={database}"
    if password:
        dsn += f" password={password}"
    return dsn


def _db_configured(cfg: ConvertConfig) -> bool:
    env_keys = ("DATABASE_URL", "PGDSN", "PGHOST", "PGDATABASE")
    return cfg.database.configured or any(os.getenv(k) for k in env_keys)


@contextmanager
def _document_sink(cfg: ConvertConfig, logger: logging.Logger) -> Iterator[DocumentSink | None]:
    """Yield a PostgresDocumentSink, or None when logging documents is disabled/unavailable."""
    # テスト等で DB 接続を完全に無効化したい場合 DISABLE_DB_CONNECT=1
    if os.getenv("DISABLE_DB_CONNECT") == "1":
        logger.debug("DB connect disabled via DISABLE_DB_CONNECT=1 -> no document log")
        yield None
        return
    if not _db_configured(cfg):
        logger.debug("no database configured -> no document log")
        yield None
        return
    try:
        conn = psycopg2.connect(_build_dsn(cfg))
    except psycopg2.Error as e:
        logger.info(f"DB connection failed -> continuing without document log: {e}")
        yield None
        return
    try:
        conn.autocommit = False  # PostgresDocumentSink がエントリ毎に COMMIT
        yield PostgresDocumentSink(conn, table=cfg.database.table)
    finally:
        conn.close()


def _load_env_file(path: Path, override: bool = True) -> None:
    """Load .env using python-dotenv.

    override=True により .env の値で既存環境変数を上書き (DB 接続情報を最優先)。
    """
    if path.exists():
        load_dotenv(dotenv_path=path, override=override)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="xml2excel", description="XML <-> Excel workbook converter")
    p.add_argument("--config", type=Path, default=DEFAULT_CONFIG_PATH, help="YAML config path")
    p.add_argument(
        "--direction",
        choices=[d.value for d in Direction],
        help="Override the configured conversion direction",
    )
    p.add_argument("--watch", action="store_true", help="Keep converting new files until interrupted")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    p.add_argument(
        "--inspect-data", action="store_true", help="Print groups / sheets with sample rows then exit"
    )
    return p.parse_args(argv)


def _inspect_data(cfg: ConvertConfig) -> int:
    try:
        files = scan_source_files(Path(cfg.source_directory), cfg.direction)
    except ProcessingError as e:
        print(f"inspect: {e}")
        return EXIT_FATAL
    if not files:
        print(f"inspect: no {cfg.direction.source_suffix} files")
        return EXIT_SUCCESS_ALL
    for f in files:
        print(f"FILE: {f.name}")
        try:
            if cfg.direction is Direction.FLATTEN:
                groups = flatten_tree(parse_xml_file(f), naming=cfg.group_naming)
                tables = [(name, g.records) for name, g in groups.items()]
            else:
                tables = [(s.sheet_name, s.records) for s in read_sheets(f)]
        except ConversionError as e:
            print(f"  read_error: {e}")
            continue
        for name, records in tables:
            columns: list[str] = []
            for r in records:
                columns.extend(k for k in r.fields if k not in columns)
            print(f"  SHEET: {name} rows={len(records)} cols={columns}")
            print("    sample_rows=", [r.fields for r in records[:SAMPLE_ROWS]])
    return EXIT_SUCCESS_ALL


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    # NOTE: 空リスト [] が与えられた場合に sys.argv[1:] が混入しないよう None のときのみ読む
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    _load_env_file(Path(".env"), override=True)

    try:
        cfg = load_config(args.config)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL
    if args.direction:
        cfg = replace(cfg, direction=Direction(args.direction))

    directory = Path(cfg.source_directory)
    if not directory.is_dir():
        logger.error(f"directory not found: {directory}")
        return EXIT_FATAL

    if args.debug:
        for h in logger.handlers:
            h.setLevel(logging.DEBUG)
        logger.setLevel(logging.DEBUG)
        logger.debug("debug mode enabled")

    if args.inspect_data:
        return _inspect_data(cfg)

    logger.info(f"{cfg.direction.value}: processing files from {directory}")

    with _document_sink(cfg, logger) as sink:
        try:
            result = process_all(cfg, sink=sink)
        except ProcessingError as e:
            logger.error(f"processing: {e}")
            return EXIT_FATAL

        summary_line = render_summary_line(result)
        # log_summary が "SUMMARY " ラベルを付けるので本文のみ渡す
        log_summary(summary_line.removeprefix("SUMMARY "))

        if args.watch:
            try:
                watched = watch(cfg, sink=sink)
            except ProcessingError as e:
                logger.error(f"watch: {e}")
                return EXIT_FATAL
            failed = sum(1 for r in watched if not r.ok)
            logger.info(f"watch stopped: converted={len(watched) - failed} failed={failed}")

    if result.failed_files > 0:
        return EXIT_PARTIAL_FAILURE
    return EXIT_SUCCESS_ALL


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
