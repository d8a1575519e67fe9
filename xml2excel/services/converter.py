from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from ..excel.reader import read_sheets
from ..excel.writer import build_grids, write_workbook
from ..models.config_models import ConvertConfig
from ..models.conversion import ConversionResult, ConversionStatus, Direction
from ..models.errors import ParseError, SchemaMismatch, WriteError
from ..tree.document import document_text, parse_xml_bytes, write_xml_document
from ..tree.flattener import flatten_tree
from ..tree.rebuilder import DEFAULT_ROOT_NAME, make_singularizer, rebuild_tree, singularize

"""Conversion entry points: one source file in, one destination file out.

flatten_file / unflatten_file raise exactly one typed error (ParseError or
WriteError) on failure. convert_file wraps them into a ConversionResult so
callers inspect a value instead of unwinding exceptions.

Nothing here holds state between calls; converting the same unchanged file
twice produces the same grids / the same XML bytes.
"""

__all__ = [
    "ConvertOptions",
    "FlattenOutcome",
    "UnflattenOutcome",
    "destination_for",
    "flatten_file",
    "unflatten_file",
    "convert_file",
]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConvertOptions:
    destination_dir: Path | None = None  # None -> 変換元と同じディレクトリ
    group_naming: str = "path"
    root_name: str = DEFAULT_ROOT_NAME
    singularize: Callable[[str], str] = singularize

    @classmethod
    def from_config(cls, config: ConvertConfig) -> ConvertOptions:
        return cls(
            destination_dir=Path(config.destination_directory) if config.destination_directory else None,
            group_naming=config.group_naming,
            root_name=config.root_name,
            singularize=make_singularizer(config.singular_names),
        )


@dataclass(frozen=True)
class FlattenOutcome:
    destination: Path
    sheets: int
    document: str  # 変換元 XML テキスト (document log 用)


@dataclass(frozen=True)
class UnflattenOutcome:
    destination: Path
    sheets: int
    document: str
    issues: list[SchemaMismatch] = field(default_factory=list)


def destination_for(source: Path, destination_dir: Path | None, suffix: str) -> Path:
    """``<destination_dir>/<source stem><suffix>`` (source's own directory by default)."""
    directory = destination_dir if destination_dir is not None else source.parent
    return directory / f"{source.stem}{suffix}"


def flatten_file(
    source: Path, destination_dir: Path | None = None, naming: str = "path"
) -> FlattenOutcome:
    """XML document -> workbook with one tab per RowGroup."""
    try:
        data = source.read_bytes()
    except OSError as e:
        raise ParseError(f"cannot read {source}: {e}") from e
    root = parse_xml_bytes(data, source=source.name)
    groups = flatten_tree(root, naming=naming)
    grids = build_grids(groups)
    destination = destination_for(source, destination_dir, Direction.FLATTEN.target_suffix)
    write_workbook(grids, destination, empty_title=root.name)
    logger.info("converted %s -> %s sheets=%d", source.name, destination, len(grids))
    return FlattenOutcome(
        destination=destination,
        sheets=len(grids),
        document=document_text(data),
    )


def unflatten_file(
    source: Path,
    destination_dir: Path | None = None,
    root_name: str = DEFAULT_ROOT_NAME,
    singularize: Callable[[str], str] = singularize,
) -> UnflattenOutcome:
    """Workbook -> single-rooted XML document."""
    sheets = read_sheets(source)
    root = rebuild_tree(sheets, root_name=root_name, singularize=singularize)
    destination = destination_for(source, destination_dir, Direction.UNFLATTEN.target_suffix)
    payload = write_xml_document(root, destination)
    issues = [issue for sheet in sheets for issue in sheet.issues]
    logger.info(
        "converted %s -> %s sheets=%d issues=%d", source.name, destination, len(sheets), len(issues)
    )
    return UnflattenOutcome(
        destination=destination,
        sheets=len(sheets),
        document=payload.decode("utf-8"),
        issues=issues,
    )


def convert_file(
    source: Path, direction: Direction, options: ConvertOptions | None = None
) -> ConversionResult:
    """Run one conversion and report it as a ConversionResult (never raises for per-file errors)."""
    opts = options or ConvertOptions()
    try:
        if direction is Direction.FLATTEN:
            flat = flatten_file(source, opts.destination_dir, naming=opts.group_naming)
            return ConversionResult(
                source=source,
                direction=direction,
                status=ConversionStatus.SUCCESS,
                destination=flat.destination,
                sheets=flat.sheets,
                document=flat.document,
            )
        outcome = unflatten_file(
            source, opts.destination_dir, root_name=opts.root_name, singularize=opts.singularize
        )
        return ConversionResult(
            source=source,
            direction=direction,
            status=ConversionStatus.SUCCESS,
            destination=outcome.destination,
            sheets=outcome.sheets,
            issues=outcome.issues,
            document=outcome.document,
        )
    except ParseError as e:
        logger.error("parse failed: %s", e)
        return ConversionResult(
            source=source, direction=direction, status=ConversionStatus.PARSE_ERROR, error=str(e)
        )
    except WriteError as e:
        logger.error("write failed: %s", e)
        return ConversionResult(
            source=source, direction=direction, status=ConversionStatus.WRITE_ERROR, error=str(e)
        )
