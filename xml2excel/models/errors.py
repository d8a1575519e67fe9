from __future__ import annotations

from dataclasses import dataclass

"""Typed error kinds for a single conversion.

ParseError / WriteError abort the current file only. SchemaMismatch is not
raised: the offending worksheet or column is skipped and the mismatch is
carried on the result so the orchestrator can report it.
"""

__all__ = [
    "ConversionError",
    "ParseError",
    "WriteError",
    "SchemaMismatch",
]


class ConversionError(Exception):
    """Base class for per-file conversion failures."""

    error_type = "CONVERSION_ERROR"


class ParseError(ConversionError):
    """Source document unreadable or structurally invalid."""

    error_type = "PARSE_ERROR"


class WriteError(ConversionError):
    """Destination could not be created."""

    error_type = "WRITE_ERROR"


@dataclass(frozen=True)
class SchemaMismatch:
    """A worksheet (or part of one) that was skipped instead of failing the file."""
    sheet: str
    detail: str

    error_type = "SCHEMA_MISMATCH"

    def __str__(self) -> str:
        return f"sheet '{self.sheet}': {self.detail}"
