"""Domain models for the XML <-> Excel converter.

Tree side (ElementNode), tabular side (RowRecord, RowGroup, WorksheetGrid,
SheetData), per-file results and configuration.
"""

from .config_models import ConvertConfig, DatabaseConfig
from .conversion import ConversionResult, ConversionStatus, Direction
from .element import ElementNode
from .errors import ConversionError, ParseError, SchemaMismatch, WriteError
from .row_group import RowGroup, RowRecord
from .worksheet import SheetData, WorksheetGrid

__all__ = [
    # Configuration models
    "ConvertConfig",
    "DatabaseConfig",
    # Data model
    "ElementNode",
    "RowRecord",
    "RowGroup",
    "WorksheetGrid",
    "SheetData",
    # Results and errors
    "Direction",
    "ConversionStatus",
    "ConversionResult",
    "ConversionError",
    "ParseError",
    "WriteError",
    "SchemaMismatch",
]
