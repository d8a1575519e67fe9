"""XML <-> Excel workbook converter (flatten / unflatten)."""

__version__ = "0.1.0"
