from __future__ import annotations

import codecs
import logging
import re
import xml.etree.ElementTree as ET
from pathlib import Path

from ..fileio import atomic_destination
from ..models.element import ElementNode
from ..models.errors import ParseError

"""XML document boundary: parse a file into ElementNode, serialize back.

Parsing is all-or-nothing: a malformed document raises ParseError and no
partial tree is returned. Serialization is deterministic (same tree, same
bytes) so re-running a conversion on unchanged input is safe.
"""

__all__ = [
    "parse_xml_file",
    "parse_xml_bytes",
    "document_text",
    "serialize_document",
    "write_xml_document",
]

logger = logging.getLogger(__name__)

INDENT = "  "
_DECLARED_ENCODING = re.compile(rb"""^<\?xml[^>]*?encoding\s*=\s*["']([A-Za-z0-9._-]+)["']""")


def parse_xml_bytes(data: bytes, source: str = "<bytes>") -> ElementNode:
    try:
        root = ET.fromstring(data)
    except ET.ParseError as e:
        raise ParseError(f"invalid XML in {source}: {e}") from e
    return ElementNode.from_etree(root)


def parse_xml_file(path: Path) -> ElementNode:
    """Parse the XML document at ``path``."""
    try:
        data = path.read_bytes()
    except OSError as e:
        raise ParseError(f"cannot read {path}: {e}") from e
    return parse_xml_bytes(data, source=path.name)


def document_text(data: bytes) -> str:
    """Decode raw XML bytes using the BOM or declared encoding (UTF-8 otherwise)."""
    if data.startswith(codecs.BOM_UTF8):
        encoding = "utf-8-sig"
    elif data.startswith((codecs.BOM_UTF16_LE, codecs.BOM_UTF16_BE)):
        encoding = "utf-16"
    else:
        match = _DECLARED_ENCODING.match(data)
        encoding = match.group(1).decode("ascii") if match else "utf-8"
    try:
        return data.decode(encoding, errors="replace")
    except LookupError:
        logger.warning("unknown XML encoding %r, decoding as utf-8", encoding)
        return data.decode("utf-8", errors="replace")


def serialize_document(root: ElementNode) -> bytes:
    """UTF-8 XML with declaration and two-space indentation."""
    tree = ET.ElementTree(root.to_etree())
    ET.indent(tree, space=INDENT)
    return ET.tostring(tree.getroot(), encoding="utf-8", xml_declaration=True) + b"\n"


def write_xml_document(root: ElementNode, destination: Path) -> bytes:
    """Write ``root`` atomically to ``destination``; return the bytes written."""
    payload = serialize_document(root)
    with atomic_destination(destination) as tmp:
        tmp.write_bytes(payload)  # OSError -> WriteError (atomic_destination)
    return payload
