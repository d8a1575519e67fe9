"""Tree side of the converter: traversal, flattening, naming and rebuilding."""

from .document import (
    document_text,
    parse_xml_bytes,
    parse_xml_file,
    serialize_document,
    write_xml_document,
)
from .flattener import build_record, flatten_tree, is_record_element
from .names import sanitize_name
from .rebuilder import make_singularizer, rebuild_tree, singularize
from .walker import group_children, iter_elements, walk

__all__ = [
    "build_record",
    "document_text",
    "flatten_tree",
    "is_record_element",
    "group_children",
    "iter_elements",
    "make_singularizer",
    "parse_xml_bytes",
    "parse_xml_file",
    "rebuild_tree",
    "sanitize_name",
    "serialize_document",
    "singularize",
    "walk",
    "write_xml_document",
]
