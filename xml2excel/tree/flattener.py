from __future__ import annotations

import logging

from ..models.element import ElementNode
from ..models.row_group import RowGroup, RowRecord
from .walker import iter_elements, walk

"""Row flattener: ElementNode tree -> named RowGroups.

Every grouped child that is a non-leaf or carries attributes becomes one
record of its group. Per record element ``e``:
- each attribute of ``e`` becomes a field
- each plain leaf child of ``e`` (no attributes) becomes a field
  (child name -> child text)
- a leaf ``e`` with attributes also keeps its own text, under its own name
- other children are not inlined; they become records of their own group

Group naming:
- "path"  (default): nested groups are qualified with their ancestry below the
  root (``order/line``); the root's direct children keep their bare name
- "local": groups are keyed by local name only, so same-named elements at
  different depths are merged into one group (legacy behaviour)

Records inside a group, and groups themselves, follow document order.
"""

__all__ = [
    "GROUP_NAMING_MODES",
    "PATH_SEPARATOR",
    "is_record_element",
    "build_record",
    "group_name_for",
    "flatten_tree",
]

logger = logging.getLogger(__name__)

GROUP_NAMING_MODES = ("path", "local")
PATH_SEPARATOR = "/"


def is_record_element(element: ElementNode) -> bool:
    """True for elements that get a row of their own (non-leaf, or attributes present)."""
    return not element.is_leaf or bool(element.attributes)


def build_record(element: ElementNode) -> RowRecord:
    """Build the flat record for one element (attributes + plain leaf children)."""
    record = RowRecord()
    for name, value in element.attributes.items():
        record.add(name, value)
    if element.is_leaf:
        if element.attributes and element.text and element.text.strip():
            # <price currency="EUR">10</price> -> currency, price
            record.add(element.name, element.text)
        return record
    for child in element.children:
        if not is_record_element(child):
            # 同名の葉要素が複数ある場合は name_2, name_3 ... で保持
            record.add(child.name, child.text or "")
    return record


def group_name_for(path: tuple[str, ...], naming: str = "path") -> str:
    if naming == "local":
        return path[-1]
    return PATH_SEPARATOR.join(path)


def flatten_tree(root: ElementNode, naming: str = "path") -> dict[str, RowGroup]:
    """Flatten ``root`` into RowGroups keyed by group name, in first-seen order.

    The root contributes a group of its own (named after it) only when it has
    attributes or plain leaf children. Elements whose record would be empty
    (pure wrappers) add no row.
    """
    if naming not in GROUP_NAMING_MODES:
        raise ValueError(f"unknown group naming: {naming!r}")

    position = {id(node): i for i, node in enumerate(iter_elements(root))}
    rows: list[tuple[int, str, RowRecord]] = []

    root_record = build_record(root)
    if root_record:
        rows.append((position[id(root)], root.name, root_record))

    for _node, path, groups in walk(root):
        for name, members in groups.items():
            group_name = group_name_for(path + (name,), naming)
            for child in members:
                if not is_record_element(child):
                    continue
                record = build_record(child)
                if record:
                    rows.append((position[id(child)], group_name, record))

    groups_out: dict[str, RowGroup] = {}
    for _pos, name, record in sorted(rows, key=lambda row: row[0]):
        if name not in groups_out:
            groups_out[name] = RowGroup(group_name=name)
        groups_out[name].records.append(record)

    logger.debug(
        "flattened root=%s groups=%s",
        root.name,
        {name: len(g.records) for name, g in groups_out.items()},
    )
    return groups_out
