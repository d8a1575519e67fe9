from __future__ import annotations

from collections.abc import Iterator

from ..models.element import ElementNode

"""Generic traversal over an ElementNode tree, grouping children by name."""

__all__ = [
    "group_children",
    "iter_elements",
    "walk",
]


def group_children(node: ElementNode) -> dict[str, list[ElementNode]]:
    """Group direct children by name.

    Group order is the order in which each name first appears; members keep
    document order. A node without children yields an empty mapping.
    """
    groups: dict[str, list[ElementNode]] = {}
    for child in node.children:
        groups.setdefault(child.name, []).append(child)
    return groups


def iter_elements(root: ElementNode) -> Iterator[ElementNode]:
    """Every node of the tree, leaves included, in document (pre-)order."""
    stack = [root]
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(node.children))


def walk(
    root: ElementNode, path: tuple[str, ...] = ()
) -> Iterator[tuple[ElementNode, tuple[str, ...], dict[str, list[ElementNode]]]]:
    """Yield ``(node, path, groups)`` for every non-leaf node, pre-order.

    ``path`` holds the names from the root's children down to ``node`` (empty
    for the root itself). Leaves are terminal and yield nothing. Children are
    descended in document order, so nodes come out in document order.
    """
    if root.is_leaf:
        return
    yield root, path, group_children(root)
    for child in root.children:
        yield from walk(child, path + (child.name,))
