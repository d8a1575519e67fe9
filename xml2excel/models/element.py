from __future__ import annotations

import xml.etree.ElementTree as ET
from dataclasses import dataclass, field

"""ElementNode model: the hierarchical side of the conversion.

An ElementNode is either parsed from an XML document (read-only traversal
during flattening) or synthesized by the tree rebuilder (written once, then
serialized). Only local names are kept; namespace URIs are dropped.
"""

__all__ = [
    "ElementNode",
    "local_name",
]


def local_name(tag: str) -> str:
    """Strip a ``{namespace}`` prefix from an ElementTree tag or attribute key."""
    return tag.rsplit("}", 1)[-1]


@dataclass
class ElementNode:
    """A node in the source/target tree.

    Invariant: a node is a leaf iff it has no children. Leaves carry ``text``,
    non-leaves carry ``children`` (mixed content text is ignored).
    """
    name: str
    attributes: dict[str, str] = field(default_factory=dict)
    children: list[ElementNode] = field(default_factory=list)
    text: str | None = None

    @property
    def is_leaf(self) -> bool:
        return not self.children

    @classmethod
    def from_etree(cls, element: ET.Element) -> ElementNode:
        children = [cls.from_etree(child) for child in element if isinstance(child.tag, str)]
        return cls(
            name=local_name(element.tag),
            attributes={local_name(k): v for k, v in element.attrib.items()},
            children=children,
            text=None if children else element.text,
        )

    def to_etree(self) -> ET.Element:
        element = ET.Element(self.name, dict(self.attributes))
        if self.children:
            for child in self.children:
                element.append(child.to_etree())
        else:
            element.text = self.text
        return element
