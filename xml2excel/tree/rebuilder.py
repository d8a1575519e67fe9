from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping

from ..models.element import ElementNode
from ..models.worksheet import SheetData
from .names import sanitize_name

"""Tree rebuilder: worksheet records -> one ElementNode tree.

Layout of the result::

    <Root>
      <Invoices>            one container per worksheet, worksheet order
        <Invoice>           one element per record, row order
          <DocEntry>1</DocEntry>   one leaf per non-empty field
        </Invoice>
      </Invoices>
    </Root>

The row element name comes from a singularizer. The default only strips one
trailing "s" ("Invoices" -> "Invoice"); it is a naming convention, not an
inflector, and can be replaced or overridden per sheet name.
"""

__all__ = [
    "DEFAULT_ROOT_NAME",
    "singularize",
    "make_singularizer",
    "rebuild_tree",
]

DEFAULT_ROOT_NAME = "Root"


def singularize(name: str) -> str:
    """Strip a single trailing 's' (names of one character are left alone)."""
    if len(name) > 1 and name.endswith("s"):
        return name[:-1]
    return name


def make_singularizer(overrides: Mapping[str, str] | None = None) -> Callable[[str], str]:
    """Return a singularizer that consults ``overrides`` before the heuristic."""
    table = dict(overrides or {})
    if not table:
        return singularize

    def _singularize(name: str) -> str:
        if name in table:
            return table[name]
        return singularize(name)

    return _singularize


def rebuild_tree(
    sheets: Iterable[SheetData],
    root_name: str = DEFAULT_ROOT_NAME,
    singularize: Callable[[str], str] = singularize,
) -> ElementNode:
    """Build a single-rooted tree from per-worksheet records."""
    root = ElementNode(name=sanitize_name(root_name))
    for sheet in sheets:
        container = ElementNode(name=sanitize_name(sheet.sheet_name))
        row_tag = sanitize_name(singularize(sheet.sheet_name))
        for record in sheet.records:
            row = ElementNode(name=row_tag)
            for key, value in record.fields.items():
                if value is None or value == "":
                    continue
                row.children.append(ElementNode(name=sanitize_name(key), text=value))
            container.children.append(row)
        root.children.append(container)
    return root
