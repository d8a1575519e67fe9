from __future__ import annotations

from xml2excel.models.row_group import RowRecord
from xml2excel.models.worksheet import SheetData
from xml2excel.tree.rebuilder import make_singularizer, rebuild_tree, singularize


def _sheet(name: str, *records: dict[str, str | None]) -> SheetData:
    rows = [RowRecord(dict(r)) for r in records]
    columns: list[str] = []
    for r in rows:
        columns.extend(k for k in r.fields if k not in columns)
    return SheetData(sheet_name=name, columns=columns, records=rows)


def test_singularize_strips_one_trailing_s() -> None:
    assert singularize("Invoices") == "Invoice"
    assert singularize("Status") == "Statu"  # 既知の制限: 不規則な単語は上書きで対応
    assert singularize("Person") == "Person"
    assert singularize("s") == "s"


def test_make_singularizer_overrides() -> None:
    fn = make_singularizer({"People": "Person", "Status": "Status"})
    assert fn("People") == "Person"
    assert fn("Status") == "Status"
    assert fn("Invoices") == "Invoice"
    assert make_singularizer(None) is singularize


def test_rebuild_people() -> None:
    sheet = _sheet(
        "persons",
        {"id": "1", "name": "John Doe", "email": "j@x.com"},
        {"id": "2", "name": "Jane Smith"},
    )
    root = rebuild_tree([sheet])
    assert root.name == "Root"
    (container,) = root.children
    assert container.name == "persons"
    assert [row.name for row in container.children] == ["person", "person"]
    first, second = container.children
    assert [(c.name, c.text) for c in first.children] == [
        ("id", "1"),
        ("name", "John Doe"),
        ("email", "j@x.com"),
    ]
    assert [c.name for c in second.children] == ["id", "name"]


def test_empty_values_omitted() -> None:
    root = rebuild_tree([_sheet("Items", {"a": "", "b": None, "c": "x"})])
    (row,) = root.children[0].children
    assert [c.name for c in row.children] == ["c"]


def test_names_are_sanitized() -> None:
    root = rebuild_tree([_sheet("order line", {"Doc Entry": "1"})], root_name="my root")
    assert root.name == "my_x0020_root"
    container = root.children[0]
    assert container.name == "order_x0020_line"
    assert container.children[0].children[0].name == "Doc_x0020_Entry"


def test_custom_singularizer() -> None:
    root = rebuild_tree([_sheet("People", {"n": "1"})], singularize=make_singularizer({"People": "Person"}))
    assert root.children[0].children[0].name == "Person"


def test_no_sheets_gives_root_only() -> None:
    root = rebuild_tree([], root_name="Export")
    assert root.name == "Export"
    assert root.children == []


def test_sheet_without_records_gives_empty_container() -> None:
    root = rebuild_tree([_sheet("Empty"), _sheet("Data", {"a": "1"})])
    assert [c.name for c in root.children] == ["Empty", "Data"]
    assert root.children[0].children == []
