from __future__ import annotations

from pathlib import Path

from xml2excel.excel.reader import read_sheets
from xml2excel.models.conversion import Direction
from xml2excel.services.converter import ConvertOptions, convert_file
from xml2excel.tree.document import parse_xml_bytes

"""XML -> workbook -> XML over the real pandas / openpyxl stack."""

UNIFORM = """<Root>
  <Invoices>
    <Invoice><DocEntry>1</DocEntry><CardCode>C001</CardCode><Total>10.5</Total></Invoice>
    <Invoice><DocEntry>2</DocEntry><CardCode>C002</CardCode><Total>7</Total></Invoice>
  </Invoices>
</Root>
"""


def _records(xml: bytes) -> list[dict[str, str]]:
    root = parse_xml_bytes(xml)
    return [
        {leaf.name: leaf.text for leaf in row.children}
        for container in root.children
        for row in container.children
    ]


def test_uniform_records_survive_round_trip(write_xml, temp_workdir: Path) -> None:
    src = write_xml("invoices.xml", UNIFORM)
    opts = ConvertOptions(destination_dir=temp_workdir / "out", group_naming="local")

    flat = convert_file(src, Direction.FLATTEN, opts)
    assert flat.ok
    (sheet,) = read_sheets(flat.destination)
    assert sheet.sheet_name == "Invoice"
    assert sheet.columns == ["DocEntry", "CardCode", "Total"]

    back = convert_file(flat.destination, Direction.UNFLATTEN, opts)
    assert back.ok
    assert _records(back.destination.read_bytes()) == _records(src.read_bytes())


def test_absent_and_empty_fields_both_read_back_absent(write_xml, temp_workdir: Path) -> None:
    src = write_xml(
        "p.xml",
        "<r><person><id>1</id><email/></person><person><id>2</id></person></r>",
    )
    flat = convert_file(src, Direction.FLATTEN, ConvertOptions(destination_dir=temp_workdir / "out"))
    (sheet,) = read_sheets(flat.destination)
    assert sheet.columns == ["id", "email"]
    assert [r.fields for r in sheet.records] == [{"id": "1"}, {"id": "2"}]


def test_nested_groups_get_separate_sheets(write_xml, temp_workdir: Path) -> None:
    src = write_xml(
        "orders.xml",
        "<shop><order><no>1</no><line><sku>A</sku></line></order><line><sku>Z</sku></line></shop>",
    )
    flat = convert_file(src, Direction.FLATTEN, ConvertOptions(destination_dir=temp_workdir / "out"))
    assert [s.sheet_name for s in read_sheets(flat.destination)] == ["order", "orderline", "line"]
