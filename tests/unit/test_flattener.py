from __future__ import annotations

import pytest

from xml2excel.tree.document import parse_xml_bytes
from xml2excel.tree.flattener import build_record, flatten_tree

SCENARIO_A = (
    b'<root><person id="1"><name>John Doe</name><email>j@x.com</email></person>'
    b'<person id="2"><name>Jane Smith</name></person></root>'
)


def test_flatten_people() -> None:
    groups = flatten_tree(parse_xml_bytes(SCENARIO_A))
    assert list(groups) == ["person"]
    records = groups["person"].records
    assert [r.fields for r in records] == [
        {"id": "1", "name": "John Doe", "email": "j@x.com"},
        {"id": "2", "name": "Jane Smith"},
    ]


def test_attributes_before_leaf_children() -> None:
    node = parse_xml_bytes(b'<item code="X"><qty>2</qty><price>9.5</price></item>')
    assert list(build_record(node).fields) == ["code", "qty", "price"]


def test_empty_leaf_is_empty_string_not_absent() -> None:
    node = parse_xml_bytes(b"<item><note/><qty>1</qty></item>")
    fields = build_record(node).fields
    assert fields["note"] == ""
    assert "missing" not in fields


def test_duplicate_leaf_names_are_suffixed() -> None:
    node = parse_xml_bytes(b"<item><tag>a</tag><tag>b</tag><tag>c</tag></item>")
    assert build_record(node).fields == {"tag": "a", "tag_2": "b", "tag_3": "c"}


NESTED = b"""<shop>
  <order no="1"><customer>A</customer>
    <line><sku>X</sku></line>
    <line><sku>Y</sku></line>
  </order>
  <line><sku>Z</sku><qty>3</qty></line>
</shop>"""


def test_path_naming_keeps_nested_groups_apart() -> None:
    groups = flatten_tree(parse_xml_bytes(NESTED), naming="path")
    assert list(groups) == ["order", "order/line", "line"]
    assert [r.get("sku") for r in groups["order/line"].records] == ["X", "Y"]
    assert [r.fields for r in groups["line"].records] == [{"sku": "Z", "qty": "3"}]


def test_local_naming_merges_same_local_name() -> None:
    groups = flatten_tree(parse_xml_bytes(NESTED), naming="local")
    assert list(groups) == ["order", "line"]
    assert [r.get("sku") for r in groups["line"].records] == ["X", "Y", "Z"]


def test_root_with_fields_gets_own_group() -> None:
    groups = flatten_tree(parse_xml_bytes(b'<export run="7"><row><a>1</a></row></export>'))
    assert list(groups) == ["export", "row"]
    assert groups["export"].records[0].fields == {"run": "7"}


def test_wrapper_without_fields_adds_no_row() -> None:
    groups = flatten_tree(parse_xml_bytes(b"<r><wrap><item><a>1</a></item></wrap></r>"))
    assert list(groups) == ["wrap/item"]


def test_leaf_only_root_has_no_groups() -> None:
    assert flatten_tree(parse_xml_bytes(b"<r>text</r>")) == {}


def test_namespaces_are_dropped() -> None:
    xml = b'<r xmlns="urn:x" xmlns:p="urn:p"><p:item p:id="1"><p:name>n</p:name></p:item></r>'
    groups = flatten_tree(parse_xml_bytes(xml))
    assert groups["item"].records[0].fields == {"id": "1", "name": "n"}


def test_unknown_naming_mode_rejected() -> None:
    with pytest.raises(ValueError, match="unknown group naming"):
        flatten_tree(parse_xml_bytes(SCENARIO_A), naming="flat")


def test_attribute_only_items_each_get_a_row() -> None:
    groups = flatten_tree(parse_xml_bytes(b'<root><item id="1"/><item id="2"/></root>'))
    assert list(groups) == ["item"]
    assert [r.fields for r in groups["item"].records] == [{"id": "1"}, {"id": "2"}]


def test_childless_member_keeps_document_order() -> None:
    xml = b'<root><person id="1"><name>John</name></person><person id="2"/></root>'
    groups = flatten_tree(parse_xml_bytes(xml))
    assert [r.fields for r in groups["person"].records] == [
        {"id": "1", "name": "John"},
        {"id": "2"},
    ]


def test_attribute_leaf_is_not_inlined_into_parent() -> None:
    xml = b'<item><sku>A</sku><price currency="EUR">10</price></item>'
    node = parse_xml_bytes(xml)
    assert build_record(node).fields == {"sku": "A"}

    groups = flatten_tree(parse_xml_bytes(b"<r>" + xml + b"</r>"))
    assert list(groups) == ["item", "item/price"]
    assert groups["item/price"].records[0].fields == {"currency": "EUR", "price": "10"}


def test_attribute_leaf_interleaves_with_siblings() -> None:
    xml = b'<r><p id="1"/><p><n>x</n></p><p id="3"/></r>'
    groups = flatten_tree(parse_xml_bytes(xml))
    assert [r.fields for r in groups["p"].records] == [{"id": "1"}, {"n": "x"}, {"id": "3"}]
