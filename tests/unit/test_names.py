from __future__ import annotations

import pytest

from xml2excel.tree.names import EMPTY_NAME, is_valid_name, sanitize_name


@pytest.mark.parametrize("name", ["Invoice", "DocEntry", "_private", "a-b.c", "Straße", "名前"])
def test_valid_names_unchanged(name: str) -> None:
    assert sanitize_name(name) == name


@pytest.mark.parametrize(
    "text,expected",
    [
        ("Doc Entry", "Doc_x0020_Entry"),
        ("1stItem", "_1stItem"),
        ("-dash", "_-dash"),
        ("@id", "_x0040_id"),
        ("a:b", "a_x003A_b"),
        ("price/unit", "price_x002F_unit"),
    ],
)
def test_invalid_characters_encoded(text: str, expected: str) -> None:
    assert sanitize_name(text) == expected
    assert is_valid_name(sanitize_name(text))


@pytest.mark.parametrize("text", ["", None])
def test_empty_name_gets_placeholder(text) -> None:
    assert sanitize_name(text) == EMPTY_NAME


@pytest.mark.parametrize("text", ["Doc Entry", "1stItem", "@id", "x y z", "😀smile", "order/line"])
def test_sanitize_is_idempotent(text: str) -> None:
    once = sanitize_name(text)
    assert sanitize_name(once) == once


def test_characters_outside_the_bmp_use_eight_hex_digits() -> None:
    assert sanitize_name("a\U000F0000") == "a_x000F0000_"
    assert sanitize_name("a\u0001") == "a_x0001_"
