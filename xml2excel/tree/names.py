from __future__ import annotations

import re

"""Element name sanitizer.

Maps arbitrary header / sheet text to a valid XML element name (an NCName):

- characters that may not appear in a name are encoded as ``_xHHHH_``
  (the XmlConvert.EncodeName convention)
- a first character that is a name character but cannot start a name
  (digit, '-', '.', combining marks) gets a leading underscore
- a first character that is not a name character at all is encoded, so the
  result starts with the '_' of the escape

Underscores are never escaped, so the output only ever contains name
characters and sanitizing it again returns it unchanged.
"""

__all__ = [
    "sanitize_name",
    "is_valid_name",
    "EMPTY_NAME",
]

EMPTY_NAME = "Unnamed"

_NAME_START = (
    "A-Z_a-z"
    "\u00C0-\u00D6\u00D8-\u00F6\u00F8-\u02FF\u0370-\u037D\u037F-\u1FFF"
    "\u200C-\u200D\u2070-\u218F\u2C00-\u2FEF\u3001-\uD7FF\uF900-\uFDCF"
    "\uFDF0-\uFFFD\U00010000-\U000EFFFF"
)
_NAME_EXTRA = "\\-.0-9\u00B7\u0300-\u036F\u203F-\u2040"

_START_CHAR = re.compile(f"[{_NAME_START}]")
_NAME_CHAR = re.compile(f"[{_NAME_START}{_NAME_EXTRA}]")
_VALID_NAME = re.compile(f"[{_NAME_START}][{_NAME_START}{_NAME_EXTRA}]*")


def is_valid_name(name: str) -> bool:
    return bool(name) and _VALID_NAME.fullmatch(name) is not None


def _encode(char: str) -> str:
    code = ord(char)
    if code > 0xFFFF:
        return f"_x{code:08X}_"
    return f"_x{code:04X}_"


def sanitize_name(text: str | None) -> str:
    """Return a valid element name for ``text``; valid names come back unchanged."""
    if not text:
        return EMPTY_NAME
    if is_valid_name(text):
        return text

    parts: list[str] = []
    for i, char in enumerate(text):
        if _NAME_CHAR.fullmatch(char) is None:
            parts.append(_encode(char))
        elif i == 0 and _START_CHAR.fullmatch(char) is None:
            parts.append("_" + char)
        else:
            parts.append(char)
    return "".join(parts)
