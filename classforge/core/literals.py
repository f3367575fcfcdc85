"""
Literal values: parsing them out of generated source and writing them back.

Only literals are understood (null, booleans, numbers, quoted strings and
nested ``array(...)`` / ``[...]`` collections). Anything else, such as a
function call, a constant reference or an interpolated string, is rejected
with ``LiteralError`` rather than evaluated.
"""

import math
import re
from typing import Any, Dict, List, Mapping, Tuple, Union

from .errors import LiteralError

_NUMBER_RE = re.compile(
    r"[-+]?(?:0[xX][0-9a-fA-F]+|(?:\d+\.\d*|\.\d+|\d+)(?:[eE][-+]?\d+)?)"
)
_WORD_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")

_DOUBLE_QUOTE_ESCAPES = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "v": "\v",
    "f": "\f",
    "e": "\x1b",
    "0": "\0",
    "\\": "\\",
    '"': '"',
    "$": "$",
}


class LiteralParser:
    """Recursive descent parser for a single literal expression."""

    def __init__(self, text: str):
        self.text = text
        self.pos = 0

    def parse(self) -> Any:
        value = self._value()
        self._skip_ws()
        if self.pos != len(self.text):
            self._fail("Unexpected trailing input")
        return value

    def _fail(self, message: str):
        raise LiteralError(
            f"{message} at position {self.pos} in {self.text!r}",
            text=self.text,
            position=self.pos,
        )

    def _skip_ws(self):
        while self.pos < len(self.text) and self.text[self.pos].isspace():
            self.pos += 1

    def _peek(self) -> str:
        return self.text[self.pos] if self.pos < len(self.text) else ""

    def _expect(self, token: str):
        self._skip_ws()
        if not self.text.startswith(token, self.pos):
            self._fail(f"Expected '{token}'")
        self.pos += len(token)

    def _value(self) -> Any:
        self._skip_ws()
        char = self._peek()
        if not char:
            self._fail("Unexpected end of input")
        if char == "'":
            return self._single_quoted()
        if char == '"':
            return self._double_quoted()
        if char == "[":
            self.pos += 1
            return self._items("]")
        if char.isdigit() or char in "+-.":
            return self._number()

        match = _WORD_RE.match(self.text, self.pos)
        if not match:
            self._fail(f"Unexpected character {char!r}")
        word = match.group(0)
        lowered = word.lower()
        if lowered == "null":
            self.pos = match.end()
            return None
        if lowered in ("true", "false"):
            self.pos = match.end()
            return lowered == "true"
        if lowered == "array":
            self.pos = match.end()
            self._expect("(")
            return self._items(")")
        self._fail(f"Not a literal: {word!r}")

    def _number(self) -> Union[int, float]:
        match = _NUMBER_RE.match(self.text, self.pos)
        if not match:
            self._fail("Invalid number")
        self.pos = match.end()
        token = match.group(0)
        sign = -1 if token.startswith("-") else 1
        digits = token.lstrip("+-")
        if digits[:2].lower() == "0x":
            return sign * int(digits, 16)
        if any(c in digits for c in ".eE"):
            return sign * float(digits)
        return sign * int(digits)

    def _single_quoted(self) -> str:
        self.pos += 1
        chars = []
        while True:
            char = self._peek()
            if not char:
                self._fail("Unterminated string")
            self.pos += 1
            if char == "'":
                return "".join(chars)
            if char == "\\" and self._peek() in ("'", "\\"):
                chars.append(self._peek())
                self.pos += 1
            else:
                chars.append(char)

    def _double_quoted(self) -> str:
        self.pos += 1
        chars = []
        while True:
            char = self._peek()
            if not char:
                self._fail("Unterminated string")
            self.pos += 1
            if char == '"':
                return "".join(chars)
            if char == "$" and (self._peek() == "{" or _WORD_RE.match(self._peek())):
                self._fail("Interpolated strings are not literals")
            if char == "{" and self._peek() == "$":
                self._fail("Interpolated strings are not literals")
            if char == "\\" and self._peek() in _DOUBLE_QUOTE_ESCAPES:
                chars.append(_DOUBLE_QUOTE_ESCAPES[self._peek()])
                self.pos += 1
            else:
                chars.append(char)

    def _items(self, closing: str) -> Union[List[Any], Dict[Any, Any]]:
        entries: List[Tuple[Any, Any]] = []
        explicit_keys = False
        next_index = 0

        while True:
            self._skip_ws()
            if self._peek() == closing:
                self.pos += 1
                break

            first = self._value()
            self._skip_ws()
            if self.text.startswith("=>", self.pos):
                self.pos += 2
                key = self._normalize_key(first)
                value = self._value()
                explicit_keys = True
            else:
                key, value = next_index, first
            if isinstance(key, int):
                next_index = max(next_index, key + 1)
            entries.append((key, value))

            self._skip_ws()
            if self._peek() == ",":
                self.pos += 1
            elif self._peek() != closing:
                self._fail(f"Expected ',' or '{closing}'")

        if not explicit_keys:
            return [value for _, value in entries]
        return dict(entries)

    def _normalize_key(self, key: Any) -> Union[int, str]:
        if isinstance(key, bool):
            return int(key)
        if isinstance(key, int):
            return key
        if isinstance(key, str):
            if re.fullmatch(r"-?[1-9]\d*|0", key):
                return int(key)
            return key
        self._fail(f"Invalid array key {key!r}")


def parse_literal(text: str) -> Any:
    """Parse ``text`` as a single literal and return the Python value.

    Args:
        text: Literal source, e.g. ``"array('a' => 1)"``.

    Returns:
        None, bool, int, float, str, list or dict.

    Raises:
        LiteralError: If ``text`` is anything other than one literal.
    """
    return LiteralParser(text).parse()


def export_value(value: Any, indent: int = 4) -> str:
    """Render a Python value as literal source.

    Collections are rendered over several lines, their entries indented by
    ``indent`` spaces and their closing parenthesis by ``indent - 4``.
    """
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if math.isnan(value):
            return "NAN"
        if math.isinf(value):
            return "INF" if value > 0 else "-INF"
        return repr(value)
    if isinstance(value, str):
        escaped = value.replace("\\", "\\\\").replace("'", "\\'")
        return f"'{escaped}'"
    if isinstance(value, Mapping):
        return export_array(value, indent)
    if isinstance(value, (list, tuple)):
        return export_array(dict(enumerate(value)), indent)
    raise LiteralError(f"Cannot export value of type {type(value).__name__}")


def export_array(items: Mapping[Any, Any], indent: int) -> str:
    """Render a mapping as a multi-line ``array(...)`` literal.

    An empty mapping still spans three lines: ``array(``, a blank line and
    the closing parenthesis.
    """
    lines = []
    for key, value in items.items():
        lines.append(
            f"{' ' * indent}{export_value(key)} => {export_value(value, indent + 4)},"
        )
    return "array(\n{}\n{})".format("\n".join(lines), " " * (indent - 4))
