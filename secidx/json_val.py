"""A small, lenient JSON reader and writer for attribute documents."""

from __future__ import annotations

import re
from typing import Any, Union

JsonValue = Union[int, float, str, bool, list, tuple, dict]

_WHITESPACE = frozenset(" \t\n\v\f\r")
_DIGITS = frozenset("0123456789")
_NUMBER_CHARS = frozenset("0123456789e.-+")
_FLOAT_PREFIX = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:e[+-]?\d+)?")
_INT_PREFIX = re.compile(r"[+-]?\d+")
_INT32_MIN = -(2**31)
_INT32_MAX = 2**31 - 1


class _Parser:
    """Recursive-descent reader over a string; only the first value is read."""

    def __init__(self, text: str) -> None:
        self.text = text
        self.pos = 0

    def peek(self) -> str:
        return self.text[self.pos] if self.pos < len(self.text) else ""

    def at_end(self) -> bool:
        return self.pos >= len(self.text)

    def value(self) -> Any:
        while not self.at_end():
            char = self.peek()
            if char in _WHITESPACE:
                self.pos += 1
            elif char == '"':
                return self.string()
            elif char in ("t", "f"):
                return self.boolean()
            elif char == "[":
                return self.array()
            elif char == "{":
                return self.mapping()
            else:
                return self.number()
        return 0

    def number(self) -> int | float:
        start = self.pos
        while not self.at_end() and self.peek() in _NUMBER_CHARS:
            self.pos += 1
        token = self.text[start:self.pos]
        if "." in token or "e" in token:
            match = _FLOAT_PREFIX.match(token)
            if match is None:
                raise ValueError(f"invalid number {token!r} at offset {start}")
            return float(match.group())
        match = _INT_PREFIX.match(token)
        if match is None:
            raise ValueError(f"invalid number {token!r} at offset {start}")
        number = int(match.group())
        if not _INT32_MIN <= number <= _INT32_MAX:
            raise ValueError(f"integer {number} out of range")
        return number

    def string(self) -> str:
        self.pos += 1
        end = self.text.find('"', self.pos)
        if end < 0:
            raise ValueError("unterminated string")
        result = self.text[self.pos:end]
        self.pos = end + 1
        return result

    def boolean(self) -> bool:
        if self.peek() == "f":
            self.pos = min(self.pos + 5, len(self.text))
            return False
        self.pos = min(self.pos + 4, len(self.text))
        return True

    def _skip(self, separators: str, closer: str | None) -> None:
        while not self.at_end():
            char = self.peek()
            if char == closer or not (char in _WHITESPACE or char in separators):
                break
            self.pos += 1

    def array(self) -> list:
        self.pos += 1
        items: list = []
        while self.peek() != "]":
            if self.at_end():
                raise ValueError("unterminated array")
            items.append(self.value())
            self._skip(",", "]")
        self.pos += 1
        return items

    def mapping(self) -> dict:
        self.pos += 1
        result: dict = {}
        while self.peek() != "}":
            if self.at_end():
                raise ValueError("unterminated object")
            key = self.value()
            self._skip(":", None)
            result[_freeze(key)] = self.value()
            self._skip(",", "}")
        self.pos += 1
        return result


def _freeze(key: Any) -> Any:
    if isinstance(key, (list, tuple)):
        return tuple(_freeze(item) for item in key)
    if isinstance(key, dict):
        raise ValueError("objects cannot be used as keys")
    return key


def _order_key(value: Any) -> tuple:
    if isinstance(value, bool):
        return (3, value)
    if isinstance(value, int):
        return (0, value)
    if isinstance(value, float):
        return (1, value)
    if isinstance(value, str):
        return (2, value)
    if isinstance(value, (list, tuple)):
        return (4, tuple(_order_key(item) for item in value))
    if isinstance(value, dict):
        return (5, tuple(sorted((_order_key(k), _order_key(v)) for k, v in value.items())))
    raise TypeError(f"unsupported value type: {type(value).__name__}")


def parse(text: str) -> Any:
    """Read the first value in ``text``; an empty text reads as 0."""
    return _Parser(text).value()


def to_text(value: Any) -> str:
    """Write a value compactly, with object keys in sorted order."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return f"{value:g}"
    if isinstance(value, str):
        return f'"{value}"'
    if isinstance(value, (list, tuple)):
        return "[" + ",".join(to_text(item) for item in value) + "]"
    if isinstance(value, dict):
        ordered = sorted(value.items(), key=lambda item: _order_key(item[0]))
        return "{" + ",".join(f"{to_text(k)}:{to_text(v)}" for k, v in ordered) + "}"
    raise TypeError(f"unsupported value type: {type(value).__name__}")