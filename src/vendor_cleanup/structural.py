"""Order-insensitive comparison of associative file contents.

PHP configuration and translation files usually ``return`` an array literal.
Those literals are read with a small tokenizer (the file is never executed):
array literals become ordered maps with PHP key semantics, scalars keep their
type, and anything else (``env('APP_NAME', 'Laravel')``, ``Foo::class``,
concatenations) is kept as an opaque expression compared by its tokens.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from logging import getLogger
from typing import Any

log = getLogger(__name__)

_TOKEN_RE = re.compile(
    r"""
    (?P<ws>\s+)
  | (?P<comment>//[^\r\n]*|\#(?!\[)[^\r\n]*|/\*.*?\*/)
  | (?P<open><\?php|<\?=)
  | (?P<close>\?>)
  | (?P<single>'(?:[^'\\]|\\.)*')
  | (?P<double>"(?:[^"\\]|\\.)*")
  | (?P<number>0[xX][0-9a-fA-F_]+|0[bB][01_]+|\d[\d_]*(?:\.\d*)?(?:[eE][+-]?\d+)?|\.\d+(?:[eE][+-]?\d+)?)
  | (?P<name>\\?[A-Za-z_\x80-\uffff][A-Za-z0-9_\\\x80-\uffff]*)
  | (?P<variable>\$[A-Za-z_\x80-\uffff][A-Za-z0-9_\x80-\uffff]*)
  | (?P<op>=>|::|\.\.\.|\?\?|===|!==|==|!=|<=|>=|&&|\|\||->)
  | (?P<punct>[\[\](){},;.?:!=<>+\-*/%&|^~@\#$])
    """,
    re.VERBOSE | re.DOTALL,
)
_DOUBLE_ESCAPES = {"n": "\n", "t": "\t", "r": "\r", "v": "\v", "e": "\x1b", "f": "\f", "\\": "\\", "$": "$", '"': '"'}
_DOUBLE_ESCAPE_RE = re.compile(r"\\(.)", re.DOTALL)
_INTERPOLATION_RE = re.compile(r"(?<!\\)\$[A-Za-z_{]|\{\$")
_INTEGER_KEY_RE = re.compile(r"^(?:0|-?[1-9][0-9]*)$")
_VALUE_STOPS = frozenset({",", "]", ")", "=>", ";"})
_OPENERS = {"[": "]", "(": ")", "{": "}"}


class StructureParseError(ValueError):
    """Raised when content cannot be read as an associative structure."""


@dataclass(frozen=True, slots=True)
class Expression:
    """A PHP expression that is not a plain literal."""

    text: str


@dataclass(frozen=True, slots=True)
class _Token:
    kind: str
    text: str


def structurally_equal(vendor_raw: str, local_raw: str, *, path: str = "") -> bool | None:
    """Compare two contents while ignoring key order.

    Returns ``None`` when either side cannot be parsed into an associative
    structure; the caller then keeps its byte-level verdict.
    """

    try:
        vendor_value = sort_recursive(parse_structure(vendor_raw, path=path))
        local_value = sort_recursive(parse_structure(local_raw, path=path))
    except (StructureParseError, RecursionError) as exc:
        log.debug("Structural comparison not applicable for %s: %s", path or "<content>", exc)
        return None

    return vendor_value == local_value


def parse_structure(raw: str, *, path: str = "") -> dict[Any, Any] | list[Any]:
    """Parse ``raw`` into nested maps/lists according to the file type of ``path``."""

    if path.lower().endswith(".json"):
        try:
            value = json.loads(raw)
        except ValueError as exc:
            raise StructureParseError(f"invalid JSON: {exc}") from exc
    else:
        value = _PhpArrayParser(_tokenize(raw)).parse_return()

    if not isinstance(value, (dict, list)):
        raise StructureParseError("content is not an associative structure")
    return value


def sort_recursive(value: Any) -> Any:
    """Return a canonical, hashable form of ``value`` with every map sorted by key.

    Scalars are tagged with their type so that ``1``, ``"1"``, ``1.0`` and
    ``True`` never compare equal.
    """

    if isinstance(value, dict):
        items = [(_tag(key), sort_recursive(item)) for key, item in value.items()]
        items.sort(key=lambda pair: pair[0])
        return ("map", tuple(items))
    if isinstance(value, list):
        return ("list", tuple(sort_recursive(item) for item in value))
    return _tag(value)


def _tag(value: Any) -> tuple[str, Any]:
    if isinstance(value, Expression):
        return ("expr", value.text)
    if value is None:
        return ("null", "")
    return (type(value).__name__, value)


def _tokenize(raw: str) -> list[_Token]:
    tokens: list[_Token] = []
    index = max(raw.find("<?php"), 0)
    length = len(raw)
    while index < length:
        match = _TOKEN_RE.match(raw, index)
        if match is None:
            raise StructureParseError(f"unexpected character {raw[index]!r} at offset {index}")
        kind = match.lastgroup or ""
        if kind == "close":
            break
        if kind not in {"ws", "comment", "open"}:
            tokens.append(_Token(kind, match.group()))
        index = match.end()
    return tokens


class _PhpArrayParser:
    def __init__(self, tokens: list[_Token]) -> None:
        self.tokens = tokens
        self.pos = 0

    def parse_return(self) -> Any:
        depth = 0
        while self.pos < len(self.tokens):
            token = self.tokens[self.pos]
            self.pos += 1
            if token.text in _OPENERS:
                depth += 1
            elif token.text in _OPENERS.values():
                depth -= 1
            elif depth == 0 and token.kind == "name" and token.text.lower() == "return":
                value = self._value()
                if self._peek() not in {None, ";"}:
                    raise StructureParseError(f"unexpected token {self._peek()!r} after return value")
                return value
        raise StructureParseError("no top-level return statement")

    # ------------------------------------------------------------------

    def _peek(self, offset: int = 0) -> str | None:
        position = self.pos + offset
        if position < len(self.tokens):
            return self.tokens[position].text
        return None

    def _at_value_end(self) -> bool:
        following = self._peek()
        return following is None or following in _VALUE_STOPS

    def _value(self) -> Any:
        start = self.pos
        literal = self._literal()
        if literal is not _NO_LITERAL and self._at_value_end():
            return literal
        self.pos = start
        return self._expression()

    def _literal(self) -> Any:
        token = self.tokens[self.pos] if self.pos < len(self.tokens) else None
        if token is None:
            raise StructureParseError("unexpected end of content")

        if token.text == "[":
            return self._array("]")
        if token.kind == "name" and token.text.lower() == "array" and self._peek(1) == "(":
            self.pos += 1
            return self._array(")")
        if token.kind == "single":
            self.pos += 1
            return _unescape_single(token.text[1:-1])
        if token.kind == "double":
            body = token.text[1:-1]
            if _INTERPOLATION_RE.search(body):
                return _NO_LITERAL
            self.pos += 1
            return _DOUBLE_ESCAPE_RE.sub(_double_escape, body)
        if token.kind == "number":
            self.pos += 1
            return _number(token.text)
        if token.text == "-" and self._peek(1) is not None and self.tokens[self.pos + 1].kind == "number":
            self.pos += 2
            return -_number(self.tokens[self.pos - 1].text)
        if token.kind == "name":
            lowered = token.text.lower().lstrip("\\")
            constants = {"true": True, "false": False, "null": None}
            if lowered in constants:
                self.pos += 1
                return constants[lowered]
        return _NO_LITERAL

    def _array(self, close: str) -> dict[Any, Any]:
        self.pos += 1
        result: dict[Any, Any] = {}
        next_index = 0
        while True:
            following = self._peek()
            if following is None:
                raise StructureParseError(f"unterminated array, expected {close!r}")
            if following == close:
                self.pos += 1
                return result

            first = self._value()
            if self._peek() == "=>":
                self.pos += 1
                key = _array_key(first)
                result[key] = self._value()
                if isinstance(key, int) and key >= next_index:
                    next_index = key + 1
            else:
                result[next_index] = first
                next_index += 1

            following = self._peek()
            if following == ",":
                self.pos += 1
            elif following != close:
                raise StructureParseError(f"unexpected token {following!r} in array")

    def _expression(self) -> Expression:
        parts: list[str] = []
        depth = 0
        while self.pos < len(self.tokens):
            text = self.tokens[self.pos].text
            if depth == 0 and text in _VALUE_STOPS:
                break
            if text in _OPENERS:
                depth += 1
            elif text in _OPENERS.values():
                depth -= 1
            parts.append(text)
            self.pos += 1
        if not parts:
            raise StructureParseError(f"expected a value, found {self._peek()!r}")
        return Expression(" ".join(parts))


_NO_LITERAL = object()


def _unescape_single(body: str) -> str:
    return body.replace("\\\\", "\x00").replace("\\'", "'").replace("\x00", "\\")


def _double_escape(match: re.Match[str]) -> str:
    char = match.group(1)
    return _DOUBLE_ESCAPES.get(char, match.group(0))


def _number(text: str) -> int | float:
    cleaned = text.replace("_", "")
    lowered = cleaned.lower()
    try:
        if lowered.startswith("0x"):
            return int(lowered, 16)
        if lowered.startswith("0b"):
            return int(lowered, 2)
        if any(marker in lowered for marker in (".", "e")):
            return float(cleaned)
        if len(cleaned) > 1 and cleaned.startswith("0"):
            return int(cleaned, 8)
        return int(cleaned)
    except ValueError as exc:
        raise StructureParseError(f"invalid number literal {text!r}") from exc


def _array_key(value: Any) -> int | str:
    if isinstance(value, Expression):
        return value.text
    if isinstance(value, bool):
        return int(value)
    if value is None:
        return ""
    if isinstance(value, float):
        try:
            return int(value)
        except (OverflowError, ValueError) as exc:
            raise StructureParseError(f"illegal array key {value!r}") from exc
    if isinstance(value, str) and _INTEGER_KEY_RE.match(value):
        return int(value)
    if isinstance(value, (int, str)):
        return value
    raise StructureParseError(f"illegal array key {value!r}")
