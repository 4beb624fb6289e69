"""Tokenizer for type expressions.

Dotted names are emitted as ``IDENT . IDENT`` sequences and joined by the
grammar.  The one exception is the internal array encoding (``[I``,
``[[Ljava.lang.String;``), which lexes as a single ``INTERNAL_NAME`` token so
the grammar can validate the whole encoding at once.
"""

from __future__ import annotations

from dataclasses import dataclass

from .errors import LexError

__all__ = ["KEYWORDS", "OPERATORS", "PRIMITIVE_NAMES", "Token", "Tokenizer", "tokenize"]


@dataclass(frozen=True, slots=True)
class Token:
    """Single lexical token with its ``[start, end)`` offsets."""

    kind: str
    value: str
    start: int
    end: int


PRIMITIVE_NAMES = frozenset(
    {"void", "boolean", "byte", "short", "int", "long", "float", "double"}
)

KEYWORDS = frozenset({"extends", "super"}) | PRIMITIVE_NAMES

OPERATORS = {
    "<": "LT",
    ">": "GT",
    "&": "AMP",
    ",": "COMMA",
    "[": "LBRACKET",
    "]": "RBRACKET",
    "?": "QUESTION",
    "@": "AT",
    ".": "DOT",
}


def _is_identifier_start(ch: str) -> bool:
    return ch.isalpha() or ch in "_$"


def _is_identifier_part(ch: str) -> bool:
    return ch.isalnum() or ch in "_$"


class Tokenizer:
    """Hand-written scanner producing :class:`Token` objects."""

    def __init__(self, source: str) -> None:
        self.source = source
        self.length = len(source)
        self.index = 0

    def tokenize(self) -> list[Token]:
        tokens: list[Token] = []
        while not self._eof:
            ch = self._peek()
            if ch.isspace():
                self._consume_whitespace()
                continue
            if _is_identifier_start(ch):
                tokens.append(self._consume_identifier())
                continue
            if ch == "[" and (self._peek(1) == "[" or _is_identifier_start(self._peek(1))):
                tokens.append(self._consume_internal_name())
                continue
            tokens.append(self._consume_operator())
        tokens.append(Token("EOF", "", self.index, self.index))
        return tokens

    @property
    def _eof(self) -> bool:
        return self.index >= self.length

    def _peek(self, offset: int = 0) -> str:
        if self.index + offset >= self.length:
            return "\0"
        return self.source[self.index + offset]

    def _consume_whitespace(self) -> None:
        while not self._eof and self._peek().isspace():
            self.index += 1

    def _consume_identifier(self) -> Token:
        start = self.index
        self.index += 1
        while _is_identifier_part(self._peek()):
            self.index += 1
        value = self.source[start : self.index]
        kind = value if value in KEYWORDS else "IDENT"
        return Token(kind, value, start, self.index)

    def _consume_internal_name(self) -> Token:
        start = self.index
        while self._peek() == "[":
            self.index += 1
        while _is_identifier_part(self._peek()) or self._peek() in ".;":
            self.index += 1
        return Token("INTERNAL_NAME", self.source[start : self.index], start, self.index)

    def _consume_operator(self) -> Token:
        start = self.index
        ch = self._peek()
        kind = OPERATORS.get(ch)
        if kind is None:
            raise LexError(f"Unexpected character {ch!r}", position=start)
        self.index += 1
        return Token(kind, ch, start, self.index)


def tokenize(text: str) -> list[Token]:
    """Return the tokens of ``text`` followed by a terminating ``EOF`` token."""

    return Tokenizer(text).tokenize()
