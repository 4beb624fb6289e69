"""Parser for reified type expressions.

Accepted forms::

    Type        := Wildcard | ParamType | ArrayName | Canonical
    Canonical   := (Primitive | RawName) ("[" "]")*
    ParamType   := RawName "<" TypeArg ("," TypeArg)* ">" ("[" "]")*
    TypeArg     := Wildcard | Type
    Wildcard    := "?" ("extends" Type ("&" Type)* | "super" Type)?
    ArrayName   := "["+ (PrimitiveCode | "L" RawName ";") ("[" "]")*
    RawName     := Identifier ("." Identifier)*

Each alternative starts with its own kind of token (``?``, an identifier or
primitive keyword, an internal array name), so the parser never backtracks.
Type variables are not accepted and declared generic bounds are not checked:
``Enum<String>`` parses even though ``Enum`` is declared ``Enum<E extends
Enum<E>>``.
"""

from __future__ import annotations

import functools
import re
from typing import Callable, Optional, Sequence

from packages.telemetry.logger import get_logger

from . import ast, types
from .config import DEFAULT_CATALOG_PATH, ParserSettings, load_settings
from .errors import (
    ArityMismatchError,
    ClassNotFoundError,
    InvalidArgumentError,
    InvalidTypeArgumentError,
    MalformedInternalNameError,
    ParseError,
    TrailingInputError,
)
from .lexer import PRIMITIVE_NAMES, Token, tokenize
from .reflect import PRIMITIVE_DESCRIPTORS, PRIMITIVES, ClassType, Type
from .resolver import ClassCatalog, NameResolver

__all__ = ["Parser", "RuleReference", "TypeParser", "parse", "parse_expression"]

_LOGGER = get_logger("typeexpr.grammar")

_SEGMENT = r"[^\W\d][\w$]*|\$[\w$]*"
_INTERNAL_NAME = re.compile(rf"\[+(?:[ZBSIJFD]|L(?:{_SEGMENT})(?:\.(?:{_SEGMENT}))*;)")

_PRIMITIVE_CODES = {code: name for name, code in PRIMITIVE_DESCRIPTORS.items() if name != "void"}


def _describe(token: Token) -> str:
    if token.kind == "EOF":
        return "end of input"
    return repr(token.value)


class RuleReference:
    """Forward-declared grammar rule, bound once every rule exists.

    Wildcard bounds and type arguments call back into the top-level type rule
    through this cell, which keeps the rule definitions independent of the
    order they are written in.
    """

    __slots__ = ("name", "_rule")

    def __init__(self, name: str) -> None:
        self.name = name
        self._rule: Optional[Callable[[], ast.TypeExpr]] = None

    def set(self, rule: Callable[[], ast.TypeExpr]) -> None:
        if self._rule is not None:
            raise RuntimeError(f"grammar rule {self.name!r} is already bound")
        self._rule = rule

    def __call__(self) -> ast.TypeExpr:
        if self._rule is None:
            raise RuntimeError(f"grammar rule {self.name!r} used before being bound")
        return self._rule()


class Parser:
    """Recursive-descent parser over a token list; one instance per input."""

    def __init__(self, tokens: Sequence[Token]) -> None:
        if not tokens or tokens[-1].kind != "EOF":
            raise ValueError("token stream must end with an EOF token")
        self.tokens = tokens
        self.index = 0
        self._type = RuleReference("type")
        self._type.set(self._parse_type)

    # ------------------------------------------------------------------
    # Token helpers

    def _peek(self, offset: int = 0) -> Token:
        target = min(self.index + offset, len(self.tokens) - 1)
        return self.tokens[target]

    def _advance(self) -> Token:
        token = self._peek()
        if token.kind != "EOF":
            self.index += 1
        return token

    def _match(self, *kinds: str) -> Optional[Token]:
        token = self._peek()
        if token.kind in kinds:
            self.index += 1
            return token
        return None

    def _expect(self, *kinds: str, expected: Optional[str] = None) -> Token:
        token = self._peek()
        if token.kind not in kinds:
            raise ParseError(
                f"Unexpected {_describe(token)}",
                position=token.start,
                expected=expected or " or ".join(kinds),
            )
        self.index += 1
        return token

    def _check(self, *kinds: str) -> bool:
        return self._peek().kind in kinds

    # ------------------------------------------------------------------
    # Entry point

    def parse_type(self) -> ast.TypeExpr:
        """Parse exactly one type expression, rejecting leftover tokens."""

        expr = self._type()
        token = self._peek()
        if token.kind != "EOF":
            raise TrailingInputError(
                f"Unexpected {_describe(token)} after complete type",
                position=token.start,
                expected="end of input",
            )
        return expr

    # ------------------------------------------------------------------
    # Rules

    def _parse_type(self) -> ast.TypeExpr:
        token = self._peek()
        if token.kind == "QUESTION":
            return self._parse_wildcard()
        if token.kind == "INTERNAL_NAME":
            expr = self._parse_internal_array_name()
        elif token.kind in PRIMITIVE_NAMES:
            self._advance()
            expr = ast.Primitive(token.value, span=ast.Span(token.start, token.end))
        elif token.kind == "IDENT":
            expr = self._parse_class_type()
        else:
            raise ParseError(
                f"Unexpected {_describe(token)}", position=token.start, expected="type"
            )
        expr = self._parse_array_suffix(expr)
        if self._check("LT"):
            raise ParseError(_not_parameterizable(expr), position=self._peek().start)
        return expr

    def _parse_array_suffix(self, expr: ast.TypeExpr) -> ast.TypeExpr:
        while self._check("LBRACKET"):
            opening = self._advance()
            if isinstance(expr, ast.Primitive) and expr.name == "void":
                raise ParseError("void cannot be an array component", position=opening.start)
            closing = self._expect("RBRACKET", expected="']'")
            start = expr.span.start if expr.span is not None else opening.start
            expr = ast.ArrayOf(expr, span=ast.Span(start, closing.end))
        return expr

    def _parse_raw_name(self) -> ast.RawName:
        first = self._expect("IDENT", expected="class name")
        parts = [first.value]
        end = first.end
        while self._match("DOT"):
            part = self._expect("IDENT", expected="identifier after '.'")
            parts.append(part.value)
            end = part.end
        return ast.RawName(".".join(parts), span=ast.Span(first.start, end))

    def _parse_class_type(self) -> ast.TypeExpr:
        raw = self._parse_raw_name()
        opening = self._match("LT")
        if opening is None:
            return raw
        if self._check("GT"):
            raise ParseError(
                f"Empty type argument list for {raw.name}",
                position=self._peek().start,
                expected="type argument",
            )
        arguments = [self._parse_type_argument()]
        while self._match("COMMA"):
            arguments.append(self._parse_type_argument())
        closing = self._expect("GT", expected="',' or '>'")
        start = raw.span.start if raw.span is not None else opening.start
        return ast.Parameterized(raw, tuple(arguments), span=ast.Span(start, closing.end))

    def _parse_type_argument(self) -> ast.TypeExpr:
        argument = self._type()
        if isinstance(argument, ast.Primitive):
            raise InvalidTypeArgumentError(
                f"primitive type {argument.name} cannot be a type argument",
                position=argument.position,
            )
        return argument

    def _parse_wildcard(self) -> ast.Wildcard:
        question = self._expect("QUESTION", expected="'?'")
        if self._match("extends"):
            kind = ast.WildcardKind.UPPER
            bounds = [self._parse_wildcard_bound()]
            while self._match("AMP"):
                bounds.append(self._parse_wildcard_bound())
        elif self._match("super"):
            kind = ast.WildcardKind.LOWER
            bounds = [self._parse_wildcard_bound()]
            if self._check("AMP"):
                raise ParseError(
                    "a lower-bounded wildcard takes a single bound",
                    position=self._peek().start,
                )
        else:
            span = ast.Span(question.start, question.end)
            return ast.Wildcard(ast.WildcardKind.UNBOUNDED, span=span)
        last = bounds[-1]
        end = last.span.end if last.span is not None else question.end
        return ast.Wildcard(kind, tuple(bounds), span=ast.Span(question.start, end))

    def _parse_wildcard_bound(self) -> ast.TypeExpr:
        bound = self._type()
        if isinstance(bound, ast.Wildcard):
            raise ParseError("wildcard bound cannot be a wildcard", position=bound.position)
        if isinstance(bound, ast.Primitive):
            raise InvalidTypeArgumentError(
                f"primitive type {bound.name} cannot be a wildcard bound",
                position=bound.position,
            )
        return bound

    def _parse_internal_array_name(self) -> ast.InternalArrayName:
        token = self._advance()
        if _INTERNAL_NAME.fullmatch(token.value) is None:
            raise MalformedInternalNameError(
                f"{_diagnose_internal_name(token.value)} in {token.value!r}",
                position=token.start,
                expected="'[' followed by a primitive code or 'L<class name>;'",
            )
        return ast.InternalArrayName(token.value, span=ast.Span(token.start, token.end))


def _not_parameterizable(expr: ast.TypeExpr) -> str:
    if isinstance(expr, ast.Parameterized):
        return f"{expr.raw.name} is already parameterized"
    if isinstance(expr, (ast.ArrayOf, ast.InternalArrayName)):
        return "array types cannot be parameterized"
    if isinstance(expr, ast.Primitive):
        return f"primitive type {expr.name} cannot be parameterized"
    return "type cannot be parameterized"


def _diagnose_internal_name(encoded: str) -> str:
    element = encoded.lstrip("[")
    if not element:
        return "missing array element type"
    if element == "V":
        return "void cannot be an array component"
    if element.startswith("L"):
        if not element.endswith(";"):
            return "missing trailing ';'"
        if element.count(";") > 1:
            return "superfluous ';'"
        return "invalid class name"
    if element.endswith(";"):
        return "class descriptor must start with 'L'"
    if len(element) == 1:
        return f"unknown primitive code {element!r}"
    return "malformed element type"


# ---------------------------------------------------------------------------
# Public API


def _check_text(text: object) -> str:
    if text is None:
        raise InvalidArgumentError("type expression must not be None")
    if not isinstance(text, str):
        raise InvalidArgumentError(f"type expression must be a str, got {type(text).__name__}")
    if not text:
        raise ParseError("empty type expression", position=0, expected="type")
    return text


class TypeParser:
    """Parse type expressions into type values using one name resolver.

    Instances keep no per-call state, so a single parser may be shared
    between threads.
    """

    def __init__(
        self,
        resolver: Optional[NameResolver] = None,
        *,
        settings: Optional[ParserSettings] = None,
    ) -> None:
        self.settings = settings if settings is not None else load_settings()
        if resolver is None:
            if self.settings.catalog_path == DEFAULT_CATALOG_PATH:
                resolver = ClassCatalog.default()
            else:
                resolver = ClassCatalog.from_yaml(self.settings.catalog_path)
        self.resolver = resolver

    def parse_expression(self, text: str) -> ast.TypeExpr:
        """Return the syntax tree of ``text`` without resolving any names."""

        return Parser(tokenize(_check_text(text))).parse_type()

    def parse(self, text: str) -> Type:
        """Return the type value denoted by ``text``."""

        value = self.evaluate(self.parse_expression(text))
        _LOGGER.debug("parsed %r as %s", text, value)
        return value

    def resolve_class(self, name: str, *, position: Optional[int] = None) -> ClassType:
        """Resolve ``name``, retrying simple names against the default package."""

        try:
            return self.resolver.resolve(name)
        except ClassNotFoundError:
            if "." in name or not self.settings.default_package:
                raise ClassNotFoundError(name, position=position) from None
        qualified = f"{self.settings.default_package}.{name}"
        _LOGGER.debug("retrying %s as %s", name, qualified)
        try:
            return self.resolver.resolve(qualified)
        except ClassNotFoundError:
            raise ClassNotFoundError(name, position=position) from None

    def evaluate(self, expr: ast.TypeExpr) -> Type:
        """Turn a syntax tree into a type value."""

        if isinstance(expr, ast.Primitive):
            return PRIMITIVES[expr.name]
        if isinstance(expr, ast.RawName):
            return self.resolve_class(expr.name, position=expr.position)
        if isinstance(expr, ast.InternalArrayName):
            return self._evaluate_internal_name(expr)
        if isinstance(expr, ast.ArrayOf):
            return types.array_of(self.evaluate(expr.component))
        if isinstance(expr, ast.Parameterized):
            raw = self.resolve_class(expr.raw.name, position=expr.raw.position)
            if len(expr.arguments) != raw.arity:
                raise ArityMismatchError(
                    raw.name, raw.arity, len(expr.arguments), position=expr.position
                )
            arguments = [self.evaluate(argument) for argument in expr.arguments]
            return types.parameterized_of(raw, arguments)
        if isinstance(expr, ast.Wildcard):
            bounds = [self.evaluate(bound) for bound in expr.bounds]
            if expr.kind is ast.WildcardKind.LOWER:
                return types.supertype_of(*bounds)
            return types.subtype_of(*bounds)
        raise TypeError(f"unsupported type expression node: {expr!r}")

    def _evaluate_internal_name(self, expr: ast.InternalArrayName) -> Type:
        element = expr.element
        if element in _PRIMITIVE_CODES:
            value: Type = PRIMITIVES[_PRIMITIVE_CODES[element]]
        else:
            value = self.resolve_class(element[1:-1], position=expr.position)
        for _ in range(expr.depth):
            value = types.array_of(value)
        return value


@functools.lru_cache(maxsize=1)
def _default_parser() -> TypeParser:
    return TypeParser()


def parse(text: str) -> Type:
    """Parse ``text`` with a shared parser bound to the bundled class catalog."""

    return _default_parser().parse(text)


def parse_expression(text: str) -> ast.TypeExpr:
    """Parse ``text`` into a syntax tree without resolving names."""

    return _default_parser().parse_expression(text)
