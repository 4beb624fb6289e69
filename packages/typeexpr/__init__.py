"""Parse textual type expressions into canonical type values."""

from . import ast, canonical, config, errors, grammar, lexer, reflect, resolver, types
from .errors import (
    ArityMismatchError,
    ClassNotFoundError,
    InvalidArgumentError,
    InvalidTypeArgumentError,
    LexError,
    MalformedInternalNameError,
    ParseError,
    TrailingInputError,
    TypeExpressionError,
)
from .grammar import TypeParser, parse, parse_expression
from .reflect import format_type
from .resolver import ClassCatalog, NameResolver
from .types import array_of, parameterized_of, subtype_of, supertype_of

__all__ = [
    "ArityMismatchError",
    "ClassCatalog",
    "ClassNotFoundError",
    "InvalidArgumentError",
    "InvalidTypeArgumentError",
    "LexError",
    "MalformedInternalNameError",
    "NameResolver",
    "ParseError",
    "TrailingInputError",
    "TypeExpressionError",
    "TypeParser",
    "array_of",
    "ast",
    "canonical",
    "config",
    "errors",
    "format_type",
    "grammar",
    "lexer",
    "parameterized_of",
    "parse",
    "parse_expression",
    "reflect",
    "resolver",
    "subtype_of",
    "supertype_of",
    "types",
]
