"""Error taxonomy for type expression parsing and construction.

Everything the parser can reject derives from :class:`TypeExpressionError`.
Malformed input is reported through :class:`ParseError` and its subclasses,
while failures to find a named class surface as :class:`ClassNotFoundError`
so callers can tell the two apart with a single ``except`` clause each.
"""

from __future__ import annotations

from typing import Optional

__all__ = [
    "ArityMismatchError",
    "CanonicalizationError",
    "ClassNotFoundError",
    "ConfigError",
    "InvalidArgumentError",
    "InvalidTypeArgumentError",
    "LexError",
    "MalformedInternalNameError",
    "ParseError",
    "TrailingInputError",
    "TypeExpressionError",
]


class TypeExpressionError(RuntimeError):
    """Base class carrying an optional source offset and expectation."""

    def __init__(
        self,
        message: str,
        *,
        position: Optional[int] = None,
        expected: Optional[str] = None,
    ) -> None:
        text = message
        if position is not None:
            text = f"{position}: {text}"
        if expected:
            text = f"{text} (expected {expected})"
        super().__init__(text)
        self.message = message
        self.position = position
        self.expected = expected


class ParseError(TypeExpressionError):
    """The input text is not a well-formed type expression."""


class LexError(ParseError):
    """No token matches at ``position``."""


class TrailingInputError(ParseError):
    """A complete type was parsed but tokens remain."""


class MalformedInternalNameError(ParseError):
    """Broken ``[I`` / ``[Lpkg.Name;`` style array encoding."""


class InvalidTypeArgumentError(ParseError):
    """A primitive type was used where a reference type is required."""


class ArityMismatchError(ParseError):
    """Type argument count differs from the raw class's declared parameters."""

    def __init__(
        self,
        raw_name: str,
        expected_count: int,
        actual_count: int,
        *,
        position: Optional[int] = None,
    ) -> None:
        super().__init__(
            f"{raw_name} expects {expected_count} type argument(s), got {actual_count}",
            position=position,
        )
        self.raw_name = raw_name
        self.expected_count = expected_count
        self.actual_count = actual_count


class ClassNotFoundError(TypeExpressionError):
    """The name resolver has no class for ``name``."""

    def __init__(self, name: str, *, position: Optional[int] = None) -> None:
        super().__init__(f"class not found: {name}", position=position)
        self.name = name


class CanonicalizationError(TypeExpressionError):
    """A placeholder variable was left unbound while freezing a type value."""


class InvalidArgumentError(ValueError):
    """The caller passed no text (``None``) or a non-string object."""


class ConfigError(ValueError):
    """Settings or class catalog documents are unreadable or mis-shaped."""
