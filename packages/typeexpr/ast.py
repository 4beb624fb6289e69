"""Syntax tree for parsed type expressions.

Nodes are frozen dataclasses built bottom-up by the grammar and consumed once
when the tree is turned into a type value.  Source spans are kept for error
reporting but excluded from equality so two parses of ``boolean[]`` and
``boolean [ ]`` produce equal trees.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Optional

__all__ = [
    "ArrayOf",
    "InternalArrayName",
    "Node",
    "Parameterized",
    "Primitive",
    "RawName",
    "Span",
    "TypeExpr",
    "Wildcard",
    "WildcardKind",
]


@dataclass(frozen=True, slots=True)
class Span:
    """Half-open ``[start, end)`` character offsets in the source text."""

    start: int
    end: int


@dataclass(frozen=True, slots=True, kw_only=True)
class Node:
    """Base class for all type expression nodes."""

    span: Optional[Span] = field(default=None, compare=False, repr=False)

    @property
    def position(self) -> Optional[int]:
        return self.span.start if self.span is not None else None


TypeExpr = Node


@dataclass(frozen=True, slots=True)
class Primitive(Node):
    """One of the eight primitive type keywords."""

    name: str


@dataclass(frozen=True, slots=True)
class RawName(Node):
    """Unresolved class reference; ``name`` is already dot-joined."""

    name: str


@dataclass(frozen=True, slots=True)
class InternalArrayName(Node):
    """Validated internal array encoding such as ``[[Ljava.lang.String;``."""

    encoded: str

    @property
    def depth(self) -> int:
        return len(self.encoded) - len(self.encoded.lstrip("["))

    @property
    def element(self) -> str:
        """Descriptor after the brackets: a primitive code or ``Lname;``."""

        return self.encoded[self.depth :]


@dataclass(frozen=True, slots=True)
class ArrayOf(Node):
    """Canonical ``T[]`` suffix applied to ``component``."""

    component: Node


@dataclass(frozen=True, slots=True)
class Parameterized(Node):
    """Raw class name applied to type arguments."""

    raw: RawName
    arguments: tuple[Node, ...]


class WildcardKind(enum.Enum):
    UNBOUNDED = "unbounded"
    UPPER = "extends"
    LOWER = "super"


@dataclass(frozen=True, slots=True)
class Wildcard(Node):
    """``?``, ``? extends A & B`` or ``? super bound``.

    ``bounds`` is empty exactly when ``kind`` is ``UNBOUNDED``; a lower bound
    is always a single node.
    """

    kind: WildcardKind
    bounds: tuple[Node, ...] = ()
