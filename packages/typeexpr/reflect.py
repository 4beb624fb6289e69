"""Host type model: nominal classes plus the composite generic type values.

The model mirrors the shape of a JVM-style reflection API. ``ClassType`` covers
ordinary classes, the eight primitive types and native array classes; the
composites (``ParameterizedType``, ``WildcardType``, ``GenericArrayType``) are
frozen dataclasses so equality and hashing follow their structure rather than
the identity of whatever built them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from .errors import InvalidTypeArgumentError

__all__ = [
    "ClassType",
    "GenericArrayType",
    "OBJECT",
    "PRIMITIVES",
    "PRIMITIVE_DESCRIPTORS",
    "ParameterizedType",
    "Type",
    "TypeVariable",
    "WildcardType",
    "format_type",
]


class Type:
    """Marker base class for every type value."""

    __slots__ = ()

    def __str__(self) -> str:
        return format_type(self)


# ---------------------------------------------------------------------------
# Nominal types


@dataclass(frozen=True, slots=True)
class TypeVariable(Type):
    """Type parameter declared by a generic class (``E`` of ``List<E>``)."""

    name: str
    declaration: str

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True, slots=True)
class ClassType(Type):
    """Nominal type identified by its binary name.

    Array classes use the internal encoding for ``name`` (``[I``,
    ``[Ljava.lang.String;``) and keep a reference to their ``component``.
    Only the name takes part in equality.
    """

    name: str
    type_parameters: tuple[TypeVariable, ...] = field(default=(), compare=False)
    component: Optional[ClassType] = field(default=None, compare=False)
    primitive: bool = field(default=False, compare=False)

    @property
    def is_array(self) -> bool:
        return self.component is not None

    @property
    def arity(self) -> int:
        return len(self.type_parameters)

    @property
    def canonical_name(self) -> str:
        """Source-style name: ``int[][]`` rather than ``[[I``."""

        if self.component is not None:
            return self.component.canonical_name + "[]"
        return self.name.replace("$", ".")

    def array_class(self) -> ClassType:
        """Return the native array class whose component is this class."""

        if self.primitive and self.name == "void":
            raise InvalidTypeArgumentError("void cannot be an array component")
        if self.primitive:
            encoded = "[" + PRIMITIVE_DESCRIPTORS[self.name]
        elif self.component is not None:
            encoded = "[" + self.name
        else:
            encoded = f"[L{self.name};"
        return ClassType(encoded, component=self)

    def __str__(self) -> str:
        return self.name


def _primitive(name: str) -> ClassType:
    return ClassType(name, primitive=True)


PRIMITIVE_DESCRIPTORS: dict[str, str] = {
    "void": "V",
    "boolean": "Z",
    "byte": "B",
    "short": "S",
    "int": "I",
    "long": "J",
    "float": "F",
    "double": "D",
}

PRIMITIVES: dict[str, ClassType] = {name: _primitive(name) for name in PRIMITIVE_DESCRIPTORS}

OBJECT = ClassType("java.lang.Object")


# ---------------------------------------------------------------------------
# Composite types


@dataclass(frozen=True, slots=True)
class ParameterizedType(Type):
    """A raw class applied to an ordered tuple of type arguments."""

    raw: ClassType
    arguments: tuple[Type, ...]


@dataclass(frozen=True, slots=True)
class GenericArrayType(Type):
    """Array whose component is not a plain class (``List<String>[]``)."""

    component: Type


@dataclass(frozen=True, slots=True, eq=False)
class WildcardType(Type):
    """``?``-style type argument; bounds compare as sets."""

    upper_bounds: tuple[Type, ...] = (OBJECT,)
    lower_bounds: tuple[Type, ...] = ()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, WildcardType):
            return NotImplemented
        return frozenset(self.upper_bounds) == frozenset(other.upper_bounds) and frozenset(
            self.lower_bounds
        ) == frozenset(other.lower_bounds)

    def __hash__(self) -> int:
        return hash((WildcardType, frozenset(self.upper_bounds), frozenset(self.lower_bounds)))


# ---------------------------------------------------------------------------
# Pretty-printing


def format_type(typ: Type, *, canonical: bool = False) -> str:
    """Return the textual form of ``typ`` accepted back by the parser.

    Classes print by binary name (``[I``, ``java.util.Map$Entry``) unless
    ``canonical`` is set, in which case array classes print as ``int[]``.
    """

    def pretty(t: Type) -> str:
        if isinstance(t, ClassType):
            if canonical and t.component is not None:
                return pretty(t.component) + "[]"
            return t.name
        if isinstance(t, ParameterizedType):
            inside = ", ".join(pretty(arg) for arg in t.arguments)
            return f"{t.raw.name}<{inside}>"
        if isinstance(t, GenericArrayType):
            return pretty(t.component) + "[]"
        if isinstance(t, WildcardType):
            if t.lower_bounds:
                return "? super " + " & ".join(pretty(b) for b in t.lower_bounds)
            upper = [b for b in t.upper_bounds if b != OBJECT]
            if not upper:
                return "?"
            return "? extends " + " & ".join(pretty(b) for b in upper)
        if isinstance(t, TypeVariable):
            return t.name
        return repr(t)

    return pretty(typ)
