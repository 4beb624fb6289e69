"""Placeholder substitution used to freeze composite type values.

The factory in :mod:`packages.typeexpr.types` first builds each composite as a
template whose slots are :class:`FreshVariable` placeholders, then asks a
:class:`TypeResolver` to replace every placeholder with its actual type.  The
result is rebuilt bottom-up from the reflect dataclasses, so two structurally
identical inputs always freeze into equal values.
"""

from __future__ import annotations

import itertools
from typing import Mapping, Optional

from .errors import CanonicalizationError
from .reflect import (
    ClassType,
    GenericArrayType,
    ParameterizedType,
    Type,
    TypeVariable,
    WildcardType,
)

__all__ = ["FreshVariable", "TypeResolver", "contains_placeholder", "fresh_variable"]

_SERIAL = itertools.count()


class FreshVariable(Type):
    """Placeholder that compares equal only to itself."""

    __slots__ = ("name", "serial")

    def __init__(self, name: str) -> None:
        self.name = name
        self.serial = next(_SERIAL)

    def __eq__(self, other: object) -> bool:
        return self is other

    def __hash__(self) -> int:
        return hash((FreshVariable, self.serial))

    def __repr__(self) -> str:
        return f"{self.name}#{self.serial}"


def fresh_variable(name: str) -> FreshVariable:
    return FreshVariable(name)


def contains_placeholder(typ: Type) -> bool:
    """Return ``True`` if any :class:`FreshVariable` remains inside ``typ``."""

    if isinstance(typ, FreshVariable):
        return True
    if isinstance(typ, ParameterizedType):
        return any(contains_placeholder(arg) for arg in typ.arguments)
    if isinstance(typ, WildcardType):
        return any(contains_placeholder(b) for b in typ.upper_bounds + typ.lower_bounds)
    if isinstance(typ, GenericArrayType):
        return contains_placeholder(typ.component)
    return False


class TypeResolver:
    """Immutable substitution from placeholders (or type variables) to types."""

    __slots__ = ("_mappings",)

    def __init__(self, mappings: Optional[Mapping[Type, Type]] = None) -> None:
        self._mappings: dict[Type, Type] = dict(mappings or {})

    def where(self, variable: Type, actual: Type) -> TypeResolver:
        """Return a new resolver that additionally maps ``variable`` to ``actual``."""

        if not isinstance(variable, (FreshVariable, TypeVariable)):
            raise CanonicalizationError(f"cannot bind non-variable {variable!r}")
        existing = self._mappings.get(variable)
        if existing is not None and existing != actual:
            raise CanonicalizationError(
                f"{variable!r} already bound to {existing!r}, cannot rebind to {actual!r}"
            )
        updated = dict(self._mappings)
        updated[variable] = actual
        return TypeResolver(updated)

    def resolve(self, typ: Type) -> Type:
        """Substitute every bound variable in ``typ`` and verify none leak."""

        resolved = self._resolve(typ)
        if contains_placeholder(resolved):
            raise CanonicalizationError(f"unbound placeholder left in {resolved!r}")
        return resolved

    def _resolve(self, typ: Type) -> Type:
        if isinstance(typ, (FreshVariable, TypeVariable)):
            actual = self._mappings.get(typ)
            if actual is None:
                if isinstance(typ, FreshVariable):
                    raise CanonicalizationError(f"placeholder {typ!r} has no binding")
                return typ
            return actual
        if isinstance(typ, ParameterizedType):
            arguments = tuple(self._resolve(arg) for arg in typ.arguments)
            return ParameterizedType(typ.raw, arguments)
        if isinstance(typ, WildcardType):
            return WildcardType(
                tuple(self._resolve(b) for b in typ.upper_bounds),
                tuple(self._resolve(b) for b in typ.lower_bounds),
            )
        if isinstance(typ, GenericArrayType):
            component = self._resolve(typ.component)
            # A class component collapses to its native array class.
            if isinstance(component, ClassType):
                return component.array_class()
            return GenericArrayType(component)
        return typ
