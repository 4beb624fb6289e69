"""Factory for composite type values.

Every constructor here follows the same recipe: describe the composite with
fresh placeholders, bind each placeholder to the caller's type, and let
:class:`~packages.typeexpr.canonical.TypeResolver` freeze the result.  The
returned values therefore compare equal to any equivalently built value,
including ones created directly from the :mod:`reflect` dataclasses.
"""

from __future__ import annotations

from typing import Sequence

from .canonical import TypeResolver, fresh_variable
from .errors import ArityMismatchError, InvalidTypeArgumentError
from .reflect import (
    OBJECT,
    ClassType,
    GenericArrayType,
    ParameterizedType,
    Type,
    WildcardType,
)

__all__ = ["array_of", "parameterized_of", "subtype_of", "supertype_of"]


def _require_reference(typ: Type, role: str, *, wildcard_ok: bool = False) -> None:
    if not isinstance(typ, Type):
        raise InvalidTypeArgumentError(f"{role} must be a type value, got {typ!r}")
    if isinstance(typ, WildcardType) and not wildcard_ok:
        raise InvalidTypeArgumentError(f"wildcard {typ} cannot be used as {role}")
    if isinstance(typ, ClassType) and typ.primitive:
        raise InvalidTypeArgumentError(f"primitive type {typ.name} cannot be used as {role}")


def subtype_of(*bounds: Type) -> WildcardType:
    """Return ``? extends bounds``; with no bounds this is the unbounded ``?``.

    ``Object`` is implied by every other bound, so it is dropped whenever one
    is present: ``subtype_of(OBJECT, NUMBER) == subtype_of(NUMBER)``.
    """

    bounds = tuple(b for b in bounds if b != OBJECT) or (OBJECT,)
    resolver = TypeResolver()
    variables = []
    for index, bound in enumerate(bounds, start=1):
        _require_reference(bound, "a wildcard bound")
        var = fresh_variable(f"B{index}")
        variables.append(var)
        resolver = resolver.where(var, bound)
    template = WildcardType(upper_bounds=tuple(variables), lower_bounds=())
    return resolver.resolve(template)  # type: ignore[return-value]


def supertype_of(bound: Type) -> WildcardType:
    """Return ``? super bound``."""

    _require_reference(bound, "a wildcard bound")
    var = fresh_variable("SUB")
    template = WildcardType(upper_bounds=(OBJECT,), lower_bounds=(var,))
    return TypeResolver().where(var, bound).resolve(template)  # type: ignore[return-value]


def parameterized_of(raw: ClassType, arguments: Sequence[Type]) -> ParameterizedType:
    """Apply ``arguments`` to ``raw`` after checking the declared arity.

    Bounds of the declared type parameters are not checked, so values such as
    ``Enum<String>`` are accepted.
    """

    if not isinstance(raw, ClassType) or raw.primitive or raw.is_array:
        raise InvalidTypeArgumentError(f"{raw} cannot be parameterized")
    arguments = tuple(arguments)
    if len(arguments) != raw.arity:
        raise ArityMismatchError(raw.name, raw.arity, len(arguments))
    resolver = TypeResolver()
    variables = []
    for index, argument in enumerate(arguments):
        _require_reference(argument, "a type argument", wildcard_ok=True)
        var = fresh_variable(f"T{index}")
        variables.append(var)
        resolver = resolver.where(var, argument)
    template = ParameterizedType(raw, tuple(variables))
    return resolver.resolve(template)  # type: ignore[return-value]


def array_of(component: Type) -> Type:
    """Return the array type of ``component``.

    Plain classes (primitives included) map to their native array class; any
    other component yields a :class:`GenericArrayType`.
    """

    if isinstance(component, ClassType):
        return component.array_class()
    _require_reference(component, "an array component")
    var = fresh_variable("E")
    return TypeResolver().where(var, component).resolve(GenericArrayType(var))
