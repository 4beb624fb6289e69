"""Name resolution: mapping class names to nominal :class:`ClassType` values.

The grammar only depends on the :class:`NameResolver` protocol.
:class:`ClassCatalog` is the bundled implementation, backed by a YAML document
listing each class's binary name and declared type parameters.
"""

from __future__ import annotations

import functools
import re
from pathlib import Path
from typing import Any, Iterator, Mapping, Protocol, Sequence

from packages.telemetry.logger import get_logger

from .config import DEFAULT_CATALOG_PATH, load_config
from .errors import ClassNotFoundError, ConfigError
from .reflect import ClassType, TypeVariable

__all__ = ["ClassCatalog", "NameResolver"]

_LOGGER = get_logger("typeexpr.resolver")

_SEGMENT = r"[^\W\d][\w$]*|\$[\w$]*"
_BINARY_NAME = re.compile(rf"(?:{_SEGMENT})(?:\.(?:{_SEGMENT}))*")


class NameResolver(Protocol):
    """Anything that can turn a class name into a :class:`ClassType`."""

    def resolve(self, name: str) -> ClassType:
        """Return the class called ``name`` or raise :class:`ClassNotFoundError`."""
        ...


class ClassCatalog:
    """In-memory registry of known classes.

    The catalog is only written while it is being populated; lookups never
    mutate it, so one instance can serve concurrent parses.
    """

    def __init__(self, classes: Mapping[str, Sequence[str]] | None = None) -> None:
        self._classes: dict[str, ClassType] = {}
        for name, parameters in (classes or {}).items():
            self.register(name, parameters)

    def register(self, name: str, type_parameters: Sequence[str] = ()) -> ClassType:
        """Add (or replace) ``name`` with the given type parameter names."""

        if not isinstance(name, str) or not _BINARY_NAME.fullmatch(name):
            raise ConfigError(f"invalid class name: {name!r}")
        if isinstance(type_parameters, str):
            raise ConfigError(f"{name}: type parameters must be a list of names")
        variables = []
        for parameter in type_parameters:
            if not isinstance(parameter, str) or not parameter.isidentifier():
                raise ConfigError(f"{name}: invalid type parameter {parameter!r}")
            variables.append(TypeVariable(parameter, name))
        if len({var.name for var in variables}) != len(variables):
            raise ConfigError(f"{name}: duplicate type parameter names")
        cls = ClassType(name, type_parameters=tuple(variables))
        self._classes[name] = cls
        return cls

    def resolve(self, name: str) -> ClassType:
        try:
            return self._classes[name]
        except KeyError:
            raise ClassNotFoundError(name) from None

    def __contains__(self, name: object) -> bool:
        return name in self._classes

    def __iter__(self) -> Iterator[ClassType]:
        return iter(self._classes.values())

    def __len__(self) -> int:
        return len(self._classes)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> ClassCatalog:
        """Build a catalog from a ``{"classes": {name: [params...]}}`` document."""

        classes = data.get("classes")
        if classes is None:
            return cls()
        if not isinstance(classes, Mapping):
            raise ConfigError("'classes' must map class names to type parameter lists")
        normalised: dict[str, Sequence[str]] = {}
        for name, parameters in classes.items():
            if parameters is None:
                parameters = ()
            if not isinstance(parameters, (list, tuple)):
                raise ConfigError(f"{name}: type parameters must be a list of names")
            normalised[name] = parameters
        return cls(normalised)

    @classmethod
    def from_yaml(cls, path: str | Path) -> ClassCatalog:
        catalog = cls.from_mapping(load_config(path))
        _LOGGER.info("loaded %d classes from %s", len(catalog), path)
        return catalog

    @classmethod
    def default(cls) -> ClassCatalog:
        """Return the shared catalog bundled with the package."""

        return _default_catalog()


@functools.lru_cache(maxsize=1)
def _default_catalog() -> ClassCatalog:
    return ClassCatalog.from_yaml(DEFAULT_CATALOG_PATH)
