"""YAML-backed settings for the type expression parser."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Optional

import yaml

from .errors import ConfigError

__all__ = [
    "CONFIG_ENV_VAR",
    "DEFAULT_CATALOG_PATH",
    "DEFAULT_PACKAGE",
    "ParserSettings",
    "load_config",
    "load_settings",
]

CONFIG_ENV_VAR = "TYPEEXPR_CONFIG"

DEFAULT_PACKAGE = "java.lang"

DEFAULT_CATALOG_PATH = Path(__file__).resolve().parent / "catalog.yaml"


def load_config(path: str | Path) -> dict[str, Any]:
    """Return the parsed YAML mapping stored at ``path``.

    An empty document yields ``{}``; anything other than a mapping at the root
    raises :class:`ConfigError`.
    """

    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"configuration file not found: {config_path}")
    raw_text = config_path.read_text(encoding="utf-8")
    try:
        data = yaml.safe_load(raw_text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"failed to parse {config_path}: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"{config_path}: configuration root must be a mapping")
    return data


@dataclass(frozen=True, slots=True)
class ParserSettings:
    """Knobs shared by :class:`~packages.typeexpr.grammar.TypeParser` instances."""

    default_package: str = DEFAULT_PACKAGE
    catalog_path: Path = DEFAULT_CATALOG_PATH

    @classmethod
    def from_mapping(
        cls, data: Mapping[str, Any], *, base_dir: Optional[Path] = None
    ) -> ParserSettings:
        default_package = data.get("default_package", DEFAULT_PACKAGE)
        if not isinstance(default_package, str):
            raise ConfigError("default_package must be a string")
        default_package = default_package.strip().rstrip(".")
        catalog_value = data.get("catalog")
        if catalog_value is None:
            catalog_path = DEFAULT_CATALOG_PATH
        else:
            catalog_path = Path(str(catalog_value))
            if not catalog_path.is_absolute() and base_dir is not None:
                catalog_path = base_dir / catalog_path
        return cls(default_package=default_package, catalog_path=catalog_path)


def load_settings(path: str | Path | None = None) -> ParserSettings:
    """Load settings from ``path``, ``$TYPEEXPR_CONFIG`` or the built-in defaults."""

    if path is None:
        path = os.environ.get(CONFIG_ENV_VAR) or None
    if path is None:
        return ParserSettings()
    config_path = Path(path)
    data = load_config(config_path)
    section = data.get("typeexpr", data)
    if not isinstance(section, Mapping):
        raise ConfigError(f"{config_path}: 'typeexpr' section must be a mapping")
    return ParserSettings.from_mapping(section, base_dir=config_path.parent)
