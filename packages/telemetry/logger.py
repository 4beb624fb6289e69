"""Logging setup shared by the typeexpr modules.

The ``typeexpr`` logger tree is configured once, from ``configs/logging.yaml``
when that file exists and parses, otherwise from the built-in console setup.
``$TYPEEXPR_LOG_LEVEL`` overrides the package logger's level in either case.
"""

from __future__ import annotations

import logging
import logging.config
import os
from pathlib import Path
from threading import RLock
from typing import Any, Mapping, Optional

import yaml

LEVEL_ENV_VAR = "TYPEEXPR_LOG_LEVEL"
PACKAGE_LOGGER = "typeexpr"
DEFAULT_LEVEL = "WARNING"
CONFIG_PATH = Path(__file__).resolve().parents[2] / "configs" / "logging.yaml"

_SECTIONS = frozenset({"version", "disable_existing_loggers", "formatters", "handlers", "loggers"})

_lock = RLock()
_CONFIGURED = False


def default_config(level: str = DEFAULT_LEVEL) -> dict[str, Any]:
    """Console-only configuration for the package logger at ``level``."""

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "standard": {"format": "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"}
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "stream": "ext://sys.stderr",
                "formatter": "standard",
            }
        },
        "loggers": {
            PACKAGE_LOGGER: {"level": level, "handlers": ["console"], "propagate": False}
        },
    }


def _load_config(path: Optional[Path] = None) -> dict[str, Any]:
    """Merge the YAML file over the defaults, then apply the level override."""

    path = CONFIG_PATH if path is None else Path(path)
    config = default_config()
    if path.exists():
        try:
            data = yaml.safe_load(path.read_text(encoding="utf-8"))
        except yaml.YAMLError as exc:  # pragma: no cover - broken config on disk
            logging.getLogger("typeexpr.telemetry").warning("ignoring %s: %s", path, exc)
            data = None
        if isinstance(data, Mapping):
            config.update((key, value) for key, value in data.items() if key in _SECTIONS)

    level = os.environ.get(LEVEL_ENV_VAR, "").strip().upper()
    if level:
        loggers = dict(config.get("loggers") or {})
        loggers[PACKAGE_LOGGER] = {**(loggers.get(PACKAGE_LOGGER) or {}), "level": level}
        config["loggers"] = loggers
    return config


def configure(path: Optional[Path] = None) -> None:
    """Configure the ``typeexpr`` logger hierarchy exactly once."""

    global _CONFIGURED
    with _lock:
        if not _CONFIGURED:
            logging.config.dictConfig(_load_config(path))
            _CONFIGURED = True


def get_logger(name: str) -> logging.Logger:
    if not isinstance(name, str) or not name:
        raise ValueError("logger name must be a non-empty string")
    configure()
    return logging.getLogger(name)


__all__ = ["LEVEL_ENV_VAR", "configure", "default_config", "get_logger"]
