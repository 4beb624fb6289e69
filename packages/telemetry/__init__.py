"""Convenience exports for typeexpr telemetry utilities."""

from . import logger

__all__ = ["logger"]
