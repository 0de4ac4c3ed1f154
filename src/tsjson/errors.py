"""Exceptions raised while converting translation modules.

Every error carries the path of the module (or directory) being converted.
All of them are recoverable at the scan level: the failing module is skipped
and the scan continues.
"""

from __future__ import annotations

from pathlib import Path


class ConversionError(Exception):
    """Base class for per-module conversion failures."""

    def __init__(self, message: str, path: str | Path | None = None):
        self.path = Path(path) if path is not None else None
        self.message = message
        super().__init__(f"{path}: {message}" if path is not None else message)


class DirectoryReadError(ConversionError):
    """A directory could not be listed or a file could not be read."""


class ParseError(ConversionError):
    """Source text is not valid in the supported TypeScript subset."""


class ResolutionError(ConversionError):
    """An import statement points at a module that does not exist."""


class EvaluationError(ConversionError):
    """A binding could not be materialized into a concrete value."""


class SerializationError(ConversionError):
    """An evaluated value cannot be represented as JSON."""
