"""Convert TypeScript translation modules into JSON files."""

from __future__ import annotations

from .__version import __version__
from .config import CheckPath, ConvertConfig
from .converter import convert_module, load_values
from .scanner import scan

__all__ = [
    "CheckPath",
    "ConvertConfig",
    "__version__",
    "convert_module",
    "load_values",
    "scan",
]
