"""JSON serialization of evaluated binding values."""

from __future__ import annotations

import json
import math
import re
from typing import TYPE_CHECKING, Any

from ._analyzer.evaluator import UNDEFINED
from .errors import SerializationError

if TYPE_CHECKING:
    from pathlib import Path

_LONE_SURROGATE_RE = re.compile("[\ud800-\udfff]")


def to_json_data(value: Any, path: str | Path | None = None) -> Any:
    """Convert an evaluated value into plain JSON-compatible data.

    ``undefined`` members of objects are dropped and ``undefined`` array items
    become ``null``, as ``JSON.stringify`` does.

    Raises:
        SerializationError: For non-finite numbers, a top-level ``undefined``
            or any value that is not plain data
    """
    if value is UNDEFINED:
        raise SerializationError("value is undefined", path)
    return _convert(value, path)


def _convert(value: Any, path: str | Path | None) -> Any:
    if value is None or isinstance(value, (bool, str, int)):
        return value
    if isinstance(value, float):
        if not math.isfinite(value):
            raise SerializationError(f"non-finite number {value!r} is not representable", path)
        return value
    if isinstance(value, dict):
        return {
            str(key): _convert(item, path) for key, item in value.items() if item is not UNDEFINED
        }
    if isinstance(value, list):
        return [None if item is UNDEFINED else _convert(item, path) for item in value]
    raise SerializationError(f"unsupported value of type {type(value).__name__}", path)


def serialize(value: Any, path: str | Path | None = None) -> str:
    """Serialize a value to indented JSON text, keeping key order.

    Args:
        value: Evaluated value of a binding
        path: Source module, used in errors

    Returns:
        JSON text indented by two spaces, without a trailing newline
    """
    data = to_json_data(value, path)
    try:
        text = json.dumps(data, indent=2, ensure_ascii=False, allow_nan=False)
    except (TypeError, ValueError) as e:
        raise SerializationError(str(e), path) from e
    # Unpaired surrogates cannot be written as UTF-8; escape them like JSON.stringify
    return _LONE_SURROGATE_RE.sub(lambda m: f"\\u{ord(m.group()):04x}", text)


def serialize_bindings(values: dict[str, Any], path: str | Path | None = None) -> str:
    """Serialize several bindings as one object keyed by binding name.

    Bindings whose value is ``undefined`` are left out.
    """
    return serialize(dict(values), path)
