"""
Literal-expression evaluator.

Materializes binding values straight from the syntax tree. Only the nodes a
translation dictionary is made of are understood: object and array literals,
primitives, template strings, references to other bindings (with member
access) and spreads. Anything else is rejected, so no code from the source
module is ever executed.
"""

from __future__ import annotations

import logging
import math
import re
from pathlib import Path
from typing import TYPE_CHECKING, Any

from tsjson.errors import EvaluationError

from .ts_utils import decode_escapes, get_children, get_text, string_value, unwrap_expression

if TYPE_CHECKING:
    from collections.abc import Iterable

    from tree_sitter import Node

    from tsjson.models import CompilationUnit

logger = logging.getLogger(__name__)

# Largest integer a JavaScript number holds exactly
_MAX_SAFE_INTEGER = 2**53 - 1

# Canonical array-index keys are ordered ahead of string keys in JS objects
_ARRAY_INDEX_RE = re.compile(r"^(?:0|[1-9][0-9]*)$")
_MAX_ARRAY_INDEX = 2**32 - 2


class _Undefined:
    """The JavaScript ``undefined`` value."""

    _instance: _Undefined | None = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "undefined"

    def __bool__(self) -> bool:
        return False


UNDEFINED = _Undefined()


def is_array_index(key: str) -> bool:
    return bool(_ARRAY_INDEX_RE.match(key)) and int(key) <= _MAX_ARRAY_INDEX


def order_keys(obj: dict[str, Any]) -> dict[str, Any]:
    """Return ``obj`` with keys in JavaScript property order.

    Integer-like keys come first in ascending order, the remaining keys keep
    their insertion order.
    """
    index_keys = sorted((key for key in obj if is_array_index(key)), key=int)
    if not index_keys:
        return obj
    ordered = {key: obj[key] for key in index_keys}
    ordered.update((key, value) for key, value in obj.items() if not is_array_index(key))
    return ordered


def number_to_key(value: int | float) -> str:
    """Convert a number to the property key JavaScript would use."""
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        if value.is_integer():
            value = int(value)
    return str(value)


def normalize_number(value: float) -> int | float:
    """Collapse integral floats to ``int``, since JavaScript has a single number type."""
    if value.is_integer() and abs(value) <= _MAX_SAFE_INTEGER:
        return int(value)
    return value


def parse_number(text: str) -> int | float:
    """Parse a JavaScript numeric literal."""
    text = text.replace("_", "")
    lowered = text.lower()
    if lowered.endswith("n"):
        raise ValueError("BigInt literals are not supported")
    if lowered.startswith(("0x", "0o", "0b")):
        return int(text, 0)
    if len(text) > 1 and text[0] == "0" and text.isdigit():
        # Legacy octal literal
        return int(text, 8) if set(text) <= set("01234567") else int(text)
    return normalize_number(float(text))


class LiteralEvaluator:
    """Evaluates binding initializers against a scope of earlier bindings."""

    def __init__(self, path: str | Path | None = None, scope: dict[str, Any] | None = None):
        self.path = Path(path) if path is not None else None
        self.scope: dict[str, Any] = dict(scope) if scope else {}
        self.known_names: set[str] = set(self.scope)

    def _error(self, message: str, node: Node | None = None) -> EvaluationError:
        if node is not None:
            row, col = node.start_point
            message = f"{message} (line {row + 1}, column {col + 1})"
        return EvaluationError(message, self.path)

    def evaluate_unit(self, unit: CompilationUnit, order: Iterable[str]) -> dict[str, Any]:
        """Evaluate the bindings of a compilation unit in the given order.

        Args:
            unit: Compilation unit holding the bindings
            order: Binding names, dependencies first

        Returns:
            Binding name -> evaluated value, in evaluation order

        Raises:
            EvaluationError: If a binding cannot be materialized
        """
        self.known_names.update(unit.bindings)
        results: dict[str, Any] = {}
        for name in order:
            binding = unit.bindings[name]
            if binding.initializer is None:
                value: Any = UNDEFINED
            else:
                value = self.evaluate(binding.initializer)
            self.scope[name] = value
            results[name] = value
            logger.debug(f"Evaluated binding '{name}'")
        return results

    def evaluate(self, node: Node) -> Any:
        """Evaluate a single expression node."""
        node = unwrap_expression(node)
        handler = getattr(self, f"_eval_{node.type}", None)
        if handler is None:
            raise self._error(f"unsupported expression '{node.type}'", node)
        return handler(node)

    def _eval_object(self, node: Node) -> dict[str, Any]:
        obj: dict[str, Any] = {}
        for member in get_children(node):
            if member.type == "pair":
                key = self._property_key(member.child_by_field_name("key"))
                obj[key] = self.evaluate(member.child_by_field_name("value"))
            elif member.type == "shorthand_property_identifier":
                obj[get_text(member)] = self._lookup(get_text(member), member)
            elif member.type == "spread_element":
                self._spread_into_object(obj, member)
            else:
                raise self._error(f"unsupported object member '{member.type}'", member)
        return order_keys(obj)

    def _property_key(self, key: Node) -> str:
        if key.type in ("property_identifier", "private_property_identifier"):
            return get_text(key)
        if key.type == "string":
            return self._string_value(key)
        if key.type == "number":
            return number_to_key(self._eval_number(key))
        if key.type == "computed_property_name":
            value = self.evaluate(get_children(key)[0])
            if isinstance(value, bool) or value is None or value is UNDEFINED:
                return js_string(value)
            if isinstance(value, (int, float)):
                return number_to_key(value)
            if isinstance(value, str):
                return value
        raise self._error("unsupported property key", key)

    def _spread_into_object(self, obj: dict[str, Any], member: Node) -> None:
        value = self.evaluate(get_children(member)[0])
        if isinstance(value, dict):
            obj.update(value)
        elif isinstance(value, (list, str)):
            obj.update((str(index), item) for index, item in enumerate(value))
        # Spreading null, undefined, numbers or booleans adds nothing

    def _eval_array(self, node: Node) -> list[Any]:
        items: list[Any] = []
        for element in get_children(node):
            if element.type == "spread_element":
                value = self.evaluate(get_children(element)[0])
                if not isinstance(value, (list, str)):
                    raise self._error(f"cannot spread {js_type(value)} into an array", element)
                items.extend(value)
            else:
                items.append(self.evaluate(element))
        return items

    def _string_value(self, node: Node) -> str:
        try:
            return string_value(node)
        except ValueError as e:
            raise self._error(str(e), node) from e

    def _eval_string(self, node: Node) -> str:
        return self._string_value(node)

    def _eval_template_string(self, node: Node) -> str:
        raw = node.text or b""
        parts: list[str] = []
        offset = 1
        for child in node.children:
            if child.type != "template_substitution":
                continue
            start = child.start_byte - node.start_byte
            parts.append(self._cooked(raw[offset:start], node))
            expression = get_children(child)
            parts.append(js_string(self.evaluate(expression[0])) if expression else "")
            offset = child.end_byte - node.start_byte
        parts.append(self._cooked(raw[offset:-1], node))
        return "".join(parts)

    def _cooked(self, raw: bytes, node: Node) -> str:
        try:
            return _cook_template(raw)
        except ValueError as e:
            raise self._error(str(e), node) from e

    def _eval_number(self, node: Node) -> int | float:
        try:
            return parse_number(get_text(node))
        except ValueError as e:
            raise self._error(str(e), node) from e

    def _eval_unary_expression(self, node: Node) -> int | float:
        operator = get_text(node.child_by_field_name("operator"))
        value = self.evaluate(node.child_by_field_name("argument"))
        is_number = isinstance(value, (int, float)) and not isinstance(value, bool)
        if operator not in ("-", "+") or not is_number:
            raise self._error(f"unsupported unary expression '{get_text(node)}'", node)
        return -value if operator == "-" else value

    def _eval_true(self, node: Node) -> bool:
        return True

    def _eval_false(self, node: Node) -> bool:
        return False

    def _eval_null(self, node: Node) -> None:
        return None

    def _eval_undefined(self, node: Node) -> _Undefined:
        return UNDEFINED

    def _eval_identifier(self, node: Node) -> Any:
        return self._lookup(get_text(node), node)

    def _lookup(self, name: str, node: Node) -> Any:
        if name in self.scope:
            return self.scope[name]
        if name == "undefined":
            return UNDEFINED
        if name in self.known_names:
            raise self._error(f"cannot access '{name}' before initialization", node)
        raise self._error(f"'{name}' is not defined", node)

    def _eval_member_expression(self, node: Node) -> Any:
        target = self.evaluate(node.child_by_field_name("object"))
        optional = any(child.type == "optional_chain" for child in node.children)
        key = get_text(node.child_by_field_name("property"))
        return self._get_property(target, key, node, optional)

    def _eval_subscript_expression(self, node: Node) -> Any:
        target = self.evaluate(node.child_by_field_name("object"))
        index = self.evaluate(node.child_by_field_name("index"))
        optional = any(child.type == "optional_chain" for child in node.children)
        if isinstance(index, (int, float)) and not isinstance(index, bool):
            index = number_to_key(index)
        elif not isinstance(index, str):
            raise self._error("unsupported subscript", node)
        return self._get_property(target, index, node, optional)

    def _get_property(self, target: Any, key: str, node: Node, optional: bool = False) -> Any:
        if target is None or target is UNDEFINED:
            if optional:
                return UNDEFINED
            raise self._error(f"cannot read property '{key}' of {js_string(target)}", node)
        if isinstance(target, dict):
            return target.get(key, UNDEFINED)
        if isinstance(target, (list, str)):
            if key == "length":
                return len(target)
            if is_array_index(key) and int(key) < len(target):
                return target[int(key)]
            return UNDEFINED
        raise self._error(f"cannot read property '{key}' of {js_type(target)}", node)


def _cook_template(raw: bytes) -> str:
    text = raw.decode("utf-8").replace("\r\n", "\n").replace("\r", "\n")
    return decode_escapes(text)


def js_type(value: Any) -> str:
    """Name of a value's JavaScript type, for error messages."""
    if value is None:
        return "null"
    if value is UNDEFINED:
        return "undefined"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    return "object"


def js_string(value: Any) -> str:
    """Convert a value to a string the way template literals do."""
    if value is None:
        return "null"
    if value is UNDEFINED:
        return "undefined"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return number_to_key(value)
    if isinstance(value, str):
        return value
    if isinstance(value, list):
        return ",".join(
            "" if item is None or item is UNDEFINED else js_string(item) for item in value
        )
    return "[object Object]"


def evaluate_bindings(
    unit: CompilationUnit, order: Iterable[str], path: str | Path | None = None
) -> dict[str, Any]:
    """Evaluate a compilation unit's bindings in a fresh, empty scope."""
    return LiteralEvaluator(path if path is not None else unit.path).evaluate_unit(unit, order)
