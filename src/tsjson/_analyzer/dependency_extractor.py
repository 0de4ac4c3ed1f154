"""
Dependency extraction for binding initializers.

Collects the identifiers a binding's initializer reads. Member accesses and
calls are reduced to their root identifier, and object property keys are
never treated as references. This is a heuristic good enough to order
literal initializers that point at sibling bindings, not full scope analysis.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from .ts_utils import get_children, get_text, unwrap_expression

if TYPE_CHECKING:
    from tree_sitter import Node

# Nodes whose dependency is their left-most (root) operand
_ROOTED_TYPES = {
    "member_expression": "object",
    "call_expression": "function",
}


def extract_dependencies(initializer: Node | None) -> list[str]:
    """Return identifiers referenced by an initializer, in first-seen order.

    Args:
        initializer: Value node of a variable declarator, or None

    Returns:
        Unique identifier names in the order they appear
    """
    found: dict[str, None] = {}
    if initializer is not None:
        _collect(initializer, found)
    return list(found)


def _collect(node: Node, found: dict[str, None]) -> None:
    node = unwrap_expression(node)
    if node is None:
        return

    node_type = node.type
    if node_type in ("identifier", "shorthand_property_identifier"):
        name = get_text(node)
        if name != "undefined":
            found.setdefault(name)
    elif node_type == "object":
        for member in get_children(node):
            if member.type == "pair":
                key = member.child_by_field_name("key")
                if key is not None and key.type == "computed_property_name":
                    for inner in get_children(key):
                        _collect(inner, found)
                value = member.child_by_field_name("value")
                if value is not None:
                    _collect(value, found)
            else:
                _collect(member, found)
    elif node_type in _ROOTED_TYPES:
        root = node.child_by_field_name(_ROOTED_TYPES[node_type])
        if root is not None:
            _collect(root, found)
        if node_type == "call_expression":
            for argument in get_children(node.child_by_field_name("arguments")):
                _collect(argument, found)
    elif node_type == "subscript_expression":
        for field_name in ("object", "index"):
            child = node.child_by_field_name(field_name)
            if child is not None:
                _collect(child, found)
    elif node_type in ("property_identifier", "string", "number", "template_chars"):
        return
    else:
        # arrays, spreads, template substitutions, unary operators
        for child in get_children(node):
            _collect(child, found)
