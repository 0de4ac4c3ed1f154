"""
Utilities for working with tree-sitter TypeScript nodes.
Provides helper functions for common node queries and text extraction.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from tsjson.constants import DECLARATION_TYPES, TRANSPARENT_WRAPPERS

if TYPE_CHECKING:
    from collections.abc import Generator

    from tree_sitter import Node, Tree

_ESCAPE_RE = re.compile(
    r"\\(?:u\{([0-9a-fA-F]+)\}|u([0-9a-fA-F]{4})|x([0-9a-fA-F]{2})|(\r\n|[\s\S]))"
)

_SINGLE_ESCAPES = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "b": "\b",
    "f": "\f",
    "v": "\v",
    "0": "\0",
}

_LINE_TERMINATORS = ("\n", "\r", "\r\n", "\u2028", "\u2029")

_MAX_CODE_POINT = 0x10FFFF


def get_text(node: Node | None) -> str:
    """Safely get the source text of a node."""
    if node is None or node.text is None:
        return ""
    return node.text.decode("utf-8")


def get_children(node: Node | None) -> list[Node]:
    """Named children of a node, without comments."""
    if node is None:
        return []
    return [child for child in node.named_children if child.type != "comment"]


def walk_tree(node: Node) -> Generator[Node, None, None]:
    """Walk a tree recursively, yielding all nodes."""
    yield node
    for child in node.children:
        yield from walk_tree(child)


def find_error_node(node: Node) -> Node | None:
    """Return the first ERROR or MISSING node below ``node``."""
    for child in walk_tree(node):
        if child.is_error or child.is_missing:
            return child
    return None


def iter_top_level_statements(tree: Tree) -> Generator[Node, None, None]:
    """Yield the statements directly below the program node."""
    yield from get_children(tree.root_node)


def is_import_statement(node: Node) -> bool:
    return node.type == "import_statement"


def get_declaration(node: Node) -> Node | None:
    """Return the variable declaration of a statement, looking through ``export``."""
    if node.type in DECLARATION_TYPES:
        return node
    if node.type == "export_statement":
        declaration = node.child_by_field_name("declaration")
        if declaration is not None and declaration.type in DECLARATION_TYPES:
            return declaration
    return None


def is_binding_declaration(node: Node) -> bool:
    """Check if a statement declares top-level variables (``const``/``let``/``var``)."""
    return get_declaration(node) is not None


def iter_declarators(node: Node) -> Generator[tuple[str, Node | None], None, None]:
    """Yield ``(name, initializer)`` for each simply-named declarator of a statement.

    Destructuring patterns are not bindings and are skipped.
    """
    declaration = get_declaration(node)
    if declaration is None:
        return
    for child in get_children(declaration):
        if child.type != "variable_declarator":
            continue
        name_node = child.child_by_field_name("name")
        if name_node is None or name_node.type != "identifier":
            continue
        yield get_text(name_node), child.child_by_field_name("value")


def get_import_source(node: Node) -> Node | None:
    """Get the string node holding the module specifier of an import."""
    return node.child_by_field_name("source")


def get_import_source_text(node: Node) -> str:
    """Raw source clause of an import, quotes included."""
    return get_text(get_import_source(node))


def is_type_only_import(node: Node) -> bool:
    """Check for ``import type { ... } from '...'``."""
    return any(child.type == "type" for child in node.children)


def unwrap_expression(node: Node | None) -> Node | None:
    """Strip parentheses and TypeScript wrappers that do not change a value."""
    while node is not None and node.type in TRANSPARENT_WRAPPERS:
        children = get_children(node)
        if not children:
            return node
        # ``<T>expr`` carries the expression last; every other wrapper first
        node = children[-1] if node.type == "type_assertion" else children[0]
    return node


def _replace_escape(match: re.Match[str]) -> str:
    braced, four, two, other = match.groups()
    if braced is not None:
        code_point = int(braced, 16)
        if code_point > _MAX_CODE_POINT:
            raise ValueError(f"undefined Unicode code-point escape '\\u{{{braced}}}'")
        return chr(code_point)
    if four is not None:
        return chr(int(four, 16))
    if two is not None:
        return chr(int(two, 16))
    if other in _LINE_TERMINATORS:
        return ""
    return _SINGLE_ESCAPES.get(other, other)


def decode_escapes(raw: str) -> str:
    """Decode JavaScript escape sequences, joining surrogate pairs.

    Lone surrogates are kept as they are.

    Raises:
        ValueError: For a code-point escape above U+10FFFF
    """
    decoded = _ESCAPE_RE.sub(_replace_escape, raw)
    if any("\ud800" <= ch <= "\udfff" for ch in decoded):
        decoded = decoded.encode("utf-16", "surrogatepass").decode("utf-16", "surrogatepass")
    return decoded


def string_value(node: Node) -> str:
    """Value of a string literal node."""
    return decode_escapes(get_text(node)[1:-1])
