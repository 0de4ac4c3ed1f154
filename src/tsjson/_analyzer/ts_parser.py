"""Tree-sitter TypeScript parser singletons with parse tree caching.

Provides one parser per dialect (plain TypeScript and TSX) for use across the
codebase, with a hash-keyed LRU cache of parse trees. The cache matters for
merged compilation units, which re-parse the same imported sources over and
over while a translation directory is being converted.
"""

from __future__ import annotations

import hashlib
import os
from collections import OrderedDict
from typing import TYPE_CHECKING

from tree_sitter import Language, Parser
from tree_sitter_typescript import language_tsx, language_typescript

from tsjson.errors import ParseError

from .ts_utils import find_error_node

if TYPE_CHECKING:
    from pathlib import Path

    from tree_sitter import Tree

# dialect -> parser
_parsers: dict[str, Parser] = {}

# Parse tree cache: hash(dialect + source_code) -> (Tree, source_bytes)
# Using OrderedDict for LRU-like behavior
_parse_cache: OrderedDict[str, tuple[Tree, bytes]] = OrderedDict()

# Cache configuration
_CACHE_ENABLED = os.environ.get("TSJSON_DISABLE_CACHE") != "1"
_MAX_CACHE_SIZE = int(os.environ.get("TSJSON_CACHE_SIZE", "100"))

_LANGUAGES = {
    "typescript": language_typescript,
    "tsx": language_tsx,
}


def _get_parser(dialect: str = "typescript") -> Parser:
    """Get or create the tree-sitter parser for a dialect."""
    parser = _parsers.get(dialect)
    if parser is None:
        parser = Parser(Language(_LANGUAGES[dialect]()))
        _parsers[dialect] = parser
    return parser


def dialect_for(path: str | Path | None) -> str:
    """Pick the grammar for a file path, defaulting to plain TypeScript."""
    if path is not None and str(path).endswith(".tsx"):
        return "tsx"
    return "typescript"


def _compute_hash(dialect: str, source_bytes: bytes) -> str:
    """Compute SHA-256 hash of dialect and source code for the cache key."""
    return hashlib.sha256(dialect.encode() + b"\0" + source_bytes).hexdigest()


def _cache_get(cache_key: str) -> tuple[Tree, bytes] | None:
    if not _CACHE_ENABLED:
        return None

    if cache_key in _parse_cache:
        _parse_cache.move_to_end(cache_key)
        return _parse_cache[cache_key]

    return None


def _cache_put(cache_key: str, tree: Tree, source_bytes: bytes) -> None:
    """Store parse tree in cache with LRU eviction."""
    if not _CACHE_ENABLED:
        return

    _parse_cache[cache_key] = (tree, source_bytes)

    while len(_parse_cache) > _MAX_CACHE_SIZE:
        _parse_cache.popitem(last=False)


def clear_cache() -> None:
    """Clear the parse tree cache.

    Useful for testing or when memory needs to be freed.
    """
    _parse_cache.clear()


def get_cache_stats() -> dict[str, int]:
    """Get cache statistics.

    Returns:
        Dictionary with cache size and capacity
    """
    return {
        "size": len(_parse_cache),
        "capacity": _MAX_CACHE_SIZE,
        "enabled": _CACHE_ENABLED,
    }


def parse(source_code: str | bytes, dialect: str = "typescript") -> Tree:
    """Parse TypeScript source code using tree-sitter with caching.

    Tree-sitter always recovers from errors, so the returned tree may contain
    ERROR or MISSING nodes. Use :func:`parse_module` to reject those.

    Args:
        source_code: TypeScript source code to parse
        dialect: ``"typescript"`` or ``"tsx"``

    Returns:
        Tree-sitter Tree object
    """
    parser = _get_parser(dialect)
    source_bytes = source_code.encode("utf-8") if isinstance(source_code, str) else source_code

    cache_key = _compute_hash(dialect, source_bytes)
    cached = _cache_get(cache_key)
    if cached is not None:
        cached_tree, cached_bytes = cached
        # Verify cached bytes match (hash collision protection)
        if cached_bytes == source_bytes:
            return cached_tree

    tree = parser.parse(source_bytes)
    _cache_put(cache_key, tree, source_bytes)

    return tree


def parse_module(source_code: str, path: str | Path | None = None) -> Tree:
    """Parse a module and reject it when it contains syntax errors.

    Args:
        source_code: TypeScript source code to parse
        path: Path of the module, used for the grammar choice and in errors

    Returns:
        Tree-sitter Tree object without ERROR or MISSING nodes

    Raises:
        ParseError: If the source is not valid TypeScript
    """
    tree = parse(source_code, dialect_for(path))
    if tree.root_node.has_error:
        error_node = find_error_node(tree.root_node)
        if error_node is not None:
            row, col = error_node.start_point
            raise ParseError(f"syntax error at line {row + 1}, column {col + 1}", path)
        raise ParseError("syntax error", path)
    return tree
