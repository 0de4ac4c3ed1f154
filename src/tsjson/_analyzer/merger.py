"""
Cross-module merging.

Builds a compilation unit for a module by prepending the full text of every
module it imports (one level deep) to its own text and re-parsing the result.
Every binding then sits in one top-level scope, so dependency extraction and
sequencing never have to follow symbols across files.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from tsjson.errors import DirectoryReadError
from tsjson.models import Binding, CompilationUnit, ImportEdge

from .dependency_extractor import extract_dependencies
from .import_resolver import ImportResolver
from .ts_parser import parse_module
from .ts_utils import (
    is_binding_declaration,
    is_import_statement,
    iter_declarators,
    iter_top_level_statements,
)

if TYPE_CHECKING:
    from tree_sitter import Tree

logger = logging.getLogger(__name__)


def read_source(path: str | Path) -> str:
    """Read a module's text.

    Raises:
        DirectoryReadError: If the file cannot be read
    """
    try:
        return Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise DirectoryReadError(f"cannot read file: {e}", path) from e


def collect_imports(tree: Tree, path: str | Path) -> list[ImportEdge]:
    """Resolve the import statements of a parsed module, in statement order."""
    resolver = ImportResolver(path)
    edges = []
    for statement in iter_top_level_statements(tree):
        if is_import_statement(statement):
            edge = resolver.resolve(statement)
            if edge is not None:
                edges.append(edge)
    return edges


def declared_names(tree: Tree) -> list[str]:
    """Names of the top-level bindings declared in a parsed module."""
    names: dict[str, None] = {}
    for statement in iter_top_level_statements(tree):
        if is_binding_declaration(statement):
            for name, _ in iter_declarators(statement):
                names.setdefault(name)
    return list(names)


def _imported_text(edge: ImportEdge) -> str:
    text = read_source(edge.target)
    if edge.target.suffix != ".json":
        return text
    # A generated JSON file is bound to the name it is imported under
    return "\n".join(f"const {local} = {text};" for local in edge.local_names)


def merge_sources(source: str, edges: list[ImportEdge]) -> str:
    """Concatenate imported module texts, in import order, ahead of ``source``."""
    imported = [_imported_text(edge) for edge in edges]
    return "\n".join([*imported, source])


def extract_bindings(tree: Tree, unit: CompilationUnit) -> None:
    """Add every top-level binding of ``tree`` to ``unit`` with its dependencies."""
    for statement in iter_top_level_statements(tree):
        if not is_binding_declaration(statement):
            continue
        for name, initializer in iter_declarators(statement):
            if name in unit.bindings:
                logger.debug(f"Binding '{name}' redeclared in {unit.path}, later declaration wins")
            unit.add_binding(Binding(name, initializer, extract_dependencies(initializer)))


def build_compilation_unit(path: str | Path, source: str | None = None) -> CompilationUnit:
    """Parse a module and merge it with its direct imports.

    Imports of imported modules are left in the merged text but are not
    followed.

    Args:
        path: Path of the module
        source: Module text; read from ``path`` when omitted

    Returns:
        The compilation unit holding every binding visible to the module

    Raises:
        ParseError: If the module or the merged text is not valid TypeScript
        ResolutionError: If an import points at a missing file
        DirectoryReadError: If a file cannot be read
    """
    path = Path(path)
    if source is None:
        source = read_source(path)

    tree = parse_module(source, path)
    unit = CompilationUnit(path=path, own_names=declared_names(tree))
    unit.imports = collect_imports(tree, path)

    if unit.has_imports:
        logger.debug(f"Merging {len(unit.imports)} import(s) into {path}")
        tree = parse_module(merge_sources(source, unit.imports), path)

    extract_bindings(tree, unit)
    return unit
