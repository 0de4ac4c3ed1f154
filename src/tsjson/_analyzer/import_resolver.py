"""
Import and module resolution utilities.
Handles parsing import statements and resolving them to sibling module files.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from tsjson.constants import SOURCE_EXTENSION, SOURCE_SUFFIXES
from tsjson.errors import ResolutionError
from tsjson.models import ImportEdge

from .ts_utils import (
    get_children,
    get_import_source,
    get_import_source_text,
    get_text,
    is_type_only_import,
    string_value,
)

if TYPE_CHECKING:
    from tree_sitter import Node

logger = logging.getLogger(__name__)


def is_relative_specifier(specifier: str) -> bool:
    """Check if a module specifier points at a file (``./x`` or ``../x``)."""
    return specifier.startswith(("./", "../")) or specifier in (".", "..")


def get_imported_names(node: Node) -> list[tuple[str, str]]:
    """Extract ``(imported_name, local_name)`` pairs from an import statement.

    A default import is reported under its local name, since translation
    modules export the binding under the same name. Type-only specifiers are
    skipped.
    """
    names: list[tuple[str, str]] = []
    for clause in get_children(node):
        if clause.type != "import_clause":
            continue
        for child in get_children(clause):
            if child.type == "identifier":
                # import en from './en'
                local_name = get_text(child)
                names.append((local_name, local_name))
            elif child.type == "namespace_import":
                # import * as en from './en'
                for part in get_children(child):
                    if part.type == "identifier":
                        local_name = get_text(part)
                        names.append((local_name, local_name))
            elif child.type == "named_imports":
                for specifier in get_children(child):
                    if specifier.type != "import_specifier" or any(
                        part.type == "type" for part in specifier.children
                    ):
                        continue
                    name_node = specifier.child_by_field_name("name")
                    alias_node = specifier.child_by_field_name("alias")
                    if name_node is None:
                        continue
                    import_name = (
                        string_value(name_node)
                        if name_node.type == "string"
                        else get_text(name_node)
                    )
                    local_name = get_text(alias_node) if alias_node is not None else import_name
                    names.append((import_name, local_name))
    return names


class ImportResolver:
    """Resolves the import statements of one module to sibling files."""

    def __init__(self, importer: str | Path):
        self.importer = Path(importer)
        self.base_dir = self.importer.parent

    def resolve_module_path(self, specifier: str) -> Path:
        """Resolve a relative module specifier to a file path.

        The source extension is appended unless the specifier already carries
        a file extension that is not part of the module name (``.ts``,
        ``.tsx``, ``.json``, ...). ``./common.i18n`` therefore resolves to
        ``common.i18n.ts``.

        Raises:
            ResolutionError: If the resolved file does not exist
        """
        target = self.base_dir / specifier
        if target.suffix not in SOURCE_SUFFIXES and target.suffix != ".json":
            target = target.with_name(target.name + SOURCE_EXTENSION)
        if not target.is_file():
            raise ResolutionError(f"cannot resolve import '{specifier}' ({target})", self.importer)
        return target

    def resolve(self, node: Node) -> ImportEdge | None:
        """Resolve an import statement.

        Returns:
            The import edge, or None for imports that carry no translation
            data (package imports and ``import type``)

        Raises:
            ResolutionError: If a relative import points at a missing file
        """
        source = get_import_source(node)
        if source is None:
            return None
        try:
            specifier = string_value(source)
        except ValueError as e:
            raise ResolutionError(f"invalid import specifier: {e}", self.importer) from e

        if is_type_only_import(node):
            logger.debug(f"Skipping type-only import '{specifier}' in {self.importer}")
            return None
        if not is_relative_specifier(specifier):
            logger.debug(f"Skipping package import '{specifier}' in {self.importer}")
            return None

        try:
            pairs = get_imported_names(node)
        except ValueError as e:
            raise ResolutionError(f"invalid imported name: {e}", self.importer) from e
        return ImportEdge(
            importer=self.importer,
            target=self.resolve_module_path(specifier),
            source_clause=get_import_source_text(node),
            names=tuple(name for name, _ in pairs),
            local_names=tuple(local for _, local in pairs),
        )
