"""Data models for the tsjson pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from tree_sitter import Node


@dataclass
class Binding:
    """A named top-level value declaration."""

    name: str
    initializer: Node | None
    dependencies: list[str] = field(default_factory=list)

    @property
    def initializer_text(self) -> str:
        """Source text of the initializer, empty when there is none."""
        if self.initializer is None or self.initializer.text is None:
            return ""
        return self.initializer.text.decode("utf-8")


@dataclass(frozen=True)
class ImportEdge:
    """An import statement resolved to a sibling module on disk."""

    importer: Path
    target: Path
    source_clause: str
    names: tuple[str, ...] = ()
    local_names: tuple[str, ...] = ()


@dataclass
class CompilationUnit:
    """Bindings of a module merged with the bindings of its direct imports."""

    path: Path
    bindings: dict[str, Binding] = field(default_factory=dict)
    own_names: list[str] = field(default_factory=list)
    imports: list[ImportEdge] = field(default_factory=list)

    @property
    def has_imports(self) -> bool:
        return bool(self.imports)

    def add_binding(self, binding: Binding) -> None:
        """Register a binding; a later declaration replaces an earlier one."""
        self.bindings[binding.name] = binding

    def get_binding(self, name: str) -> Binding | None:
        return self.bindings.get(name)

    def get_binding_names(self) -> list[str]:
        """Binding names in first-declaration order."""
        return list(self.bindings.keys())


@dataclass
class ConversionResult:
    """Outcome of converting a single source module."""

    source: Path
    values: dict[str, Any] = field(default_factory=dict)
    written: list[Path] = field(default_factory=list)
