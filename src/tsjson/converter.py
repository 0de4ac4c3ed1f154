"""
Per-module conversion pipeline.

source file -> parse -> merge imports -> extract bindings -> sequence ->
evaluate -> select -> serialize -> write
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

from ._analyzer.evaluator import evaluate_bindings
from ._analyzer.merger import build_compilation_unit
from ._analyzer.sequencer import find_cycles, sequence_bindings
from .constants import OUTPUT_EXTENSION
from .errors import EvaluationError
from .models import ConversionResult
from .serializer import serialize, serialize_bindings

if TYPE_CHECKING:
    from collections.abc import Sequence

    from .config import ConvertConfig
    from .models import CompilationUnit

logger = logging.getLogger(__name__)


def select_names(
    unit: CompilationUnit, order: Sequence[str], names: Sequence[str] | None = None
) -> list[str]:
    """Pick the bindings of a unit that are written out.

    Explicitly requested names win. Otherwise a module with imports yields only
    the names it declares itself, and a module without imports yields every
    binding in evaluation order.

    Raises:
        EvaluationError: If a requested name is not a binding of the unit
    """
    if names is not None:
        missing = [name for name in names if name not in unit.bindings]
        if missing:
            raise EvaluationError(f"module does not declare {', '.join(missing)}", unit.path)
        return list(names)
    if unit.has_imports:
        return list(unit.own_names)
    return list(order)


def load_values(
    path: str | Path, names: Sequence[str] | None = None, source: str | None = None
) -> dict[str, Any]:
    """Evaluate the translation bindings of a module.

    Args:
        path: Path of the TypeScript module
        names: Bindings to return; defaults to the module's own bindings
        source: Module text, read from ``path`` when omitted

    Returns:
        Binding name -> evaluated value, in selection order

    Raises:
        ConversionError: Any subclass, when the module cannot be converted
    """
    unit = build_compilation_unit(path, source)
    dependencies = {name: binding.dependencies for name, binding in unit.bindings.items()}

    for cycle in find_cycles(dependencies):
        logger.warning(f"Dependency cycle in {unit.path}: {' -> '.join([*cycle, cycle[0]])}")

    order = sequence_bindings(dependencies)
    values = evaluate_bindings(unit, order)
    return {name: values[name] for name in select_names(unit, order, names)}


def output_paths(name: str, source: Path, config: ConvertConfig) -> list[Path]:
    """Files a converted binding (or grouped module) is written to."""
    filename = name + OUTPUT_EXTENSION
    paths = [config.output_folder / filename]
    if config.write_next_to_source:
        paths.append(source.parent / filename)
    return paths


def _write(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    logger.info(f"Wrote {path}")


def convert_module(
    path: str | Path, config: ConvertConfig, names: Sequence[str] | None = None
) -> ConversionResult:
    """Convert one module and write its JSON output.

    Every value is serialized before anything is written, so a failing binding
    leaves no partial output behind for the module.

    Raises:
        ConversionError: Any subclass, when the module cannot be converted
    """
    path = Path(path)
    values = load_values(path, names)
    result = ConversionResult(source=path, values=values)

    if not values:
        logger.debug(f"No bindings found in {path}")
        return result

    if config.group_by_file:
        outputs = [(stem_of(path), serialize_bindings(values, path))]
    else:
        outputs = [(name, serialize(value, path)) for name, value in values.items()]

    for name, text in outputs:
        for target in output_paths(name, path, config):
            _write(target, text)
            result.written.append(target)
    return result


def stem_of(path: Path) -> str:
    """File name without its final extension (``common.i18n.ts`` -> ``common.i18n``)."""
    return path.name[: -len(path.suffix)] if path.suffix else path.name
