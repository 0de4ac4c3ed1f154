"""
Directory scanning and batch conversion.

Walks the configured check paths below the project root, converts every
translation directory it finds and keeps going when a single module fails.
"""

from __future__ import annotations

import logging
import os
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from ._analyzer.import_resolver import ImportResolver
from ._analyzer.merger import read_source
from ._analyzer.ts_parser import parse_module
from ._analyzer.ts_utils import get_text, is_import_statement, iter_top_level_statements
from .constants import AGGREGATOR_FILE, EXCLUDED_DIRS, SOURCE_SUFFIXES
from .converter import convert_module, output_paths, stem_of
from .errors import ConversionError, DirectoryReadError

if TYPE_CHECKING:
    from tree_sitter import Node

    from .config import CheckPath, ConvertConfig
    from .models import ConversionResult, ImportEdge

logger = logging.getLogger(__name__)


@dataclass
class ScanReport:
    """Modules converted and failures collected during a scan."""

    converted: list[ConversionResult] = field(default_factory=list)
    failures: list[tuple[Path, ConversionError]] = field(default_factory=list)

    def record_failure(self, error: ConversionError, path: Path) -> None:
        failing = error.path or path
        logger.error(f"Skipping {failing}: {error.message}")
        self.failures.append((failing, error))


@dataclass
class AggregatorPlan:
    """Modules to convert as listed by an aggregator file's imports."""

    path: Path
    source: str
    imports: list[tuple[Node, ImportEdge]] = field(default_factory=list)

    def targets(self) -> dict[Path, list[str]]:
        """Imported module -> exported names to convert, in import order."""
        grouped: dict[Path, list[str]] = {}
        for _, edge in self.imports:
            names = grouped.setdefault(edge.target, [])
            names.extend(name for name in edge.names if name not in names)
        return grouped


def is_source_file(path: Path) -> bool:
    """Check if a file is a convertible TypeScript module."""
    return (
        path.suffix in SOURCE_SUFFIXES
        and path.name != AGGREGATOR_FILE
        and not path.name.endswith(".d.ts")
    )


def _list_dir(directory: Path) -> list[os.DirEntry[str]]:
    try:
        with os.scandir(directory) as entries:
            return sorted(entries, key=lambda entry: entry.name)
    except OSError as e:
        raise DirectoryReadError(f"cannot read directory: {e}", directory) from e


def plan_from_aggregator(aggregator: Path, report: ScanReport) -> AggregatorPlan:
    """Read the import statements of an aggregator file.

    Imports that cannot be resolved are reported and left out; imports of
    already generated JSON files are ignored.

    Raises:
        ConversionError: If the aggregator cannot be read or parsed
    """
    source = read_source(aggregator)
    tree = parse_module(source, aggregator)
    resolver = ImportResolver(aggregator)
    plan = AggregatorPlan(path=aggregator, source=source)

    for statement in iter_top_level_statements(tree):
        if not is_import_statement(statement):
            continue
        try:
            edge = resolver.resolve(statement)
        except ConversionError as e:
            report.record_failure(e, aggregator)
            continue
        if edge is None or edge.target.suffix not in SOURCE_SUFFIXES or not edge.names:
            continue
        plan.imports.append((statement, edge))
    return plan


def _relative_specifier(from_dir: Path, target: Path) -> str:
    specifier = Path(os.path.relpath(target, from_dir)).as_posix()
    return specifier if specifier.startswith(".") else f"./{specifier}"


def _rewritten_import(
    statement: Node, edge: ImportEdge, plan: AggregatorPlan, config: ConvertConfig
) -> str:
    quote = edge.source_clause[:1] or "'"
    base_dir = plan.path.parent

    def specifier(name: str) -> str:
        # Point at the copy next to the source when there is one
        target = output_paths(name, edge.target, config)[-1]
        return quote + _relative_specifier(base_dir, target) + quote

    if config.group_by_file:
        return get_text(statement).replace(edge.source_clause, specifier(stem_of(edge.target)), 1)
    return "\n".join(
        f"import {local} from {specifier(name)};"
        for name, local in zip(edge.names, edge.local_names)
    )


def rewrite_aggregator(plan: AggregatorPlan, converted: set[Path], config: ConvertConfig) -> bool:
    """Point aggregator imports of converted modules at the generated JSON files.

    Returns:
        True if the aggregator file was changed
    """
    source_bytes = plan.source.encode("utf-8")
    changed = False
    # Replace from the end so earlier byte offsets stay valid
    for statement, edge in sorted(plan.imports, key=lambda item: item[0].start_byte, reverse=True):
        if edge.target not in converted:
            continue
        replacement = _rewritten_import(statement, edge, plan, config).encode("utf-8")
        source_bytes = (
            source_bytes[: statement.start_byte] + replacement + source_bytes[statement.end_byte :]
        )
        changed = True

    if changed:
        plan.path.write_text(source_bytes.decode("utf-8"), encoding="utf-8")
        logger.info(f"Rewrote imports in {plan.path}")
    return changed


def delete_sources(results: list[ConversionResult]) -> None:
    """Delete the source modules of conversions that wrote output."""
    for result in results:
        if not result.written:
            continue
        try:
            result.source.unlink()
        except OSError as e:
            logger.error(f"Could not delete {result.source}: {e}")
            continue
        logger.info(f"Deleted {result.source}")


def convert_directory(
    directory: Path, use_index: bool, config: ConvertConfig, report: ScanReport
) -> None:
    """Convert the modules of one translation directory."""
    aggregator = directory / AGGREGATOR_FILE
    plan: AggregatorPlan | None = None

    if use_index and aggregator.is_file():
        try:
            plan = plan_from_aggregator(aggregator, report)
        except ConversionError as e:
            report.record_failure(e, aggregator)
            return
        modules: list[tuple[Path, list[str] | None]] = list(plan.targets().items())
    else:
        modules = [
            (Path(entry.path), None)
            for entry in _list_dir(directory)
            if entry.is_file() and is_source_file(Path(entry.name))
        ]

    results: list[ConversionResult] = []
    for source, names in modules:
        try:
            result = convert_module(source, config, names)
        except ConversionError as e:
            report.record_failure(e, source)
            continue
        except OSError as e:
            report.record_failure(DirectoryReadError(f"cannot write output: {e}", source), source)
            continue
        results.append(result)
    report.converted.extend(results)

    if plan is not None and config.rewrite_index_imports and results:
        rewrite_aggregator(plan, {result.source for result in results}, config)
    # Sources go only after every module of the directory has been converted
    if config.delete_source:
        delete_sources(results)


def walk(directory: Path, check: CheckPath, config: ConvertConfig, report: ScanReport) -> None:
    """Descend ``directory`` looking for translation directories.

    A matching directory is converted and not descended further. Directories
    that cannot be read are reported and skipped.
    """
    pending = [directory]
    while pending:
        current = pending.pop()
        if config.is_target_dir(current):
            try:
                convert_directory(current, check.use_index, config, report)
            except DirectoryReadError as e:
                report.record_failure(e, current)
            continue
        try:
            entries = _list_dir(current)
        except DirectoryReadError as e:
            report.record_failure(e, current)
            continue
        subdirs = [
            Path(entry.path)
            for entry in entries
            if entry.is_dir(follow_symlinks=False) and entry.name not in EXCLUDED_DIRS
        ]
        # Reversed so the stack pops them in name order
        pending.extend(reversed(subdirs))


def prepare_output(config: ConvertConfig) -> None:
    """Create the output folder, emptying it first when asked to."""
    if config.clean_output and config.output_folder.exists():
        shutil.rmtree(config.output_folder)
    config.output_folder.mkdir(parents=True, exist_ok=True)


def scan(config: ConvertConfig) -> ScanReport:
    """Convert every translation directory below the configured check paths.

    Args:
        config: Conversion options

    Returns:
        Converted modules and per-module failures
    """
    report = ScanReport()
    if not config.root.is_dir():
        logger.error(f"Folder does not exist: {config.root}")
        return report

    prepare_output(config)
    for check in config.check_paths:
        start = config.root / check.path
        if not start.is_dir():
            logger.warning(f"Check path does not exist: {start}")
            continue
        logger.info(f"Scanning {start}")
        walk(start, check, config, report)

    logger.info(
        f"Converted {len(report.converted)} module(s), {len(report.failures)} failure(s)"
    )
    return report
