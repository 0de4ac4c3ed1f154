from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from .__version import __version__
from ._logging import get_logger, setup_colored_logging
from .config import CheckPath, ConvertConfig
from .constants import DEFAULT_CHECK_PATHS, DEFAULT_OUTPUT_FOLDER, DEFAULT_TARGET_PATH

logger = get_logger(__name__)

_DESCRIPTION = """\
tsjson: convert TypeScript translation modules into JSON files

Finds translation directories below a project root and, for every module:
• merges the sibling modules it imports into one compilation unit
• orders its bindings so referenced values are evaluated first
• evaluates object/array literals without executing any code
• writes one JSON file per binding (or per module with --group-by-file)"""


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description=_DESCRIPTION,
        prog="tsjson",
        formatter_class=argparse.RawTextHelpFormatter,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("root", type=str, help="Project root to scan")
    parser.add_argument(
        "--check-path",
        dest="check_paths",
        action="append",
        metavar="PATH[:index]",
        help=(
            "Top-level path below the root to scan; repeatable. Append ':index' to let\n"
            "the directory's aggregator file pick the bindings\n"
            f"(default: {', '.join(DEFAULT_CHECK_PATHS)})"
        ),
    )
    parser.add_argument(
        "--target-path",
        default=DEFAULT_TARGET_PATH,
        help="Path suffix marking a translation directory (default: %(default)s)",
    )
    parser.add_argument(
        "-o",
        "--output",
        default=DEFAULT_OUTPUT_FOLDER,
        help="Folder receiving the JSON files (default: %(default)s)",
    )
    parser.add_argument(
        "--next-to-source",
        action="store_true",
        help="Also write each JSON file next to its source module",
    )
    parser.add_argument(
        "--rewrite-index",
        action="store_true",
        help="Rewrite aggregator imports of converted modules to import the JSON files",
    )
    parser.add_argument(
        "--delete-source",
        action="store_true",
        help="Delete source modules after a successful conversion",
    )
    parser.add_argument(
        "--group-by-file",
        action="store_true",
        help="Write one JSON object per source module instead of one file per binding",
    )
    parser.add_argument(
        "--clean",
        action="store_true",
        help="Empty the output folder before converting",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Set the logging level (default: %(default)s)",
    )
    return parser


def config_from_args(args: argparse.Namespace) -> ConvertConfig:
    """Build the conversion options from parsed command-line arguments."""
    check_paths = args.check_paths or list(DEFAULT_CHECK_PATHS)
    return ConvertConfig(
        root=Path(args.root),
        check_paths=tuple(CheckPath.parse(value) for value in check_paths),
        target_path=args.target_path,
        output_folder=Path(args.output),
        write_next_to_source=args.next_to_source,
        rewrite_index_imports=args.rewrite_index,
        delete_source=args.delete_source,
        group_by_file=args.group_by_file,
        clean_output=args.clean,
    )


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the converter."""
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_colored_logging(level=getattr(logging, args.log_level))
    config = config_from_args(args)

    if not config.root.is_dir():
        logger.error(f"Folder does not exist: {config.root}")
        return 1

    from .scanner import scan

    report = scan(config)
    for path, error in report.failures:
        logger.debug(f"{path}: {type(error).__name__}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
