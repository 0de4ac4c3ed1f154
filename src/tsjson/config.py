"""Conversion configuration.

The pipeline never reads ambient flags: a single ``ConvertConfig`` value is
built once (usually from the command line) and handed to :func:`tsjson.scan`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from .constants import DEFAULT_CHECK_PATHS, DEFAULT_OUTPUT_FOLDER, DEFAULT_TARGET_PATH


@dataclass(frozen=True)
class CheckPath:
    """A top-level path to scan and whether its aggregator files drive conversion."""

    path: str
    use_index: bool = False

    @classmethod
    def parse(cls, value: str) -> CheckPath:
        """Parse ``path`` or ``path:index`` as given on the command line."""
        path, sep, mode = value.rpartition(":")
        if sep and mode == "index":
            return cls(path=path, use_index=True)
        return cls(path=value)


@dataclass(frozen=True)
class ConvertConfig:
    """Options recognized by the scanner."""

    root: Path
    check_paths: tuple[CheckPath, ...] = field(
        default_factory=lambda: tuple(CheckPath(p) for p in DEFAULT_CHECK_PATHS)
    )
    target_path: str = DEFAULT_TARGET_PATH
    output_folder: Path = Path(DEFAULT_OUTPUT_FOLDER)
    write_next_to_source: bool = False
    rewrite_index_imports: bool = False
    delete_source: bool = False
    group_by_file: bool = False
    clean_output: bool = False

    def __post_init__(self):
        # Normalize so that suffix matching works on POSIX-style paths
        object.__setattr__(self, "root", Path(self.root))
        object.__setattr__(self, "output_folder", Path(self.output_folder))
        object.__setattr__(self, "target_path", self.target_path.strip("/"))

    def is_target_dir(self, directory: Path) -> bool:
        """Check whether ``directory`` is a translation directory."""
        return directory.as_posix().rstrip("/").endswith("/" + self.target_path)
