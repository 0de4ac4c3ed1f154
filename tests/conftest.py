from __future__ import annotations

import textwrap
from typing import TYPE_CHECKING

import pytest

from tsjson._analyzer import ts_parser
from tsjson.config import CheckPath, ConvertConfig

if TYPE_CHECKING:
    from pathlib import Path


@pytest.fixture(autouse=True)
def clear_parse_cache():
    """Start every test with an empty parse tree cache."""
    ts_parser.clear_cache()
    yield
    ts_parser.clear_cache()


@pytest.fixture
def write_module(tmp_path):
    """Write a dedented TypeScript module below tmp_path and return its path."""

    def _write(relative: str, source: str) -> Path:
        path = tmp_path / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(textwrap.dedent(source), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def make_config(tmp_path):
    """Build a ConvertConfig rooted at tmp_path, writing into tmp_path/json."""

    def _make(**overrides) -> ConvertConfig:
        options = {
            "root": tmp_path,
            "check_paths": (CheckPath("projects"),),
            "output_folder": tmp_path / "json",
        }
        options.update(overrides)
        return ConvertConfig(**options)

    return _make
