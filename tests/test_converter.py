"""Tests for the per-module conversion pipeline."""

from __future__ import annotations

import json

import pytest

from tsjson.converter import convert_module, load_values, stem_of
from tsjson.errors import EvaluationError, ParseError, SerializationError


class TestLoadValues:
    """Test evaluation and selection of a module's bindings."""

    def test_module_without_imports_selects_all_bindings(self, write_module):
        path = write_module(
            "en/common.ts",
            """\
            export const greeting = { hello: 'hi', sub: other };
            export const other = { bye: 'later' };
            """,
        )
        values = load_values(path)
        assert list(values) == ["other", "greeting"]
        assert values["greeting"] == {"hello": "hi", "sub": {"bye": "later"}}

    def test_module_with_imports_selects_own_bindings(self, write_module):
        write_module("en/shared.ts", "export const shared = { ok: 'OK' };\n")
        path = write_module(
            "en/dialog.ts",
            """\
            import { shared } from './shared';
            export const dialog = { title: 'Dialog', shared };
            """,
        )
        assert load_values(path) == {"dialog": {"title": "Dialog", "shared": {"ok": "OK"}}}

    def test_importer_shadows_imported_binding(self, write_module):
        write_module("en/base.ts", "export const title = 'imported';\nexport const x = 1;\n")
        path = write_module(
            "en/page.ts",
            """\
            import { x } from './base';
            export const title = 'own';
            export const page = { title, x };
            """,
        )
        assert load_values(path) == {"title": "own", "page": {"title": "own", "x": 1}}

    def test_requested_names(self, write_module):
        path = write_module("en/en-translations.ts", "export const en = { a: 'b' };\nconst z = 1;\n")
        assert load_values(path, ["en"]) == {"en": {"a": "b"}}

    def test_requested_name_missing(self, write_module):
        path = write_module("en/en-translations.ts", "export const en = {};\n")
        with pytest.raises(EvaluationError, match="does not declare de"):
            load_values(path, ["de"])

    def test_cycle_is_reported_as_evaluation_error(self, write_module):
        path = write_module("en/cycle.ts", "const a = { b };\nconst b = { a };\n")
        with pytest.raises(EvaluationError):
            load_values(path)

    def test_parse_error(self, write_module):
        path = write_module("en/bad.ts", "export const en = {\n")
        with pytest.raises(ParseError):
            load_values(path)


class TestConvertModule:
    """Test writing JSON output for a module."""

    def test_one_file_per_binding(self, write_module, make_config, tmp_path):
        path = write_module(
            "en/common.ts",
            """\
            const other = { bye: 'later' };
            export const greeting = { hello: 'hi', sub: other };
            """,
        )
        config = make_config()
        result = convert_module(path, config)

        assert [p.name for p in result.written] == ["other.json", "greeting.json"]
        greeting = (tmp_path / "json" / "greeting.json").read_text(encoding="utf-8")
        assert json.loads(greeting) == {"hello": "hi", "sub": {"bye": "later"}}
        assert greeting.index('"hello"') < greeting.index('"sub"')

    def test_group_by_file(self, write_module, make_config, tmp_path):
        path = write_module(
            "en/common.i18n.ts",
            "export const a = { x: 1 };\nexport const b = { y: a };\n",
        )
        convert_module(path, make_config(group_by_file=True))

        output = tmp_path / "json" / "common.i18n.json"
        assert json.loads(output.read_text(encoding="utf-8")) == {"a": {"x": 1}, "b": {"y": {"x": 1}}}

    def test_write_next_to_source(self, write_module, make_config):
        path = write_module("en/labels.ts", "export const labels = { ok: 'OK' };\n")
        result = convert_module(path, make_config(write_next_to_source=True))
        assert path.parent / "labels.json" in result.written
        assert (path.parent / "labels.json").is_file()

    def test_rerun_is_byte_identical(self, write_module, make_config, tmp_path):
        path = write_module(
            "en/common.ts",
            "export const common = { b: [1, 2], a: { 'ü': `t` }, 3: null };\n",
        )
        config = make_config()
        convert_module(path, config)
        first = (tmp_path / "json" / "common.json").read_bytes()
        convert_module(path, config)
        assert (tmp_path / "json" / "common.json").read_bytes() == first

    def test_failing_module_writes_nothing(self, write_module, make_config, tmp_path):
        path = write_module(
            "en/partial.ts",
            "export const good = { a: 1 };\nexport const bad = undefined;\n",
        )
        with pytest.raises(SerializationError, match="undefined"):
            convert_module(path, make_config())
        assert not (tmp_path / "json" / "good.json").exists()


@pytest.mark.parametrize(
    ("name", "expected"),
    [("en.ts", "en"), ("common.i18n.ts", "common.i18n"), ("README", "README")],
)
def test_stem_of(tmp_path, name, expected):
    assert stem_of(tmp_path / name) == expected
