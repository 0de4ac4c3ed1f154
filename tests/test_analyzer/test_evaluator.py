"""Tests for the literal-expression evaluator."""

from __future__ import annotations

import pytest

from tsjson._analyzer.evaluator import (
    UNDEFINED,
    LiteralEvaluator,
    evaluate_bindings,
    order_keys,
    parse_number,
)
from tsjson._analyzer.merger import build_compilation_unit
from tsjson._analyzer.sequencer import sequence_bindings
from tsjson.errors import EvaluationError


def evaluate_source(write_module, source: str) -> dict:
    path = write_module("module.ts", source)
    unit = build_compilation_unit(path)
    order = sequence_bindings({n: b.dependencies for n, b in unit.bindings.items()})
    return evaluate_bindings(unit, order)


class TestLiterals:
    """Test evaluation of literal values."""

    @pytest.mark.parametrize(
        ("expression", "expected"),
        [
            ("'single'", "single"),
            ('"double \\"quoted\\""', 'double "quoted"'),
            ("42", 42),
            ("-1.5", -1.5),
            ("1e3", 1000),
            ("0x1F", 31),
            ("1_000", 1000),
            ("2.0", 2),
            ("true", True),
            ("false", False),
            ("null", None),
            ("[1, 'two', [3]]", [1, "two", [3]]),
            ("{ a: 1, 'b-c': 2, \"d\": 3 }", {"a": 1, "b-c": 2, "d": 3}),
            ("`multi\nline`", "multi\nline"),
            ("({ wrapped: true } as const)", {"wrapped": True}),
            ("<Labels>{ cast: 1 }", {"cast": 1}),
            ("{ ok: 1 } satisfies Labels", {"ok": 1}),
        ],
    )
    def test_expression(self, write_module, expression, expected):
        values = evaluate_source(write_module, f"const value = {expression};\n")
        assert values["value"] == expected

    def test_undefined(self, write_module):
        values = evaluate_source(write_module, "const value = undefined;\n")
        assert values["value"] is UNDEFINED

    def test_declaration_without_initializer(self, write_module):
        values = evaluate_source(write_module, "let value;\n")
        assert values["value"] is UNDEFINED

    def test_integer_keys_are_ordered_first(self, write_module):
        values = evaluate_source(write_module, "const value = { b: 1, 10: 'x', 2: 'y', a: 0 };\n")
        assert list(values["value"]) == ["2", "10", "b", "a"]


class TestReferences:
    """Test evaluation of references to other bindings."""

    def test_nested_reference(self, write_module):
        values = evaluate_source(
            write_module,
            """\
            const other = { bye: 'later' };
            const greeting = { hello: 'hi', sub: other };
            """,
        )
        assert values["greeting"] == {"hello": "hi", "sub": {"bye": "later"}}
        assert list(values["greeting"]) == ["hello", "sub"]

    def test_reference_declared_later(self, write_module):
        values = evaluate_source(
            write_module,
            """\
            export const greeting = { sub: other };
            export const other = { bye: 'later' };
            """,
        )
        assert values["greeting"] == {"sub": {"bye": "later"}}

    def test_shorthand_and_spread(self, write_module):
        values = evaluate_source(
            write_module,
            """\
            const base = { a: 1, b: 2 };
            const extra = ['x'];
            const labels = { ...base, b: 3, extra, list: [...extra, 'y'] };
            """,
        )
        assert values["labels"] == {"a": 1, "b": 3, "extra": ["x"], "list": ["x", "y"]}

    def test_member_access(self, write_module):
        values = evaluate_source(
            write_module,
            """\
            const common = { actions: { save: 'Save' }, items: ['a', 'b'] };
            const page = {
              save: common.actions.save,
              first: common['items'][0],
              count: common.items.length,
              missing: common.nothing,
            };
            """,
        )
        assert values["page"] == {"save": "Save", "first": "a", "count": 2, "missing": UNDEFINED}

    def test_template_substitution(self, write_module):
        values = evaluate_source(
            write_module,
            """\
            const brand = 'Acme';
            const title = `Welcome to ${brand} (${2}) \\u0021`;
            """,
        )
        assert values["title"] == "Welcome to Acme (2) !"

    def test_computed_key(self, write_module):
        values = evaluate_source(
            write_module,
            """\
            const key = 'dynamic';
            const value = { [key]: 1 };
            """,
        )
        assert values["value"] == {"dynamic": 1}


class TestErrors:
    """Test rejection of unsupported or unresolvable code."""

    def test_unknown_identifier(self, write_module):
        with pytest.raises(EvaluationError, match="'missing' is not defined"):
            evaluate_source(write_module, "const value = { a: missing };\n")

    def test_cycle_reports_uninitialized_access(self, write_module):
        with pytest.raises(EvaluationError, match="before initialization"):
            evaluate_source(
                write_module,
                """\
                const a = { b };
                const b = { a };
                """,
            )

    @pytest.mark.parametrize(
        "expression",
        [
            "compute()",
            "() => 'x'",
            "new Date()",
            "1 + 1",
            "{ method() { return 1; } }",
            "10n",
        ],
    )
    def test_code_is_not_executed(self, write_module, expression):
        with pytest.raises(EvaluationError):
            evaluate_source(write_module, f"const value = {expression};\n")

    def test_property_of_null(self, write_module):
        with pytest.raises(EvaluationError, match="cannot read property"):
            evaluate_source(write_module, "const n = null;\nconst value = n.x;\n")

    @pytest.mark.parametrize(
        "expression",
        [
            r'"\u{110000}"',
            r"`a\u{FFFFFF}${1}`",
            r'{ "\u{110000}": 1 }',
        ],
    )
    def test_code_point_escape_out_of_range(self, write_module, expression):
        with pytest.raises(EvaluationError, match="code-point escape"):
            evaluate_source(write_module, f"const value = {expression};\n")

    def test_error_carries_path(self, write_module):
        with pytest.raises(EvaluationError) as exc_info:
            evaluate_source(write_module, "const value = missing;\n")
        assert exc_info.value.path.name == "module.ts"


class TestIsolation:
    """Test that evaluation only sees bindings of the unit."""

    def test_host_names_are_invisible(self, write_module):
        for name in ("print", "globalThis", "process", "__builtins__"):
            with pytest.raises(EvaluationError):
                evaluate_source(write_module, f"const value = {name};\n")

    def test_fresh_scope_per_evaluator(self):
        assert LiteralEvaluator().scope == {}

    def test_deterministic(self, write_module):
        source = "const a = { x: [1, 2], y: { z: 'q' } };\nconst b = { a };\n"
        assert evaluate_source(write_module, source) == evaluate_source(write_module, source)


class TestHelpers:
    """Test number parsing and key ordering helpers."""

    @pytest.mark.parametrize(
        ("text", "expected"),
        [("0", 0), ("0.5", 0.5), (".5", 0.5), ("0b101", 5), ("0o17", 15), ("1E2", 100)],
    )
    def test_parse_number(self, text, expected):
        assert parse_number(text) == expected

    def test_order_keys_keeps_string_insertion_order(self):
        assert list(order_keys({"z": 1, "a": 2})) == ["z", "a"]
