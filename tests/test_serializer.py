"""Tests for JSON serialization."""

from __future__ import annotations

import pytest

from tsjson._analyzer.evaluator import UNDEFINED
from tsjson.errors import SerializationError
from tsjson.serializer import serialize, serialize_bindings, to_json_data


class TestSerialize:
    """Test the JSON text produced for evaluated values."""

    def test_indented_and_ordered(self):
        value = {"hello": "hi", "sub": {"bye": "later"}}
        assert serialize(value) == '{\n  "hello": "hi",\n  "sub": {\n    "bye": "later"\n  }\n}'

    def test_key_order_is_preserved(self):
        text = serialize({"z": 1, "a": 2})
        assert text.index('"z"') < text.index('"a"')

    def test_non_ascii_is_kept(self):
        assert serialize({"greeting": "Grüß dich"}) == '{\n  "greeting": "Grüß dich"\n}'

    def test_lone_surrogate_is_escaped(self):
        text = serialize({"odd": "a\ud800b"})
        assert text == '{\n  "odd": "a\\ud800b"\n}'
        text.encode("utf-8")

    def test_empty_containers(self):
        assert serialize({}) == "{}"
        assert serialize([]) == "[]"

    def test_undefined_members_follow_json_stringify(self):
        assert to_json_data({"a": UNDEFINED, "b": [UNDEFINED, 1]}) == {"b": [None, 1]}

    def test_deterministic(self):
        value = {"b": [1, 2.5, None, True], "a": {"x": "y"}}
        assert serialize(value) == serialize(value)

    def test_serialize_bindings(self):
        text = serialize_bindings({"en": {"a": "b"}, "count": 1})
        assert text == '{\n  "en": {\n    "a": "b"\n  },\n  "count": 1\n}'


class TestSerializeErrors:
    """Test values that cannot be represented."""

    @pytest.mark.parametrize("value", [float("nan"), float("inf"), {"x": float("-inf")}])
    def test_non_finite_numbers(self, value):
        with pytest.raises(SerializationError):
            serialize(value)

    def test_top_level_undefined(self):
        with pytest.raises(SerializationError, match="undefined"):
            serialize(UNDEFINED, "en.ts")

    def test_unsupported_type(self):
        with pytest.raises(SerializationError):
            serialize({"when": object()})
