"""
Тесты вычисления выражений с конвейером фильтров.
"""

import pytest

from tpages.errors import FilterExecutionError, UnknownFilterError
from tpages.scope import ScopeChain
from tpages.template.parser import parse_expression


@pytest.fixture
def evaluate(context):
    evaluator = context.composer.evaluator

    def run(text, bindings=None):
        return evaluator.evaluate(parse_expression(text), ScopeChain(bindings or {}))

    return run


class TestExpressionEvaluator:

    def test_identifier(self, evaluate):
        assert evaluate("title", {"title": "T"}) == "T"

    def test_unresolved_identifier_is_none(self, evaluate):
        assert evaluate("missing") is None

    def test_property_chain(self, evaluate):
        data = {"a": {"b": [{"c": "deep"}]}}
        assert evaluate("a.b.0.c", data) == "deep"
        assert evaluate("a.x.y.z", data) is None

    def test_index_expression(self, evaluate):
        data = {"row": {"k1": "v1"}, "key": "k1", "items": ["x", "y"], "i": 1}
        assert evaluate("row[key]", data) == "v1"
        assert evaluate("items[i]", data) == "y"
        assert evaluate("items['length']", data) == 2

    def test_collection_index_is_unresolved(self, evaluate):
        data = {"m": {"a": 1}}
        assert evaluate("m[[1]]", data) is None
        assert evaluate("m[{ a: 1 }] | otherwise('none')", data) == "none"

    def test_literals(self, evaluate):
        assert evaluate("'x'") == "x"
        assert evaluate("1.5") == 1.5
        assert evaluate("null") is None

    def test_array_and_object(self, evaluate):
        assert evaluate("[a, b]", {"a": "foo", "b": "bar"}) == ["foo", "bar"]
        assert evaluate("{ id: 'x', title }", {"title": "T"}) == {"id": "x", "title": "T"}

    def test_pipeline_left_to_right(self, evaluate):
        assert evaluate("title | lower | otherwise('none')", {"title": "ABC"}) == "abc"

    def test_otherwise_on_missing(self, evaluate):
        assert evaluate("id | otherwise('header')") == "header"
        assert evaluate("message | otherwise(defaultMessage)", {"defaultMessage": "dm"}) == "dm"

    def test_missing_value_passes_through_string_filters(self, evaluate):
        assert evaluate("missing | upper | otherwise('fallback')") == "fallback"

    def test_argument_pipeline(self, evaluate):
        assert evaluate("a | otherwise(b | upper)", {"b": "x"}) == "X"

    def test_unknown_filter(self, evaluate):
        with pytest.raises(UnknownFilterError):
            evaluate("a | shout", {"a": 1})

    def test_filter_type_error(self, evaluate):
        with pytest.raises(FilterExecutionError, match="Filter 'upper': expected a string"):
            evaluate("n | upper", {"n": 5})
