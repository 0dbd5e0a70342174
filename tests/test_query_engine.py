#!/usr/bin/env python3
"""
test_query_engine.py - Unit tests for JSONPath evaluation

Covers each segment type incrementally:
1. Root and field access
2. Index access and slices
3. Wildcards
4. Recursive descent
5. Filter predicates
6. Result classification (invalid queries, engine errors)
"""

import copy
import sys

import pytest

from jsonpath_extract.query import EvaluationStatus, InvalidQueryError, QueryEngine, evaluate
from jsonpath_extract.query.segments import RecursiveDescentSegment


@pytest.fixture
def engine():
    return QueryEngine()


def matches_of(engine, query, document):
    """Evaluate and return the matches, asserting the query succeeded."""
    result = engine.evaluate(query, document)
    assert result.status is EvaluationStatus.SUCCESS, result.error
    return result.matches


# ============================================================================
# Root and field access
# ============================================================================

class TestFieldAccess:

    def test_root_returns_document(self, engine, store):
        """$ alone matches exactly the root value."""
        assert matches_of(engine, "$", store) == [store]

    def test_root_of_scalar_document(self, engine):
        assert matches_of(engine, "$", 42) == [42]
        assert matches_of(engine, "$", None) == [None]

    def test_dot_field_chain(self, engine, store):
        assert matches_of(engine, "$.store.bicycle.color", store) == ["red"]

    def test_bracket_quoted_names(self, engine, store):
        assert matches_of(engine, "$['store'][\"bicycle\"]['color']", store) == ["red"]

    def test_bracket_unquoted_names(self, engine, store):
        assert matches_of(engine, "$[store][bicycle]", store) == [store["store"]["bicycle"]]

    def test_quoted_name_with_special_characters(self, engine):
        document = {"a.b": {"c d": 1}, "it's": 2}
        assert matches_of(engine, "$['a.b']['c d']", document) == [1]
        assert matches_of(engine, "$['it\\'s']", document) == [2]

    def test_whitespace_around_query_is_ignored(self, engine, store):
        assert matches_of(engine, "  $.expensive \n", store) == [10]

    def test_missing_field_is_empty_success(self, engine, store):
        """A well-formed query that finds nothing is still a success."""
        result = engine.evaluate("$.missing.field", store)
        assert result.status is EvaluationStatus.SUCCESS
        assert result.matches == []

    def test_field_on_array_contributes_nothing(self, engine, store):
        assert matches_of(engine, "$.store.book.title", store) == []

    def test_null_value_is_a_match(self, engine):
        assert matches_of(engine, "$.a", {"a": None}) == [None]

    def test_duplicate_values_are_kept(self, engine):
        document = {"a": {"x": 1}, "b": {"x": 1}}
        assert matches_of(engine, "$.*.x", document) == [1, 1]


# ============================================================================
# Index access and slices
# ============================================================================

class TestIndexAndSlice:

    def test_index(self, engine, store):
        assert matches_of(engine, "$.store.book[0].title", store) == ["Sayings of the Century"]

    def test_negative_index(self, engine, store):
        assert matches_of(engine, "$.store.book[-1].title", store) == ["The Lord of the Rings"]

    def test_out_of_range_index(self, engine, store):
        assert matches_of(engine, "$.store.book[4]", store) == []
        assert matches_of(engine, "$.store.book[-5]", store) == []

    def test_index_on_object(self, engine, store):
        assert matches_of(engine, "$.store.bicycle[0]", store) == []

    def test_slice(self, engine, store):
        assert matches_of(engine, "$.store.book[1:3].title", store) == ["Sword of Honour", "Moby Dick"]

    def test_slice_open_start(self, engine, store):
        assert matches_of(engine, "$.store.book[:2].author", store) == ["Nigel Rees", "Evelyn Waugh"]

    def test_slice_negative_start(self, engine, store):
        assert matches_of(engine, "$.store.book[-2:].title", store) == ["Moby Dick", "The Lord of the Rings"]

    def test_slice_step(self, engine, store):
        assert matches_of(engine, "$.store.book[::2].title", store) == ["Sayings of the Century", "Moby Dick"]

    def test_slice_negative_step(self, engine, store):
        assert matches_of(engine, "$.store.book[::-1].price", store) == [22.99, 8.99, 12.99, 8.95]

    def test_slice_with_whitespace(self, engine):
        assert matches_of(engine, "$[ 1 : 4 : 2 ]", [0, 1, 2, 3, 4]) == [1, 3]

    def test_slice_out_of_range_is_clamped(self, engine):
        assert matches_of(engine, "$[2:100]", [0, 1, 2, 3]) == [2, 3]

    def test_slice_on_object(self, engine, store):
        assert matches_of(engine, "$.store.bicycle[0:1]", store) == []


# ============================================================================
# Wildcards
# ============================================================================

class TestWildcard:

    def test_object_wildcard(self, engine, store):
        assert matches_of(engine, "$.store.bicycle.*", store) == ["red", 19.95]

    def test_array_wildcard(self, engine, store):
        assert matches_of(engine, "$.store.book[*].author", store) == [
            "Nigel Rees",
            "Evelyn Waugh",
            "Herman Melville",
            "J. R. R. Tolkien",
        ]

    def test_wildcard_preserves_structural_order(self, engine, store):
        assert matches_of(engine, "$.store.*", store) == [store["store"]["book"], store["store"]["bicycle"]]

    def test_wildcard_on_scalar(self, engine, store):
        assert matches_of(engine, "$.expensive.*", store) == []


# ============================================================================
# Recursive descent
# ============================================================================

class TestRecursiveDescent:

    def test_descendant_field(self, engine, store):
        assert matches_of(engine, "$..author", store) == [
            "Nigel Rees",
            "Evelyn Waugh",
            "Herman Melville",
            "J. R. R. Tolkien",
        ]

    def test_descendant_field_in_pre_order(self, engine, store):
        assert matches_of(engine, "$..price", store) == [8.95, 12.99, 8.99, 22.99, 19.95]
        assert matches_of(engine, "$.store..price", store) == [8.95, 12.99, 8.99, 22.99, 19.95]

    def test_descendant_bracket(self, engine, store):
        assert matches_of(engine, "$..book[2].title", store) == ["Moby Dick"]
        assert matches_of(engine, "$..book[-1:]", store) == [store["store"]["book"][-1]]

    def test_descent_visits_every_node_once_in_pre_order(self):
        document = {"a": {"b": 1, "c": [2, 3]}, "d": "x"}
        nodes = RecursiveDescentSegment().select(document, document)
        assert nodes == [document, document["a"], 1, [2, 3], 2, 3, "x"]

    def test_descendant_wildcard_returns_every_non_root_node_in_pre_order(self, engine):
        document = {"a": {"b": 1, "c": [2, 3]}, "d": "x"}
        expected = [document["a"], 1, [2, 3], 2, 3, "x"]
        assert matches_of(engine, "$..*", document) == expected
        assert matches_of(engine, "$..[*]", document) == expected

    def test_descendant_wildcard_excludes_starting_node(self, engine):
        document = {"a": {"b": 1, "c": [2, 3]}, "d": "x"}
        assert matches_of(engine, "$.a..*", document) == [1, [2, 3], 2, 3]
        assert matches_of(engine, "$..*", 5) == []

    def test_deeply_nested_document(self, engine):
        """Descent does not recurse in Python, so depth is not bounded by the recursion limit."""
        document = []
        current = document
        for _ in range(5000):
            child = []
            current.append(child)
            current = child

        result = engine.evaluate("$..*", document)
        assert result.status is EvaluationStatus.SUCCESS
        assert len(result.matches) == 5000

    def test_cyclic_structure_is_an_engine_error(self, engine):
        document = {"a": []}
        document["a"].append(document)

        result = engine.evaluate("$..*", document)
        assert result.status is EvaluationStatus.ENGINE_ERROR
        assert "Cyclic" in result.error

    def test_shared_subtree_is_visited_at_each_position(self, engine):
        shared = {"x": 1}
        document = {"a": shared, "b": shared}
        assert matches_of(engine, "$..x", document) == [1, 1]


# ============================================================================
# Filter predicates
# ============================================================================

class TestFilters:

    def test_numeric_comparison(self, engine, store):
        assert matches_of(engine, "$.store.book[?(@.price < 10)].title", store) == [
            "Sayings of the Century",
            "Moby Dick",
        ]

    def test_existence(self, engine, store):
        assert matches_of(engine, "$.store.book[?(@.isbn)].title", store) == [
            "Moby Dick",
            "The Lord of the Rings",
        ]

    def test_negated_existence(self, engine, store):
        assert matches_of(engine, "$.store.book[?(!@.isbn)].title", store) == [
            "Sayings of the Century",
            "Sword of Honour",
        ]

    def test_and(self, engine, store):
        query = "$.store.book[?(@.category == 'fiction' && @.price > 20)].author"
        assert matches_of(engine, query, store) == ["J. R. R. Tolkien"]

    def test_or_keeps_structural_order(self, engine, store):
        query = '$.store.book[?(@.price > 20 || @.category == "reference")].title'
        assert matches_of(engine, query, store) == ["Sayings of the Century", "The Lord of the Rings"]

    def test_parenthesized_groups(self, engine, store):
        query = "$.store.book[?((@.price < 9 || @.price > 20) && @.isbn)].title"
        assert matches_of(engine, query, store) == ["Moby Dick", "The Lord of the Rings"]

    def test_root_reference(self, engine, store):
        query = "$.store.book[?(@.price > $.expensive)].title"
        assert matches_of(engine, query, store) == ["Sword of Honour", "The Lord of the Rings"]

    def test_rfc_style_filter_without_parentheses(self, engine, store):
        assert matches_of(engine, "$.store.book[?@.price > 20].title", store) == ["The Lord of the Rings"]

    def test_filter_on_descendants(self, engine, store):
        result = matches_of(engine, "$..book[?(@.author != 'Herman Melville')]", store)
        assert len(result) == 3

    def test_filter_on_scalar_children(self, engine):
        assert matches_of(engine, "$.nums[?(@ > 2)]", {"nums": [1, 2, 3, 4]}) == [3, 4]

    def test_filter_on_object_children(self, engine, store):
        assert matches_of(engine, "$.store[?(@.color)]", store) == [store["store"]["bicycle"]]

    def test_nested_filter_paths(self, engine):
        document = {
            "orders": [
                {"id": 1, "customer": {"address": {"city": "Oslo"}}, "tags": ["x"]},
                {"id": 2, "customer": {"address": {"city": "Bergen"}}, "tags": ["y"]},
            ]
        }
        assert matches_of(engine, "$.orders[?(@.customer.address['city'] == 'Oslo')].id", document) == [1]
        assert matches_of(engine, "$.orders[?(@.tags[0] == 'y')].id", document) == [2]
        assert matches_of(engine, "$.orders[?(@.tags[-1] == 'x')].id", document) == [1]

    def test_number_literals(self, engine):
        document = {"t": [{"v": -20}, {"v": 0.5}, {"v": 100}]}
        assert matches_of(engine, "$.t[?(@.v < -1.5e1)].v", document) == [-20]
        assert matches_of(engine, "$.t[?(@.v == 0.5)].v", document) == [0.5]
        assert matches_of(engine, "$.t[?(@.v >= 1E2)].v", document) == [100]

    def test_filter_without_spaces(self, engine):
        document = {"items": [{"price": 5}, {"price": 15}]}
        assert matches_of(engine, "$.items[?(@.price>10)]", document) == [{"price": 15}]

    def test_filter_on_scalar_candidate(self, engine, store):
        assert matches_of(engine, "$.expensive[?(@ > 1)]", store) == []


class TestFilterTypeSafety:
    """Comparisons across JSON kinds exclude the node instead of failing."""

    def test_string_compared_to_number(self, engine):
        document = {"items": [{"name": "apple"}, {"name": 7}]}
        result = engine.evaluate("$.items[?(@.name>5)]", document)
        assert result.status is EvaluationStatus.SUCCESS
        assert result.matches == [{"name": 7}]

    def test_not_equal_requires_same_kind(self, engine):
        document = {"items": [{"name": "apple"}, {"name": 7}, {"name": 5}]}
        assert matches_of(engine, "$.items[?(@.name != 5)]", document) == [{"name": 7}]

    def test_negated_mismatch_still_excludes(self, engine):
        document = {"items": [{"name": "a"}, {"name": 3}, {"name": 7}]}
        assert matches_of(engine, "$.items[?(!(@.name > 5))]", document) == [{"name": 3}]

    def test_booleans_are_not_numbers(self, engine):
        document = {"items": [{"v": True}, {"v": 1}]}
        assert matches_of(engine, "$.items[?(@.v == 1)]", document) == [{"v": 1}]
        assert matches_of(engine, "$.items[?(@.v == true)]", document) == [{"v": True}]

    def test_null_comparison(self, engine):
        document = {"items": [{"v": None}, {"v": 0}, {}]}
        assert matches_of(engine, "$.items[?(@.v == null)]", document) == [{"v": None}]

    def test_ordering_on_booleans_is_mismatch(self, engine):
        document = {"items": [{"v": True}, {"v": False}]}
        assert matches_of(engine, "$.items[?(@.v > false)]", document) == []

    def test_string_ordering(self, engine):
        document = {"items": [{"n": "apple"}, {"n": "pear"}]}
        assert matches_of(engine, "$.items[?(@.n < 'banana')].n", document) == ["apple"]

    def test_missing_field_comparison(self, engine):
        document = {"items": [{"a": 1}, {"b": 1}]}
        assert matches_of(engine, "$.items[?(@.a != 2)]", document) == [{"a": 1}]


# ============================================================================
# Classification
# ============================================================================

class TestInvalidQueries:

    @pytest.mark.parametrize("query", [
        "",
        "   ",
        "store.book",
        "$.",
        "$..",
        "$.a..",
        "$[",
        "$[0",
        "$]",
        "$[0]]",
        "$.a[",
        "$['a",
        "$['a'",
        "$['a' 'b']",
        "$[]",
        "$[1.5]",
        "$[1a]",
        "$[-]",
        "$[::0]",
        "$.a b",
        "$.items[?()]",
        "$[?]",
        "$.items[?(@.price <> 10)]",
        "$.items[?(@.price = 10)]",
        "$.items[?(@.price === 10)]",
        "$.items[?(@.price > )]",
        "$.items[?(@.price > 1.2.3)]",
        "$.items[?(@.price > 10]",
        "$.items[?(@.price > 10)",
        "$.items[?(@.a & @.b)]",
        "$.items[?(10)]",
        "$.items[?(@.a == 'x)]",
        "$.items[?(@.a == 'bad \\q escape')]",
        "$.items[?" + "(" * 5000 + "@.a",
        "$.items[?(" + "!" * 5000 + "@.a)]",
    ])
    def test_invalid_query(self, engine, store, query):
        result = engine.evaluate(query, store)
        assert result.status is EvaluationStatus.INVALID_QUERY
        assert result.matches == []
        assert result.error

    def test_nesting_within_limit_is_accepted(self, engine):
        document = {"items": [{"a": 1}, {"b": 2}]}
        query = "$.items[?" + "(" * 50 + "@.a" + ")" * 50 + "]"
        assert matches_of(engine, query, document) == [{"a": 1}]

    @pytest.mark.skipif(
        not hasattr(sys, "get_int_max_str_digits"),
        reason="interpreter has no integer string conversion limit",
    )
    @pytest.mark.parametrize("query", [
        "$[" + "9" * 5000 + "]",
        "$[" + "9" * 5000 + ":]",
        "$.items[?(@.a == " + "9" * 5000 + ")]",
    ])
    def test_oversized_integer_literal(self, engine, store, query):
        result = engine.evaluate(query, store)
        assert result.status is EvaluationStatus.INVALID_QUERY
        assert "Malformed numeric literal" in result.error

    def test_non_string_query(self, engine, store):
        result = engine.evaluate(None, store)
        assert result.status is EvaluationStatus.INVALID_QUERY

    def test_compile_raises_invalid_query_error(self, engine):
        with pytest.raises(InvalidQueryError) as exc_info:
            engine.compile("$.items[?(@.price > )]")
        assert exc_info.value.position == len("$.items[?(@.price > ")


class TestEngineErrors:

    def test_non_json_value_is_engine_error(self, engine):
        result = engine.evaluate("$.a.*", {"a": {1, 2}})
        assert result.status is EvaluationStatus.ENGINE_ERROR
        assert result.error.startswith("TypeError")
        assert result.matches == []


class TestEvaluationProperties:

    def test_evaluation_is_repeatable(self, engine, store):
        query = "$..book[?(@.price < 20)].title"
        first = engine.evaluate(query, store)
        second = engine.evaluate(query, store)
        assert first == second

    def test_document_is_not_modified(self, engine, store):
        before = copy.deepcopy(store)
        engine.evaluate("$..*", store)
        engine.evaluate("$.store.book[::-1]", store)
        assert store == before

    def test_module_level_evaluate(self, store):
        result = evaluate("$.expensive", store)
        assert result.is_success
        assert result.matches == [10]
