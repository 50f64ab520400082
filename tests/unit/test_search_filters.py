"""Unit tests for where clauses and score conditions."""

import pytest

from memsearch.domain.search import ScoreConditions, SearchHit
from memsearch.exceptions import ParameterError, TypeMismatchError
from memsearch.search.filters import (
    FieldCondition,
    apply_where_clause,
    compile_where_clause,
    filter_hits_by_score,
    parse_score_conditions,
)
from memsearch.search.schema import Schema


BOOKS = [
    {"title": "Dune", "year": 1965, "available": True},
    {"title": "Dune Messiah", "year": 1969, "available": False},
    {"title": "The Great Gatsby", "year": 1925, "available": True},
]


@pytest.fixture
def schema():
    return Schema.from_mapping({"title": "string", "year": "number", "available": "boolean"})


def _titles(documents):
    return [document["title"] for document in documents]


@pytest.mark.unit
class TestCompileWhereClause:
    def test_empty_clause(self, schema):
        assert compile_where_clause(None, schema) == ()
        assert compile_where_clause({}, schema) == ()

    def test_one_condition_per_key(self, schema):
        conditions = compile_where_clause({"year": {"gte": 1900, "lt": 1966}}, schema)

        assert conditions == (FieldCondition("year", "gte", 1900), FieldCondition("year", "lt", 1966))

    def test_boolean_field_takes_a_bare_value(self, schema):
        assert compile_where_clause({"available": False}, schema) == (FieldCondition("available", "eq", False),)

    def test_bt_normalized_to_tuple(self, schema):
        assert compile_where_clause({"year": {"bt": [1900, 1966]}}, schema) == (
            FieldCondition("year", "bt", (1900, 1966)),
        )

    def test_unknown_field(self, schema):
        with pytest.raises(ParameterError, match="Field 'isbn' does not exist in the schema"):
            compile_where_clause({"isbn": {"eq": "x"}}, schema)

    def test_unknown_condition(self, schema):
        with pytest.raises(ParameterError, match="Unrecognized condition 'ne' on field 'year'"):
            compile_where_clause({"year": {"ne": 1965}}, schema)

    def test_non_mapping_condition_on_number_field(self, schema):
        with pytest.raises(ParameterError, match="must be a mapping"):
            compile_where_clause({"year": 1965}, schema)

    def test_boolean_field_rejects_mapping(self, schema):
        with pytest.raises(TypeMismatchError, match="Expected a boolean"):
            compile_where_clause({"available": {"eq": True}}, schema)

    def test_operand_type_must_match_field(self, schema):
        with pytest.raises(TypeMismatchError, match="expects a number, got str"):
            compile_where_clause({"year": {"gt": "1900"}}, schema)

    def test_bool_operand_rejected_for_number_field(self, schema):
        with pytest.raises(TypeMismatchError):
            compile_where_clause({"year": {"eq": True}}, schema)

    def test_inc_requires_string_field(self, schema):
        with pytest.raises(TypeMismatchError, match="requires a string field"):
            compile_where_clause({"year": {"inc": "19"}}, schema)

    def test_inc_requires_string_operand(self, schema):
        with pytest.raises(TypeMismatchError, match="expects a string, got int"):
            compile_where_clause({"title": {"inc": 5}}, schema)

    @pytest.mark.parametrize("operand", [1900, [1900], [1900, 1950, 2000], "1900-1950"])
    def test_malformed_bt(self, schema, operand):
        with pytest.raises(ParameterError, match="two-element"):
            compile_where_clause({"year": {"bt": operand}}, schema)

    def test_bt_bounds_type_checked(self, schema):
        with pytest.raises(TypeMismatchError):
            compile_where_clause({"year": {"bt": [1900, "2000"]}}, schema)

    def test_type_mismatch_is_a_parameter_error(self):
        assert issubclass(TypeMismatchError, ParameterError)


@pytest.mark.unit
class TestApplyWhereClause:
    @pytest.mark.parametrize(
        ("where", "expected"),
        [
            ({"year": {"lt": 1965}}, ["The Great Gatsby"]),
            ({"year": {"lte": 1965}}, ["Dune", "The Great Gatsby"]),
            ({"year": {"gt": 1965}}, ["Dune Messiah"]),
            ({"year": {"gte": 1965}}, ["Dune", "Dune Messiah"]),
            ({"year": {"eq": 1969}}, ["Dune Messiah"]),
            ({"year": {"bt": [1925, 1965]}}, ["Dune", "The Great Gatsby"]),
            ({"title": {"inc": "Dune"}}, ["Dune", "Dune Messiah"]),
            ({"title": {"eq": "Dune"}}, ["Dune"]),
            ({"available": True}, ["Dune", "The Great Gatsby"]),
            ({"available": True, "year": {"gt": 1950}}, ["Dune"]),
        ],
    )
    def test_operators(self, schema, where, expected):
        conditions = compile_where_clause(where, schema)

        assert _titles(apply_where_clause(BOOKS, conditions)) == expected

    def test_inc_is_case_sensitive_substring(self, schema):
        conditions = compile_where_clause({"title": {"inc": "dune"}}, schema)

        assert apply_where_clause(BOOKS, conditions) == []

    def test_no_conditions_keeps_everything(self):
        assert apply_where_clause(iter(BOOKS), ()) == BOOKS

    def test_document_getter(self, schema):
        wrapped = [("a", BOOKS[0]), ("b", BOOKS[1])]
        conditions = compile_where_clause({"available": False}, schema)

        kept = apply_where_clause(wrapped, conditions, document_getter=lambda item: item[1])

        assert kept == [("b", BOOKS[1])]

    def test_missing_field_never_matches(self):
        assert not FieldCondition("year", "eq", 1965).matches({"title": "Dune"})


@pytest.mark.unit
class TestScoreConditions:
    HITS = [
        SearchHit(score=0.9, document={"title": "a"}),
        SearchHit(score=0.5, document={"title": "b"}),
        SearchHit(score=0.2, document={"title": "c"}),
    ]

    def _titles(self, hits):
        return [hit.document["title"] for hit in hits]

    def test_gt_and_lt_are_strict(self):
        assert self._titles(filter_hits_by_score(self.HITS, {"gt": 0.5})) == ["a"]
        assert self._titles(filter_hits_by_score(self.HITS, {"lt": 0.5})) == ["c"]

    def test_eq(self):
        assert self._titles(filter_hits_by_score(self.HITS, {"eq": 0.5})) == ["b"]

    def test_conditions_combine(self):
        assert self._titles(filter_hits_by_score(self.HITS, {"gt": 0.1, "lt": 0.9})) == ["b", "c"]

    def test_empty_conditions_keep_order(self):
        assert filter_hits_by_score(self.HITS, None) == self.HITS
        assert filter_hits_by_score(self.HITS, {}) == self.HITS

    def test_accepts_model_instance(self):
        assert self._titles(filter_hits_by_score(self.HITS, ScoreConditions(gt=0.3))) == ["a", "b"]

    def test_scores_above_one_pass_gt(self):
        hits = [SearchHit(score=7.0, document={"title": "x"})]

        assert filter_hits_by_score(hits, {"gt": 0.99}) == hits

    @pytest.mark.parametrize("value", [0, 1, 1.5, -0.2])
    def test_threshold_outside_open_unit_interval(self, value):
        with pytest.raises(ParameterError, match="Score must be between 0 and 1"):
            parse_score_conditions({"gt": value})

    def test_unknown_key(self):
        with pytest.raises(ParameterError, match="Invalid score condition 'gte'"):
            parse_score_conditions({"gte": 0.5})

    def test_non_mapping(self):
        with pytest.raises(ParameterError):
            parse_score_conditions([0.5])

    def test_pydantic_error_is_chained(self):
        with pytest.raises(ParameterError) as exc_info:
            parse_score_conditions({"lt": "high"})

        assert exc_info.value.__cause__ is not None
