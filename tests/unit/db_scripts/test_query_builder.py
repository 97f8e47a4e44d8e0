##############################################################################
# Copyright (c) crispr_db Project developers. See top-level LICENSE and
# COPYRIGHT files for dates and other details. No copyright assignment is
# required to contribute to crispr_db.
##############################################################################

"""
Tests for the `query_builder.py` module.
"""

import pytest

from crispr_db.db_scripts.query_builder import (
    Filter,
    QueryBuilder,
    combine_filters,
    count_placeholders,
    equals,
    in_clause,
)
from crispr_db.exceptions import QueryBuildError, ValidationError


class TestPlaceholders:
    """Tests for placeholder counting and filter validation."""

    @pytest.mark.parametrize(
        "clause, expected",
        [
            ("a = ?", 1),
            ("a = ? AND b IN (?, ?, ?)", 4),
            ("a = '?' AND b = ?", 1),
            ('"weird?column" = ?', 1),
            ("no placeholders", 0),
        ],
    )
    def test_count_placeholders(self, clause: str, expected: int):
        """
        Test that only placeholders outside of quotes are counted.

        Args:
            clause: The SQL fragment.
            expected: The number of placeholders it holds.
        """
        assert count_placeholders(clause) == expected

    def test_validate_raises_on_mismatch(self):
        """
        Test that a filter whose values don't match its placeholders is rejected.
        """
        with pytest.raises(QueryBuildError, match="2 placeholder"):
            Filter("a = ? AND b = ?", (1,)).validate()

    def test_query_build_error_is_a_validation_error(self):
        """
        Test that placeholder mismatches are reported as validation errors.
        """
        assert issubclass(QueryBuildError, ValidationError)


class TestFilters:
    """Tests for the filter constructors."""

    def test_equals(self):
        """
        Test that `equals` binds its value rather than inlining it.
        """
        flt = equals("t.target_name", "gene1'; DROP TABLE target; --")
        assert flt.clause == "t.target_name = ?"
        assert flt.params == ("gene1'; DROP TABLE target; --",)

    @pytest.mark.parametrize("values", [[7], [1, 2, 3], list(range(25))])
    def test_in_clause_parity(self, values):
        """
        Test that an IN clause has exactly one placeholder per value, in order.

        Args:
            values: The values of the IN list.
        """
        flt = in_clause("amp.crRNA_id", values)
        assert count_placeholders(flt.clause) == len(values)
        assert flt.params == tuple(values)
        flt.validate()

    def test_in_clause_accepts_a_generator(self):
        """
        Test that the values of an IN clause can come from any iterable.
        """
        flt = in_clause("id", (i * 2 for i in range(3)))
        assert flt.clause == "id IN (?, ?, ?)"
        assert flt.params == (0, 2, 4)

    def test_empty_in_clause_matches_nothing(self):
        """
        Test that an empty IN list becomes a filter that is always false.
        """
        flt = in_clause("id", [])
        assert flt.clause == "1 = 0"
        assert flt.params == ()

    def test_combine_filters_keeps_params_in_order(self):
        """
        Test that combined filters keep their values aligned with their fragments.
        """
        combined = combine_filters(equals("a", 1), in_clause("b", [2, 3]), None, equals("c", 4))
        assert combined.clause == "(a = ?) AND (b IN (?, ?)) AND (c = ?)"
        assert combined.params == (1, 2, 3, 4)

    def test_combine_filters_with_nothing(self):
        """
        Test that combining no filters gives no filter.
        """
        assert combine_filters() is None
        assert combine_filters(None, None) is None

    def test_and_operator(self):
        """
        Test that `&` combines two filters.
        """
        combined = equals("a", 1) & equals("b", 2)
        assert combined == Filter("(a = ?) AND (b = ?)", (1, 2))


class TestQueryBuilder:
    """Tests for the `QueryBuilder` class."""

    def test_build_without_filter(self):
        """
        Test that the base statement is returned unchanged without a filter.
        """
        builder = QueryBuilder("SELECT * FROM primer p")
        assert builder.build() == ("SELECT * FROM primer p", [])

    def test_build_appends_where(self):
        """
        Test that a filter is appended with WHERE.
        """
        builder = QueryBuilder("SELECT * FROM primer p", suffix="ORDER BY p.primer_id")
        sql, params = builder.build(equals("p.primer_id", 10))
        assert sql == "SELECT * FROM primer p\nWHERE p.primer_id = ?\nORDER BY p.primer_id"
        assert params == [10]

    def test_build_appends_and_when_base_has_where(self):
        """
        Test that a filter is appended with AND when the base already filters.
        """
        builder = QueryBuilder(
            "SELECT * FROM crRNA cr, status st WHERE cr.status_id = st.status_id AND st.status = ?",
            has_where=True,
            base_params=["DESIGNED"],
        )
        sql, params = builder.build(in_clause("cr.target_id", [1, 2]))
        assert sql.endswith("AND cr.target_id IN (?, ?)")
        assert params == ["DESIGNED", 1, 2]

    def test_base_params_are_validated(self):
        """
        Test that a base statement with the wrong number of values is rejected up front.
        """
        with pytest.raises(QueryBuildError):
            QueryBuilder("SELECT * FROM crRNA WHERE crRNA_id = ?")

    def test_build_rejects_invalid_filter(self):
        """
        Test that an inconsistent filter is rejected when the statement is built.
        """
        builder = QueryBuilder("SELECT * FROM crRNA")
        with pytest.raises(QueryBuildError):
            builder.build(Filter("crRNA_id IN (?, ?)", (1,)))

    def test_insert(self):
        """
        Test that an INSERT statement has one placeholder per column.
        """
        statement = QueryBuilder.insert("amplicon_to_crRNA", ["primer_pair_id", "crRNA_id"])
        assert statement == "INSERT INTO amplicon_to_crRNA (primer_pair_id, crRNA_id) VALUES (?, ?)"
