##############################################################################
# Copyright (c) crispr_db Project developers. See top-level LICENSE and
# COPYRIGHT files for dates and other details. No copyright assignment is
# required to contribute to crispr_db.
##############################################################################

"""
Composition of parameterized SQL statements.

A [`QueryBuilder`][db_scripts.query_builder.QueryBuilder] holds a fixed base
statement (select list plus from/join clauses) and appends an optional filter
to it. Filters are [`Filter`][db_scripts.query_builder.Filter] objects: a SQL
fragment written with positional `?` placeholders and the ordered list of
values bound to them. Values never become part of the SQL text.
"""

import logging
from typing import Any, Iterable, List, NamedTuple, Optional, Sequence, Tuple

from crispr_db.exceptions import QueryBuildError


LOG = logging.getLogger(__name__)

PLACEHOLDER = "?"


def count_placeholders(clause: str) -> int:
    """
    Count the positional placeholders in a SQL fragment, ignoring quoted literals.

    Args:
        clause: The SQL fragment.

    Returns:
        The number of `?` placeholders outside of string literals and quoted identifiers.
    """
    count = 0
    quote = None
    for char in clause:
        if quote is not None:
            if char == quote:
                quote = None
        elif char in ("'", '"'):
            quote = char
        elif char == PLACEHOLDER:
            count += 1
    return count


class Filter(NamedTuple):
    """
    A filter fragment and the values bound to its placeholders.

    Attributes:
        clause: SQL fragment with positional placeholders, e.g. `pp.primer_pair_id = ?`.
        params: The values bound to the placeholders, in order.
    """

    clause: str
    params: Tuple[Any, ...] = ()

    def validate(self):
        """
        Check that the fragment and its values are in lock-step.

        Raises:
            (exceptions.QueryBuildError): If the number of placeholders differs
                from the number of values.
        """
        expected = count_placeholders(self.clause)
        if expected != len(self.params):
            raise QueryBuildError(
                f"Filter '{self.clause}' has {expected} placeholder(s) but {len(self.params)} value(s) were supplied."
            )

    def __and__(self, other: "Filter") -> "Filter":
        return combine_filters(self, other)


def equals(column: str, value: Any) -> Filter:
    """
    Build an equality filter.

    Args:
        column: The column to compare.
        value: The value it must equal.

    Returns:
        A filter of the form `column = ?`.
    """
    return Filter(f"{column} = {PLACEHOLDER}", (value,))


def in_clause(column: str, values: Iterable[Any]) -> Filter:
    """
    Build a variable-length `IN (...)` filter with one placeholder per value.

    An empty list produces a filter that matches nothing rather than the
    invalid `IN ()`.

    Args:
        column: The column to compare.
        values: The values the column may take.

    Returns:
        A filter of the form `column IN (?, ?, ...)`.
    """
    values = tuple(values)
    if not values:
        return Filter("1 = 0", ())
    placeholders = ", ".join(PLACEHOLDER for _ in values)
    return Filter(f"{column} IN ({placeholders})", values)


def combine_filters(*filters: Optional[Filter]) -> Optional[Filter]:
    """
    Join filters with `AND`, keeping their values in the same order as their fragments.

    Args:
        *filters: Filters to combine. `None` entries are skipped.

    Returns:
        The combined filter, or None if no filters were given.
    """
    present = [flt for flt in filters if flt is not None]
    if not present:
        return None
    if len(present) == 1:
        return present[0]
    clause = " AND ".join(f"({flt.clause})" for flt in present)
    params: List[Any] = []
    for flt in present:
        params.extend(flt.params)
    return Filter(clause, tuple(params))


class QueryBuilder:
    """
    Builds executable statements from a base statement and an optional filter.

    Attributes:
        base_sql: The fixed part of the statement.
        base_params: Values bound to placeholders inside `base_sql` itself.
        has_where: True when `base_sql` already contains a WHERE clause (for
            example the join conditions of a multi-table select), in which case
            filters are appended with `AND`.
        suffix: Text appended after the filter, e.g. `GROUP BY ...`.
    """

    def __init__(self, base_sql: str, has_where: bool = False, suffix: str = "", base_params: Sequence[Any] = ()):
        """
        Args:
            base_sql: The fixed part of the statement.
            has_where: Whether `base_sql` already contains a WHERE clause.
            suffix: Text appended after the filter.
            base_params: Values bound to placeholders in `base_sql`.
        """
        self.base_sql = base_sql.strip()
        self.has_where = has_where
        self.suffix = suffix.strip()
        self.base_params = tuple(base_params)
        Filter(self.base_sql, self.base_params).validate()

    def build(self, where: Optional[Filter] = None) -> Tuple[str, List[Any]]:
        """
        Produce the statement and its ordered parameter list.

        Args:
            where: The filter to append, if any.

        Returns:
            A tuple of (statement, params).

        Raises:
            (exceptions.QueryBuildError): If the filter's placeholders and values disagree.
        """
        sql = self.base_sql
        params = list(self.base_params)
        if where is not None and where.clause:
            where.validate()
            joiner = "AND" if self.has_where else "WHERE"
            sql = f"{sql}\n{joiner} {where.clause}"
            params.extend(where.params)
        if self.suffix:
            sql = f"{sql}\n{self.suffix}"
        return sql, params

    @staticmethod
    def insert(table: str, columns: Sequence[str]) -> str:
        """
        Build an INSERT statement with one placeholder per column.

        Args:
            table: The table to insert into.
            columns: The columns being written, in the order their values will be bound.

        Returns:
            The INSERT statement.
        """
        column_str = ", ".join(columns)
        placeholder_str = ", ".join(PLACEHOLDER for _ in columns)
        return f"INSERT INTO {table} ({column_str}) VALUES ({placeholder_str})"
