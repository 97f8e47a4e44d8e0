##############################################################################
# Copyright (c) crispr_db Project developers. See top-level LICENSE and
# COPYRIGHT files for dates and other details. No copyright assignment is
# required to contribute to crispr_db.
##############################################################################

"""
This module defines the abstract base class `BaseAdaptor`, which provides the
generic fetch and store machinery shared by every entity adaptor.

A subclass describes its table (`table`, `table_alias`, `id_column`,
`natural_key`), the select statement rows are read with (`base_query`), how a
row becomes an entity (`build_entity`), which columns an insert writes
(`insert_values`) and which references must be resolved before an insert
(`dependencies`). Everything else, including identity-mapped hydration,
existence checks and transactional stores, is handled here.
"""

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Dict, Generic, Iterable, List, Mapping, Optional, Sequence, Tuple, Type, TypeVar

from crispr_db.db_scripts.data_models import BaseEntity
from crispr_db.db_scripts.dependency_store import Dependency, DependencyStore
from crispr_db.db_scripts.query_builder import Filter, QueryBuilder, combine_filters, equals, in_clause
from crispr_db.db_scripts.row_hydrator import RowHydrator
from crispr_db.exceptions import EntityNotFoundError, IntegrityError


if TYPE_CHECKING:
    from crispr_db.db_scripts.crispr_db import CrisprDatabase


LOG = logging.getLogger(__name__)

E = TypeVar("E", bound=BaseEntity)


class BaseAdaptor(Generic[E], ABC):
    """
    Abstract base class for the adaptor of one entity type.

    Generic Parameters:
        E (BaseEntity): The entity class handled by this adaptor.

    Attributes:
        entity_type: The identity cache key for this type.
        entity_class: The dataclass handled by this adaptor.
        table: The table holding one row per entity.
        table_alias: The alias of `table` inside `base_query`.
        id_column: The primary key column of `table`.
        natural_key: Pairs of (column, attribute) that identify a row when the
            entity has no id yet. Empty if the type has no natural key.
        not_found_error: The error raised when a unique lookup finds nothing.
        base_query: The select statement every fetch starts from.
        base_query_suffix: Text appended after any filter, e.g. `ORDER BY`.
        db: The session owning this adaptor.

    Methods:
        check_entry_exists_in_db: Run a `count(*)` query and report whether it found anything.
        exists_in_db: Report whether an entity's row exists.
        fetch_id_by_natural_key: Look up the id of an entity that doesn't hold one.
        fetch_by_natural_key: Fetch the stored instance matching an entity's natural key.
        fetch_rows_expecting_single_row: Run a query that must match exactly one row.
        fetch_rows_for_generic_select_statement: Run a query and return every row.
        fetch_by_id: Fetch one entity by its id.
        fetch_by_ids: Fetch several entities by id.
        store: Store an entity and everything it references.
    """

    entity_type: str = None
    entity_class: Type[E] = None
    table: str = None
    table_alias: str = None
    id_column: str = None
    natural_key: Tuple[Tuple[str, str], ...] = ()
    not_found_error: Type[EntityNotFoundError] = EntityNotFoundError
    base_query: str = None
    base_query_suffix: str = ""

    def __init__(self, db: "CrisprDatabase"):
        """
        Args:
            db: The session owning this adaptor.
        """
        self.db = db
        self.connection = db.connection
        self.cache = db.cache
        self.query_builder = QueryBuilder(self.base_query, suffix=self.base_query_suffix)
        self.hydrator: RowHydrator[E] = RowHydrator(self.entity_type, self.id_column, self.cache, self.build_entity)
        self._dependency_store: Optional[DependencyStore[E]] = None

    def __repr__(self) -> str:
        return f"{type(self).__name__}(table={self.table!r})"

    @property
    def dependency_store(self) -> DependencyStore[E]:
        """The store used for this type, created once every sibling adaptor exists."""
        if self._dependency_store is None:
            self._dependency_store = DependencyStore(self, self.dependencies())
        return self._dependency_store

    def column(self, name: str) -> str:
        """
        Qualify a column of `table` with its alias in `base_query`.

        Args:
            name: The column name.

        Returns:
            The qualified column, e.g. `t.target_name`.
        """
        return f"{self.table_alias}.{name}" if self.table_alias else name

    def dependencies(self) -> List[Dependency]:
        """
        The references that must exist before this type's row can be inserted.

        Returns:
            The dependencies, in the order they are resolved.
        """
        return []

    @abstractmethod
    def build_entity(self, row: Mapping[str, Any]) -> E:
        """
        Construct a new entity from a result row.

        Args:
            row: A row produced by `base_query`.

        Returns:
            The new entity.
        """
        raise NotImplementedError("Subclasses of `BaseAdaptor` must implement a `build_entity` method.")

    @abstractmethod
    def insert_values(self, entity: E) -> Dict[str, Any]:
        """
        Map the columns written when this entity's row is inserted to their values.

        Args:
            entity: The entity being stored. Its references are already resolved.

        Returns:
            An ordered mapping of column name to value.
        """
        raise NotImplementedError("Subclasses of `BaseAdaptor` must implement an `insert_values` method.")

    def check_entry_exists_in_db(self, statement: str, params: Sequence[Any]) -> bool:
        """
        Run a `select count(*) ...` statement and report whether it matched anything.

        Args:
            statement: The count statement.
            params: The values bound to its placeholders.

        Returns:
            True if the count is nonzero.
        """
        return self.connection.count(statement, params) > 0

    def natural_key_filter(self, entity: E, qualified: bool = True) -> Optional[Filter]:
        """
        Build the filter matching an entity's natural key.

        Args:
            entity: The entity whose natural key is used.
            qualified: Whether to qualify the columns with `table_alias`.

        Returns:
            The filter, or None if this type has no natural key.

        Raises:
            (exceptions.IntegrityError): If part of the natural key is missing.
        """
        if not self.natural_key:
            return None
        filters = []
        for column, attribute in self.natural_key:
            value = getattr(entity, attribute)
            if value is None:
                raise IntegrityError(
                    f"Cannot identify {self.entity_type}: it has no id and no {attribute} to look it up by."
                )
            filters.append(equals(self.column(column) if qualified else column, value))
        return combine_filters(*filters)

    def exists_in_db(self, entity: E) -> bool:
        """
        Report whether an entity's row exists.

        The check goes by id when the entity has one and by natural key otherwise.

        Args:
            entity: The entity to check.

        Returns:
            True if the row exists. Always False for a type without a natural
            key when the entity has no id.

        Raises:
            (exceptions.IntegrityError): If the entity has no id and an incomplete natural key.
        """
        entity_id = entity.get_id()
        if entity_id is not None:
            where = equals(self.id_column, entity_id)
        else:
            where = self.natural_key_filter(entity, qualified=False)
            if where is None:
                return False
        statement = f"SELECT count(*) FROM {self.table} WHERE {where.clause}"
        return self.check_entry_exists_in_db(statement, where.params)

    def fetch_id_by_natural_key(self, entity: E) -> int:
        """
        Look up the id of the row matching an entity's natural key.

        Args:
            entity: The entity, usually one without an id.

        Returns:
            The id of the matching row.

        Raises:
            (exceptions.IntegrityError): If this type has no natural key or it is incomplete.
            (exceptions.EntityNotFoundError): If no row matches.
        """
        where = self.natural_key_filter(entity, qualified=False)
        if where is None:
            raise IntegrityError(f"{self.entity_type} has no natural key to look an id up by.")
        statement = f"SELECT {self.id_column} FROM {self.table} WHERE {where.clause}"
        row = self.fetch_rows_expecting_single_row(statement, where.params)
        return row[0]

    def fetch_by_natural_key(self, entity: E) -> E:
        """
        Fetch the stored instance matching an entity's natural key.

        Args:
            entity: The entity, usually one without an id.

        Returns:
            The instance for the matching row.

        Raises:
            (exceptions.EntityNotFoundError): If no row matches.
        """
        return self.fetch_by_id(self.fetch_id_by_natural_key(entity))

    def fetch_rows_expecting_single_row(self, statement: str, params: Sequence[Any]) -> Mapping[str, Any]:
        """
        Run a query that must match exactly one row.

        Args:
            statement: The select statement.
            params: The values bound to its placeholders.

        Returns:
            The matching row.

        Raises:
            (exceptions.EntityNotFoundError): If nothing matched.
            (exceptions.IntegrityError): If more than one row matched.
        """
        rows = self.fetch_rows_for_generic_select_statement(statement, params)
        if not rows:
            raise self.not_found_error(f"Couldn't retrieve {self.entity_type} from database with params {list(params)}.")
        if len(rows) > 1:
            raise IntegrityError(f"Expected one {self.entity_type} row but found {len(rows)} with params {list(params)}.")
        return rows[0]

    def fetch_rows_for_generic_select_statement(self, statement: str, params: Sequence[Any]) -> List[Mapping[str, Any]]:
        """
        Run a select statement and return every row.

        Args:
            statement: The select statement.
            params: The values bound to its placeholders.

        Returns:
            The rows, possibly none.
        """
        return self.connection.fetch_all(statement, params)

    def _fetch(self, where: Optional[Filter] = None, query_builder: Optional[QueryBuilder] = None) -> List[E]:
        """
        Fetch every entity matching a filter.

        Args:
            where: The filter, or None to fetch every row.
            query_builder: The builder to use instead of the adaptor's own,
                for queries that need extra joins.

        Returns:
            The matching entities in row order, possibly none.
        """
        builder = query_builder if query_builder is not None else self.query_builder
        statement, params = builder.build(where)
        rows = self.fetch_rows_for_generic_select_statement(statement, params)
        LOG.debug(f"Fetched {len(rows)} {self.entity_type} row(s).")
        return self.hydrator.hydrate_all(rows)

    def _fetch_single(self, where: Filter, description: str, query_builder: Optional[QueryBuilder] = None) -> E:
        """
        Fetch the single entity matching a filter.

        Args:
            where: The filter.
            description: How the entity was looked for, used in the error message.
            query_builder: The builder to use instead of the adaptor's own.

        Returns:
            The matching entity.

        Raises:
            (exceptions.EntityNotFoundError): If nothing matched.
        """
        entities = self._fetch(where, query_builder)
        if not entities:
            raise self.not_found_error(f"Couldn't retrieve {self.entity_type} {description} from database.")
        return entities[0]

    def fetch_by_id(self, entity_id: int) -> E:
        """
        Fetch one entity by its id.

        Args:
            entity_id: The database id.

        Returns:
            The single live instance for that row.

        Raises:
            (exceptions.EntityNotFoundError): If the id doesn't exist.
        """
        cached = self.cache.lookup(self.entity_type, entity_id)
        if cached is not None:
            return cached
        return self._fetch_single(equals(self.column(self.id_column), entity_id), f"with id {entity_id}")

    def fetch_by_ids(self, entity_ids: Iterable[int]) -> List[E]:
        """
        Fetch several entities by id.

        Args:
            entity_ids: The database ids.

        Returns:
            One entity per id, in the order the ids were given.

        Raises:
            (exceptions.EntityNotFoundError): If any id doesn't exist.
        """
        return [self.fetch_by_id(entity_id) for entity_id in entity_ids]

    def _fetch_all_in(self, column: str, values: Iterable[Any], query_builder: Optional[QueryBuilder] = None) -> List[E]:
        """Fetch every entity whose `column` takes one of `values`."""
        return self._fetch(in_clause(column, values), query_builder)

    def store(self, entity: E) -> E:
        """
        Store an entity and everything it references in one transaction.

        Args:
            entity: The entity to store.

        Returns:
            The stored entity, now carrying its id.
        """
        return self.dependency_store.store(entity)
