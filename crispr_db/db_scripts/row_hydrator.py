##############################################################################
# Copyright (c) crispr_db Project developers. See top-level LICENSE and
# COPYRIGHT files for dates and other details. No copyright assignment is
# required to contribute to crispr_db.
##############################################################################

"""
Conversion of result rows into entities.

A [`RowHydrator`][db_scripts.row_hydrator.RowHydrator] turns one row into one
entity, going through the session's identity cache so that a row that has
already been materialized is never built twice. Rows produced by multi-table
joins are split into per-entity field groups with
[`CompositeRow`][db_scripts.row_hydrator.CompositeRow]; column aliases of the
form `<group>__<column>` mark which group a column belongs to.
"""

import logging
from typing import Any, Callable, Dict, Generic, Iterable, List, Mapping, Optional, Set, TypeVar

from crispr_db.db_scripts.identity_cache import IdentityCache
from crispr_db.exceptions import IntegrityError


LOG = logging.getLogger(__name__)

E = TypeVar("E")

GROUP_SEPARATOR = "__"


class CompositeRow:
    """
    A row returned by a join, partitioned into one field group per entity.

    Columns aliased as `<group>__<column>` belong to `<group>`; every other
    column belongs to the row's primary entity.
    """

    def __init__(self, row: Mapping[str, Any]):
        """
        Args:
            row: A result row supporting `keys()` and lookup by column name.
        """
        self.row = row

    def primary(self) -> Dict[str, Any]:
        """
        Get the columns that don't belong to a named group.

        Returns:
            A dictionary of column name to value.
        """
        return {key: self.row[key] for key in self.row.keys() if GROUP_SEPARATOR not in key}

    def group(self, prefix: str) -> Dict[str, Any]:
        """
        Get the columns of one named group, with the prefix stripped.

        Args:
            prefix: The group name, e.g. `left`.

        Returns:
            A dictionary of column name to value.

        Raises:
            KeyError: If the row has no column in that group.
        """
        start = f"{prefix}{GROUP_SEPARATOR}"
        group = {key[len(start) :]: self.row[key] for key in self.row.keys() if key.startswith(start)}
        if not group:
            raise KeyError(f"Row has no columns for group '{prefix}'.")
        return group


def resolve_reference(adaptor: Any, foreign_id: Optional[int]) -> Optional[Any]:
    """
    Resolve a foreign key through the owning adaptor.

    Args:
        adaptor: The adaptor of the referenced entity type.
        foreign_id: The foreign key read from the row.

    Returns:
        The referenced entity, or None when the foreign key is null.
    """
    if foreign_id is None:
        return None
    return adaptor.fetch_by_id(foreign_id)


class RowHydrator(Generic[E]):
    """
    Builds entities of one type from result rows.

    Attributes:
        entity_type: The cache key for this type, e.g. `primer_pair`.
        id_column: The name of the row column holding the entity's id.
        cache: The session's identity cache.
        build: Callable constructing a new entity from a row. It is only
            called for rows whose id isn't cached yet.
    """

    def __init__(self, entity_type: str, id_column: str, cache: IdentityCache, build: Callable[[Mapping[str, Any]], E]):
        self.entity_type = entity_type
        self.id_column = id_column
        self.cache = cache
        self.build = build
        self._in_progress: Set[int] = set()

    def hydrate(self, row: Mapping[str, Any]) -> E:
        """
        Return the entity for a row, building it only if it isn't cached.

        A cached instance is returned as is; the rest of the row is not read.

        Args:
            row: A result row, or a field group taken from one.

        Returns:
            The single live instance for the row's id.

        Raises:
            (exceptions.IntegrityError): If the row has no id, or if building it
                leads back to the same row.
        """
        entity_id = row[self.id_column]
        if entity_id is None:
            raise IntegrityError(f"Cannot hydrate a {self.entity_type} from a row without a {self.id_column}.")

        cached = self.cache.lookup(self.entity_type, entity_id)
        if cached is not None:
            return cached

        if entity_id in self._in_progress:
            raise IntegrityError(f"Cyclic reference detected while hydrating {self.entity_type} {entity_id}.")

        self._in_progress.add(entity_id)
        try:
            entity = self.build(row)
        finally:
            self._in_progress.discard(entity_id)

        self.cache.insert(self.entity_type, entity_id, entity)
        LOG.debug(f"Hydrated {self.entity_type} {entity_id}.")
        return entity

    def hydrate_all(self, rows: Iterable[Mapping[str, Any]]) -> List[E]:
        """
        Hydrate every row, keeping the row order.

        Args:
            rows: Result rows.

        Returns:
            One entity per row. Rows sharing an id yield the same instance.
        """
        return [self.hydrate(row) for row in rows]
