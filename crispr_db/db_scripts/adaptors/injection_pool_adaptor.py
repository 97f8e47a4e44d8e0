##############################################################################
# Copyright (c) crispr_db Project developers. See top-level LICENSE and
# COPYRIGHT files for dates and other details. No copyright assignment is
# required to contribute to crispr_db.
##############################################################################

"""
Module for managing injection pools in the crispr_db database.

A pool is a row of the `injection` table plus one `injection_pool` row for
every guide RNA injected with it.
"""

import logging
from typing import Any, Dict, List, Mapping

from crispr_db.db_scripts.adaptors.base_adaptor import BaseAdaptor
from crispr_db.db_scripts.data_models import CrRNA, GuideRNA, InjectionPool
from crispr_db.db_scripts.query_builder import QueryBuilder, equals
from crispr_db.exceptions import InjectionPoolNotFoundError, ValidationError


LOG = logging.getLogger(__name__)

GUIDE_COLUMNS = ["injection_id", "crRNA_id", "guideRNA_type", "guideRNA_concentration"]


class InjectionPoolAdaptor(BaseAdaptor[InjectionPool]):
    """
    Adaptor for the `injection` table and its `injection_pool` junction.

    Methods:
        fetch_by_name: Fetch a pool by its unique name.
    """

    entity_type = "injection_pool"
    entity_class = InjectionPool
    table = "injection"
    table_alias = "i"
    id_column = "injection_id"
    natural_key = (("injection_name", "pool_name"),)
    not_found_error = InjectionPoolNotFoundError
    base_query = """
        SELECT i.injection_id, i.injection_name, i.cas9_type, i.cas9_concentration,
            i.date, i.line_injected, i.line_raised, i.sorted_by
        FROM injection i
    """

    def _fetch_guides(self, injection_id: int) -> List[GuideRNA]:
        rows = self.fetch_rows_for_generic_select_statement(
            "SELECT crRNA_id, guideRNA_type, guideRNA_concentration FROM injection_pool "
            "WHERE injection_id = ? ORDER BY crRNA_id",
            [injection_id],
        )
        return [
            GuideRNA(
                crRNA=self.db.crRNAs.fetch_by_id(row["crRNA_id"]),
                guideRNA_type=row["guideRNA_type"],
                concentration=row["guideRNA_concentration"],
            )
            for row in rows
        ]

    def build_entity(self, row: Mapping[str, Any]) -> InjectionPool:
        return InjectionPool(
            db_id=row["injection_id"],
            pool_name=row["injection_name"],
            cas9_type=row["cas9_type"],
            cas9_concentration=row["cas9_concentration"],
            date=row["date"],
            line_injected=row["line_injected"],
            line_raised=row["line_raised"],
            sorted_by=row["sorted_by"],
            guides=self._fetch_guides(row["injection_id"]),
        )

    def insert_values(self, entity: InjectionPool) -> Dict[str, Any]:
        return {
            "injection_id": entity.db_id,
            "injection_name": entity.pool_name,
            "cas9_type": entity.cas9_type,
            "cas9_concentration": entity.cas9_concentration,
            "date": entity.date,
            "line_injected": entity.line_injected,
            "line_raised": entity.line_raised,
            "sorted_by": entity.sorted_by,
        }

    def _link_guides(self, pool: InjectionPool):
        statement = QueryBuilder.insert("injection_pool", GUIDE_COLUMNS)
        for guide in pool.guides:
            guide.crRNA = self.dependency_store.resolve(self.db.crRNAs, guide.crRNA)
            self.connection.execute(
                statement, [pool.db_id, guide.crRNA.crRNA_id, guide.guideRNA_type, guide.concentration]
            )

    def store(self, entity: InjectionPool) -> InjectionPool:
        """
        Store a pool and its guide RNAs.

        Guides that aren't in the database yet are stored first.

        Args:
            entity: The injection pool.

        Returns:
            The stored pool.

        Raises:
            (exceptions.ValidationError): If the pool has no name or a guide
                doesn't hold a CrRNA. Nothing is written.
        """
        self.dependency_store.validate(entity)
        if not entity.pool_name:
            raise ValidationError("InjectionPool object must have a pool_name to be stored.")
        for guide in entity.guides:
            if not isinstance(guide, GuideRNA) or not isinstance(guide.crRNA, CrRNA):
                raise ValidationError("Every guide in an InjectionPool must be a GuideRNA holding a CrRNA.")
        return self.dependency_store.store(entity, associations=self._link_guides)

    def fetch_by_name(self, pool_name: str) -> InjectionPool:
        """
        Fetch a pool by its unique name.

        Args:
            pool_name: The name of the pool.

        Returns:
            The injection pool.

        Raises:
            (exceptions.InjectionPoolNotFoundError): If no pool has that name.
        """
        return self._fetch_single(equals("i.injection_name", pool_name), f"with name {pool_name}")
