##############################################################################
# Copyright (c) crispr_db Project developers. See top-level LICENSE and
# COPYRIGHT files for dates and other details. No copyright assignment is
# required to contribute to crispr_db.
##############################################################################

"""
Module for managing subplexes in the crispr_db database.
"""

import logging
from typing import Any, Dict, List, Mapping

from crispr_db.db_scripts.adaptors.base_adaptor import BaseAdaptor
from crispr_db.db_scripts.data_models import InjectionPool, Subplex
from crispr_db.db_scripts.dependency_store import Dependency
from crispr_db.db_scripts.query_builder import equals
from crispr_db.db_scripts.row_hydrator import resolve_reference
from crispr_db.exceptions import SubplexNotFoundError


LOG = logging.getLogger(__name__)


class SubplexAdaptor(BaseAdaptor[Subplex]):
    """
    Adaptor for the `subplex` table.

    Methods:
        fetch_all_by_injection_pool: Fetch every subplex of an injection pool.
    """

    entity_type = "subplex"
    entity_class = Subplex
    table = "subplex"
    table_alias = "s"
    id_column = "subplex_id"
    not_found_error = SubplexNotFoundError
    base_query = "SELECT s.subplex_id, s.plex_name, s.plate_num, s.injection_id FROM subplex s"

    def dependencies(self) -> List[Dependency]:
        return [Dependency("injection_pool", self.db.injection_pools, required=False)]

    def build_entity(self, row: Mapping[str, Any]) -> Subplex:
        return Subplex(
            db_id=row["subplex_id"],
            plex_name=row["plex_name"],
            plate_num=row["plate_num"],
            injection_pool=resolve_reference(self.db.injection_pools, row["injection_id"]),
        )

    def insert_values(self, entity: Subplex) -> Dict[str, Any]:
        pool = entity.injection_pool
        return {
            "subplex_id": entity.db_id,
            "plex_name": entity.plex_name,
            "plate_num": entity.plate_num,
            "injection_id": pool.db_id if pool is not None else None,
        }

    def fetch_all_by_injection_pool(self, injection_pool: InjectionPool) -> List[Subplex]:
        """
        Fetch every subplex of an injection pool.

        Args:
            injection_pool: The stored pool.

        Returns:
            The subplexes, possibly none.
        """
        return self._fetch(equals("s.injection_id", injection_pool.db_id))
