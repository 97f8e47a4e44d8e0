##############################################################################
# Copyright (c) crispr_db Project developers. See top-level LICENSE and
# COPYRIGHT files for dates and other details. No copyright assignment is
# required to contribute to crispr_db.
##############################################################################

"""
Module for managing restriction enzymes in the crispr_db database.
"""

import logging
from typing import Any, Dict, List, Mapping

from crispr_db.db_scripts.adaptors.base_adaptor import BaseAdaptor
from crispr_db.db_scripts.data_models import Enzyme
from crispr_db.db_scripts.query_builder import equals
from crispr_db.exceptions import EnzymeNotFoundError


LOG = logging.getLogger(__name__)


class EnzymeAdaptor(BaseAdaptor[Enzyme]):
    """
    Adaptor for the `enzyme` table. Enzymes are identified by their unique name.

    Enzymes are rarely stored directly: an enzyme missing from the database is
    added when the restriction sites of a guide that uses it are stored.

    Methods:
        fetch_by_name: Fetch an enzyme by its name.
        fetch_all_by_crRNA_and_primer_pair: Fetch the enzymes recorded for a guide's amplicon.
    """

    entity_type = "enzyme"
    entity_class = Enzyme
    table = "enzyme"
    table_alias = "en"
    id_column = "enzyme_id"
    natural_key = (("name", "name"),)
    not_found_error = EnzymeNotFoundError
    base_query = """
        SELECT en.enzyme_id, en.name, en.site
        FROM enzyme en
    """

    def build_entity(self, row: Mapping[str, Any]) -> Enzyme:
        return Enzyme(enzyme_id=row["enzyme_id"], name=row["name"], site=row["site"])

    def insert_values(self, entity: Enzyme) -> Dict[str, Any]:
        return {"enzyme_id": entity.enzyme_id, "name": entity.name, "site": entity.site}

    def fetch_by_name(self, name: str) -> Enzyme:
        """
        Fetch an enzyme by its unique name.

        Args:
            name: The enzyme name, e.g. `BsaI`.

        Returns:
            The enzyme.

        Raises:
            (exceptions.EnzymeNotFoundError): If no enzyme has that name.
        """
        return self._fetch_single(equals("en.name", name), f"with name {name}")

    def fetch_all_by_crRNA_and_primer_pair(self, crRNA_id: int, primer_pair_id: int) -> List[Enzyme]:
        """
        Fetch the enzymes recorded for a guide and the primer pair amplifying it.

        Args:
            crRNA_id: The id of the guide.
            primer_pair_id: The id of the primer pair.

        Returns:
            The enzymes, possibly none.
        """
        rows = self.fetch_rows_for_generic_select_statement(
            "SELECT enzyme_id FROM restriction_enzymes WHERE crRNA_id = ? AND primer_pair_id = ? ORDER BY enzyme_id",
            [crRNA_id, primer_pair_id],
        )
        return self.fetch_by_ids([row["enzyme_id"] for row in rows])
