##############################################################################
# Copyright (c) crispr_db Project developers. See top-level LICENSE and
# COPYRIGHT files for dates and other details. No copyright assignment is
# required to contribute to crispr_db.
##############################################################################

"""
Module for managing plasmid backbones in the crispr_db database.
"""

import logging
from typing import Any, Dict, Mapping

from crispr_db.db_scripts.adaptors.base_adaptor import BaseAdaptor
from crispr_db.db_scripts.data_models import PlasmidBackbone
from crispr_db.db_scripts.query_builder import equals
from crispr_db.exceptions import PlasmidBackboneNotFoundError


LOG = logging.getLogger(__name__)


class PlasmidBackboneAdaptor(BaseAdaptor[PlasmidBackbone]):
    """
    Adaptor for the `plasmid_backbone` table. Backbones are identified by their unique name.

    Methods:
        fetch_by_name: Fetch a backbone by its name.
    """

    entity_type = "plasmid_backbone"
    entity_class = PlasmidBackbone
    table = "plasmid_backbone"
    table_alias = "pb"
    id_column = "plasmid_backbone_id"
    natural_key = (("plasmid_backbone", "name"),)
    not_found_error = PlasmidBackboneNotFoundError
    base_query = """
        SELECT pb.plasmid_backbone_id, pb.plasmid_backbone
        FROM plasmid_backbone pb
    """

    def build_entity(self, row: Mapping[str, Any]) -> PlasmidBackbone:
        return PlasmidBackbone(plasmid_backbone_id=row["plasmid_backbone_id"], name=row["plasmid_backbone"])

    def insert_values(self, entity: PlasmidBackbone) -> Dict[str, Any]:
        return {"plasmid_backbone_id": entity.plasmid_backbone_id, "plasmid_backbone": entity.name}

    def fetch_by_name(self, name: str) -> PlasmidBackbone:
        """
        Fetch a plasmid backbone by its unique name.

        Args:
            name: The backbone name, e.g. `pDR274`.

        Returns:
            The backbone.

        Raises:
            (exceptions.PlasmidBackboneNotFoundError): If no backbone has that name.
        """
        return self._fetch_single(equals("pb.plasmid_backbone", name), f"with name {name}")
