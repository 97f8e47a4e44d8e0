##############################################################################
# Copyright (c) crispr_db Project developers. See top-level LICENSE and
# COPYRIGHT files for dates and other details. No copyright assignment is
# required to contribute to crispr_db.
##############################################################################

"""
Module for managing plates in the crispr_db database.
"""

import logging
from typing import Any, Dict, Mapping

from crispr_db.db_scripts.adaptors.base_adaptor import BaseAdaptor
from crispr_db.db_scripts.data_models import Plate
from crispr_db.db_scripts.query_builder import equals
from crispr_db.exceptions import PlateNotFoundError


LOG = logging.getLogger(__name__)


class PlateAdaptor(BaseAdaptor[Plate]):
    """
    Adaptor for the `plate` table. Plates are identified by their unique name.

    Methods:
        fetch_empty_plate_by_id: Fetch a plate without any of its contents.
        fetch_by_name: Fetch a plate by its name.
        get_plate_id_from_name: Look up the id of a plate by its name.
    """

    entity_type = "plate"
    entity_class = Plate
    table = "plate"
    table_alias = "pl"
    id_column = "plate_id"
    natural_key = (("plate_name", "plate_name"),)
    not_found_error = PlateNotFoundError
    base_query = """
        SELECT pl.plate_id, pl.plate_name, pl.plate_type, pl.plate_category
        FROM plate pl
    """

    def build_entity(self, row: Mapping[str, Any]) -> Plate:
        return Plate(
            plate_id=row["plate_id"],
            plate_name=row["plate_name"],
            plate_type=row["plate_type"],
            plate_category=row["plate_category"],
        )

    def insert_values(self, entity: Plate) -> Dict[str, Any]:
        return {
            "plate_id": entity.plate_id,
            "plate_name": entity.plate_name,
            "plate_type": entity.plate_type,
            "plate_category": entity.plate_category,
        }

    def fetch_empty_plate_by_id(self, plate_id: int) -> Plate:
        """
        Fetch a plate by id. Wells are never hydrated, so this is `fetch_by_id`.

        Args:
            plate_id: The database id of the plate.

        Returns:
            The plate.
        """
        return self.fetch_by_id(plate_id)

    def fetch_by_name(self, plate_name: str) -> Plate:
        """
        Fetch a plate by its unique name.

        Args:
            plate_name: The name of the plate, e.g. `CR_000001a`.

        Returns:
            The plate.

        Raises:
            (exceptions.PlateNotFoundError): If no plate has that name.
        """
        return self._fetch_single(equals("pl.plate_name", plate_name), f"with name {plate_name}")

    def get_plate_id_from_name(self, plate_name: str) -> int:
        """
        Look up the id of a plate by its name, without hydrating it.

        Args:
            plate_name: The name of the plate.

        Returns:
            The plate's database id.

        Raises:
            (exceptions.PlateNotFoundError): If no plate has that name.
        """
        return self.fetch_id_by_natural_key(Plate(plate_name=plate_name))
