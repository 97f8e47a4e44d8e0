##############################################################################
# Copyright (c) crispr_db Project developers. See top-level LICENSE and
# COPYRIGHT files for dates and other details. No copyright assignment is
# required to contribute to crispr_db.
##############################################################################

"""
Module for managing primers in the crispr_db database.
"""

import logging
from typing import Any, Dict, List, Mapping

from crispr_db.db_scripts.adaptors.base_adaptor import BaseAdaptor
from crispr_db.db_scripts.data_models import Primer, Well
from crispr_db.db_scripts.dependency_store import Dependency
from crispr_db.db_scripts.row_hydrator import resolve_reference
from crispr_db.exceptions import PrimerNotFoundError


LOG = logging.getLogger(__name__)

# Column names of a primer row; joins that read primers alias their columns to these
PRIMER_COLUMNS = (
    "primer_id",
    "primer_sequence",
    "primer_chr",
    "primer_start",
    "primer_end",
    "primer_strand",
    "primer_tail",
    "plate_id",
    "well_id",
)


def primer_select_list(alias: str, group: str = None) -> str:
    """
    Build the select list for the primer columns of a joined table.

    Args:
        alias: The alias of the `primer` table in the query.
        group: When given, every column is aliased as `<group>__<column>`.

    Returns:
        The comma separated select list.
    """
    if group is None:
        return ", ".join(f"{alias}.{column}" for column in PRIMER_COLUMNS)
    return ", ".join(f"{alias}.{column} AS {group}__{column}" for column in PRIMER_COLUMNS)


class PrimerAdaptor(BaseAdaptor[Primer]):
    """
    Adaptor for the `primer` table.

    The `primer_sequence` column holds the sequence without the tail; the
    tail has its own column and is put back in front when a primer is read.
    """

    entity_type = "primer"
    entity_class = Primer
    table = "primer"
    table_alias = "p"
    id_column = "primer_id"
    not_found_error = PrimerNotFoundError
    base_query = f"SELECT {primer_select_list('p')} FROM primer p"

    def dependencies(self) -> List[Dependency]:
        return [
            Dependency(
                "plate",
                self.db.plates,
                required=False,
                getter=lambda primer: primer.well.plate if primer.well is not None else None,
                setter=lambda primer, plate: setattr(primer.well, "plate", plate),
            ),
        ]

    def build_entity(self, row: Mapping[str, Any]) -> Primer:
        tail = row["primer_tail"]
        sequence = f"{tail}{row['primer_sequence']}" if tail else row["primer_sequence"]
        plate = resolve_reference(self.db.plates, row["plate_id"])
        well = Well(plate=plate, position=row["well_id"]) if plate is not None and row["well_id"] else None
        return Primer(
            primer_id=row["primer_id"],
            sequence=sequence,
            seq_region=row["primer_chr"],
            seq_region_start=row["primer_start"],
            seq_region_end=row["primer_end"],
            seq_region_strand=row["primer_strand"],
            tail=tail,
            well=well,
        )

    def insert_values(self, entity: Primer) -> Dict[str, Any]:
        well = entity.well
        return {
            "primer_id": entity.primer_id,
            "primer_sequence": entity.template_sequence,
            "primer_chr": entity.seq_region,
            "primer_start": entity.seq_region_start,
            "primer_end": entity.seq_region_end,
            "primer_strand": entity.seq_region_strand,
            "primer_tail": entity.tail,
            "plate_id": well.plate.plate_id if well is not None else None,
            "well_id": well.position if well is not None else None,
        }
