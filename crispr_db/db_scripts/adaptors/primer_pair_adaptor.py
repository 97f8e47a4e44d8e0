##############################################################################
# Copyright (c) crispr_db Project developers. See top-level LICENSE and
# COPYRIGHT files for dates and other details. No copyright assignment is
# required to contribute to crispr_db.
##############################################################################

"""
Module for managing primer pairs in the crispr_db database.

A primer pair is read with a single three-way join of `primer_pair` with the
`primer` table twice. Each joined row is split into the pair's own columns and
one column group per primer (`left__*` and `right__*`), and each primer group
is hydrated through the primer adaptor so primers stay unique per session.
"""

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from crispr_db.db_scripts.adaptors.base_adaptor import BaseAdaptor
from crispr_db.db_scripts.adaptors.primer_adaptor import primer_select_list
from crispr_db.db_scripts.data_models import CrRNA, PrimerPair
from crispr_db.db_scripts.dependency_store import Dependency
from crispr_db.db_scripts.query_builder import QueryBuilder, equals
from crispr_db.db_scripts.row_hydrator import CompositeRow
from crispr_db.exceptions import PrimerPairNotFoundError, ValidationError
from crispr_db.utils import dedupe_by


LOG = logging.getLogger(__name__)


class PrimerPairAdaptor(BaseAdaptor[PrimerPair]):
    """
    Adaptor for the `primer_pair` table and its `amplicon_to_crRNA` junction.

    Methods:
        fetch_all_by_crRNA: Fetch the primer pairs amplifying a guide.
        fetch_all_by_crRNA_id: Fetch the primer pairs amplifying a guide, by the guide's id.
        fetch_all_by_crRNAs: Fetch the primer pairs amplifying any of several guides.
        fetch_all_by_crRNA_ids: Fetch the primer pairs amplifying any of several guide ids.
        fetch_by_plate_name_and_well: Fetch the primer pairs whose left primer sits on a plate.
    """

    entity_type = "primer_pair"
    entity_class = PrimerPair
    table = "primer_pair"
    table_alias = "pp"
    id_column = "primer_pair_id"
    not_found_error = PrimerPairNotFoundError
    base_query = f"""
        SELECT DISTINCT pp.primer_pair_id, pp.type, pp.chr, pp.start, pp."end",
            pp.strand, pp.product_size,
            {primer_select_list("p1", "left")},
            {primer_select_list("p2", "right")}
        FROM primer_pair pp
        JOIN primer p1 ON pp.left_primer_id = p1.primer_id
        JOIN primer p2 ON pp.right_primer_id = p2.primer_id
        LEFT JOIN amplicon_to_crRNA amp ON pp.primer_pair_id = amp.primer_pair_id
    """
    base_query_suffix = "ORDER BY pp.primer_pair_id"

    def __init__(self, db):
        super().__init__(db)
        self.by_plate_query = QueryBuilder(
            f"{self.base_query}\nJOIN plate pl ON p1.plate_id = pl.plate_id",
            suffix=self.base_query_suffix,
        )

    def dependencies(self) -> List[Dependency]:
        return [
            Dependency("left_primer", self.db.primers),
            Dependency("right_primer", self.db.primers),
        ]

    def build_entity(self, row: Mapping[str, Any]) -> PrimerPair:
        composite = CompositeRow(row)
        pair = composite.primary()
        primers = self.db.primers.hydrator
        return PrimerPair(
            primer_pair_id=pair["primer_pair_id"],
            type=pair["type"],
            left_primer=primers.hydrate(composite.group("left")),
            right_primer=primers.hydrate(composite.group("right")),
            seq_region=pair["chr"],
            seq_region_start=pair["start"],
            seq_region_end=pair["end"],
            seq_region_strand=pair["strand"],
            product_size=pair["product_size"],
        )

    def insert_values(self, entity: PrimerPair) -> Dict[str, Any]:
        return {
            "primer_pair_id": entity.primer_pair_id,
            "type": entity.type,
            "left_primer_id": entity.left_primer.primer_id,
            "right_primer_id": entity.right_primer.primer_id,
            "chr": entity.seq_region,
            "start": entity.seq_region_start,
            '"end"': entity.seq_region_end,
            "strand": entity.seq_region_strand,
            "product_size": entity.product_size,
        }

    def store(self, entity: PrimerPair, crRNAs: Optional[Sequence[CrRNA]] = None) -> PrimerPair:
        """
        Store a primer pair with its primers and the guides it amplifies.

        Primers and guides that aren't in the database yet are stored first.
        One `amplicon_to_crRNA` row is written per guide.

        Args:
            entity: The primer pair.
            crRNAs: The guides amplified by the pair. At least one is required.

        Returns:
            The stored primer pair.

        Raises:
            (exceptions.ValidationError): If the pair, its primers or the guide
                list are missing or of the wrong type. Nothing is written.
        """
        self.dependency_store.validate(entity)
        if not crRNAs:
            raise ValidationError("At least one crRNA must be supplied in order to add a primer pair to the database.")
        if not isinstance(crRNAs, (list, tuple)):
            raise ValidationError(f"crRNAs must be supplied as a list, not {type(crRNAs).__name__}.")
        for crRNA in crRNAs:
            if not isinstance(crRNA, CrRNA):
                raise ValidationError(f"Supplied object must be a CrRNA object, not {type(crRNA).__name__}.")

        def link_crRNAs(primer_pair: PrimerPair):
            statement = QueryBuilder.insert("amplicon_to_crRNA", ["primer_pair_id", "crRNA_id"])
            resolved = [self.dependency_store.resolve(self.db.crRNAs, crRNA) for crRNA in crRNAs]
            for crRNA in dedupe_by(resolved, lambda guide: guide.crRNA_id):
                self.connection.execute(statement, [primer_pair.primer_pair_id, crRNA.crRNA_id])

        return self.dependency_store.store(entity, associations=link_crRNAs)

    def fetch_all_by_crRNA(self, crRNA: CrRNA) -> List[PrimerPair]:
        """
        Fetch the primer pairs amplifying a guide.

        Args:
            crRNA: The stored guide.

        Returns:
            The primer pairs, possibly none.
        """
        return self.fetch_all_by_crRNA_id(crRNA.crRNA_id)

    def fetch_all_by_crRNA_id(self, crRNA_id: int) -> List[PrimerPair]:
        """
        Fetch the primer pairs amplifying a guide, by the guide's id.

        Args:
            crRNA_id: The guide's database id.

        Returns:
            The primer pairs, possibly none.
        """
        return self._fetch(equals("amp.crRNA_id", crRNA_id))

    def fetch_all_by_crRNAs(self, crRNAs: Iterable[CrRNA]) -> List[PrimerPair]:
        """
        Fetch the primer pairs amplifying any of several guides.

        Args:
            crRNAs: The stored guides.

        Returns:
            Every primer pair once, in the order first encountered.
        """
        primer_pairs = []
        for crRNA in crRNAs:
            primer_pairs.extend(self.fetch_all_by_crRNA(crRNA))
        return dedupe_by(primer_pairs, id)

    def fetch_all_by_crRNA_ids(self, crRNA_ids: Iterable[int]) -> List[PrimerPair]:
        """
        Fetch the primer pairs amplifying any of several guides, with one query.

        Args:
            crRNA_ids: The guides' database ids.

        Returns:
            Every primer pair once, ordered by id.
        """
        return self._fetch_all_in("amp.crRNA_id", crRNA_ids)

    def fetch_by_plate_name_and_well(self, plate_name: str, well_id: Optional[str] = None) -> List[PrimerPair]:
        """
        Fetch the primer pairs whose left primer sits on a plate.

        Args:
            plate_name: The name of the primer plate.
            well_id: Restrict to the left primer in this well.

        Returns:
            The primer pairs, possibly none.
        """
        where = equals("pl.plate_name", plate_name)
        if well_id:
            where = where & equals("p1.well_id", well_id)
        return self._fetch(where, self.by_plate_query)
