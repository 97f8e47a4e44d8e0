##############################################################################
# Copyright (c) crispr_db Project developers. See top-level LICENSE and
# COPYRIGHT files for dates and other details. No copyright assignment is
# required to contribute to crispr_db.
##############################################################################

"""
Module for managing guide RNAs (crRNAs) in the crispr_db database.

Besides the `crRNA` table itself this adaptor writes the per-guide
`coding_scores` and `off_target_info` tables, records how guides were
made (`expression_construct`, `construction_oligos`) and which restriction
enzymes screen their amplicons (`restriction_enzymes`), and reads the
aggregated `sequencing_results` for a set of guides.
"""

import logging
import re
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from crispr_db.db_scripts.adaptors.base_adaptor import BaseAdaptor
from crispr_db.db_scripts.data_models import (
    CrRNA,
    Enzyme,
    PlasmidBackbone,
    Plate,
    PrimerPair,
    RestrictionSite,
    Target,
    Well,
)
from crispr_db.db_scripts.dependency_store import Dependency
from crispr_db.db_scripts.query_builder import Filter, QueryBuilder, equals, in_clause
from crispr_db.db_scripts.row_hydrator import resolve_reference
from crispr_db.exceptions import CrRNANotFoundError, IntegrityError, ValidationError


LOG = logging.getLogger(__name__)

PLATE_NAME_PATTERN = re.compile(r"\ACR_0{0,5}\d+[a-z]\Z")

# The CrRNA attributes holding each kind of construction oligo
OLIGO_ATTRIBUTES = {
    "cloning_oligos": ("forward_oligo", "reverse_oligo"),
    "t7_hairpin_oligos": ("t7_hairpin_oligo",),
    "t7_fill-in_oligos": ("t7_fillin_oligo",),
}


def _well_plate(crRNA: CrRNA):
    return crRNA.well.plate if crRNA.well is not None else None


def _set_well_plate(crRNA: CrRNA, plate):
    crRNA.well.plate = plate


class crRNAAdaptor(BaseAdaptor[CrRNA]):  # pylint: disable=invalid-name
    """
    Adaptor for the `crRNA` table.

    A guide needs a target to be stored. When it sits in a well, the well's
    plate is stored too if it doesn't exist yet.

    Methods:
        store_crRNAs: Store several guides, given directly or in wells, in one transaction.
        store_coding_scores: Store the per-transcript coding scores of a stored guide.
        store_off_target_info: Store the off-target hits of a stored guide.
        check_plasmid_backbone_exists: Get the id of a guide's plasmid backbone, adding it if needed.
        store_expression_construct_info: Record a guide cloned into its backbone, in a well.
        store_construction_oligos: Record the oligos used to make a guide, in a well.
        store_restriction_enzyme_info: Store the enzymes that screen a guide's amplicon.
        fetch_all_by_name: Fetch every guide with a given name.
        fetch_by_name_and_target: Fetch the guide with a given name on a given target.
        fetch_by_names_and_targets: Fetch one guide per (name, target) pair.
        fetch_all_by_target: Fetch every guide on a target.
        fetch_all_by_targets: Fetch every guide on several targets.
        fetch_all_by_primer_pair: Fetch the guides a primer pair amplifies.
        fetch_all_by_status: Fetch every guide with a given status.
        fetch_by_plate_num_and_well: Fetch guides by plate and well.
        aggregate_sequencing_results: Count sequencing passes per guide and sample type.
    """

    entity_type = "crRNA"
    entity_class = CrRNA
    table = "crRNA"
    table_alias = "cr"
    id_column = "crRNA_id"
    not_found_error = CrRNANotFoundError
    base_query = """
        SELECT cr.crRNA_id, cr.crRNA_name, cr.chr, cr.start, cr."end", cr.strand,
            cr.sequence, cr.num_five_prime_Gs, cr.score, cr.off_target_score,
            cr.coding_score, cr.target_id, cr.plate_id, cr.well_id, cr.status_id,
            cr.status_changed
        FROM crRNA cr
    """

    def __init__(self, db):
        super().__init__(db)
        self.by_primer_pair_query = QueryBuilder(
            f"{self.base_query}\nJOIN amplicon_to_crRNA amp ON amp.crRNA_id = cr.crRNA_id"
        )
        self.by_status_query = QueryBuilder(f"{self.base_query}\nJOIN status st ON cr.status_id = st.status_id")
        self.by_plate_query = QueryBuilder(f"{self.base_query}\nJOIN plate pl ON cr.plate_id = pl.plate_id")
        self.sequencing_results_query = QueryBuilder(
            """
            SELECT seq.crRNA_id, s.type, SUM(seq.pass) AS num_passes
            FROM sample s
            JOIN sequencing_results seq ON s.sample_id = seq.sample_id
            """,
            suffix="GROUP BY seq.crRNA_id, s.type",
        )

    def dependencies(self) -> List[Dependency]:
        return [
            Dependency("target", self.db.targets),
            Dependency("plate", self.db.plates, required=False, getter=_well_plate, setter=_set_well_plate),
        ]

    def build_entity(self, row: Mapping[str, Any]) -> CrRNA:
        plate = resolve_reference(self.db.plates, row["plate_id"])
        well = Well(plate=plate, position=row["well_id"]) if plate is not None and row["well_id"] else None
        return CrRNA(
            crRNA_id=row["crRNA_id"],
            name=row["crRNA_name"],
            chr=row["chr"],
            start=row["start"],
            end=row["end"],
            strand=row["strand"],
            sequence=row["sequence"],
            five_prime_Gs=row["num_five_prime_Gs"],
            score=row["score"],
            off_target_score=row["off_target_score"],
            coding_score=row["coding_score"],
            target=resolve_reference(self.db.targets, row["target_id"]),
            well=well,
            status=self.db.status_codec.optional_name_for(row["status_id"]),
            status_changed=row["status_changed"],
        )

    def insert_values(self, entity: CrRNA) -> Dict[str, Any]:
        well = entity.well
        return {
            "crRNA_id": entity.crRNA_id,
            "crRNA_name": entity.name,
            "chr": entity.chr,
            "start": entity.start,
            '"end"': entity.end,
            "strand": entity.strand,
            "sequence": entity.sequence,
            "num_five_prime_Gs": entity.five_prime_Gs,
            "score": entity.score,
            "off_target_score": entity.off_target_score,
            "coding_score": entity.coding_score,
            "target_id": entity.target_id,
            "plate_id": well.plate.plate_id if well is not None else None,
            "well_id": well.position if well is not None else None,
            "status_id": self.db.status_codec.optional_id_for(entity.status),
            "status_changed": entity.status_changed,
        }

    def _sync_target_status(self, crRNA: CrRNA):
        if crRNA.target.status is not None:
            self.db.targets.update_status(crRNA.target)

    def store(self, entity: CrRNA) -> CrRNA:
        """
        Store one guide along with its target and, if it sits in a well, its plate.

        Args:
            entity: The guide.

        Returns:
            The stored guide.
        """
        return self.store_crRNAs([entity])[0]

    def store_crRNAs(self, crRNAs: Sequence[Union[CrRNA, Well]]) -> List[CrRNA]:
        """
        Store several guides in one transaction.

        Each item is either a guide or a well holding one; a guide given in a
        well is placed in that well before it is stored.

        Args:
            crRNAs: The guides or wells.

        Returns:
            The stored guides, in input order.

        Raises:
            (exceptions.ValidationError): If the input isn't a list, a well is
                empty or holds something other than a guide, or a guide has no
                target. Nothing is written.
        """
        if not crRNAs:
            raise ValidationError("An input must be supplied in order to add crRNAs to the database.")
        if not isinstance(crRNAs, (list, tuple)):
            raise ValidationError(f"The supplied argument must be a list, not {type(crRNAs).__name__}.")

        to_store = []
        for item in crRNAs:
            if isinstance(item, Well):
                crRNA = item.contents
                if crRNA is None:
                    raise ValidationError("The well is empty! A CrRNA must be supplied to add to the database.")
                if not isinstance(crRNA, CrRNA):
                    raise ValidationError(
                        f"The object in the supplied Well must be a CrRNA object, not {type(crRNA).__name__}."
                    )
                crRNA.well = item
            elif isinstance(item, CrRNA):
                crRNA = item
            else:
                raise ValidationError(
                    f"The supplied input must be either a Well or a CrRNA object, not {type(item).__name__}."
                )
            self.dependency_store.validate(crRNA)
            to_store.append(crRNA)

        with self.connection.transaction():
            for crRNA in to_store:
                self.dependency_store.store(crRNA, associations=self._sync_target_status)
        return to_store

    def _check_stored(self, crRNA: CrRNA):
        if not isinstance(crRNA, CrRNA):
            raise ValidationError(f"The supplied argument must be a CrRNA object, not {type(crRNA).__name__}.")
        if crRNA.crRNA_id is None:
            raise ValidationError(f"Supplied crRNA {crRNA.name} does not have a database id.")

    def store_coding_scores(self, crRNA: CrRNA) -> int:
        """
        Store the per-transcript coding scores of a stored guide.

        Args:
            crRNA: The guide, which must have an id.

        Returns:
            The number of rows written.
        """
        self._check_stored(crRNA)
        with self.connection.transaction():
            for transcript_id in sorted(crRNA.coding_scores):
                self.connection.execute(
                    QueryBuilder.insert("coding_scores", ["crRNA_id", "transcript_id", "score"]),
                    [crRNA.crRNA_id, transcript_id, crRNA.coding_scores[transcript_id]],
                )
        return len(crRNA.coding_scores)

    def store_off_target_info(self, crRNA: CrRNA) -> int:
        """
        Store the off-target hits of a stored guide.

        A guide whose off-targets were never computed, or that has none, is
        accepted and nothing is written.

        Args:
            crRNA: The guide.

        Returns:
            The number of rows written.

        Raises:
            (exceptions.ValidationError): If the guide isn't a CrRNA or has hits but no id.
            (exceptions.IntegrityError): If the guide's id isn't in the database.
        """
        if not isinstance(crRNA, CrRNA):
            raise ValidationError(f"The supplied argument must be a CrRNA object, not {type(crRNA).__name__}.")
        if crRNA.off_target_hits is None:
            LOG.warning(f"There is no off-target info for crRNA {crRNA.name}.")
            return 0
        if not crRNA.off_target_hits:
            return 0

        self._check_stored(crRNA)
        if not self.exists_in_db(crRNA):
            raise IntegrityError(f"crRNA {crRNA.name} does not exist in the database.")

        columns = ["crRNA_id", "off_target_hit", "mismatches", "annotation"]
        with self.connection.transaction():
            for off_target in crRNA.off_target_hits:
                self.connection.execute(
                    QueryBuilder.insert("off_target_info", columns),
                    [crRNA.crRNA_id, off_target.position, off_target.mismatches, off_target.annotation],
                )
        return len(crRNA.off_target_hits)

    def check_plasmid_backbone_exists(self, crRNA: CrRNA) -> int:
        """
        Look up the id of a guide's plasmid backbone, adding the backbone if it's missing.

        The guide is pointed at the session's instance of the backbone.

        Args:
            crRNA: The guide, holding a plasmid backbone.

        Returns:
            The id of the backbone.

        Raises:
            (exceptions.ValidationError): If the guide has no plasmid backbone.
        """
        self._check_backbone(crRNA)
        with self.connection.transaction():
            backbone = self.dependency_store.resolve(self.db.plasmid_backbones, crRNA.plasmid_backbone)
        crRNA.plasmid_backbone = backbone
        return backbone.plasmid_backbone_id

    def _check_backbone(self, crRNA: CrRNA):
        if not isinstance(crRNA.plasmid_backbone, PlasmidBackbone):
            raise ValidationError(f"crRNA {crRNA.name} must have a PlasmidBackbone to record how it was cloned.")

    def _check_well(self, well: Well) -> CrRNA:
        if not isinstance(well, Well):
            raise ValidationError(f"The supplied object must be a Well object, not {type(well).__name__}.")
        if not isinstance(well.plate, Plate):
            raise ValidationError(f"Well {well.position} must be on a Plate.")
        if well.contents is None:
            raise ValidationError("The well is empty! A CrRNA must be supplied to add to the database.")
        self._check_stored(well.contents)
        return well.contents

    def _well_plate_id(self, well: Well) -> int:
        well.plate = self.dependency_store.resolve(self.db.plates, well.plate)
        return well.plate.plate_id

    def store_expression_construct_info(self, well: Well):
        """
        Record that a guide has been cloned into its plasmid backbone, in a well.

        The well's plate and the guide's backbone are added if they're missing.

        Args:
            well: The well holding the construct. Its contents must be a stored
                guide with a plasmid backbone.

        Raises:
            (exceptions.ValidationError): If the well, its plate or its guide
                is missing or of the wrong type, or the guide has no id or
                no plasmid backbone. Nothing is written.
        """
        crRNA = self._check_well(well)
        self._check_backbone(crRNA)

        columns = ["crRNA_id", "plate_id", "well_id", "plasmid_backbone_id"]
        with self.connection.transaction():
            plate_id = self._well_plate_id(well)
            backbone_id = self.check_plasmid_backbone_exists(crRNA)
            self.connection.execute(
                QueryBuilder.insert("expression_construct", columns),
                [crRNA.crRNA_id, plate_id, well.position, backbone_id],
            )
        LOG.info(f"Stored expression construct for crRNA {crRNA.crRNA_id} in {well.plate.plate_name}:{well.position}.")

    def store_construction_oligos(self, well: Well, oligo_type: str):
        """
        Record the oligos used to make a guide, and the well they are in.

        Args:
            well: The well holding the oligos. Its contents must be a stored guide.
            oligo_type: One of `cloning_oligos` (the annealed forward and
                reverse oligos, cloned into the guide's plasmid backbone),
                `t7_hairpin_oligos` or `t7_fill-in_oligos`.

        Raises:
            (exceptions.ValidationError): If the oligo type is unknown, the
                guide lacks the oligos of that type, or the well is invalid as
                for `store_expression_construct_info`. Nothing is written.
        """
        crRNA = self._check_well(well)
        if oligo_type not in OLIGO_ATTRIBUTES:
            raise ValidationError(
                f"Couldn't understand oligo type '{oligo_type}'. Options: {', '.join(OLIGO_ATTRIBUTES)}."
            )
        oligos = [getattr(crRNA, attribute) for attribute in OLIGO_ATTRIBUTES[oligo_type]]
        if None in oligos:
            raise ValidationError(f"crRNA {crRNA.name} has no {oligo_type} to store.")
        cloned = oligo_type == "cloning_oligos"
        if cloned:
            self._check_backbone(crRNA)
        forward_oligo, reverse_oligo = (oligos + [None])[:2]

        columns = ["crRNA_id", "forward_oligo", "reverse_oligo", "plasmid_backbone_id", "plate_id", "well_id"]
        with self.connection.transaction():
            plate_id = self._well_plate_id(well)
            backbone_id = self.check_plasmid_backbone_exists(crRNA) if cloned else None
            self.connection.execute(
                QueryBuilder.insert("construction_oligos", columns),
                [crRNA.crRNA_id, forward_oligo, reverse_oligo, backbone_id, plate_id, well.position],
            )
        LOG.info(f"Stored {oligo_type} for crRNA {crRNA.crRNA_id} in {well.plate.plate_name}:{well.position}.")

    def store_restriction_enzyme_info(self, crRNA: CrRNA, primer_pair: PrimerPair) -> int:
        """
        Store the restriction enzymes that can screen a guide's amplicon for mutations.

        Enzymes that aren't in the database are added. Each guide's
        restriction site is pointed at the session's instance of its enzyme.

        Args:
            crRNA: The stored guide, holding its restriction sites.
            primer_pair: The stored primer pair whose amplicon is digested.

        Returns:
            The number of rows written.

        Raises:
            (exceptions.ValidationError): If either argument is of the wrong
                type or has no id, the guide has no restriction sites, or an
                enzyme without an id has no name. Nothing is written.
        """
        self._check_stored(crRNA)
        if not crRNA.restriction_sites:
            raise ValidationError(f"crRNA {crRNA.name} has no restriction enzyme info to store.")
        if not isinstance(primer_pair, PrimerPair):
            raise ValidationError(
                f"The supplied object should be a PrimerPair object, not {type(primer_pair).__name__}."
            )
        if primer_pair.primer_pair_id is None:
            raise ValidationError(f"Supplied primer pair {primer_pair.pair_name} does not have a database id.")
        for site in crRNA.restriction_sites:
            if not isinstance(site, RestrictionSite) or not isinstance(site.enzyme, Enzyme):
                raise ValidationError(f"Restriction sites of crRNA {crRNA.name} must each hold an Enzyme.")
            if site.enzyme.enzyme_id is None and site.enzyme.name is None:
                raise ValidationError("An enzyme must have a name or an id to be stored.")

        columns = ["primer_pair_id", "crRNA_id", "enzyme_id", "proximity_to_crRNA", "fragment_sizes"]
        with self.connection.transaction():
            for site in crRNA.restriction_sites:
                site.enzyme = self.dependency_store.resolve(self.db.enzymes, site.enzyme)
                fragment_sizes = ",".join(str(size) for size in sorted(site.fragment_sizes, reverse=True))
                self.connection.execute(
                    QueryBuilder.insert("restriction_enzymes", columns),
                    [
                        primer_pair.primer_pair_id,
                        crRNA.crRNA_id,
                        site.enzyme.enzyme_id,
                        site.proximity_to_cut_site,
                        fragment_sizes,
                    ],
                )
        return len(crRNA.restriction_sites)

    def exists_in_db(self, entity: Union[CrRNA, str]) -> bool:
        """
        Report whether a guide exists.

        Args:
            entity: A guide, checked by id, or a guide name.

        Returns:
            True if the guide (or any guide with that name) exists.
        """
        if isinstance(entity, str):
            return self.check_entry_exists_in_db("SELECT count(*) FROM crRNA WHERE crRNA_name = ?", [entity])
        return super().exists_in_db(entity)

    def fetch_all_by_name(self, name: str) -> List[CrRNA]:
        """
        Fetch every guide with a given name.

        Args:
            name: The guide name.

        Returns:
            The guides, possibly none.
        """
        return self._fetch(equals("cr.crRNA_name", name))

    def fetch_by_name_and_target(self, name: str, target: Target) -> CrRNA:
        """
        Fetch the guide with a given name on a given target.

        Args:
            name: The guide name.
            target: The stored target.

        Returns:
            The guide.

        Raises:
            (exceptions.CrRNANotFoundError): If there is no such guide.
        """
        where = equals("cr.crRNA_name", name) & equals("cr.target_id", target.target_id)
        return self._fetch_single(where, f"with name {name} and target {target.target_name}")

    def fetch_by_names_and_targets(self, names_and_targets: Iterable[Tuple[str, Target]]) -> List[CrRNA]:
        """
        Fetch one guide per (name, target) pair.

        Args:
            names_and_targets: Pairs of guide name and stored target.

        Returns:
            The guides, in input order.
        """
        return [self.fetch_by_name_and_target(name, target) for name, target in names_and_targets]

    def fetch_all_by_target(self, target: Target) -> List[CrRNA]:
        """
        Fetch every guide on a target.

        Args:
            target: The stored target.

        Returns:
            The guides, possibly none.
        """
        return self._fetch(equals("cr.target_id", target.target_id))

    def fetch_all_by_targets(self, targets: Iterable[Target]) -> List[CrRNA]:
        """
        Fetch every guide on any of several targets.

        Args:
            targets: The stored targets.

        Returns:
            The guides, possibly none.
        """
        return self._fetch_all_in("cr.target_id", [target.target_id for target in targets])

    def fetch_all_by_primer_pair(self, primer_pair: PrimerPair) -> List[CrRNA]:
        """
        Fetch the guides a primer pair amplifies.

        Args:
            primer_pair: The stored primer pair.

        Returns:
            The guides, possibly none.

        Raises:
            (exceptions.ValidationError): If the primer pair has no id.
        """
        if primer_pair.primer_pair_id is None:
            raise ValidationError(
                f"primer_pair_id is not defined for primer pair {primer_pair.pair_name}; "
                "cannot retrieve crRNAs from database."
            )
        return self._fetch(equals("amp.primer_pair_id", primer_pair.primer_pair_id), self.by_primer_pair_query)

    def fetch_all_by_status(self, status: str) -> List[CrRNA]:
        """
        Fetch every guide with a given status.

        Args:
            status: The status name.

        Returns:
            The guides, possibly none.
        """
        return self._fetch(equals("st.status", status), self.by_status_query)

    def fetch_by_plate_num_and_well(
        self, plate_num: Union[int, str], well_id: Optional[str] = None
    ) -> Union[CrRNA, List[CrRNA]]:
        """
        Fetch guides by plate and, optionally, well.

        A number matches every plate with that number regardless of its letter
        suffix, e.g. `1` matches `CR_000001a` and `CR_000001b`. A full plate
        name such as `CR_000001a` matches that plate only.

        Args:
            plate_num: A plate number or a full plate name.
            well_id: The well, e.g. `A01`.

        Returns:
            The single guide in that well when `well_id` is given, otherwise
            every guide on the plate.

        Raises:
            (exceptions.ValidationError): If `plate_num` is neither a number nor a plate name.
            (exceptions.CrRNANotFoundError): If `well_id` is given and the well holds no guide.
            (exceptions.IntegrityError): If `well_id` is given and the well holds several guides.
        """
        if isinstance(plate_num, int) or (isinstance(plate_num, str) and plate_num.isdigit()):
            where = Filter("pl.plate_name LIKE ?", (f"CR_{int(plate_num):06d}%",))
        elif isinstance(plate_num, str) and PLATE_NAME_PATTERN.match(plate_num):
            where = equals("pl.plate_name", plate_num)
        else:
            raise ValidationError(f"Supplied plate number, {plate_num}, does not look like a number!")

        if not well_id:
            return self._fetch(where, self.by_plate_query)

        crRNAs = self._fetch(where & equals("cr.well_id", well_id), self.by_plate_query)
        if not crRNAs:
            raise CrRNANotFoundError(f"Couldn't retrieve crRNA from plate {plate_num} well {well_id}.")
        if len(crRNAs) > 1:
            raise IntegrityError(f"Got more than one crRNA for plate {plate_num} well {well_id}.")
        return crRNAs[0]

    def aggregate_sequencing_results(self, crRNAs: Iterable[CrRNA]) -> Dict[int, Dict[str, int]]:
        """
        Count the sequencing passes of several guides, per sample type.

        Args:
            crRNAs: The stored guides.

        Returns:
            A dictionary of crRNA id to a dictionary of sample type to number of passes.
        """
        crRNA_ids = [crRNA.crRNA_id for crRNA in crRNAs]
        statement, params = self.sequencing_results_query.build(in_clause("seq.crRNA_id", crRNA_ids))
        results: Dict[int, Dict[str, int]] = {}
        for row in self.fetch_rows_for_generic_select_statement(statement, params):
            results.setdefault(row["crRNA_id"], {})[row["type"]] = row["num_passes"]
        return results
