##############################################################################
# Copyright (c) crispr_db Project developers. See top-level LICENSE and
# COPYRIGHT files for dates and other details. No copyright assignment is
# required to contribute to crispr_db.
##############################################################################

"""
This module houses the dataclasses for the records stored in crispr_db's database.

Every entity compares by identity (`eq=False`): the identity cache guarantees
that one database row maps to one instance, so two references to the same row
are always the same object.
"""

import logging
from abc import ABC
from dataclasses import Field, dataclass, field
from dataclasses import fields as dataclass_fields
from typing import Any, ClassVar, Dict, List, Optional, Tuple

from crispr_db.exceptions import IntegrityError


LOG = logging.getLogger(__name__)


@dataclass(eq=False)
class BaseEntity(ABC):
    """
    A base class for every entity dataclass.

    Subclasses name the attribute holding their database id in `id_field`. That
    attribute is `None` until the entity is first stored and never changes
    afterwards.

    Methods:
        get_id: Get the database id of this entity.
        assign_id: Record the database id after the entity's row has been inserted.
        clear_id: Forget an id assigned inside a transaction that rolled back.
        get_class_fields: Retrieve the dataclass fields of this entity class.
        get_scalars: Retrieve every field that isn't a reference to another entity.
    """

    id_field: ClassVar[str] = "db_id"

    def get_id(self) -> Optional[int]:
        """
        Get the database id of this entity.

        Returns:
            The id, or None if the entity has never been stored.
        """
        return getattr(self, self.id_field)

    def assign_id(self, new_id: int):
        """
        Record the database id of this entity.

        Args:
            new_id: The id generated by the database.

        Raises:
            (exceptions.IntegrityError): If the entity already holds a different id.
        """
        current_id = self.get_id()
        if current_id is not None and current_id != new_id:
            raise IntegrityError(
                f"{type(self).__name__} already has id {current_id}; refusing to change it to {new_id}."
            )
        setattr(self, self.id_field, new_id)

    def clear_id(self):
        """Forget the database id. Only used when the insert that produced it was rolled back."""
        setattr(self, self.id_field, None)

    @classmethod
    def get_class_fields(cls) -> Tuple[Field]:
        """
        Get the fields associated with this entity class.

        Returns:
            A tuple of dataclass.Field objects representing the fields in this data class.
        """
        return dataclass_fields(cls)

    def get_scalars(self) -> Dict[str, Any]:
        """
        Get every field of this entity that is not a reference to another entity.

        Returns:
            A dictionary of field name to value.
        """
        scalars = {}
        for field_obj in self.get_class_fields():
            value = getattr(self, field_obj.name)
            if isinstance(value, (BaseEntity, Well, list, dict)):
                continue
            scalars[field_obj.name] = value
        return scalars


@dataclass(eq=False)
class Plate(BaseEntity):
    """
    A physical plate that guide RNAs and primers are arrayed on.

    Attributes:
        plate_id: Database id.
        plate_name: Unique plate name, e.g. `CR_000001a`.
        plate_type: Number of wells, as a string.
        plate_category: What the plate holds, e.g. `crispr` or `pcr_primers`.
    """

    id_field: ClassVar[str] = "plate_id"

    plate_id: Optional[int] = None
    plate_name: Optional[str] = None
    plate_type: str = "96"
    plate_category: Optional[str] = None


@dataclass(eq=False)
class Well:
    """
    A position on a plate. A value object with no table of its own.

    Attributes:
        plate: The plate the well is on.
        position: The well id, e.g. `A01`.
        contents: The entity sitting in the well, if any.
    """

    plate: Plate
    position: str
    contents: Any = None


@dataclass(eq=False)
class Target(BaseEntity):
    """
    A genomic region that guide RNAs are designed against.

    The natural key of a target is `(target_name, requestor)`.
    """

    id_field: ClassVar[str] = "target_id"

    target_id: Optional[int] = None
    target_name: Optional[str] = None
    assembly: Optional[str] = None
    chr: Optional[str] = None
    start: Optional[int] = None
    end: Optional[int] = None
    strand: Optional[str] = None
    species: Optional[str] = None
    requires_enzyme: bool = False
    gene_id: Optional[str] = None
    gene_name: Optional[str] = None
    requestor: Optional[str] = None
    ensembl_version: Optional[int] = None
    status: Optional[str] = None
    status_changed: Optional[str] = None

    @property
    def name(self) -> Optional[str]:
        """Alias for `target_name`."""
        return self.target_name


@dataclass(eq=False)
class OffTarget:
    """
    One predicted off-target hit for a guide RNA.

    Attributes:
        position: Location of the hit, e.g. `Zv9:4:1000-1022:1`.
        mismatches: Number of mismatches against the guide.
        annotation: Where the hit falls, e.g. `exon`, `intron`, `nongenic`.
    """

    position: str
    mismatches: int
    annotation: Optional[str] = None


@dataclass(eq=False)
class PlasmidBackbone(BaseEntity):
    """
    A vector that guide RNAs are cloned into. Identified by its unique name.
    """

    id_field: ClassVar[str] = "plasmid_backbone_id"

    plasmid_backbone_id: Optional[int] = None
    name: Optional[str] = None


@dataclass(eq=False)
class Enzyme(BaseEntity):
    """
    A restriction enzyme. Identified by its unique name.

    Attributes:
        enzyme_id: Database id.
        name: The enzyme name, e.g. `BsaI`.
        site: The recognition site, e.g. `GGTCTC`.
    """

    id_field: ClassVar[str] = "enzyme_id"

    enzyme_id: Optional[int] = None
    name: Optional[str] = None
    site: Optional[str] = None


@dataclass(eq=False)
class RestrictionSite:
    """
    A restriction enzyme that cuts a guide's amplicon only at the guide's site.

    Attributes:
        enzyme: The enzyme.
        proximity_to_cut_site: Distance in bp from the enzyme site to the guide's cut site.
        fragment_sizes: Sizes in bp of the digested amplicon's fragments.
    """

    enzyme: Enzyme
    proximity_to_cut_site: Optional[int] = None
    fragment_sizes: List[int] = field(default_factory=list)


@dataclass(eq=False)
class CrRNA(BaseEntity):
    """
    A CRISPR guide RNA design.

    Attributes:
        crRNA_id: Database id.
        name: Guide name, conventionally `crRNA:chr:start-end:strand`.
        target: The target the guide was designed against. Required to store.
        well: The plate position of the guide, if it has been arrayed.
        coding_scores: Per-transcript coding scores, keyed by transcript id.
        off_target_hits: Predicted off-target hits, or None if never computed.
        plasmid_backbone: The vector the guide is cloned into, if it has been.
        restriction_sites: Enzymes usable to screen for mutations at the guide, or None
            if never computed.
        forward_oligo, reverse_oligo: The annealed oligos used to clone the guide.
        t7_hairpin_oligo, t7_fillin_oligo: The oligos used to make the guide by in vitro transcription.
    """

    id_field: ClassVar[str] = "crRNA_id"

    crRNA_id: Optional[int] = None
    name: Optional[str] = None
    chr: Optional[str] = None
    start: Optional[int] = None
    end: Optional[int] = None
    strand: Optional[str] = None
    sequence: Optional[str] = None
    five_prime_Gs: int = 0
    score: Optional[float] = None
    off_target_score: Optional[float] = None
    coding_score: Optional[float] = None
    target: Optional[Target] = None
    well: Optional[Well] = None
    status: Optional[str] = None
    status_changed: Optional[str] = None
    coding_scores: Dict[str, float] = field(default_factory=dict)
    off_target_hits: Optional[List[OffTarget]] = None
    plasmid_backbone: Optional[PlasmidBackbone] = None
    restriction_sites: Optional[List[RestrictionSite]] = None
    forward_oligo: Optional[str] = None
    reverse_oligo: Optional[str] = None
    t7_hairpin_oligo: Optional[str] = None
    t7_fillin_oligo: Optional[str] = None

    @property
    def target_id(self) -> Optional[int]:
        """The database id of this guide's target."""
        return self.target.target_id if self.target is not None else None

    @property
    def target_name(self) -> Optional[str]:
        """The name of this guide's target."""
        return self.target.target_name if self.target is not None else None


@dataclass(eq=False)
class Primer(BaseEntity):
    """
    A PCR primer.

    `sequence` is the full oligo, including the `tail` prefix when there is one.
    Only the part after the tail is written to the `primer_sequence` column.
    """

    id_field: ClassVar[str] = "primer_id"

    primer_id: Optional[int] = None
    sequence: Optional[str] = None
    seq_region: Optional[str] = None
    seq_region_start: Optional[int] = None
    seq_region_end: Optional[int] = None
    seq_region_strand: Optional[str] = None
    tail: Optional[str] = None
    well: Optional[Well] = None

    @property
    def primer_name(self) -> str:
        """Name of the primer in the form `chr:start-end:strand`."""
        return f"{self.seq_region}:{self.seq_region_start}-{self.seq_region_end}:{self.seq_region_strand}"

    @property
    def template_sequence(self) -> Optional[str]:
        """The primer sequence without its tail."""
        if self.sequence is not None and self.tail and self.sequence.startswith(self.tail):
            return self.sequence[len(self.tail) :]
        return self.sequence


@dataclass(eq=False)
class PrimerPair(BaseEntity):
    """
    A pair of primers amplifying a region around one or more guide RNAs.

    Attributes:
        type: The screening the pair was designed for, e.g. `ext`, `int`, `ext-illumina`.
        left_primer: The forward primer. Required to store.
        right_primer: The reverse primer. Required to store.
    """

    id_field: ClassVar[str] = "primer_pair_id"

    primer_pair_id: Optional[int] = None
    type: Optional[str] = None
    left_primer: Optional[Primer] = None
    right_primer: Optional[Primer] = None
    seq_region: Optional[str] = None
    seq_region_start: Optional[int] = None
    seq_region_end: Optional[int] = None
    seq_region_strand: Optional[str] = None
    product_size: Optional[int] = None

    @property
    def pair_name(self) -> str:
        """Name of the amplicon in the form `chr:start-end:strand`."""
        return f"{self.seq_region}:{self.seq_region_start}-{self.seq_region_end}:{self.seq_region_strand}"


@dataclass(eq=False)
class GuideRNA:
    """
    One guide RNA in an injection pool, with how it was prepared.
    """

    crRNA: CrRNA
    guideRNA_type: Optional[str] = None
    concentration: Optional[float] = None


@dataclass(eq=False)
class InjectionPool(BaseEntity):
    """
    A pool of guide RNAs injected together. The natural key is `pool_name`.
    """

    db_id: Optional[int] = None
    pool_name: Optional[str] = None
    cas9_type: Optional[str] = None
    cas9_concentration: Optional[float] = None
    date: Optional[str] = None
    line_injected: Optional[str] = None
    line_raised: Optional[str] = None
    sorted_by: Optional[str] = None
    guides: List[GuideRNA] = field(default_factory=list)


@dataclass(eq=False)
class Subplex(BaseEntity):
    """
    A subset of a sequencing plex, tied to one injection pool.
    """

    db_id: Optional[int] = None
    plex_name: Optional[str] = None
    plate_num: Optional[int] = None
    injection_pool: Optional[InjectionPool] = None


@dataclass(eq=False)
class Sample(BaseEntity):
    """
    A sequenced sample. Needs both an injection pool and a subplex to be stored.
    """

    db_id: Optional[int] = None
    sample_name: Optional[str] = None
    injection_pool: Optional[InjectionPool] = None
    subplex: Optional[Subplex] = None
    well_id: Optional[str] = None
    barcode_id: Optional[int] = None
    generation: Optional[str] = None
    sample_type: Optional[str] = None
    species: Optional[str] = None
