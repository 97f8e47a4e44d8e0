##############################################################################
# Copyright (c) crispr_db Project developers. See top-level LICENSE and
# COPYRIGHT files for dates and other details. No copyright assignment is
# required to contribute to crispr_db.
##############################################################################

"""
Tests for the `data_models.py` module.
"""

import pytest

from crispr_db.db_scripts.data_models import CrRNA, InjectionPool, Plate, Primer, PrimerPair, Target, Well
from crispr_db.exceptions import IntegrityError


class TestBaseEntity:
    """Tests for the behaviour every entity shares."""

    def test_id_field_per_type(self):
        """
        Test that each entity reads its id from its own field.
        """
        assert Target(target_id=3).get_id() == 3
        assert InjectionPool(db_id=4).get_id() == 4
        assert Primer().get_id() is None

    def test_assign_id(self):
        """
        Test that an id can be assigned once and re-assigned to the same value.
        """
        primer = Primer()
        primer.assign_id(10)
        primer.assign_id(10)
        assert primer.primer_id == 10

    def test_assign_different_id_raises(self):
        """
        Test that an id never changes once assigned.
        """
        primer = Primer(primer_id=10)
        with pytest.raises(IntegrityError):
            primer.assign_id(11)
        assert primer.primer_id == 10

    def test_clear_id(self):
        """
        Test that clearing an id leaves the entity unsaved.
        """
        plate = Plate(plate_id=1)
        plate.clear_id()
        assert plate.get_id() is None

    def test_identity_equality(self):
        """
        Test that two entities with the same values are still different objects.
        """
        assert Primer(primer_id=1) != Primer(primer_id=1)
        primer = Primer(primer_id=1)
        assert primer == primer

    def test_get_scalars_skips_references(self):
        """
        Test that references, wells and collections are left out of the scalars.
        """
        crRNA = CrRNA(crRNA_id=1, name="guide", target=Target(), well=Well(Plate(), "A01"))
        scalars = crRNA.get_scalars()
        assert scalars["name"] == "guide"
        assert "target" not in scalars
        assert "well" not in scalars
        assert "coding_scores" not in scalars

    def test_get_class_fields(self):
        """
        Test that the dataclass fields are returned in declaration order.
        """
        names = [field.name for field in Plate.get_class_fields()]
        assert names == ["plate_id", "plate_name", "plate_type", "plate_category"]


class TestDerivedValues:
    """Tests for the computed properties of entities."""

    def test_primer_name_and_template(self):
        """
        Test that a primer's name is built from its location and its tail is stripped from the template.
        """
        primer = Primer(
            sequence="TAILACGT", tail="TAIL", seq_region="5", seq_region_start=1, seq_region_end=8, seq_region_strand="1"
        )
        assert primer.primer_name == "5:1-8:1"
        assert primer.template_sequence == "ACGT"

    def test_template_without_tail(self):
        """
        Test that a primer without a tail has its full sequence as template.
        """
        assert Primer(sequence="ACGT").template_sequence == "ACGT"

    def test_pair_name(self):
        """
        Test that a pair's name is built from its amplicon location.
        """
        pair = PrimerPair(seq_region="5", seq_region_start=100, seq_region_end=500, seq_region_strand="1")
        assert pair.pair_name == "5:100-500:1"

    def test_crRNA_target_shortcuts(self):
        """
        Test that a guide exposes its target's id and name, and None without a target.
        """
        crRNA = CrRNA(target=Target(target_id=2, target_name="gene1_exon1"))
        assert crRNA.target_id == 2
        assert crRNA.target_name == "gene1_exon1"
        assert CrRNA().target_id is None
        assert Target(target_name="x").name == "x"

    def test_mutable_defaults_are_not_shared(self):
        """
        Test that each entity gets its own collections.
        """
        first, second = CrRNA(), CrRNA()
        first.coding_scores["ENST1"] = 0.5
        assert second.coding_scores == {}
        assert InjectionPool().guides is not InjectionPool().guides
