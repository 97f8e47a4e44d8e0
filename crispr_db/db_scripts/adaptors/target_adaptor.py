##############################################################################
# Copyright (c) crispr_db Project developers. See top-level LICENSE and
# COPYRIGHT files for dates and other details. No copyright assignment is
# required to contribute to crispr_db.
##############################################################################

"""
Module for managing targets in the crispr_db database.

A target is identified by its id once stored and by the pair
`(target_name, requestor)` before that.
"""

import logging
from datetime import date
from typing import Any, Dict, List, Mapping

from crispr_db.db_scripts.adaptors.base_adaptor import BaseAdaptor
from crispr_db.db_scripts.data_models import Target
from crispr_db.db_scripts.query_builder import equals
from crispr_db.exceptions import TargetNotFoundError, ValidationError


LOG = logging.getLogger(__name__)


class TargetAdaptor(BaseAdaptor[Target]):
    """
    Adaptor for the `target` table.

    Methods:
        fetch_by_name_and_requestor: Fetch a target by its natural key.
        fetch_all_by_requestor: Fetch every target asked for by one requestor.
        update_status: Write a target's current status back to the database.
    """

    entity_type = "target"
    entity_class = Target
    table = "target"
    table_alias = "t"
    id_column = "target_id"
    natural_key = (("target_name", "target_name"), ("requestor", "requestor"))
    not_found_error = TargetNotFoundError
    base_query = """
        SELECT t.target_id, t.target_name, t.assembly, t.chr, t.start, t."end",
            t.strand, t.species, t.requires_enzyme, t.gene_id, t.gene_name,
            t.requestor, t.ensembl_version, t.status_id, t.status_changed
        FROM target t
    """

    def build_entity(self, row: Mapping[str, Any]) -> Target:
        return Target(
            target_id=row["target_id"],
            target_name=row["target_name"],
            assembly=row["assembly"],
            chr=row["chr"],
            start=row["start"],
            end=row["end"],
            strand=row["strand"],
            species=row["species"],
            requires_enzyme=bool(row["requires_enzyme"]),
            gene_id=row["gene_id"],
            gene_name=row["gene_name"],
            requestor=row["requestor"],
            ensembl_version=row["ensembl_version"],
            status=self.db.status_codec.optional_name_for(row["status_id"]),
            status_changed=row["status_changed"],
        )

    def insert_values(self, entity: Target) -> Dict[str, Any]:
        return {
            "target_id": entity.target_id,
            "target_name": entity.target_name,
            "assembly": entity.assembly,
            "chr": entity.chr,
            "start": entity.start,
            '"end"': entity.end,
            "strand": entity.strand,
            "species": entity.species,
            "requires_enzyme": int(bool(entity.requires_enzyme)),
            "gene_id": entity.gene_id,
            "gene_name": entity.gene_name,
            "requestor": entity.requestor,
            "ensembl_version": entity.ensembl_version,
            "status_id": self.db.status_codec.optional_id_for(entity.status),
            "status_changed": entity.status_changed,
        }

    def fetch_by_name_and_requestor(self, target_name: str, requestor: str) -> Target:
        """
        Fetch a target by its name and the person who asked for it.

        Args:
            target_name: The name of the target.
            requestor: The requestor's name.

        Returns:
            The target.

        Raises:
            (exceptions.TargetNotFoundError): If there is no such target.
        """
        where = equals("t.target_name", target_name) & equals("t.requestor", requestor)
        return self._fetch_single(where, f"with name {target_name} and requestor {requestor}")

    def fetch_all_by_requestor(self, requestor: str) -> List[Target]:
        """
        Fetch every target asked for by one requestor.

        Args:
            requestor: The requestor's name.

        Returns:
            The targets, possibly none.
        """
        return self._fetch(equals("t.requestor", requestor))

    def update_status(self, target: Target):
        """
        Write a stored target's status back to the database.

        The change date is set to today when the target doesn't carry one.

        Args:
            target: The target, which must have an id.

        Raises:
            (exceptions.ValidationError): If the target has no id or no status.
            (exceptions.StatusNotFoundError): If the status isn't in the vocabulary.
        """
        if not isinstance(target, Target) or target.target_id is None:
            raise ValidationError("update_status needs a Target that has been stored.")
        if target.status is None:
            raise ValidationError(f"Target {target.target_name} has no status to update.")
        status_id = self.db.status_codec.id_for(target.status)
        if target.status_changed is None:
            target.status_changed = date.today().isoformat()
        with self.connection.transaction():
            self.connection.execute(
                "UPDATE target SET status_id = ?, status_changed = ? WHERE target_id = ?",
                [status_id, target.status_changed, target.target_id],
            )
        LOG.debug(f"Updated status of target {target.target_id} to {target.status}.")
