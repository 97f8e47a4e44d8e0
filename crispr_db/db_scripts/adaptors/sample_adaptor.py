##############################################################################
# Copyright (c) crispr_db Project developers. See top-level LICENSE and
# COPYRIGHT files for dates and other details. No copyright assignment is
# required to contribute to crispr_db.
##############################################################################

"""
Module for managing sequenced samples in the crispr_db database.

A sample can only be stored with both an injection pool and a subplex; either
is stored first when it isn't in the database yet.
"""

import logging
from typing import Any, Dict, List, Mapping, Sequence

from crispr_db.db_scripts.adaptors.base_adaptor import BaseAdaptor
from crispr_db.db_scripts.data_models import InjectionPool, Sample, Subplex
from crispr_db.db_scripts.dependency_store import Dependency
from crispr_db.db_scripts.query_builder import equals
from crispr_db.db_scripts.row_hydrator import resolve_reference
from crispr_db.exceptions import SampleNotFoundError, ValidationError


LOG = logging.getLogger(__name__)


class SampleAdaptor(BaseAdaptor[Sample]):
    """
    Adaptor for the `sample` table.

    Methods:
        store_sample: Synonym for `store`.
        store_samples: Store several samples in one transaction.
        fetch_by_name: Fetch a sample by its unique name.
        fetch_all_by_subplex_id: Fetch every sample of a subplex, by the subplex's id.
        fetch_all_by_subplex: Fetch every sample of a subplex.
        fetch_all_by_injection_id: Fetch every sample of an injection pool, by the pool's id.
        fetch_all_by_injection_pool: Fetch every sample of an injection pool.
    """

    entity_type = "sample"
    entity_class = Sample
    table = "sample"
    table_alias = "sa"
    id_column = "sample_id"
    not_found_error = SampleNotFoundError
    base_query = """
        SELECT sa.sample_id, sa.sample_name, sa.injection_id, sa.subplex_id,
            sa.well_id, sa.barcode_id, sa.generation, sa.type, sa.species
        FROM sample sa
    """

    def dependencies(self) -> List[Dependency]:
        # The pool comes first so a subplex sharing it sees it already stored
        return [
            Dependency("injection_pool", self.db.injection_pools),
            Dependency("subplex", self.db.subplexes),
        ]

    def build_entity(self, row: Mapping[str, Any]) -> Sample:
        return Sample(
            db_id=row["sample_id"],
            sample_name=row["sample_name"],
            injection_pool=resolve_reference(self.db.injection_pools, row["injection_id"]),
            subplex=resolve_reference(self.db.subplexes, row["subplex_id"]),
            well_id=row["well_id"],
            barcode_id=row["barcode_id"],
            generation=row["generation"],
            sample_type=row["type"],
            species=row["species"],
        )

    def insert_values(self, entity: Sample) -> Dict[str, Any]:
        return {
            "sample_id": entity.db_id,
            "sample_name": entity.sample_name,
            "injection_id": entity.injection_pool.db_id,
            "subplex_id": entity.subplex.db_id,
            "well_id": entity.well_id,
            "barcode_id": entity.barcode_id,
            "generation": entity.generation,
            "type": entity.sample_type,
            "species": entity.species,
        }

    def store(self, entity: Sample) -> Sample:
        """
        Store one sample along with its injection pool and subplex.

        Args:
            entity: The sample.

        Returns:
            The stored sample.
        """
        return self.store_samples([entity])[0]

    def store_sample(self, sample: Sample) -> Sample:
        """Synonym for `store`."""
        return self.store(sample)

    def store_samples(self, samples: Sequence[Sample]) -> List[Sample]:
        """
        Store several samples in one transaction.

        If any sample fails, none of them is stored.

        Args:
            samples: The samples.

        Returns:
            The stored samples, in input order.

        Raises:
            (exceptions.ValidationError): If the input isn't a list of samples
                each with an injection pool and a subplex. Nothing is written.
        """
        if not isinstance(samples, (list, tuple)):
            raise ValidationError("Supplied argument must be a list of Sample objects.")
        for sample in samples:
            self.dependency_store.validate(sample)

        with self.connection.transaction():
            for sample in samples:
                self.dependency_store.store(sample)
        LOG.info(f"Stored {len(samples)} sample(s).")
        return list(samples)

    def fetch_by_name(self, sample_name: str) -> Sample:
        """
        Fetch a sample by its unique name.

        Args:
            sample_name: The name of the sample.

        Returns:
            The sample.

        Raises:
            (exceptions.SampleNotFoundError): If no sample has that name.
        """
        return self._fetch_single(equals("sa.sample_name", sample_name), f"with name {sample_name}")

    def fetch_all_by_subplex_id(self, subplex_id: int) -> List[Sample]:
        """
        Fetch every sample of a subplex, by the subplex's id.

        Args:
            subplex_id: The subplex's database id.

        Returns:
            The samples, possibly none.
        """
        return self._fetch(equals("sa.subplex_id", subplex_id))

    def fetch_all_by_subplex(self, subplex: Subplex) -> List[Sample]:
        """Fetch every sample of a stored subplex."""
        return self.fetch_all_by_subplex_id(subplex.db_id)

    def fetch_all_by_injection_id(self, injection_id: int) -> List[Sample]:
        """
        Fetch every sample of an injection pool, by the pool's id.

        Args:
            injection_id: The pool's database id.

        Returns:
            The samples, possibly none.
        """
        return self._fetch(equals("sa.injection_id", injection_id))

    def fetch_all_by_injection_pool(self, injection_pool: InjectionPool) -> List[Sample]:
        """Fetch every sample of a stored injection pool."""
        return self.fetch_all_by_injection_id(injection_pool.db_id)
