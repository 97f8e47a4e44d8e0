##############################################################################
# Copyright (c) crispr_db Project developers. See top-level LICENSE and
# COPYRIGHT files for dates and other details. No copyright assignment is
# required to contribute to crispr_db.
##############################################################################

"""
Tests for the `sample_adaptor.py` and `subplex_adaptor.py` modules.
"""

import pytest

from crispr_db.db_scripts.data_models import Sample
from crispr_db.exceptions import ExecutionError, SampleNotFoundError, SubplexNotFoundError, ValidationError
from tests.fixture_types import FixtureCallable, FixtureCrisprDatabase


def count(db, table: str) -> int:
    return db.connection.count(f"SELECT count(*) FROM {table}")


class TestStoreSamples:
    """Tests for storing samples."""

    def test_stores_everything_referenced(self, sessions_db: FixtureCrisprDatabase, entities_sample: FixtureCallable):
        """
        Test that a sample with nothing stored yet brings its pool, subplex, guide and target along.

        Args:
            sessions_db: An open session on a fresh database.
            entities_sample: Factory for samples.
        """
        sample = sessions_db.samples.store(entities_sample())

        assert sample.db_id is not None
        assert sample.injection_pool.db_id is not None
        assert sample.subplex.db_id is not None
        assert sample.subplex.injection_pool is sample.injection_pool
        guide = sample.injection_pool.guides[0].crRNA
        assert guide.crRNA_id is not None
        assert guide.target.target_id is not None
        for table in ("sample", "subplex", "injection", "injection_pool", "crRNA", "target"):
            assert count(sessions_db, table) == 1

    def test_batch_shares_a_new_pool(self, sessions_db: FixtureCrisprDatabase, entities_sample: FixtureCallable):
        """
        Test that two samples holding equal unsaved pools end up pointing at one stored pool.

        Args:
            sessions_db: An open session on a fresh database.
            entities_sample: Factory for samples.
        """
        first = entities_sample()
        second = entities_sample(sample_name="170_A02", well_id="A02")
        assert first.injection_pool is not second.injection_pool

        sessions_db.samples.store_samples([first, second])

        assert second.injection_pool is first.injection_pool
        assert second.subplex.injection_pool is first.injection_pool
        assert count(sessions_db, "injection") == 1
        assert count(sessions_db, "subplex") == 2

    def test_batch_is_atomic(self, sessions_db: FixtureCrisprDatabase, entities_sample: FixtureCallable):
        """
        Test that a duplicate sample name rolls back the whole batch, dependencies included.

        Args:
            sessions_db: An open session on a fresh database.
            entities_sample: Factory for samples.
        """
        first = entities_sample()
        second = entities_sample()

        with pytest.raises(ExecutionError):
            sessions_db.samples.store_samples([first, second])

        for table in ("sample", "subplex", "injection", "injection_pool", "crRNA", "target"):
            assert count(sessions_db, table) == 0
        assert first.db_id is None
        assert first.injection_pool.db_id is None
        assert first.subplex.db_id is None
        assert second.db_id is None
        assert len(sessions_db.cache) == 0

    def test_store_sample_synonym(self, sessions_db: FixtureCrisprDatabase, entities_sample: FixtureCallable):
        """
        Test that `store_sample` stores one sample.

        Args:
            sessions_db: An open session on a fresh database.
            entities_sample: Factory for samples.
        """
        sample = sessions_db.samples.store_sample(entities_sample())
        assert sessions_db.samples.fetch_by_name("170_A01") is sample

    @pytest.mark.parametrize(
        "overrides",
        [{"injection_pool": None}, {"subplex": None}, {"injection_pool": "170"}],
    )
    def test_missing_references(self, sessions_db: FixtureCrisprDatabase, entities_sample: FixtureCallable, overrides):
        """
        Test that a sample without a usable pool or subplex is rejected before anything is written.

        Args:
            sessions_db: An open session on a fresh database.
            entities_sample: Factory for samples.
            overrides: The fields to break.
        """
        sample = entities_sample()
        for name, value in overrides.items():
            setattr(sample, name, value)

        with pytest.raises(ValidationError):
            sessions_db.samples.store_samples([entities_sample(sample_name="170_A02"), sample])
        assert count(sessions_db, "sample") == 0
        assert count(sessions_db, "injection") == 0

    @pytest.mark.parametrize("samples", [None, "170_A01", Sample(sample_name="170_A01")])
    def test_not_a_list(self, sessions_db: FixtureCrisprDatabase, samples):
        """
        Test that `store_samples` only accepts a list.

        Args:
            sessions_db: An open session on a fresh database.
            samples: The invalid argument.
        """
        with pytest.raises(ValidationError):
            sessions_db.samples.store_samples(samples)


class TestFetchSamples:
    """Tests for fetching samples and subplexes."""

    @pytest.fixture
    def stored(self, sessions_db: FixtureCrisprDatabase, entities_sample: FixtureCallable):
        """Three samples from one pool, the first two on one subplex."""
        first = entities_sample()
        second = entities_sample(sample_name="170_A02", injection_pool=first.injection_pool, subplex=first.subplex)
        third = entities_sample(sample_name="170_A03", injection_pool=first.injection_pool)
        return sessions_db.samples.store_samples([first, second, third])

    def test_identity(self, sessions_db: FixtureCrisprDatabase, stored):
        """
        Test that every fetch returns the stored instances.

        Args:
            sessions_db: An open session on a fresh database.
            stored: The stored samples.
        """
        first = stored[0]
        assert sessions_db.samples.fetch_by_id(first.db_id) is first
        assert sessions_db.samples.fetch_by_name("170_A01") is first
        assert sessions_db.samples.fetch_all_by_subplex(first.subplex) == stored[:2]
        assert sessions_db.samples.fetch_all_by_subplex_id(stored[2].subplex.db_id) == [stored[2]]
        assert sessions_db.samples.fetch_all_by_injection_pool(first.injection_pool) == stored
        assert sessions_db.samples.fetch_all_by_injection_id(first.injection_pool.db_id) == stored
        assert sessions_db.subplexes.fetch_all_by_injection_pool(first.injection_pool) == [
            first.subplex,
            stored[2].subplex,
        ]

    def test_hydrated_graph(self, sessions_second_db: FixtureCrisprDatabase, stored):
        """
        Test that a sample read by another session shares one pool, subplex and guide object.

        Args:
            sessions_second_db: Another session on the same file.
            stored: The stored samples.
        """
        first = sessions_second_db.samples.fetch_by_name("170_A01")
        second = sessions_second_db.samples.fetch_by_name("170_A02")

        assert first is not stored[0]
        assert first.sample_name == "170_A01"
        assert first.sample_type == "injected"
        assert first.injection_pool is second.injection_pool
        assert first.subplex is second.subplex
        assert first.subplex.injection_pool is first.injection_pool
        guide = first.injection_pool.guides[0].crRNA
        assert guide is sessions_second_db.crRNAs.fetch_by_id(stored[0].injection_pool.guides[0].crRNA.crRNA_id)

    def test_not_found(self, sessions_db: FixtureCrisprDatabase):
        """
        Test that unknown samples and subplexes raise while list lookups return nothing.

        Args:
            sessions_db: An open session on a fresh database.
        """
        with pytest.raises(SampleNotFoundError):
            sessions_db.samples.fetch_by_name("170_A01")
        with pytest.raises(SubplexNotFoundError):
            sessions_db.subplexes.fetch_by_id(1)
        assert sessions_db.samples.fetch_all_by_subplex_id(1) == []


def test_subplex_without_pool(
    sessions_db: FixtureCrisprDatabase, sessions_second_db: FixtureCrisprDatabase, entities_subplex: FixtureCallable
):
    """
    Test that a subplex can be stored on its own.

    Args:
        sessions_db: An open session on a fresh database.
        sessions_second_db: Another session on the same file.
        entities_subplex: Factory for subplexes.
    """
    subplex = sessions_db.subplexes.store(entities_subplex())
    fetched = sessions_second_db.subplexes.fetch_by_id(subplex.db_id)
    assert fetched.plex_name == "MPX14"
    assert fetched.plate_num == 1
    assert fetched.injection_pool is None
