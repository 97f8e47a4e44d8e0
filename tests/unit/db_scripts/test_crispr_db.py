##############################################################################
# Copyright (c) crispr_db Project developers. See top-level LICENSE and
# COPYRIGHT files for dates and other details. No copyright assignment is
# required to contribute to crispr_db.
##############################################################################

"""
Tests for the `crispr_db.py` module.
"""

import os

import pytest

from crispr_db.config import configfile
from crispr_db.db_scripts.adaptors.primer_pair_adaptor import PrimerPairAdaptor
from crispr_db.db_scripts.crispr_db import CrisprDatabase
from crispr_db.db_scripts.data_models import GuideRNA
from crispr_db.exceptions import AdaptorNotSupportedError
from tests.fixture_types import FixtureCallable, FixtureCrisprDatabase, FixtureStr


class TestCrisprDatabase:
    """Tests for the `CrisprDatabase` session."""

    def test_schema_is_created(self, sessions_db: FixtureCrisprDatabase, sessions_db_path: FixtureStr):
        """
        Test that opening a session creates the database file and the status vocabulary.

        Args:
            sessions_db: An open session on a fresh database.
            sessions_db_path: The path of its database file.
        """
        assert os.path.isfile(sessions_db_path)
        assert sessions_db.get_connection_string() == sessions_db_path
        assert sessions_db.connection.count("SELECT count(*) FROM status") == 17

    def test_get_adaptor(self, sessions_db: FixtureCrisprDatabase):
        """
        Test that adaptors are reachable by name and through properties.

        Args:
            sessions_db: An open session on a fresh database.
        """
        assert isinstance(sessions_db.get_adaptor("primer_pair"), PrimerPairAdaptor)
        assert sessions_db.get_adaptor("primer_pair") is sessions_db.primer_pairs
        assert sessions_db.get_adaptor("crRNA") is sessions_db.crRNAs

    def test_get_adaptor_unknown(self, sessions_db: FixtureCrisprDatabase):
        """
        Test that an unknown entity type is rejected.

        Args:
            sessions_db: An open session on a fresh database.
        """
        with pytest.raises(AdaptorNotSupportedError):
            sessions_db.get_adaptor("transcript")

    def test_store_dispatches_on_type(
        self, sessions_db: FixtureCrisprDatabase, entities_primer_pair: FixtureCallable, entities_crRNA: FixtureCallable
    ):
        """
        Test that the session's `store` picks the adaptor for the entity and passes extra arguments on.

        Args:
            sessions_db: An open session on a fresh database.
            entities_primer_pair: Factory for primer pairs.
            entities_crRNA: Factory for guide RNAs.
        """
        pair = sessions_db.store(entities_primer_pair(), [entities_crRNA()])
        assert sessions_db.get("primer_pair", pair.primer_pair_id) is pair

    def test_store_unsupported_object(self, sessions_db: FixtureCrisprDatabase):
        """
        Test that objects without a table are rejected.

        Args:
            sessions_db: An open session on a fresh database.
        """
        with pytest.raises(AdaptorNotSupportedError):
            sessions_db.store(GuideRNA(crRNA=None))

    def test_outer_transaction_spans_stores(
        self, sessions_db: FixtureCrisprDatabase, entities_target: FixtureCallable
    ):
        """
        Test that stores inside a session transaction are rolled back together.

        Args:
            sessions_db: An open session on a fresh database.
            entities_target: Factory for targets.
        """
        first = entities_target(target_name="gene1_exon1")
        second = entities_target(target_name="gene2_exon1")
        with pytest.raises(RuntimeError):
            with sessions_db.transaction():
                sessions_db.targets.store(first)
                sessions_db.targets.store(second)
                raise RuntimeError("abandon")

        assert first.target_id is None and second.target_id is None
        assert sessions_db.connection.count("SELECT count(*) FROM target") == 0

    def test_sessions_have_separate_caches(
        self,
        sessions_db: FixtureCrisprDatabase,
        sessions_second_db: FixtureCrisprDatabase,
        entities_target: FixtureCallable,
    ):
        """
        Test that a second session hydrates its own instance of a row.

        Args:
            sessions_db: An open session on a fresh database.
            sessions_second_db: Another session on the same file.
            entities_target: Factory for targets.
        """
        target = sessions_db.targets.store(entities_target())
        other = sessions_second_db.targets.fetch_by_id(target.target_id)
        assert other is not target
        assert other.target_name == target.target_name
        assert sessions_second_db.targets.fetch_by_id(target.target_id) is other

    def test_context_manager_closes(self, sessions_db_path: FixtureStr):
        """
        Test that leaving the `with` block closes the connection.

        Args:
            sessions_db_path: The path of a database file.
        """
        with CrisprDatabase(sessions_db_path, foreign_keys=True, journal_mode="WAL") as db:
            assert db.connection.conn is not None
        assert db.connection.conn is None

    def test_default_path_comes_from_config(self, tmp_path, mocker):
        """
        Test that a session without a path uses the configured database path.

        Args:
            tmp_path: PyTest's per-test temporary directory.
            mocker: PyTest mocker fixture.
        """
        db_path = str(tmp_path / "configured.db")
        config = configfile.get_default_config()
        config["database"]["path"] = db_path
        mocker.patch("crispr_db.config.configfile.get_config", return_value=config)

        with CrisprDatabase() as db:
            assert db.get_connection_string() == db_path
