##############################################################################
# Copyright (c) crispr_db Project developers. See top-level LICENSE and
# COPYRIGHT files for dates and other details. No copyright assignment is
# required to contribute to crispr_db.
##############################################################################

"""
Tests for the `schema.py` module.
"""

from crispr_db.backends.sqlite.schema import TABLES, create_schema
from crispr_db.backends.sqlite.sqlite_connection import MEMORY_DB, DBConnection
from crispr_db.common.enums import Status


def test_create_schema_is_idempotent():
    """
    Test that every table is created, the statuses are seeded once, and a second run changes nothing.
    """
    connection = DBConnection(MEMORY_DB, foreign_keys=True, journal_mode="MEMORY")
    try:
        create_schema(connection)
        create_schema(connection)

        rows = connection.fetch_all("SELECT name FROM sqlite_master WHERE type = 'table' AND name != 'sqlite_sequence'")
        assert {row["name"] for row in rows} == set(TABLES)
        assert connection.count("SELECT count(*) FROM status") == len(Status)
        row = connection.fetch_one("SELECT status FROM status WHERE status_id = ?", [Status.DESIGNED.value])
        assert row["status"] == "DESIGNED"
    finally:
        connection.close()
