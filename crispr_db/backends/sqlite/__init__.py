##############################################################################
# Copyright (c) crispr_db Project developers. See top-level LICENSE and
# COPYRIGHT files for dates and other details. No copyright assignment is
# required to contribute to crispr_db.
##############################################################################

"""
SQLite driver collaborator for crispr_db.

Modules:
    sqlite_connection.py: Opens configured connections and wraps them with
        statement execution, last-insert-id lookup and re-entrant transactions.
    schema.py: The fixed table definitions and the status vocabulary seed.
"""
