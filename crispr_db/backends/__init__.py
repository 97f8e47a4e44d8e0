##############################################################################
# Copyright (c) crispr_db Project developers. See top-level LICENSE and
# COPYRIGHT files for dates and other details. No copyright assignment is
# required to contribute to crispr_db.
##############################################################################

"""
The `backends` package contains the database driver collaborators used by the
adaptors in [`db_scripts`][db_scripts].

Subpackages:
    sqlite: Connection handling, transactions and schema creation for SQLite.
"""
