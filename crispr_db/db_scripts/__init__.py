##############################################################################
# Copyright (c) crispr_db Project developers. See top-level LICENSE and
# COPYRIGHT files for dates and other details. No copyright assignment is
# required to contribute to crispr_db.
##############################################################################

"""
The `db_scripts` package contains the fetch/store engine of crispr_db: the
entity dataclasses, the identity cache, row hydration, dependency-aware
storage, one adaptor per entity type and the
[`CrisprDatabase`][db_scripts.crispr_db.CrisprDatabase] session that ties them
together.
"""
