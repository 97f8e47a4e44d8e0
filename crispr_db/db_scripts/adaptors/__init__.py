##############################################################################
# Copyright (c) crispr_db Project developers. See top-level LICENSE and
# COPYRIGHT files for dates and other details. No copyright assignment is
# required to contribute to crispr_db.
##############################################################################

"""
One adaptor per stored entity type.

Every adaptor derives from [`BaseAdaptor`][db_scripts.adaptors.base_adaptor.BaseAdaptor]
and is owned by a [`CrisprDatabase`][db_scripts.crispr_db.CrisprDatabase]
session, through which it reaches the adaptors of the types it references.
"""
