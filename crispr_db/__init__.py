##############################################################################
# Copyright (c) crispr_db Project developers. See top-level LICENSE and
# COPYRIGHT files for dates and other details. No copyright assignment is
# required to contribute to crispr_db.
##############################################################################

"""
crispr_db: storage and retrieval of CRISPR screening records.

This package maps guide RNAs, primer pairs, injection pools and samples onto a
relational database and hands them back as fully hydrated Python objects.
"""

import os


__version__ = "0.4.0"
VERSION = __version__
PATH_TO_PROJ = os.path.join(os.path.dirname(__file__), "")
