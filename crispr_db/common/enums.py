##############################################################################
# Copyright (c) crispr_db Project developers. See top-level LICENSE and
# COPYRIGHT files for dates and other details. No copyright assignment is
# required to contribute to crispr_db.
##############################################################################

"""This module provides enumerations shared across crispr_db."""
from enum import IntEnum


__all__ = ("Status",)


class Status(IntEnum):
    """
    Enum for the progress of a target or guide RNA through the screening pipeline.

    The numeric value of each member is the code stored in the `status` table;
    the member name is the status string stored alongside it.
    """

    REQUESTED: int = 1
    DESIGNED: int = 2
    ORDERED: int = 3
    MADE: int = 4
    INJECTED: int = 5
    MISEQ_EMBRYO_SCREENING: int = 6
    PASSED_EMBRYO_SCREENING: int = 7
    FAILED_EMBRYO_SCREENING: int = 8
    SPERM_FROZEN: int = 9
    MISEQ_SPERM_SCREENING: int = 10
    PASSED_SPERM_SCREENING: int = 11
    FAILED_SPERM_SCREENING: int = 12
    SHIPPED: int = 13
    SHIPPED_AND_IN_SYSTEM: int = 14
    IN_SYSTEM: int = 15
    CARRIERS: int = 16
    F1_FROZEN: int = 17
