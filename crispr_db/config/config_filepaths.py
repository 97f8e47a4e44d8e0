##############################################################################
# Copyright (c) crispr_db Project developers. See top-level LICENSE and
# COPYRIGHT files for dates and other details. No copyright assignment is
# required to contribute to crispr_db.
##############################################################################

"""
This module stores constants representing file paths that will be needed for
crispr_db's configuration.
"""

import os


APP_FILENAME: str = "app.yaml"
USER_HOME: str = os.path.expanduser("~")
CRISPR_DB_HOME: str = os.path.join(USER_HOME, ".crispr_db")
CONFIG_PATH_FILE: str = os.path.join(CRISPR_DB_HOME, "config_path.txt")
DEFAULT_DB_PATH: str = os.path.join(CRISPR_DB_HOME, "crispr.db")
