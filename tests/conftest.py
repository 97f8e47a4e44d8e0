##############################################################################
# Copyright (c) crispr_db Project developers. See top-level LICENSE and
# COPYRIGHT files for dates and other details. No copyright assignment is
# required to contribute to crispr_db.
##############################################################################

"""
This module contains pytest fixtures to be used throughout the entire test suite.
"""
import logging
import os
from glob import glob

import pytest

from crispr_db.config import configfile
from tests.fixture_types import FixtureModification


# pylint: disable=redefined-outer-name


#######################################
# Loading in Module Specific Fixtures #
#######################################

fixture_glob = os.path.join("tests", "fixtures", "**", "*.py")
pytest_plugins = [
    fixture_file.replace(os.sep, ".").replace(".py", "")
    for fixture_file in glob(fixture_glob, recursive=True)
    if not fixture_file.endswith("__init__.py")
]


#######################################
######### Fixture Definitions #########
#######################################


@pytest.fixture(autouse=True)
def reset_config() -> FixtureModification:
    """
    Make sure every test starts without a cached configuration and leaves none behind.
    """
    configfile.CONFIG = None
    configfile.IS_LOCAL_MODE = False
    yield
    configfile.CONFIG = None
    configfile.IS_LOCAL_MODE = False


@pytest.fixture
def crispr_db_logger() -> logging.Logger:
    """
    A throwaway logger whose handlers are removed after the test.

    Returns:
        A logger named uniquely for the test suite.
    """
    logger = logging.getLogger("crispr_db_test_logger")
    yield logger
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
