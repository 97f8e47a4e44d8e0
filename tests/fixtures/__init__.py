##############################################################################
# Copyright (c) crispr_db Project developers. See top-level LICENSE and
# COPYRIGHT files for dates and other details. No copyright assignment is
# required to contribute to crispr_db.
##############################################################################

"""
Fixture modules loaded by `tests/conftest.py` through `pytest_plugins`.

Every fixture is prefixed with the name of the file defining it, e.g. the
`sessions_db` fixture lives in `sessions.py` and `entities_target` lives in
`entities.py`.
"""
