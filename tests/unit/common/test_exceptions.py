##############################################################################
# Copyright (c) crispr_db Project developers. See top-level LICENSE and
# COPYRIGHT files for dates and other details. No copyright assignment is
# required to contribute to crispr_db.
##############################################################################

"""
Tests for the `exceptions` package.
"""

import pytest

from crispr_db import exceptions
from crispr_db.exceptions import (
    CrisprDBError,
    EntityNotFoundError,
    ExecutionError,
    QueryBuildError,
    SampleNotFoundError,
    StatusNotFoundError,
    ValidationError,
)


def test_every_error_is_a_crispr_db_error():
    """
    Test that every exported exception can be caught as a `CrisprDBError`.
    """
    for name in exceptions.__all__:
        assert issubclass(getattr(exceptions, name), CrisprDBError)


def test_hierarchy():
    """
    Test the families that callers catch errors by.
    """
    assert issubclass(QueryBuildError, ValidationError)
    assert issubclass(SampleNotFoundError, EntityNotFoundError)
    assert issubclass(StatusNotFoundError, LookupError)


def test_execution_error_str():
    """
    Test that an execution error shows the failed statement on one line with its params.
    """
    error = ExecutionError("Error executing statement: boom", "SELECT *\n    FROM target\n WHERE target_id = ?", (1,))
    assert error.params == [1]
    assert str(error) == (
        "Error executing statement: boom\nSTATEMENT: SELECT * FROM target WHERE target_id = ?\nPARAMS: [1]"
    )


def test_execution_error_without_statement():
    """
    Test that an execution error without a statement is just its message.
    """
    with pytest.raises(ExecutionError, match=r"\Arolled back\Z"):
        raise ExecutionError("rolled back")
