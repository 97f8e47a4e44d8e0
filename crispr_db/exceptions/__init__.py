##############################################################################
# Copyright (c) crispr_db Project developers. See top-level LICENSE and
# COPYRIGHT files for dates and other details. No copyright assignment is
# required to contribute to crispr_db.
##############################################################################

"""
Module of all crispr_db-specific exception types.
"""

from typing import Any, Optional, Sequence


__all__ = (
    "CrisprDBError",
    "ValidationError",
    "QueryBuildError",
    "IntegrityError",
    "ExecutionError",
    "EntityNotFoundError",
    "TargetNotFoundError",
    "CrRNANotFoundError",
    "PlateNotFoundError",
    "PrimerNotFoundError",
    "PrimerPairNotFoundError",
    "InjectionPoolNotFoundError",
    "SubplexNotFoundError",
    "SampleNotFoundError",
    "StatusNotFoundError",
    "IdentityCacheError",
    "AdaptorNotSupportedError",
)


class CrisprDBError(Exception):
    """
    Base class for every error raised by crispr_db.
    """


class ValidationError(CrisprDBError):
    """
    Exception to signal that an argument has the wrong type or shape.

    Raised before any statement is executed, so no transaction is ever
    opened when this is raised.
    """


class QueryBuildError(ValidationError):
    """
    Exception to signal that a filter clause and its bound values disagree.
    """


class IntegrityError(CrisprDBError):
    """
    Exception to signal that an entity referenced by the one being stored
    can neither be found nor created.
    """


class ExecutionError(CrisprDBError):
    """
    Exception to signal that a statement failed inside the database driver.

    Attributes:
        statement: The SQL statement that failed.
        params: The values that were bound to the statement.
    """

    def __init__(self, message: str, statement: Optional[str] = None, params: Optional[Sequence[Any]] = None):
        super().__init__(message)
        self.statement = statement
        self.params = list(params) if params is not None else []

    def __str__(self) -> str:
        message = super().__str__()
        if self.statement is None:
            return message
        return f"{message}\nSTATEMENT: {' '.join(self.statement.split())}\nPARAMS: {self.params}"


class EntityNotFoundError(CrisprDBError):
    """
    Exception to signal that a fetch by unique key matched no row.
    """


class TargetNotFoundError(EntityNotFoundError):
    """
    Exception to signal that the target you were looking
    for cannot be found in the database.
    """


class CrRNANotFoundError(EntityNotFoundError):
    """
    Exception to signal that the crRNA you were looking
    for cannot be found in the database.
    """


class PlateNotFoundError(EntityNotFoundError):
    """
    Exception to signal that the plate you were looking
    for cannot be found in the database.
    """


class PrimerNotFoundError(EntityNotFoundError):
    """
    Exception to signal that the primer you were looking
    for cannot be found in the database.
    """


class PrimerPairNotFoundError(EntityNotFoundError):
    """
    Exception to signal that the primer pair you were looking
    for cannot be found in the database.
    """


class InjectionPoolNotFoundError(EntityNotFoundError):
    """
    Exception to signal that the injection pool you were looking
    for cannot be found in the database.
    """


class SubplexNotFoundError(EntityNotFoundError):
    """
    Exception to signal that the subplex you were looking
    for cannot be found in the database.
    """


class SampleNotFoundError(EntityNotFoundError):
    """
    Exception to signal that the sample you were looking
    for cannot be found in the database.
    """


class PlasmidBackboneNotFoundError(EntityNotFoundError):
    """
    Exception to signal that the plasmid backbone you were looking
    for cannot be found in the database.
    """


class EnzymeNotFoundError(EntityNotFoundError):
    """
    Exception to signal that the restriction enzyme you were looking
    for cannot be found in the database.
    """


class StatusNotFoundError(CrisprDBError, LookupError):
    """
    Exception to signal that a status name or status code is not part
    of the status vocabulary.
    """


class IdentityCacheError(CrisprDBError):
    """
    Exception to signal that a second instance was registered for an
    id that the identity cache already holds.
    """


class AdaptorNotSupportedError(CrisprDBError):
    """
    Exception to signal that the adaptor requested does not exist.
    """
