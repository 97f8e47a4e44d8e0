##############################################################################
# Copyright (c) crispr_db Project developers. See top-level LICENSE and
# COPYRIGHT files for dates and other details. No copyright assignment is
# required to contribute to crispr_db.
##############################################################################

"""
Transactional storage of an entity together with everything it references.

Storing an entity follows the same steps for every type:

1. Validate the entity and its required references before touching the database.
2. Open a transaction (joining the caller's if one is already open).
3. For every reference, make sure the referenced row exists. A reference
   that exists is replaced by the session's instance for its row: the cached
   one, or the one fetched through its natural key when it has no id. A
   reference that doesn't exist is stored first, recursively.
4. Insert the entity's row and read back the id the database generated.
5. Insert any junction rows.

A failure at any step rolls back the whole transaction, resets the ids that
were assigned inside it and removes them from the identity cache.
"""

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Generic, List, Optional, Type, TypeVar

from crispr_db.backends.sqlite.sqlite_connection import Transaction
from crispr_db.db_scripts.data_models import BaseEntity
from crispr_db.db_scripts.query_builder import QueryBuilder
from crispr_db.exceptions import IntegrityError, ValidationError


if TYPE_CHECKING:
    from crispr_db.db_scripts.adaptors.base_adaptor import BaseAdaptor


LOG = logging.getLogger(__name__)

E = TypeVar("E", bound=BaseEntity)


@dataclass
class Dependency:
    """
    A reference from an entity to another stored entity.

    Attributes:
        name: The name of the reference, e.g. `left_primer`. Also the attribute
            read and written when no getter or setter is given.
        adaptor: The adaptor of the referenced type.
        required: Whether the owner can't be stored without this reference.
        getter: Reads the reference from the owner, for references that aren't
            a plain attribute (e.g. a guide's plate, reached through its well).
        setter: Writes the canonical instance back onto the owner.
    """

    name: str
    adaptor: "BaseAdaptor"
    required: bool = True
    getter: Optional[Callable[[Any], Any]] = None
    setter: Optional[Callable[[Any, Any], None]] = None

    def get(self, owner: Any) -> Any:
        """Read the referenced entity from `owner`."""
        if self.getter is not None:
            return self.getter(owner)
        return getattr(owner, self.name)

    def set(self, owner: Any, value: Any):
        """Point `owner` at `value`."""
        if self.setter is not None:
            self.setter(owner, value)
        else:
            setattr(owner, self.name, value)


class DependencyStore(Generic[E]):
    """
    Stores entities of one type, resolving their references first.

    Attributes:
        adaptor: The adaptor of the type being stored. Supplies the table, the
            id column, the row values and the existence checks.
        dependencies: The references resolved before every insert, in order.
    """

    def __init__(self, adaptor: "BaseAdaptor", dependencies: List[Dependency]):
        self.adaptor = adaptor
        self.connection = adaptor.connection
        self.cache = adaptor.cache
        self.dependencies = dependencies

    def __repr__(self) -> str:
        names = [dependency.name for dependency in self.dependencies]
        return f"DependencyStore({self.adaptor.entity_type}, dependencies={names})"

    def validate(self, entity: Any):
        """
        Check an entity and its references without any I/O.

        Args:
            entity: The object about to be stored.

        Raises:
            (exceptions.ValidationError): If `entity` isn't of the adaptor's
                type, a required reference is missing, or a reference has the
                wrong type.
        """
        entity_class = self.adaptor.entity_class
        if not isinstance(entity, entity_class):
            raise ValidationError(
                f"Supplied object must be a {entity_class.__name__} object, not {type(entity).__name__}."
            )
        for dependency in self.dependencies:
            reference = dependency.get(entity)
            if reference is None:
                if dependency.required:
                    raise ValidationError(
                        f"{entity_class.__name__} object must have a {dependency.name} to be stored."
                    )
                continue
            expected: Type = dependency.adaptor.entity_class
            if not isinstance(reference, expected):
                raise ValidationError(
                    f"{entity_class.__name__}.{dependency.name} must be a {expected.__name__} object, "
                    f"not {type(reference).__name__}."
                )

    def resolve(self, adaptor: "BaseAdaptor", reference: BaseEntity) -> BaseEntity:
        """
        Make sure a referenced entity has a row and an id.

        Must be called inside a transaction.

        Args:
            adaptor: The adaptor of the referenced type.
            reference: The referenced entity.

        Returns:
            The instance the owner should point at. When the row already
            existed this is the session's instance for it: the cached one if
            the row was loaded before, or the one hydrated through the natural
            key if `reference` had no id. Otherwise it is `reference` itself.
        """
        if adaptor.exists_in_db(reference):
            reference_id = reference.get_id()
            if reference_id is not None:
                cached = adaptor.cache.lookup(adaptor.entity_type, reference_id)
                if cached is not None:
                    return cached
                with self.connection.transaction() as txn:
                    adaptor.cache.insert(adaptor.entity_type, reference_id, reference)
                    txn.on_rollback(lambda: adaptor.cache.revert(adaptor.entity_type, reference_id))
                return reference
            canonical = adaptor.fetch_by_natural_key(reference)
            LOG.debug(f"Resolved {adaptor.entity_type} to existing id {canonical.get_id()}.")
            return canonical

        if reference.get_id() is not None:
            LOG.info(f"{adaptor.entity_type} {reference.get_id()} is not in the database. Storing it now...")
        else:
            LOG.info(f"{adaptor.entity_type} is not in the database. Storing it now...")
        adaptor.store(reference)
        return reference

    def store(self, entity: E, associations: Optional[Callable[[E], None]] = None) -> E:
        """
        Store an entity and every reference it needs.

        Args:
            entity: The entity to store.
            associations: Called with the entity once its row exists, inside the
                same transaction, to write junction rows.

        Returns:
            The stored entity, now carrying its database id.

        Raises:
            (exceptions.ValidationError): If validation fails. Nothing is written.
            (exceptions.IntegrityError): If a reference can't be found or created.
            (exceptions.ExecutionError): If a statement fails.
        """
        self.validate(entity)

        table = self.adaptor.table
        id_column = self.adaptor.id_column
        with self.connection.transaction() as txn:
            for dependency in self.dependencies:
                reference = dependency.get(entity)
                if reference is None:
                    continue
                resolved = self.resolve(dependency.adaptor, reference)
                if resolved is not reference:
                    dependency.set(entity, resolved)

            values = self.adaptor.insert_values(entity)
            statement = QueryBuilder.insert(table, list(values.keys()))
            self.connection.execute(statement, list(values.values()))
            new_id = self.connection.last_insert_id(table, id_column)
            self._register(entity, new_id, txn)

            if associations is not None:
                associations(entity)

        LOG.info(f"Stored {self.adaptor.entity_type} with id {entity.get_id()}.")
        return entity

    def _register(self, entity: E, new_id: int, txn: Transaction):
        """
        Give the entity its id and make it the cached instance for its row.

        Both are undone if the transaction rolls back.

        Args:
            entity: The entity whose row was just inserted.
            new_id: The id the database generated.
            txn: The open transaction.
        """
        entity_type = self.adaptor.entity_type
        had_id = entity.get_id() is not None
        entity.assign_id(new_id)

        cached = self.cache.lookup(entity_type, new_id)
        if cached is None:
            self.cache.insert(entity_type, new_id, entity)
        elif cached is not entity:
            raise IntegrityError(f"A different {entity_type} instance is already cached for id {new_id}.")

        def undo():
            self.cache.revert(entity_type, new_id)
            if not had_id:
                entity.clear_id()

        txn.on_rollback(undo)
