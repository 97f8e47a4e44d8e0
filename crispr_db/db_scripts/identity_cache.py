##############################################################################
# Copyright (c) crispr_db Project developers. See top-level LICENSE and
# COPYRIGHT files for dates and other details. No copyright assignment is
# required to contribute to crispr_db.
##############################################################################

"""
The identity map shared by every adaptor of a session.
"""

import logging
from collections import defaultdict
from typing import Any, Dict, Optional

from crispr_db.exceptions import IdentityCacheError


LOG = logging.getLogger(__name__)


class IdentityCache:
    """
    Maps (entity type, database id) to the single live instance for that row.

    Entries are never removed. The cache belongs to one
    [`CrisprDatabase`][db_scripts.crispr_db.CrisprDatabase] session, so a new
    session starts empty. Access is not synchronized.
    """

    def __init__(self):
        self._entries: Dict[str, Dict[int, Any]] = defaultdict(dict)

    def __repr__(self) -> str:
        sizes = {entity_type: len(entries) for entity_type, entries in self._entries.items()}
        return f"IdentityCache({sizes})"

    def __len__(self) -> int:
        return sum(len(entries) for entries in self._entries.values())

    def __contains__(self, key) -> bool:
        entity_type, entity_id = key
        return entity_id in self._entries.get(entity_type, {})

    def lookup(self, entity_type: str, entity_id: int) -> Optional[Any]:
        """
        Return the instance registered for this row.

        Args:
            entity_type: The entity type, e.g. `primer`.
            entity_id: The database id of the row.

        Returns:
            The registered instance, or None.
        """
        entity = self._entries.get(entity_type, {}).get(entity_id)
        if entity is not None:
            LOG.debug(f"Identity cache hit for {entity_type} {entity_id}.")
        return entity

    def insert(self, entity_type: str, entity_id: int, entity: Any):
        """
        Register the instance for a row.

        Args:
            entity_type: The entity type, e.g. `primer`.
            entity_id: The database id of the row.
            entity: The instance to register.

        Raises:
            (exceptions.IdentityCacheError): If an instance is already registered for this row.
        """
        if entity_id is None:
            raise IdentityCacheError(f"Cannot cache a {entity_type} without a database id.")
        entries = self._entries[entity_type]
        if entity_id in entries:
            raise IdentityCacheError(f"The identity cache already holds {entity_type} {entity_id}.")
        entries[entity_id] = entity

    def revert(self, entity_type: str, entity_id: int):
        """
        Drop the registration for a row whose insert was rolled back.

        Rows that were committed are never dropped; this only undoes a
        registration made inside a transaction that did not commit.

        Args:
            entity_type: The entity type, e.g. `primer`.
            entity_id: The database id the rolled-back insert had produced.
        """
        self._entries.get(entity_type, {}).pop(entity_id, None)
