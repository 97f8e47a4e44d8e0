##############################################################################
# Copyright (c) crispr_db Project developers. See top-level LICENSE and
# COPYRIGHT files for dates and other details. No copyright assignment is
# required to contribute to crispr_db.
##############################################################################

"""
This module contains the session object through which everything stored in
crispr_db's database is read and written.
"""

import logging
import sqlite3
from types import TracebackType
from typing import Any, ContextManager, Dict, Optional, Type

from crispr_db.backends.sqlite.schema import create_schema as create_tables
from crispr_db.backends.sqlite.sqlite_connection import DBConnection, Transaction
from crispr_db.db_scripts.adaptors.base_adaptor import BaseAdaptor
from crispr_db.db_scripts.adaptors.crrna_adaptor import crRNAAdaptor
from crispr_db.db_scripts.adaptors.enzyme_adaptor import EnzymeAdaptor
from crispr_db.db_scripts.adaptors.injection_pool_adaptor import InjectionPoolAdaptor
from crispr_db.db_scripts.adaptors.plasmid_backbone_adaptor import PlasmidBackboneAdaptor
from crispr_db.db_scripts.adaptors.plate_adaptor import PlateAdaptor
from crispr_db.db_scripts.adaptors.primer_adaptor import PrimerAdaptor
from crispr_db.db_scripts.adaptors.primer_pair_adaptor import PrimerPairAdaptor
from crispr_db.db_scripts.adaptors.sample_adaptor import SampleAdaptor
from crispr_db.db_scripts.adaptors.subplex_adaptor import SubplexAdaptor
from crispr_db.db_scripts.adaptors.target_adaptor import TargetAdaptor
from crispr_db.db_scripts.data_models import BaseEntity
from crispr_db.db_scripts.identity_cache import IdentityCache
from crispr_db.db_scripts.status_codec import StatusCodec
from crispr_db.exceptions import AdaptorNotSupportedError


LOG = logging.getLogger(__name__)


class CrisprDatabase:
    """
    A session on a crispr_db database.

    The session owns one connection, one identity cache and one adaptor per
    entity type. Adaptors reach each other through the session's properties,
    so every entity fetched or stored through the same session shares the same
    identity cache: one database row is one Python object for the life of the
    session. Sessions are not safe to share between threads.

    Attributes:
        connection (backends.sqlite.sqlite_connection.DBConnection): The open connection.
        cache (db_scripts.identity_cache.IdentityCache): The session's identity map.
        status_codec (db_scripts.status_codec.StatusCodec): Status name/code translation.

    Methods:
        get_adaptor: Get an adaptor by entity type.
        get_db_version: Retrieve the version of SQLite in use.
        get_connection_string: Retrieve the path of the database file.
        store: Store an entity through the adaptor for its type.
        get: Fetch an entity by type and id.
        transaction: Open a transaction spanning several adaptor calls.
        close: Close the connection.
    """

    def __init__(
        self,
        db_path: Optional[str] = None,
        create_schema: bool = True,
        foreign_keys: Optional[bool] = None,
        journal_mode: Optional[str] = None,
    ):
        """
        Open a session.

        Args:
            db_path: Path to the database file. Defaults to the configured `database.path`.
            create_schema: Whether to create any missing tables.
            foreign_keys: Whether to enforce foreign keys. Defaults to the configured value.
            journal_mode: The SQLite journal mode. Defaults to the configured value.
        """
        self.connection = DBConnection(db_path, foreign_keys=foreign_keys, journal_mode=journal_mode)
        if create_schema:
            create_tables(self.connection)
        self.cache = IdentityCache()
        self.status_codec = StatusCodec(self.connection)
        self._adaptors: Dict[str, BaseAdaptor] = {
            "plate": PlateAdaptor(self),
            "target": TargetAdaptor(self),
            "crRNA": crRNAAdaptor(self),
            "primer": PrimerAdaptor(self),
            "primer_pair": PrimerPairAdaptor(self),
            "injection_pool": InjectionPoolAdaptor(self),
            "subplex": SubplexAdaptor(self),
            "sample": SampleAdaptor(self),
            "plasmid_backbone": PlasmidBackboneAdaptor(self),
            "enzyme": EnzymeAdaptor(self),
        }
        LOG.debug(f"Opened crispr_db session on {self.connection.db_path}.")

    def __repr__(self) -> str:
        return f"CrisprDatabase(db_path={self.connection.db_path!r})"

    def __enter__(self) -> "CrisprDatabase":
        return self

    def __exit__(self, exc_type: Type[Exception], exc_value: Exception, traceback: TracebackType):
        self.close()

    @property
    def plates(self) -> PlateAdaptor:
        """Get the plate adaptor."""
        return self._adaptors["plate"]

    @property
    def targets(self) -> TargetAdaptor:
        """Get the target adaptor."""
        return self._adaptors["target"]

    @property
    def crRNAs(self) -> crRNAAdaptor:  # pylint: disable=invalid-name
        """Get the crRNA adaptor."""
        return self._adaptors["crRNA"]

    @property
    def primers(self) -> PrimerAdaptor:
        """Get the primer adaptor."""
        return self._adaptors["primer"]

    @property
    def primer_pairs(self) -> PrimerPairAdaptor:
        """Get the primer pair adaptor."""
        return self._adaptors["primer_pair"]

    @property
    def injection_pools(self) -> InjectionPoolAdaptor:
        """Get the injection pool adaptor."""
        return self._adaptors["injection_pool"]

    @property
    def subplexes(self) -> SubplexAdaptor:
        """Get the subplex adaptor."""
        return self._adaptors["subplex"]

    @property
    def samples(self) -> SampleAdaptor:
        """Get the sample adaptor."""
        return self._adaptors["sample"]

    @property
    def plasmid_backbones(self) -> PlasmidBackboneAdaptor:
        """Get the plasmid backbone adaptor."""
        return self._adaptors["plasmid_backbone"]

    @property
    def enzymes(self) -> EnzymeAdaptor:
        """Get the restriction enzyme adaptor."""
        return self._adaptors["enzyme"]

    def get_db_version(self) -> str:
        """
        Get the version of the SQLite library in use.

        Returns:
            The SQLite version string.
        """
        return sqlite3.sqlite_version

    def get_connection_string(self) -> str:
        """
        Get the path of the database file.

        Returns:
            The database path.
        """
        return self.connection.db_path

    def get_adaptor(self, entity_type: str) -> BaseAdaptor:
        """
        Get the adaptor for an entity type.

        Args:
            entity_type: The entity type, e.g. `primer_pair`.

        Returns:
            The adaptor.

        Raises:
            (exceptions.AdaptorNotSupportedError): If there is no adaptor for the type.
        """
        if entity_type not in self._adaptors:
            raise AdaptorNotSupportedError(
                f"Entity type not supported: {entity_type}. Supported types: {list(self._adaptors)}."
            )
        return self._adaptors[entity_type]

    def _adaptor_for(self, entity: BaseEntity) -> BaseAdaptor:
        for adaptor in self._adaptors.values():
            if type(entity) is adaptor.entity_class:  # pylint: disable=unidiomatic-typecheck
                return adaptor
        raise AdaptorNotSupportedError(f"No adaptor stores {type(entity).__name__} objects.")

    def store(self, entity: BaseEntity, *args: Any, **kwargs: Any) -> BaseEntity:
        """
        Store an entity through the adaptor for its type.

        Args:
            entity: The entity to store.
            *args: Extra positional arguments for the adaptor's `store`, e.g.
                the guides of a primer pair.
            **kwargs: Extra keyword arguments for the adaptor's `store`.

        Returns:
            The stored entity.
        """
        return self._adaptor_for(entity).store(entity, *args, **kwargs)

    def get(self, entity_type: str, entity_id: int) -> BaseEntity:
        """
        Fetch an entity by type and id.

        Args:
            entity_type: The entity type, e.g. `sample`.
            entity_id: The database id.

        Returns:
            The entity.
        """
        return self.get_adaptor(entity_type).fetch_by_id(entity_id)

    def transaction(self) -> ContextManager[Transaction]:
        """
        Open a transaction spanning several adaptor calls.

        Stores made inside it join it; nothing is committed until it exits
        without an error.

        Returns:
            The transaction context manager.
        """
        return self.connection.transaction()

    def close(self):
        """Close the connection. The session can't be used afterwards."""
        LOG.debug(f"Closing crispr_db session on {self.connection.db_path}.")
        self.connection.close()
