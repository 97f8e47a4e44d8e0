##############################################################################
# Copyright (c) crispr_db Project developers. See top-level LICENSE and
# COPYRIGHT files for dates and other details. No copyright assignment is
# required to contribute to crispr_db.
##############################################################################

"""
Translation between status names and the integer codes stored in the database.
"""

import logging
from typing import Dict, Optional, Union

from crispr_db.backends.sqlite.sqlite_connection import DBConnection
from crispr_db.common.enums import Status
from crispr_db.exceptions import StatusNotFoundError


LOG = logging.getLogger(__name__)


class StatusCodec:
    """
    Bidirectional mapping between the status vocabulary and its codes.

    The mapping is read from the `status` table the first time it is needed
    and kept for the life of the codec.

    Methods:
        id_for: Get the code for a status name.
        name_for: Get the status name for a code.
    """

    def __init__(self, connection: DBConnection):
        """
        Args:
            connection: The connection the `status` table is read through.
        """
        self.connection = connection
        self._ids: Optional[Dict[str, int]] = None
        self._names: Optional[Dict[int, str]] = None

    def _load(self):
        if self._ids is not None:
            return
        rows = self.connection.fetch_all("SELECT status_id, status FROM status")
        self._ids = {row["status"]: row["status_id"] for row in rows}
        self._names = {row["status_id"]: row["status"] for row in rows}
        LOG.debug(f"Loaded {len(self._ids)} statuses.")

    def id_for(self, status_name: Union[str, Status]) -> int:
        """
        Get the code stored in the database for a status.

        Args:
            status_name: The status name, or a [`Status`][common.enums.Status] member.

        Returns:
            The integer code.

        Raises:
            (exceptions.StatusNotFoundError): If the status isn't in the vocabulary.
        """
        self._load()
        name = status_name.name if isinstance(status_name, Status) else status_name
        try:
            return self._ids[name]
        except KeyError as exc:
            raise StatusNotFoundError(f"Status '{status_name}' is not a recognised status.") from exc

    def name_for(self, code: int) -> str:
        """
        Get the status name for a code read from the database.

        Args:
            code: The integer code.

        Returns:
            The status name.

        Raises:
            (exceptions.StatusNotFoundError): If the code isn't in the vocabulary.
        """
        self._load()
        try:
            return self._names[code]
        except KeyError as exc:
            raise StatusNotFoundError(f"Status code '{code}' is not a recognised status code.") from exc

    def optional_id_for(self, status_name: Optional[Union[str, Status]]) -> Optional[int]:
        """Like `id_for` but passes None through."""
        return None if status_name is None else self.id_for(status_name)

    def optional_name_for(self, code: Optional[int]) -> Optional[str]:
        """Like `name_for` but passes None through."""
        return None if code is None else self.name_for(code)
