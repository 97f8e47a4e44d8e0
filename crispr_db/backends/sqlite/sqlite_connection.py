##############################################################################
# Copyright (c) crispr_db Project developers. See top-level LICENSE and
# COPYRIGHT files for dates and other details. No copyright assignment is
# required to contribute to crispr_db.
##############################################################################

"""
SQLite connection handling for crispr_db.

This module defines two classes:

- `SQLiteConnection`, a context manager that opens a properly configured
  SQLite connection (autocommit mode so that transactions are always explicit,
  foreign key enforcement, journal mode, and `sqlite3.Row` rows) and closes it
  on exit.
- `DBConnection`, the driver collaborator handed to every adaptor. It keeps one
  connection open for the lifetime of a session and offers parameterized
  statement execution, table-scoped last-insert-id lookup, and a re-entrant
  transaction scope that commits on normal exit and rolls back on any error.
"""

import logging
import sqlite3
import sys
from contextlib import contextmanager
from pathlib import Path
from types import TracebackType
from typing import Any, Callable, Iterator, List, Optional, Sequence, Type

from crispr_db.exceptions import ExecutionError


LOG = logging.getLogger(__name__)

MEMORY_DB = ":memory:"


class SQLiteConnection:
    """
    Context manager for establishing and safely closing a SQLite database connection.

    Attributes:
        db_path (Optional[str]): Path to the database file. Falls back to the
            configured `database.path` when not given.
        foreign_keys (Optional[bool]): Whether to enforce foreign key constraints.
        journal_mode (Optional[str]): The SQLite journal mode to use.
        conn (sqlite3.Connection): The active SQLite connection used within the context.
    """

    def __init__(self, db_path: Optional[str] = None, foreign_keys: Optional[bool] = None, journal_mode: Optional[str] = None):
        """
        Initialize the SQLiteConnection context manager.

        Args:
            db_path: Path to the database file or `:memory:`.
            foreign_keys: Whether to enforce foreign key constraints.
            journal_mode: The SQLite journal mode to use.
        """
        self.db_path = db_path
        self.foreign_keys = foreign_keys
        self.journal_mode = journal_mode
        self.conn: sqlite3.Connection = None

    def _resolve_settings(self):
        """Fill in any setting that wasn't provided from the loaded configuration."""
        if self.db_path is not None and self.foreign_keys is not None and self.journal_mode is not None:
            return

        from crispr_db.config.configfile import get_config_object  # pylint: disable=import-outside-toplevel

        database_config = get_config_object().database
        if self.db_path is None:
            self.db_path = database_config.path
        if self.foreign_keys is None:
            self.foreign_keys = database_config.foreign_keys
        if self.journal_mode is None:
            self.journal_mode = database_config.journal_mode

    def __enter__(self) -> sqlite3.Connection:
        """
        Enters the runtime context related to this object and creates a sqlite connection.

        Returns:
            A sqlite connection.
        """
        self._resolve_settings()

        if self.db_path != MEMORY_DB:
            Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)

        connection_kwargs = {"check_same_thread": False}
        if sys.version_info < (3, 12):  # Autocommit wasn't added until python 3.12
            connection_kwargs["isolation_level"] = None
        else:
            connection_kwargs["autocommit"] = True

        LOG.debug(f"Opening SQLite connection to {self.db_path}")
        self.conn = sqlite3.connect(self.db_path, **connection_kwargs)

        self.conn.execute(f"PRAGMA journal_mode={self.journal_mode}")
        self.conn.execute(f"PRAGMA foreign_keys={'ON' if self.foreign_keys else 'OFF'}")

        # This enables name-based access to columns
        self.conn.row_factory = sqlite3.Row

        return self.conn

    def __exit__(self, exc_type: Type[Exception], exc_value: Exception, traceback: TracebackType):
        """
        Exits the runtime context and closes the connection if it's still open.

        Args:
            exc_type: The exception type raised, if any.
            exc_value: The exception instance raised, if any.
            traceback: The traceback object, if an exception was raised.
        """
        if self.conn:
            self.conn.close()
            self.conn = None


class Transaction:
    """
    Handle for the transaction currently open on a [`DBConnection`][backends.sqlite.sqlite_connection.DBConnection].

    Callers register hooks that run once the outermost scope either commits or
    rolls back. Hooks run in reverse registration order.

    Attributes:
        rollback_only (bool): Set when a nested scope failed; the outermost scope
            will then refuse to commit.
    """

    def __init__(self):
        self.rollback_only: bool = False
        self._commit_hooks: List[Callable[[], Any]] = []
        self._rollback_hooks: List[Callable[[], Any]] = []

    def on_commit(self, hook: Callable[[], Any]):
        """
        Register a callable to run after the transaction commits.

        Args:
            hook: A callable taking no arguments.
        """
        self._commit_hooks.append(hook)

    def on_rollback(self, hook: Callable[[], Any]):
        """
        Register a callable to run after the transaction rolls back.

        Args:
            hook: A callable taking no arguments.
        """
        self._rollback_hooks.append(hook)

    def _run_hooks(self, hooks: List[Callable[[], Any]]):
        for hook in reversed(hooks):
            hook()
        self._commit_hooks = []
        self._rollback_hooks = []

    def committed(self):
        """Run the commit hooks."""
        self._run_hooks(self._commit_hooks)

    def rolled_back(self):
        """Run the rollback hooks."""
        self._run_hooks(self._rollback_hooks)


class DBConnection:
    """
    Long-lived database connection shared by every adaptor of a session.

    Attributes:
        db_path (str): The path of the database file.
        conn (sqlite3.Connection): The underlying SQLite connection.

    Methods:
        execute: Execute one parameterized statement.
        fetch_all: Execute a query and return every row.
        fetch_one: Execute a query and return the first row, if any.
        count: Execute a `count(*)` query and return the number.
        last_insert_id: Id of the last row inserted into a given table.
        transaction: Re-entrant transaction scope.
        close: Close the underlying connection.
    """

    def __init__(self, db_path: Optional[str] = None, foreign_keys: Optional[bool] = None, journal_mode: Optional[str] = None):
        """
        Open the connection.

        Args:
            db_path: Path to the database file or `:memory:`. Defaults to the configured path.
            foreign_keys: Whether to enforce foreign key constraints. Defaults to the configured value.
            journal_mode: The SQLite journal mode to use. Defaults to the configured value.
        """
        self._opener = SQLiteConnection(db_path, foreign_keys=foreign_keys, journal_mode=journal_mode)
        self.conn: sqlite3.Connection = self._opener.__enter__()
        self.db_path: str = self._opener.db_path
        self._transaction: Optional[Transaction] = None

    def __repr__(self) -> str:
        return f"DBConnection(db_path={self.db_path!r})"

    @property
    def in_transaction(self) -> bool:
        """True while a transaction scope is open."""
        return self._transaction is not None

    def close(self):
        """Close the underlying connection."""
        if self._transaction is not None:
            LOG.warning("Closing a connection with an open transaction; uncommitted work will be lost.")
            self._transaction = None
        self._opener.__exit__(None, None, None)
        self.conn = None

    def execute(self, statement: str, params: Optional[Sequence[Any]] = None) -> sqlite3.Cursor:
        """
        Execute one parameterized statement.

        Args:
            statement: The SQL statement, using `?` placeholders.
            params: The values bound to the placeholders, in order.

        Returns:
            The cursor holding the statement's results.

        Raises:
            (exceptions.ExecutionError): If the driver rejects the statement.
        """
        params = list(params) if params is not None else []
        LOG.debug(f"SQLite statement: {' '.join(statement.split())}")
        LOG.debug(f"SQLite params: {params}")
        try:
            return self.conn.execute(statement, params)
        except sqlite3.Error as exc:
            raise ExecutionError(f"Error executing statement: {exc}", statement, params) from exc

    def fetch_all(self, statement: str, params: Optional[Sequence[Any]] = None) -> List[sqlite3.Row]:
        """
        Execute a query and return every row.

        Args:
            statement: The SQL query, using `?` placeholders.
            params: The values bound to the placeholders, in order.

        Returns:
            A list of rows, possibly empty.
        """
        cursor = self.execute(statement, params)
        try:
            return cursor.fetchall()
        except sqlite3.Error as exc:
            raise ExecutionError(f"Error fetching rows: {exc}", statement, params) from exc

    def fetch_one(self, statement: str, params: Optional[Sequence[Any]] = None) -> Optional[sqlite3.Row]:
        """
        Execute a query and return its first row.

        Args:
            statement: The SQL query, using `?` placeholders.
            params: The values bound to the placeholders, in order.

        Returns:
            The first row, or None when the query matched nothing.
        """
        cursor = self.execute(statement, params)
        try:
            return cursor.fetchone()
        except sqlite3.Error as exc:
            raise ExecutionError(f"Error fetching row: {exc}", statement, params) from exc

    def count(self, statement: str, params: Optional[Sequence[Any]] = None) -> int:
        """
        Execute a `select count(*) ...` query and return the number it reports.

        Args:
            statement: The SQL query, using `?` placeholders.
            params: The values bound to the placeholders, in order.

        Returns:
            The count reported by the database.
        """
        row = self.fetch_one(statement, params)
        return int(row[0]) if row is not None and row[0] is not None else 0

    def last_insert_id(self, table: str, id_column: str) -> int:
        """
        Return the id of the row most recently inserted into `table` on this connection.

        Args:
            table: The table the row was inserted into.
            id_column: The table's auto-incrementing primary key column.

        Returns:
            The database-generated id.

        Raises:
            (exceptions.ExecutionError): If the last insert on this connection
                did not target `table`.
        """
        statement = f"SELECT {id_column} FROM {table} WHERE rowid = last_insert_rowid()"
        row = self.fetch_one(statement)
        if row is None:
            raise ExecutionError(f"No row was inserted into {table} on this connection.", statement, [])
        return row[0]

    @contextmanager
    def transaction(self) -> Iterator[Transaction]:
        """
        Open a transaction scope.

        The outermost scope issues `BEGIN` and `COMMIT`. Nested scopes join the
        transaction that is already open. An exception leaving any scope rolls
        back the whole transaction once it reaches the outermost scope, and is
        re-raised.

        Yields:
            The [`Transaction`][backends.sqlite.sqlite_connection.Transaction] handle.

        Raises:
            (exceptions.ExecutionError): If a nested scope failed but the error was
                caught before it reached the outermost scope.
        """
        if self._transaction is not None:
            txn = self._transaction
            try:
                yield txn
            except BaseException:
                txn.rollback_only = True
                raise
            return

        txn = Transaction()
        self.execute("BEGIN")
        self._transaction = txn
        try:
            yield txn
            if txn.rollback_only:
                raise ExecutionError("A nested operation failed; the transaction has been rolled back.")
        except BaseException:
            self._transaction = None
            self._rollback(txn)
            raise

        self._transaction = None
        try:
            self.execute("COMMIT")
        except ExecutionError:
            self._rollback(txn)
            raise
        txn.committed()

    def _rollback(self, txn: Transaction):
        """
        Roll back the open transaction and run its rollback hooks.

        Args:
            txn: The transaction being abandoned.
        """
        LOG.warning("Rolling back transaction.")
        try:
            self.conn.execute("ROLLBACK")
        except sqlite3.Error as exc:
            # The original failure is what the caller needs to see
            LOG.error(f"Rollback failed: {exc}")
        txn.rolled_back()
