"""Shared plumbing for the SQLite repositories."""

import logging
import sqlite3
import threading

from atm_ledger.models.exceptions import StorageUnavailableError

logger = logging.getLogger(__name__)


class TransactionScope:
    """
    Tracks whether the repositories sharing a connection are inside an
    atomic block.

    While a block is open, repository writes leave the commit to the block.
    """

    def __init__(self):
        self.lock = threading.RLock()
        self.depth = 0

    @property
    def active(self) -> bool:
        return self.depth > 0


class SQLiteRepository:
    """Base class for repositories backed by a sqlite3 connection."""

    def __init__(self, conn: sqlite3.Connection, scope: TransactionScope | None = None):
        """
        Initialize the repository with a database connection.

        Args:
            conn: SQLite database connection
            scope: Transaction scope shared with sibling repositories
        """
        self._conn = conn
        self._conn.row_factory = sqlite3.Row
        self._scope = scope or TransactionScope()

    def _fetchone(self, sql: str, params: tuple = ()) -> sqlite3.Row | None:
        with self._scope.lock:
            try:
                cursor = self._conn.cursor()
                cursor.execute(sql, params)
                return cursor.fetchone()
            except sqlite3.Error as exc:
                raise StorageUnavailableError(f"Read failed: {exc}") from exc

    def _fetchall(self, sql: str, params: tuple = ()) -> list[sqlite3.Row]:
        with self._scope.lock:
            try:
                cursor = self._conn.cursor()
                cursor.execute(sql, params)
                return cursor.fetchall()
            except sqlite3.Error as exc:
                raise StorageUnavailableError(f"Read failed: {exc}") from exc

    def _execute(self, sql: str, params: tuple = ()) -> sqlite3.Cursor:
        """
        Run a write statement, committing unless an atomic block owns the commit.

        sqlite3.IntegrityError is re-raised untouched so callers can map it to
        a domain error; anything else becomes StorageUnavailableError.
        """
        with self._scope.lock:
            try:
                cursor = self._conn.cursor()
                cursor.execute(sql, params)
                if not self._scope.active:
                    self._conn.commit()
                return cursor
            except sqlite3.IntegrityError:
                if not self._scope.active:
                    self._conn.rollback()
                raise
            except sqlite3.Error as exc:
                logger.error("SQLite write failed: %s", exc)
                if not self._scope.active:
                    self._conn.rollback()
                raise StorageUnavailableError(f"Write failed: {exc}") from exc
