"""SQLite-backed LedgerStorage and backend selection."""

import logging
import sqlite3
from contextlib import contextmanager

from atm_ledger.models.exceptions import StorageUnavailableError
from atm_ledger.repositories.account_repo import AccountRepository
from atm_ledger.repositories.activity_repo import ActivityRepository
from atm_ledger.repositories.base import LedgerStorage
from atm_ledger.repositories.credential_repo import CredentialRepository
from atm_ledger.repositories.memory import InMemoryStorage
from atm_ledger.repositories.sqlite_base import TransactionScope

logger = logging.getLogger(__name__)


class SQLiteStorage(LedgerStorage):
    """The three SQLite repositories sharing one connection and one scope."""

    def __init__(self, conn: sqlite3.Connection):
        """
        Initialize the storage with a database connection.

        Args:
            conn: SQLite database connection. Open it with
                check_same_thread=False if the ledger is shared by threads.
        """
        self._conn = conn
        self._scope = TransactionScope()
        self.credentials = CredentialRepository(conn, self._scope)
        self.accounts = AccountRepository(conn, self._scope)
        self.activity = ActivityRepository(conn, self._scope)

    def create_tables(self) -> None:
        """Create every ledger table if it doesn't exist."""
        self.credentials.create_table()
        self.accounts.create_table()
        self.activity.create_table()

    @contextmanager
    def atomic(self):
        scope = self._scope
        with scope.lock:
            outermost = not scope.active
            scope.depth += 1
            try:
                yield self
            except BaseException:
                scope.depth -= 1
                if outermost:
                    logger.debug("Rolling back SQLite atomic block")
                    self._conn.rollback()
                raise
            else:
                scope.depth -= 1
                if outermost:
                    try:
                        self._conn.commit()
                    except sqlite3.Error as exc:
                        self._conn.rollback()
                        raise StorageUnavailableError(f"Commit failed: {exc}") from exc

    def close(self) -> None:
        self._conn.close()


def open_storage(settings) -> LedgerStorage:
    """
    Build the storage backend named by the settings.

    Args:
        settings: A config.settings.Settings instance

    Returns:
        A ready-to-use LedgerStorage with its tables in place

    Raises:
        StorageUnavailableError: If the database cannot be opened
    """
    if settings.storage_backend == "memory":
        logger.info("Using in-memory ledger storage")
        return InMemoryStorage()

    try:
        conn = sqlite3.connect(settings.db_path, check_same_thread=False)
    except sqlite3.Error as exc:
        raise StorageUnavailableError(f"Cannot open {settings.db_path}: {exc}") from exc
    logger.info("Using SQLite ledger storage at %s", settings.db_path)
    storage = SQLiteStorage(conn)
    storage.create_tables()
    return storage
