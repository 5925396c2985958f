"""Per-resource locks acquired in a fixed global order."""

import logging
import threading
from contextlib import contextmanager

from atm_ledger.models.exceptions import LedgerBusyError

logger = logging.getLogger(__name__)


def account_key(user_id: str, account_type) -> tuple[str, ...]:
    """Lock key for one (user, account type) balance."""
    return ("account", user_id, str(account_type))


def log_key(user_id: str) -> tuple[str, ...]:
    """Lock key for one user's activity logs."""
    return ("log", user_id)


class LockManager:
    """Hands out one lock per resource key.

    Keys passed to ``acquire`` are de-duplicated and taken in sorted order, so
    two transfers touching the same pair of accounts in opposite directions
    cannot deadlock. A key's lock is forgotten once no thread holds or waits
    for it, so unknown user ids do not accumulate.
    """

    def __init__(self, timeout: float = 5.0):
        """
        Args:
            timeout: Seconds to wait for each lock before giving up
        """
        self._timeout = timeout
        # key -> [lock, number of threads holding or waiting for it]
        self._locks: dict[tuple[str, ...], list] = {}
        self._registry_lock = threading.Lock()

    def __len__(self) -> int:
        with self._registry_lock:
            return len(self._locks)

    def _checkout(self, key: tuple[str, ...]) -> threading.Lock:
        with self._registry_lock:
            entry = self._locks.get(key)
            if entry is None:
                entry = self._locks[key] = [threading.Lock(), 0]
            entry[1] += 1
            return entry[0]

    def _checkin(self, key: tuple[str, ...]) -> None:
        with self._registry_lock:
            entry = self._locks[key]
            entry[1] -= 1
            if entry[1] == 0:
                del self._locks[key]

    @contextmanager
    def acquire(self, *keys: tuple[str, ...]):
        """
        Hold every lock named by keys for the duration of the block.

        Raises:
            LedgerBusyError: If any lock is not obtained within the timeout
        """
        ordered = sorted(set(keys))
        held = []
        try:
            for key in ordered:
                lock = self._checkout(key)
                if not lock.acquire(timeout=self._timeout):
                    self._checkin(key)
                    logger.warning("Timed out after %.1fs waiting for %s", self._timeout, key)
                    raise LedgerBusyError(f"Resource busy: {'/'.join(key)}")
                held.append((key, lock))
            logger.debug("Acquired locks %s", ordered)
            yield
        finally:
            for key, lock in reversed(held):
                lock.release()
                self._checkin(key)
