"""In-memory storage backend, mainly for tests and throwaway sessions."""

import itertools
import logging
import threading
from contextlib import contextmanager
from datetime import datetime
from decimal import Decimal

from atm_ledger.models.account import ZERO, AccountType, to_amount, to_balance
from atm_ledger.models.activity import PinActivityRecord, TransactionRecord
from atm_ledger.models.exceptions import (
    AccountAlreadyExistsError,
    AccountNotFoundError,
    UserAlreadyExistsError,
    UserNotFoundError,
)
from atm_ledger.models.user import User
from atm_ledger.repositories.base import AccountStore, ActivityLog, CredentialStore, LedgerStorage

logger = logging.getLogger(__name__)


class InMemoryCredentialStore(CredentialStore):
    def __init__(self, lock: threading.RLock):
        self._lock = lock
        self._users: dict[str, str] = {}

    def create(self, user_id: str, pin_hash: str) -> None:
        with self._lock:
            if user_id in self._users:
                raise UserAlreadyExistsError(f"User {user_id} already exists")
            self._users[user_id] = pin_hash

    def find_by_id(self, user_id: str) -> User | None:
        with self._lock:
            pin_hash = self._users.get(user_id)
        return None if pin_hash is None else User(user_id=user_id, pin_hash=pin_hash)

    def exists(self, user_id: str) -> bool:
        with self._lock:
            return user_id in self._users

    def update_pin(self, user_id: str, new_hash: str) -> None:
        with self._lock:
            if user_id not in self._users:
                raise UserNotFoundError(f"User {user_id} not found")
            self._users[user_id] = new_hash

    def _snapshot(self):
        return dict(self._users)

    def _restore(self, state) -> None:
        self._users = state


class InMemoryAccountStore(AccountStore):
    def __init__(self, lock: threading.RLock):
        self._lock = lock
        self._balances: dict[tuple[str, AccountType], Decimal] = {}

    def create(self, user_id: str, account_type: AccountType, balance: Decimal) -> None:
        key = (user_id, AccountType.parse(account_type))
        with self._lock:
            if key in self._balances:
                raise AccountAlreadyExistsError(f"Account {user_id}/{key[1]} already exists")
            self._balances[key] = to_balance(balance)

    def exists(self, user_id: str, account_type: AccountType) -> bool:
        with self._lock:
            return (user_id, AccountType.parse(account_type)) in self._balances

    def get_balance(self, user_id: str, account_type: AccountType) -> Decimal:
        with self._lock:
            return self._balances.get((user_id, AccountType.parse(account_type)), ZERO)

    def list_accounts(self, user_id: str) -> dict[AccountType, Decimal]:
        with self._lock:
            return {
                t: self._balances[(user_id, t)]
                for t in AccountType
                if (user_id, t) in self._balances
            }

    def set_balance(self, user_id: str, account_type: AccountType, new_amount: Decimal) -> None:
        key = (user_id, AccountType.parse(account_type))
        with self._lock:
            if key not in self._balances:
                raise AccountNotFoundError(f"Account {user_id}/{key[1]} not found")
            self._balances[key] = to_balance(new_amount)

    def _snapshot(self):
        return dict(self._balances)

    def _restore(self, state) -> None:
        self._balances = state


class InMemoryActivityLog(ActivityLog):
    def __init__(self, lock: threading.RLock, credentials: InMemoryCredentialStore):
        self._lock = lock
        self._credentials = credentials
        self._transactions: dict[str, list[TransactionRecord]] = {}
        self._pin_activity: dict[str, list[PinActivityRecord]] = {}
        self._seq = itertools.count(1)

    def _require_user(self, user_id: str) -> None:
        if not self._credentials.exists(user_id):
            raise UserNotFoundError(f"User {user_id} not found")

    def append_transaction(self, user_id: str, description: str, amount: Decimal) -> TransactionRecord:
        with self._lock:
            self._require_user(user_id)
            record = TransactionRecord(
                seq=next(self._seq),
                user_id=user_id,
                description=description,
                amount=to_amount(amount),
                timestamp=datetime.now().replace(microsecond=0),
            )
            self._transactions.setdefault(user_id, []).append(record)
            return record

    def append_pin_activity(self, user_id: str, description: str) -> PinActivityRecord:
        with self._lock:
            self._require_user(user_id)
            record = PinActivityRecord(
                seq=next(self._seq),
                user_id=user_id,
                description=description,
                timestamp=datetime.now().replace(microsecond=0),
            )
            self._pin_activity.setdefault(user_id, []).append(record)
            return record

    def history(self, user_id: str) -> list[TransactionRecord]:
        with self._lock:
            return list(reversed(self._transactions.get(user_id, [])))

    def pin_activity_history(self, user_id: str) -> list[PinActivityRecord]:
        with self._lock:
            return list(reversed(self._pin_activity.get(user_id, [])))

    def _snapshot(self):
        # Records are frozen, so copying the per-user lists is enough.
        return (
            {k: list(v) for k, v in self._transactions.items()},
            {k: list(v) for k, v in self._pin_activity.items()},
        )

    def _restore(self, state) -> None:
        self._transactions, self._pin_activity = state


class InMemoryStorage(LedgerStorage):
    """Dict-backed LedgerStorage.

    ``atomic()`` snapshots every store on entry to the outermost block and
    restores the snapshot if the block raises.
    """

    def __init__(self):
        self._lock = threading.RLock()
        self._depth = 0
        self.credentials = InMemoryCredentialStore(self._lock)
        self.accounts = InMemoryAccountStore(self._lock)
        self.activity = InMemoryActivityLog(self._lock, self.credentials)

    @contextmanager
    def atomic(self):
        with self._lock:
            outermost = self._depth == 0
            if outermost:
                stores = (self.credentials, self.accounts, self.activity)
                snapshot = [store._snapshot() for store in stores]
            self._depth += 1
            try:
                yield self
            except BaseException:
                if outermost:
                    logger.debug("Rolling back in-memory atomic block")
                    for store, state in zip(stores, snapshot):
                        store._restore(state)
                raise
            finally:
                self._depth -= 1
