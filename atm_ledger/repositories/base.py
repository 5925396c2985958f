"""Storage contracts consumed by the ledger service.

Each backend (SQLite, in-memory) implements these three stores plus the
``LedgerStorage`` bundle that groups them under one atomic scope.
"""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from decimal import Decimal

from atm_ledger.models.account import AccountType
from atm_ledger.models.activity import PinActivityRecord, TransactionRecord
from atm_ledger.models.exceptions import InvalidInputError
from atm_ledger.models.user import User

MINI_STATEMENT_SIZE = 5


class CredentialStore(ABC):
    """user_id -> PIN hash."""

    @abstractmethod
    def create(self, user_id: str, pin_hash: str) -> None:
        """Provision a user. Raises UserAlreadyExistsError on duplicates."""

    @abstractmethod
    def find_by_id(self, user_id: str) -> User | None:
        """Return the stored user, or None."""

    @abstractmethod
    def exists(self, user_id: str) -> bool:
        """Check whether a user was provisioned."""

    def authenticate(self, user_id: str, candidate_hash: str) -> bool:
        """
        Compare a candidate hash against the stored one.

        Args:
            user_id: The user to check
            candidate_hash: Hex digest of the entered PIN

        Returns:
            True iff the user exists and the hashes match exactly
        """
        user = self.find_by_id(user_id)
        return user is not None and user.pin_hash == candidate_hash

    @abstractmethod
    def update_pin(self, user_id: str, new_hash: str) -> None:
        """Replace the stored hash. Raises UserNotFoundError for unknown users."""


class AccountStore(ABC):
    """(user_id, account_type) -> balance."""

    @abstractmethod
    def create(self, user_id: str, account_type: AccountType, balance: Decimal) -> None:
        """Provision an account. Raises AccountAlreadyExistsError on duplicates."""

    @abstractmethod
    def exists(self, user_id: str, account_type: AccountType) -> bool:
        """Check whether the account was provisioned."""

    @abstractmethod
    def get_balance(self, user_id: str, account_type: AccountType) -> Decimal:
        """Return the balance, or 0.00 when the account does not exist."""

    @abstractmethod
    def list_accounts(self, user_id: str) -> dict[AccountType, Decimal]:
        """Return every account of the user, in AccountType declaration order."""

    @abstractmethod
    def set_balance(self, user_id: str, account_type: AccountType, new_amount: Decimal) -> None:
        """Overwrite a balance. Raises AccountNotFoundError for unknown accounts."""


class ActivityLog(ABC):
    """Append-only, per-user transaction and PIN activity logs."""

    @abstractmethod
    def append_transaction(self, user_id: str, description: str, amount: Decimal) -> TransactionRecord:
        """Append a transaction record. Raises UserNotFoundError for unknown users."""

    @abstractmethod
    def append_pin_activity(self, user_id: str, description: str) -> PinActivityRecord:
        """Append a PIN activity record. Raises UserNotFoundError for unknown users."""

    @abstractmethod
    def history(self, user_id: str) -> list[TransactionRecord]:
        """Return the user's transactions, most recent first."""

    @abstractmethod
    def pin_activity_history(self, user_id: str) -> list[PinActivityRecord]:
        """Return the user's PIN activity, most recent first."""

    def mini_history(self, user_id: str, n: int = MINI_STATEMENT_SIZE) -> list[TransactionRecord]:
        """
        Return the n most recent transactions, most recent first.

        Raises:
            InvalidInputError: If n is negative
        """
        if n < 0:
            raise InvalidInputError(f"Statement size must not be negative: {n}")
        return self.history(user_id)[:n]


class LedgerStorage(ABC):
    """The three stores plus a scope in which their writes commit together."""

    credentials: CredentialStore
    accounts: AccountStore
    activity: ActivityLog

    @abstractmethod
    def atomic(self) -> AbstractContextManager:
        """Context manager: every write inside commits, or none does."""

    def close(self) -> None:
        """Release backend resources."""
