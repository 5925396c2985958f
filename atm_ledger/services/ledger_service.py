"""Ledger service: the business logic layer of the ATM backend."""

import hashlib
import logging
import re
from decimal import Decimal

from atm_ledger.models.account import MAX_AMOUNT, MAX_BALANCE, ZERO, AccountType, to_amount
from atm_ledger.models.activity import DepositSource, PinActivityRecord, TransactionRecord
from atm_ledger.models.exceptions import (
    AccountNotFoundError,
    AuthenticationFailedError,
    InsufficientFundsError,
    InvalidAmountError,
    InvalidCodeError,
    InvalidPinFormatError,
    InvalidTransferError,
    RecipientNotFoundError,
)
from atm_ledger.repositories.base import MINI_STATEMENT_SIZE, LedgerStorage
from atm_ledger.services.locks import LockManager, account_key, log_key

logger = logging.getLogger(__name__)

PIN_PATTERN = re.compile(r"[0-9]{4}")
CARDLESS_CODE_PATTERN = re.compile(r"[0-9]{6}")

AUTH_SUCCESS = "Successful PIN authentication"
AUTH_FAILURE = "Failed PIN authentication attempt"
PIN_CHANGE_SUCCESS = "Successful PIN change"
PIN_CHANGE_WRONG_PIN = "Failed PIN change - incorrect current PIN"
PIN_CHANGE_BAD_FORMAT = "Failed PIN change - invalid format"


def hash_pin(pin: str) -> str:
    """Return the hex SHA-256 digest of a PIN."""
    return hashlib.sha256(str(pin).encode("utf-8")).hexdigest()


def validate_pin_format(pin: str) -> None:
    """
    Check that a PIN is exactly four decimal digits.

    Raises:
        InvalidPinFormatError: If it is not
    """
    if not isinstance(pin, str) or PIN_PATTERN.fullmatch(pin) is None:
        raise InvalidPinFormatError("PIN must be exactly 4 digits")


class LedgerService:
    """Service layer for ATM ledger operations.

    The service is the only writer to the credential, account and activity
    stores. Every mutating call takes the acting user explicitly, holds the
    locks of every account and log it touches, and performs its reads, writes
    and log append inside one ``storage.atomic()`` block.
    """

    def __init__(
        self,
        storage: LedgerStorage,
        mini_statement_size: int = MINI_STATEMENT_SIZE,
        lock_timeout: float = 5.0,
        max_amount=MAX_AMOUNT,
    ):
        """
        Initialize the LedgerService with a storage backend.

        Args:
            storage: The LedgerStorage holding credentials, accounts and logs
            mini_statement_size: Entries in a mini statement (default: 5)
            lock_timeout: Seconds to wait for a resource lock (default: 5.0)
            max_amount: Largest single deposit, withdrawal or transfer (default: 10^12)

        Raises:
            RuntimeError: If SHA-256 is not available on this interpreter
        """
        if "sha256" not in hashlib.algorithms_available:
            raise RuntimeError("SHA-256 not available")
        self._storage = storage
        self._mini_statement_size = mini_statement_size
        self._locks = LockManager(timeout=lock_timeout)
        self._max_amount = to_amount(max_amount)

    # Authentication

    def authenticate(self, user_id: str, pin: str) -> bool:
        """
        Check a PIN and record the attempt in the user's PIN activity log.

        Args:
            user_id: The user logging in
            pin: The PIN as entered

        Returns:
            True if the PIN matches, False otherwise (including unknown users)
        """
        credentials = self._storage.credentials
        with self._locks.acquire(log_key(user_id)):
            with self._storage.atomic():
                if not credentials.exists(user_id):
                    logger.warning("Authentication attempt for unknown user %s", user_id)
                    return False

                is_valid = credentials.authenticate(user_id, hash_pin(pin))
                self._storage.activity.append_pin_activity(
                    user_id, AUTH_SUCCESS if is_valid else AUTH_FAILURE
                )

        if is_valid:
            logger.info("User %s authenticated", user_id)
        else:
            logger.warning("Failed PIN authentication for user %s", user_id)
        return is_valid

    def require_authenticated(self, user_id: str, pin: str) -> None:
        """
        Like authenticate, but raise instead of returning False.

        Raises:
            AuthenticationFailedError: If the PIN does not match
        """
        if not self.authenticate(user_id, pin):
            raise AuthenticationFailedError(f"Authentication failed for {user_id}")

    def change_pin(self, user_id: str, current_pin: str, new_pin: str) -> bool:
        """
        Replace a user's PIN after verifying the current one.

        The current PIN is checked before the new PIN's format, so a wrong PIN
        is always reported as such.

        Args:
            user_id: The user changing their PIN
            current_pin: The PIN in use now
            new_pin: The replacement, exactly 4 digits

        Returns:
            True if the PIN was changed, False otherwise
        """
        credentials = self._storage.credentials
        activity = self._storage.activity
        with self._locks.acquire(log_key(user_id)):
            with self._storage.atomic():
                if not credentials.exists(user_id):
                    logger.warning("PIN change attempted for unknown user %s", user_id)
                    return False

                if not credentials.authenticate(user_id, hash_pin(current_pin)):
                    activity.append_pin_activity(user_id, PIN_CHANGE_WRONG_PIN)
                    logger.warning("PIN change for %s rejected: incorrect current PIN", user_id)
                    return False

                try:
                    validate_pin_format(new_pin)
                except InvalidPinFormatError:
                    activity.append_pin_activity(user_id, PIN_CHANGE_BAD_FORMAT)
                    logger.warning("PIN change for %s rejected: invalid format", user_id)
                    return False

                credentials.update_pin(user_id, hash_pin(new_pin))
                activity.append_pin_activity(user_id, PIN_CHANGE_SUCCESS)

        logger.info("PIN changed for user %s", user_id)
        return True

    # Money movement

    def _validate_amount(self, amount, action: str) -> Decimal:
        amount = to_amount(amount)
        if amount <= ZERO:
            raise InvalidAmountError(
                f"{action} amount must be greater than zero, got {amount}"
            )
        if amount > self._max_amount:
            raise InvalidAmountError(
                f"{action} amount {amount} exceeds maximum allowed of {self._max_amount}"
            )
        return amount

    def _require_account(self, user_id: str, account_type: AccountType) -> None:
        if not self._storage.accounts.exists(user_id, account_type):
            raise AccountNotFoundError(f"Account {user_id}/{account_type} not found")

    def validate_withdrawal(self, user_id: str, account_type, amount) -> bool:
        """
        Check whether an account can cover a withdrawal.

        Args:
            user_id: Owner of the account
            account_type: The account to draw from
            amount: The amount requested

        Returns:
            True if the balance is at least amount

        Raises:
            InvalidAmountError: If the amount is not positive or above the maximum
        """
        account_type = AccountType.parse(account_type)
        amount = self._validate_amount(amount, "Withdrawal")
        return self._storage.accounts.get_balance(user_id, account_type) >= amount

    def _check_capacity(self, user_id: str, account_type: AccountType, new_balance: Decimal) -> None:
        if new_balance > MAX_BALANCE:
            logger.warning(
                "Balance cap: %s/%s would reach %s", user_id, account_type, new_balance
            )
            raise InvalidAmountError(
                f"Balance of {user_id}/{account_type} would exceed the maximum of {MAX_BALANCE}"
            )

    def _check_funds(self, user_id: str, account_type: AccountType, amount: Decimal) -> Decimal:
        # Raises without touching state or the activity log.
        balance = self._storage.accounts.get_balance(user_id, account_type)
        if balance < amount:
            logger.warning(
                "Insufficient funds: %s/%s has %s, %s requested",
                user_id, account_type, balance, amount,
            )
            raise InsufficientFundsError(user_id, account_type, balance, amount)
        return balance

    def deposit(
        self,
        user_id: str,
        account_type,
        amount,
        source: DepositSource | None = None,
    ) -> TransactionRecord:
        """
        Deposit funds into an account.

        Args:
            user_id: Owner of the account
            account_type: The account to credit
            amount: The amount to deposit (must be positive)
            source: Optional channel (cash or check) named in the log entry

        Returns:
            The TransactionRecord appended to the user's log

        Raises:
            AccountNotFoundError: If the account doesn't exist
            InvalidAmountError: If the amount is not positive, above the maximum,
                or would push the balance past MAX_BALANCE
            InvalidInputError: If source is not a known deposit channel
        """
        account_type = AccountType.parse(account_type)
        amount = self._validate_amount(amount, "Deposit")

        description = f"Deposit to {account_type}"
        if source is not None:
            description = f"{DepositSource.parse(source).value} {description}"

        return self._credit(user_id, account_type, amount, description)

    def _credit(self, user_id, account_type, amount, description) -> TransactionRecord:
        accounts = self._storage.accounts
        with self._locks.acquire(account_key(user_id, account_type), log_key(user_id)):
            with self._storage.atomic():
                self._require_account(user_id, account_type)
                new_balance = accounts.get_balance(user_id, account_type) + amount
                self._check_capacity(user_id, account_type, new_balance)
                accounts.set_balance(user_id, account_type, new_balance)
                record = self._storage.activity.append_transaction(user_id, description, amount)

        logger.info("%s: %s %s, balance now %s", user_id, description, amount, new_balance)
        return record

    def withdraw(self, user_id: str, account_type, amount) -> TransactionRecord:
        """
        Withdraw funds from an account.

        A withdrawal the balance cannot cover changes nothing and is not
        written to the transaction log.

        Args:
            user_id: Owner of the account
            account_type: The account to debit
            amount: The amount to withdraw (must be positive)

        Returns:
            The TransactionRecord appended to the user's log

        Raises:
            AccountNotFoundError: If the account doesn't exist
            InvalidAmountError: If the amount is not positive
            InsufficientFundsError: If the balance is below amount
        """
        account_type = AccountType.parse(account_type)
        amount = self._validate_amount(amount, "Withdrawal")
        return self._debit(user_id, account_type, amount, f"Withdrawal from {account_type}")

    def _debit(self, user_id, account_type, amount, description) -> TransactionRecord:
        accounts = self._storage.accounts
        with self._locks.acquire(account_key(user_id, account_type), log_key(user_id)):
            with self._storage.atomic():
                self._require_account(user_id, account_type)
                balance = self._check_funds(user_id, account_type, amount)
                accounts.set_balance(user_id, account_type, balance - amount)
                record = self._storage.activity.append_transaction(user_id, description, amount)

        logger.info("%s: %s %s, balance now %s", user_id, description, amount, balance - amount)
        return record

    def transfer_same_user(self, user_id: str, source_type, dest_type, amount) -> TransactionRecord:
        """
        Move funds between two accounts of the same user.

        Args:
            user_id: Owner of both accounts
            source_type: The account to debit
            dest_type: The account to credit
            amount: The amount to move (must be positive)

        Returns:
            The single TransactionRecord appended to the user's log

        Raises:
            InvalidTransferError: If source and destination are the same account
            AccountNotFoundError: If either account doesn't exist
            InvalidAmountError: If the amount is not positive
            InsufficientFundsError: If the source balance is below amount
        """
        source_type = AccountType.parse(source_type)
        dest_type = AccountType.parse(dest_type)
        if source_type == dest_type:
            raise InvalidTransferError("Cannot transfer to the same account")
        amount = self._validate_amount(amount, "Transfer")

        return self._transfer(
            user_id, source_type, user_id, dest_type, amount,
            f"Transfer from {source_type} to {dest_type}",
        )

    def transfer_cross_user(
        self,
        source_user_id: str,
        source_type,
        dest_user_id: str,
        dest_type,
        amount,
    ) -> TransactionRecord:
        """
        Move funds from one user's account to another user's account.

        Only the source user's log receives an entry.

        Args:
            source_user_id: The user sending funds
            source_type: The sender's account to debit
            dest_user_id: The recipient
            dest_type: The recipient's account to credit
            amount: The amount to move (must be positive)

        Returns:
            The TransactionRecord appended to the source user's log

        Raises:
            RecipientNotFoundError: If the recipient doesn't exist
            AccountNotFoundError: If either account doesn't exist
            InvalidAmountError: If the amount is not positive
            InsufficientFundsError: If the source balance is below amount
        """
        if dest_user_id == source_user_id:
            return self.transfer_same_user(source_user_id, source_type, dest_type, amount)

        source_type = AccountType.parse(source_type)
        dest_type = AccountType.parse(dest_type)
        if not self._storage.credentials.exists(dest_user_id):
            raise RecipientNotFoundError(f"Recipient {dest_user_id} not found")
        amount = self._validate_amount(amount, "Transfer")

        return self._transfer(
            source_user_id, source_type, dest_user_id, dest_type, amount,
            f"Transfer to {dest_user_id}'s {dest_type}",
        )

    def _transfer(self, source_user, source_type, dest_user, dest_type, amount, description):
        accounts = self._storage.accounts
        keys = (
            account_key(source_user, source_type),
            account_key(dest_user, dest_type),
            log_key(source_user),
        )
        with self._locks.acquire(*keys):
            with self._storage.atomic():
                self._require_account(source_user, source_type)
                self._require_account(dest_user, dest_type)

                # Read both balances before mutating either
                source_balance = self._check_funds(source_user, source_type, amount)
                dest_balance = accounts.get_balance(dest_user, dest_type)
                self._check_capacity(dest_user, dest_type, dest_balance + amount)

                accounts.set_balance(source_user, source_type, source_balance - amount)
                accounts.set_balance(dest_user, dest_type, dest_balance + amount)
                record = self._storage.activity.append_transaction(source_user, description, amount)

        logger.info("%s: %s %s", source_user, description, amount)
        return record

    def cardless_deposit(self, user_id: str, account_type, amount, code: str) -> TransactionRecord:
        """
        Deposit funds authorised by a six-digit cardless code.

        Raises:
            InvalidCodeError: If code is not exactly 6 digits
            AccountNotFoundError: If the account doesn't exist
            InvalidAmountError: If the amount is not positive
        """
        self._validate_code(code)
        account_type = AccountType.parse(account_type)
        amount = self._validate_amount(amount, "Deposit")
        return self._credit(user_id, account_type, amount, f"Cardless deposit ({code})")

    def cardless_withdraw(self, user_id: str, account_type, amount, code: str) -> TransactionRecord:
        """
        Withdraw funds authorised by a six-digit cardless code.

        Raises:
            InvalidCodeError: If code is not exactly 6 digits
            AccountNotFoundError: If the account doesn't exist
            InvalidAmountError: If the amount is not positive
            InsufficientFundsError: If the balance is below amount
        """
        self._validate_code(code)
        account_type = AccountType.parse(account_type)
        amount = self._validate_amount(amount, "Withdrawal")
        return self._debit(user_id, account_type, amount, f"Cardless withdrawal ({code})")

    def _validate_code(self, code: str) -> None:
        if not isinstance(code, str) or CARDLESS_CODE_PATTERN.fullmatch(code) is None:
            raise InvalidCodeError("Cardless code must be exactly 6 digits")

    # Reads

    def user_exists(self, user_id: str) -> bool:
        return self._storage.credentials.exists(user_id)

    def get_balance(self, user_id: str, account_type) -> Decimal:
        """Balance of one account; 0.00 if the account doesn't exist."""
        return self._storage.accounts.get_balance(user_id, AccountType.parse(account_type))

    def list_accounts(self, user_id: str) -> dict[AccountType, Decimal]:
        return self._storage.accounts.list_accounts(user_id)

    def history(self, user_id: str) -> list[TransactionRecord]:
        """All transactions of a user, most recent first."""
        return self._storage.activity.history(user_id)

    def mini_history(self, user_id: str, n: int | None = None) -> list[TransactionRecord]:
        """
        The most recent transactions of a user, most recent first.

        Args:
            user_id: The user
            n: Number of entries (default: the configured mini statement size)
        """
        if n is None:
            n = self._mini_statement_size
        return self._storage.activity.mini_history(user_id, n)

    def pin_activity_history(self, user_id: str) -> list[PinActivityRecord]:
        """All PIN activity of a user, most recent first."""
        return self._storage.activity.pin_activity_history(user_id)
