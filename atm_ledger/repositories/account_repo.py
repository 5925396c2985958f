"""Account repository for database operations."""

import sqlite3
from decimal import Decimal

from atm_ledger.models.account import (
    ZERO,
    Account,
    AccountType,
    from_minor_units,
    to_minor_units,
)
from atm_ledger.models.exceptions import AccountAlreadyExistsError, AccountNotFoundError
from atm_ledger.repositories.base import AccountStore
from atm_ledger.repositories.sqlite_base import SQLiteRepository


class AccountRepository(SQLiteRepository, AccountStore):
    """Repository for account balances.

    Balances are stored as integer minor units (cents).
    """

    def create_table(self) -> None:
        """Create the Accounts table if it doesn't exist."""
        self._execute(
            """
            CREATE TABLE IF NOT EXISTS Accounts (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                UserID TEXT NOT NULL,
                AccountType TEXT NOT NULL,
                Balance INTEGER NOT NULL,
                UNIQUE (UserID, AccountType)
            )
        """
        )

    def create(self, user_id: str, account_type: AccountType, balance: Decimal) -> None:
        """
        Create a new account.

        Raises:
            AccountAlreadyExistsError: If the user already holds an account of this type
        """
        account_type = AccountType.parse(account_type)
        try:
            self._execute(
                "INSERT INTO Accounts (UserID, AccountType, Balance) VALUES (?, ?, ?)",
                (user_id, account_type.value, to_minor_units(balance)),
            )
        except sqlite3.IntegrityError:
            raise AccountAlreadyExistsError(
                f"Account {user_id}/{account_type} already exists"
            )

    def find(self, user_id: str, account_type: AccountType) -> Account | None:
        """
        Find an account by owner and type.

        Returns:
            Account object if found, None otherwise
        """
        account_type = AccountType.parse(account_type)
        row = self._fetchone(
            "SELECT UserID, AccountType, Balance FROM Accounts WHERE UserID = ? AND AccountType = ?",
            (user_id, account_type.value),
        )
        if row is None:
            return None
        return Account(
            user_id=row["UserID"],
            account_type=AccountType(row["AccountType"]),
            balance=from_minor_units(row["Balance"]),
        )

    def exists(self, user_id: str, account_type: AccountType) -> bool:
        return self.find(user_id, account_type) is not None

    def get_balance(self, user_id: str, account_type: AccountType) -> Decimal:
        account = self.find(user_id, account_type)
        return ZERO if account is None else account.balance

    def list_accounts(self, user_id: str) -> dict[AccountType, Decimal]:
        rows = self._fetchall(
            "SELECT AccountType, Balance FROM Accounts WHERE UserID = ?", (user_id,)
        )
        balances = {AccountType(row["AccountType"]): from_minor_units(row["Balance"]) for row in rows}
        return {t: balances[t] for t in AccountType if t in balances}

    def set_balance(self, user_id: str, account_type: AccountType, new_amount: Decimal) -> None:
        """
        Overwrite the balance of an account.

        The caller is responsible for having validated new_amount >= 0.

        Raises:
            AccountNotFoundError: If the account was never provisioned
        """
        account_type = AccountType.parse(account_type)
        cursor = self._execute(
            "UPDATE Accounts SET Balance = ? WHERE UserID = ? AND AccountType = ?",
            (to_minor_units(new_amount), user_id, account_type.value),
        )
        if cursor.rowcount == 0:
            raise AccountNotFoundError(f"Account {user_id}/{account_type} not found")
