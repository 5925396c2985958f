"""Activity log repository for database operations."""

from datetime import datetime
from decimal import Decimal

from atm_ledger.models.account import from_minor_units, to_minor_units
from atm_ledger.models.activity import PinActivityRecord, TransactionRecord
from atm_ledger.models.exceptions import UserNotFoundError
from atm_ledger.repositories.base import ActivityLog
from atm_ledger.repositories.sqlite_base import SQLiteRepository


class ActivityRepository(SQLiteRepository, ActivityLog):
    """Repository for the Transactions and PinActivity logs.

    Rows are only ever inserted; ordering is by the autoincrement id.
    Requires the Users table (see CredentialRepository).
    """

    def create_table(self) -> None:
        """Create the Transactions and PinActivity tables if they don't exist."""
        self._execute(
            """
            CREATE TABLE IF NOT EXISTS Transactions (
                TransactionID INTEGER PRIMARY KEY AUTOINCREMENT,
                UserID TEXT NOT NULL,
                Description TEXT NOT NULL,
                Amount INTEGER NOT NULL,
                Time TEXT NOT NULL
            )
        """
        )
        self._execute(
            """
            CREATE TABLE IF NOT EXISTS PinActivity (
                ActivityID INTEGER PRIMARY KEY AUTOINCREMENT,
                UserID TEXT NOT NULL,
                Description TEXT NOT NULL,
                Time TEXT NOT NULL
            )
        """
        )

    def _require_user(self, user_id: str) -> None:
        if self._fetchone("SELECT 1 FROM Users WHERE UserID = ?", (user_id,)) is None:
            raise UserNotFoundError(f"User {user_id} not found")

    def append_transaction(self, user_id: str, description: str, amount: Decimal) -> TransactionRecord:
        """
        Append a transaction with the current timestamp.

        Args:
            user_id: Owner of the log
            description: e.g. 'Withdrawal from SAVINGS'
            amount: The amount moved

        Returns:
            The stored TransactionRecord

        Raises:
            UserNotFoundError: If the user doesn't exist
        """
        self._require_user(user_id)
        now = datetime.now().replace(microsecond=0)
        cents = to_minor_units(amount)
        cursor = self._execute(
            "INSERT INTO Transactions (UserID, Description, Amount, Time) VALUES (?, ?, ?, ?)",
            (user_id, description, cents, now.isoformat()),
        )
        return TransactionRecord(
            seq=cursor.lastrowid,
            user_id=user_id,
            description=description,
            amount=from_minor_units(cents),
            timestamp=now,
        )

    def append_pin_activity(self, user_id: str, description: str) -> PinActivityRecord:
        """
        Append a PIN activity entry with the current timestamp.

        Raises:
            UserNotFoundError: If the user doesn't exist
        """
        self._require_user(user_id)
        now = datetime.now().replace(microsecond=0)
        cursor = self._execute(
            "INSERT INTO PinActivity (UserID, Description, Time) VALUES (?, ?, ?)",
            (user_id, description, now.isoformat()),
        )
        return PinActivityRecord(
            seq=cursor.lastrowid,
            user_id=user_id,
            description=description,
            timestamp=now,
        )

    def history(self, user_id: str) -> list[TransactionRecord]:
        rows = self._fetchall(
            """SELECT TransactionID, UserID, Description, Amount, Time
               FROM Transactions WHERE UserID = ?
               ORDER BY TransactionID DESC""",
            (user_id,),
        )
        return [
            TransactionRecord(
                seq=row["TransactionID"],
                user_id=row["UserID"],
                description=row["Description"],
                amount=from_minor_units(row["Amount"]),
                timestamp=datetime.fromisoformat(row["Time"]),
            )
            for row in rows
        ]

    def pin_activity_history(self, user_id: str) -> list[PinActivityRecord]:
        rows = self._fetchall(
            """SELECT ActivityID, UserID, Description, Time
               FROM PinActivity WHERE UserID = ?
               ORDER BY ActivityID DESC""",
            (user_id,),
        )
        return [
            PinActivityRecord(
                seq=row["ActivityID"],
                user_id=row["UserID"],
                description=row["Description"],
                timestamp=datetime.fromisoformat(row["Time"]),
            )
            for row in rows
        ]
