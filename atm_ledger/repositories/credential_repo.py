"""Credential repository for database operations."""

import sqlite3

from atm_ledger.models.exceptions import UserAlreadyExistsError, UserNotFoundError
from atm_ledger.models.user import User
from atm_ledger.repositories.base import CredentialStore
from atm_ledger.repositories.sqlite_base import SQLiteRepository


class CredentialRepository(SQLiteRepository, CredentialStore):
    """Repository for user credentials (PIN hashes)."""

    def create_table(self) -> None:
        """Create the Users table if it doesn't exist."""
        self._execute(
            """
            CREATE TABLE IF NOT EXISTS Users (
                UserID TEXT PRIMARY KEY,
                PinHash TEXT NOT NULL
            )
        """
        )

    def create(self, user_id: str, pin_hash: str) -> None:
        """
        Create a new user.

        Args:
            user_id: The user identifier, e.g. 'USER001'
            pin_hash: Hex digest of the user's PIN

        Raises:
            UserAlreadyExistsError: If a user with the same id already exists
        """
        try:
            self._execute(
                "INSERT INTO Users (UserID, PinHash) VALUES (?, ?)",
                (user_id, pin_hash),
            )
        except sqlite3.IntegrityError:
            raise UserAlreadyExistsError(f"User {user_id} already exists")

    def find_by_id(self, user_id: str) -> User | None:
        """
        Find a user by id.

        Args:
            user_id: The user id to search for

        Returns:
            User object if found, None otherwise
        """
        row = self._fetchone(
            "SELECT UserID, PinHash FROM Users WHERE UserID = ?", (user_id,)
        )
        if row is None:
            return None
        return User(user_id=row["UserID"], pin_hash=row["PinHash"])

    def exists(self, user_id: str) -> bool:
        return self._fetchone("SELECT 1 FROM Users WHERE UserID = ?", (user_id,)) is not None

    def update_pin(self, user_id: str, new_hash: str) -> None:
        """
        Replace the stored PIN hash.

        Args:
            user_id: The user to update
            new_hash: Hex digest of the new PIN

        Raises:
            UserNotFoundError: If the user doesn't exist
        """
        cursor = self._execute(
            "UPDATE Users SET PinHash = ? WHERE UserID = ?", (new_hash, user_id)
        )
        if cursor.rowcount == 0:
            raise UserNotFoundError(f"User {user_id} not found")
