"""Tests for CredentialRepository."""

import sqlite3
import pytest

from atm_ledger.models.exceptions import UserAlreadyExistsError, UserNotFoundError
from atm_ledger.repositories.credential_repo import CredentialRepository
from atm_ledger.services.ledger_service import hash_pin


@pytest.fixture
def in_memory_db():
    """Create an in-memory SQLite database for testing."""
    conn = sqlite3.connect(":memory:")
    yield conn
    conn.close()


@pytest.fixture
def credential_repo(in_memory_db):
    """Create a CredentialRepository instance with a fresh database."""
    repo = CredentialRepository(in_memory_db)
    repo.create_table()
    return repo


def test_create_table(credential_repo):
    """Verify Users table is created."""
    cursor = credential_repo._conn.cursor()
    cursor.execute("PRAGMA table_info(Users)")
    columns = {row[1]: row[2] for row in cursor.fetchall()}
    assert columns == {"UserID": "TEXT", "PinHash": "TEXT"}


def test_create_and_find_user(credential_repo):
    """Create user, then find by id."""
    credential_repo.create("USER001", hash_pin("1234"))

    user = credential_repo.find_by_id("USER001")
    assert user is not None
    assert user.user_id == "USER001"
    assert user.pin_hash == hash_pin("1234")
    assert len(user.pin_hash) == 64


def test_create_duplicate_user(credential_repo):
    """Should raise UserAlreadyExistsError."""
    credential_repo.create("USER001", hash_pin("1234"))

    with pytest.raises(UserAlreadyExistsError):
        credential_repo.create("USER001", hash_pin("9999"))

    # Original credential is kept
    assert credential_repo.authenticate("USER001", hash_pin("1234")) is True


def test_exists(credential_repo):
    """Check user exists/doesn't exist."""
    assert credential_repo.exists("USER001") is False
    credential_repo.create("USER001", hash_pin("1234"))
    assert credential_repo.exists("USER001") is True
    assert credential_repo.exists("USER002") is False


def test_authenticate(credential_repo):
    """Authenticate compares the full digest exactly."""
    stored = hash_pin("1234")
    credential_repo.create("USER001", stored)

    assert credential_repo.authenticate("USER001", stored) is True
    assert credential_repo.authenticate("USER001", hash_pin("0000")) is False
    # Case-sensitive on the hex encoding
    assert credential_repo.authenticate("USER001", stored.upper()) is False
    # Truncated digests never match
    assert credential_repo.authenticate("USER001", stored[:32]) is False


def test_authenticate_unknown_user(credential_repo):
    """Unknown users simply fail authentication."""
    assert credential_repo.authenticate("NOBODY", hash_pin("1234")) is False


def test_update_pin(credential_repo):
    """Replace the stored hash."""
    credential_repo.create("USER001", hash_pin("1234"))

    credential_repo.update_pin("USER001", hash_pin("5678"))

    assert credential_repo.authenticate("USER001", hash_pin("5678")) is True
    assert credential_repo.authenticate("USER001", hash_pin("1234")) is False


def test_update_pin_unknown_user(credential_repo):
    """Should raise UserNotFoundError."""
    with pytest.raises(UserNotFoundError):
        credential_repo.update_pin("NOBODY", hash_pin("5678"))
