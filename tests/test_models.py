"""Tests for data models and exceptions."""

from datetime import datetime
from decimal import Decimal

import pytest

from atm_ledger.models.account import (
    CENT,
    MAX_BALANCE,
    Account,
    AccountType,
    from_minor_units,
    to_amount,
    to_balance,
    to_minor_units,
)
from atm_ledger.models.activity import DepositSource, PinActivityRecord, TransactionRecord
from atm_ledger.models.exceptions import (
    LedgerError,
    AuthenticationFailedError,
    InsufficientFundsError,
    InvalidInputError,
    InvalidAmountError,
    InvalidPinFormatError,
    InvalidTransferError,
    RecipientNotFoundError,
    InvalidAccountTypeError,
    InvalidCodeError,
    NotFoundError,
    UserNotFoundError,
    AccountNotFoundError,
    UserAlreadyExistsError,
    AccountAlreadyExistsError,
    StorageUnavailableError,
    LedgerBusyError,
)


def test_account_creation():
    """Test creating an Account and verifying its fields and key."""
    account = Account(
        user_id="USER001",
        account_type=AccountType.SAVINGS,
        balance=Decimal("1000.00"),
    )

    assert account.user_id == "USER001"
    assert account.account_type is AccountType.SAVINGS
    assert account.balance == Decimal("1000.00")
    assert account.key == ("USER001", "SAVINGS")


def test_account_type_parse():
    """Account type names are matched case-insensitively."""
    assert AccountType.parse("savings") is AccountType.SAVINGS
    assert AccountType.parse(" Checking ") is AccountType.CHECKING
    assert AccountType.parse(AccountType.CHECKING) is AccountType.CHECKING
    assert str(AccountType.SAVINGS) == "SAVINGS"
    assert f"{AccountType.CHECKING}" == "CHECKING"

    with pytest.raises(InvalidAccountTypeError):
        AccountType.parse("BROKERAGE")


def test_to_amount():
    """Amounts are normalised to two decimal places."""
    assert to_amount(200) == Decimal("200.00")
    assert to_amount("12.345") == Decimal("12.35")
    assert to_amount(0.1) == Decimal("0.10")
    assert to_amount(Decimal("5")) == Decimal("5.00")
    assert str(to_amount(7)) == "7.00"

    for bad in ("abc", None, "NaN", "Infinity", Decimal("1e30"), "9" * 40):
        with pytest.raises(InvalidAmountError):
            to_amount(bad)


def test_minor_units_conversion():
    """Balances are stored as integer cents."""
    assert to_minor_units(Decimal("1000.00")) == 100000
    assert to_minor_units(Decimal("0.07")) == 7
    assert from_minor_units(100000) == Decimal("1000.00")
    assert from_minor_units(7) == Decimal("0.07")


def test_balance_range():
    """Stored balances are capped so their cents fit a 64-bit integer."""
    assert to_balance(MAX_BALANCE) == MAX_BALANCE
    assert to_minor_units(MAX_BALANCE) == 100_000_000_000_000_000
    assert to_minor_units(MAX_BALANCE) < 2 ** 63

    for too_big in (MAX_BALANCE + CENT, -MAX_BALANCE - CENT, Decimal("1e20")):
        with pytest.raises(InvalidAmountError):
            to_balance(too_big)
        with pytest.raises(InvalidAmountError):
            to_minor_units(too_big)


def test_deposit_source_parse():
    """Deposit channels parse case-insensitively."""
    assert DepositSource.parse("cash") is DepositSource.CASH
    assert DepositSource.parse("CHECK") is DepositSource.CHECK
    assert DepositSource.parse(DepositSource.CASH) is DepositSource.CASH

    with pytest.raises(InvalidInputError):
        DepositSource.parse("wire")


def test_transaction_record_render():
    """Transaction lines read '<timestamp> - <description>: <amount>'."""
    record = TransactionRecord(
        seq=1,
        user_id="USER001",
        description="Withdrawal from SAVINGS",
        amount=Decimal("200.00"),
        timestamp=datetime(2024, 1, 31, 9, 15, 0),
    )

    assert record.render() == "2024-01-31 09:15:00 - Withdrawal from SAVINGS: 200.00"
    assert str(record) == record.render()


def test_pin_activity_record_render():
    """PIN activity lines read '<timestamp> - <description>'."""
    record = PinActivityRecord(
        seq=3,
        user_id="USER001",
        description="Successful PIN change",
        timestamp=datetime(2024, 1, 31, 9, 15, 0),
    )

    assert str(record) == "2024-01-31 09:15:00 - Successful PIN change"


def test_records_are_immutable():
    """Log records cannot be modified once created."""
    record = PinActivityRecord(
        seq=1, user_id="USER001", description="x", timestamp=datetime.now()
    )
    with pytest.raises(AttributeError):
        record.description = "changed"


def test_exceptions_hierarchy():
    """Test that all custom exceptions inherit from LedgerError."""
    for error_type in (InvalidAmountError, InvalidPinFormatError, InvalidTransferError,
                       RecipientNotFoundError, InvalidAccountTypeError, InvalidCodeError):
        assert issubclass(error_type, InvalidInputError)

    assert issubclass(UserNotFoundError, NotFoundError)
    assert issubclass(AccountNotFoundError, NotFoundError)

    errors = [
        AuthenticationFailedError(),
        InsufficientFundsError("USER001", AccountType.SAVINGS, Decimal("800.00"), Decimal("5000.00")),
        InvalidInputError(),
        NotFoundError(),
        UserAlreadyExistsError(),
        AccountAlreadyExistsError(),
        StorageUnavailableError(),
        LedgerBusyError(),
    ]

    for error in errors:
        assert isinstance(error, LedgerError)


def test_insufficient_funds_error_details():
    """InsufficientFundsError carries the balance and the requested amount."""
    error = InsufficientFundsError("USER001", AccountType.SAVINGS, Decimal("800.00"), Decimal("5000.00"))

    assert error.balance == Decimal("800.00")
    assert error.requested == Decimal("5000.00")
    assert "800.00 available, 5000.00 requested" in str(error)
    assert "USER001's SAVINGS" in str(error)
