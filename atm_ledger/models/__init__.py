"""Data models for the ATM ledger."""

from .account import MAX_AMOUNT, MAX_BALANCE, Account, AccountType, to_amount, to_balance
from .activity import DepositSource, PinActivityRecord, TransactionRecord
from .user import User
from .exceptions import (
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

__all__ = [
    "Account",
    "AccountType",
    "MAX_AMOUNT",
    "MAX_BALANCE",
    "to_amount",
    "to_balance",
    "DepositSource",
    "PinActivityRecord",
    "TransactionRecord",
    "User",
    "LedgerError",
    "AuthenticationFailedError",
    "InsufficientFundsError",
    "InvalidInputError",
    "InvalidAmountError",
    "InvalidPinFormatError",
    "InvalidTransferError",
    "RecipientNotFoundError",
    "InvalidAccountTypeError",
    "InvalidCodeError",
    "NotFoundError",
    "UserNotFoundError",
    "AccountNotFoundError",
    "UserAlreadyExistsError",
    "AccountAlreadyExistsError",
    "StorageUnavailableError",
    "LedgerBusyError",
]
