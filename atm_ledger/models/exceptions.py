"""Custom exceptions for the ATM ledger."""


class LedgerError(Exception):
    """Base exception for all ledger-related errors."""
    pass


class AuthenticationFailedError(LedgerError):
    """Raised when a PIN does not match the stored credential."""
    pass


class InsufficientFundsError(LedgerError):
    """Raised when an account balance is below the requested amount."""

    def __init__(self, user_id, account_type, balance, requested):
        self.user_id = user_id
        self.account_type = account_type
        self.balance = balance
        self.requested = requested
        super().__init__(
            f"Insufficient funds in {user_id}'s {account_type}: "
            f"{balance} available, {requested} requested"
        )


class InvalidInputError(LedgerError):
    """Raised when a caller supplies a malformed value."""
    pass


class InvalidAmountError(InvalidInputError):
    """Raised when an invalid amount is provided (e.g., zero or negative)."""
    pass


class InvalidPinFormatError(InvalidInputError):
    """Raised when a PIN is not exactly four decimal digits."""
    pass


class InvalidTransferError(InvalidInputError):
    """Raised when a transfer is invalid (e.g., source == destination)."""
    pass


class RecipientNotFoundError(InvalidInputError):
    """Raised when the destination user of a transfer does not exist."""
    pass


class InvalidAccountTypeError(InvalidInputError):
    """Raised when an account type name is not recognised."""
    pass


class InvalidCodeError(InvalidInputError):
    """Raised when a cardless transaction code is not six digits."""
    pass


class NotFoundError(LedgerError):
    """Raised when an operation addresses something never provisioned."""
    pass


class UserNotFoundError(NotFoundError):
    """Raised when a user cannot be found."""
    pass


class AccountNotFoundError(NotFoundError):
    """Raised when a (user, account type) pair cannot be found."""
    pass


class UserAlreadyExistsError(LedgerError):
    """Raised when attempting to provision a user that already exists."""
    pass


class AccountAlreadyExistsError(LedgerError):
    """Raised when attempting to provision an account that already exists."""
    pass


class StorageUnavailableError(LedgerError):
    """Raised when the storage backend fails to read or write."""
    pass


class LedgerBusyError(LedgerError):
    """Raised when a resource lock could not be acquired in time."""
    pass
