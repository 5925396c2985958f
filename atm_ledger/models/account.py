"""Account data model."""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from enum import Enum

from atm_ledger.models.exceptions import InvalidAccountTypeError, InvalidAmountError

CENT = Decimal("0.01")
ZERO = Decimal("0.00")

# Largest balance either backend stores; its cents fit a signed 64-bit SQLite INTEGER.
MAX_BALANCE = Decimal("1000000000000000.00")
# Default cap on a single deposit, withdrawal or transfer.
MAX_AMOUNT = Decimal("1000000000000.00")


class AccountType(str, Enum):
    """Kinds of sub-account a user can hold."""

    SAVINGS = "SAVINGS"
    CHECKING = "CHECKING"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def parse(cls, value) -> "AccountType":
        """
        Convert a name such as 'savings' into an AccountType.

        Args:
            value: An AccountType or its (case-insensitive) name

        Returns:
            The matching AccountType

        Raises:
            InvalidAccountTypeError: If the name is not a known account type
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            raise InvalidAccountTypeError(f"Unknown account type: {value!r}")


def to_amount(value) -> Decimal:
    """
    Normalise a monetary value to a two-place Decimal.

    Floats go through str() so 0.1 stays 0.10 rather than its binary expansion.

    Raises:
        InvalidAmountError: If the value is not a finite number
    """
    if isinstance(value, float):
        value = str(value)
    try:
        amount = Decimal(value)
        if not amount.is_finite():
            raise InvalidAmountError(f"Not a valid amount: {value!r}")
        # quantize signals InvalidOperation once the digits exceed the context precision
        return amount.quantize(CENT, rounding=ROUND_HALF_UP)
    except (InvalidOperation, TypeError, ValueError):
        raise InvalidAmountError(f"Not a valid amount: {value!r}")


def to_balance(value) -> Decimal:
    """
    Normalise a value that is about to be stored as an account balance.

    Raises:
        InvalidAmountError: If the value is not a number or exceeds MAX_BALANCE
    """
    balance = to_amount(value)
    if abs(balance) > MAX_BALANCE:
        raise InvalidAmountError(f"Balance {balance} exceeds the maximum of {MAX_BALANCE}")
    return balance


def to_minor_units(amount: Decimal) -> int:
    """Convert a two-place Decimal into integer cents for storage."""
    return int((to_balance(amount) * 100).to_integral_value())


def from_minor_units(cents: int) -> Decimal:
    """Convert stored integer cents back into a two-place Decimal."""
    return (Decimal(cents) / 100).quantize(CENT)


@dataclass
class Account:
    """Represents one of a user's sub-accounts."""

    user_id: str
    account_type: AccountType
    balance: Decimal

    @property
    def key(self) -> tuple[str, str]:
        """The (user_id, account_type) pair identifying this account."""
        return self.user_id, self.account_type.value
