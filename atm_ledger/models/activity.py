"""Activity log records: financial transactions and PIN security events."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum

from atm_ledger.models.exceptions import InvalidInputError

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


class DepositSource(str, Enum):
    """Optional deposit channel, prefixed to the log description."""

    CASH = "Cash"
    CHECK = "Check"

    @classmethod
    def parse(cls, value) -> "DepositSource":
        """
        Convert a name such as 'cash' into a DepositSource.

        Raises:
            InvalidInputError: If the name is not a known deposit channel
        """
        if isinstance(value, cls):
            return value
        name = str(value).strip().upper()
        if name not in cls.__members__:
            raise InvalidInputError(f"Unknown deposit source: {value!r}")
        return cls[name]


@dataclass(frozen=True)
class TransactionRecord:
    """An immutable entry in a user's transaction log."""

    seq: int
    user_id: str
    description: str
    amount: Decimal
    timestamp: datetime

    def render(self) -> str:
        """
        Format the record as a single statement line.

        Returns:
            A line such as '2024-01-31 09:15:00 - Withdrawal from SAVINGS: 200.00'
        """
        return f"{self.timestamp.strftime(TIMESTAMP_FORMAT)} - {self.description}: {self.amount:.2f}"

    def __str__(self) -> str:
        return self.render()


@dataclass(frozen=True)
class PinActivityRecord:
    """An immutable entry in a user's PIN activity log."""

    seq: int
    user_id: str
    description: str
    timestamp: datetime

    def render(self) -> str:
        return f"{self.timestamp.strftime(TIMESTAMP_FORMAT)} - {self.description}"

    def __str__(self) -> str:
        return self.render()
