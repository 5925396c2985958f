"""User data model."""

from dataclasses import dataclass


@dataclass
class User:
    """Represents an ATM card holder and their stored credential."""

    user_id: str
    pin_hash: str
