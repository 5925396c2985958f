"""Bootstrap data for a fresh ledger."""

import logging
from decimal import Decimal

from atm_ledger.models.account import AccountType
from atm_ledger.repositories.base import LedgerStorage
from atm_ledger.services.ledger_service import hash_pin

logger = logging.getLogger(__name__)

DEFAULT_PIN = "1234"

DEMO_ACCOUNTS = {
    "USER001": {
        AccountType.SAVINGS: Decimal("1000.00"),
        AccountType.CHECKING: Decimal("500.00"),
    },
    "USER002": {
        AccountType.SAVINGS: Decimal("2000.00"),
        AccountType.CHECKING: Decimal("1000.00"),
    },
}


def seed_demo_data(storage: LedgerStorage, default_pin: str = DEFAULT_PIN) -> list[str]:
    """
    Provision the demo users and their accounts.

    Users that already exist are left untouched, so seeding an already
    seeded store is a no-op.

    Args:
        storage: The storage to provision
        default_pin: PIN given to every demo user

    Returns:
        The ids of the users created by this call
    """
    created = []
    with storage.atomic():
        for user_id, balances in DEMO_ACCOUNTS.items():
            if storage.credentials.exists(user_id):
                logger.debug("Demo user %s already provisioned", user_id)
                continue
            storage.credentials.create(user_id, hash_pin(default_pin))
            for account_type, balance in balances.items():
                storage.accounts.create(user_id, account_type, balance)
            created.append(user_id)

    if created:
        logger.info("Provisioned demo users: %s", ", ".join(created))
    return created
