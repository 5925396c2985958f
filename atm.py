import logging

from dotenv import load_dotenv
from tabulate import tabulate

from atm_ledger.logging_config import setup_logging
from atm_ledger.repositories.storage import open_storage
from atm_ledger.services.ledger_service import LedgerService
from atm_ledger.services.provisioning import DEMO_ACCOUNTS, seed_demo_data
from config.settings import Settings

logger = logging.getLogger('atm_ledger.atm')


def build_ledger(settings: Settings) -> LedgerService:
    """Open storage, seed a fresh store and wire the ledger service."""
    storage = open_storage(settings)
    seed_demo_data(storage, settings.default_pin)
    return LedgerService(
        storage,
        mini_statement_size=settings.mini_statement_size,
        lock_timeout=settings.lock_timeout,
        max_amount=settings.max_amount,
    )


def balance_table(ledger: LedgerService, user_ids) -> str:
    rows = [
        [user_id, account_type.value, f'{balance:.2f}']
        for user_id in user_ids
        for account_type, balance in ledger.list_accounts(user_id).items()
    ]
    return tabulate(
        rows,
        headers=['User', 'Account', 'Balance'],
        colalign=('left', 'left', 'right'),
        disable_numparse=True,
    )


def main() -> None:
    load_dotenv()
    settings = Settings.load()
    setup_logging(settings.log_level, settings.log_file)
    ledger = build_ledger(settings)
    logger.info('Ledger ready (%s backend)', settings.storage_backend)
    print(balance_table(ledger, DEMO_ACCOUNTS))


if __name__ == '__main__':
    main()
