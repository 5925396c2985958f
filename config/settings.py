"""Configuration management for the ATM ledger."""
import os
from dataclasses import dataclass

STORAGE_BACKENDS = ('sqlite', 'memory')


@dataclass
class Settings:
    """Configuration settings for the ATM ledger.

    This class centralizes all configuration values, replacing hardcoded
    values throughout the codebase.
    """

    # Storage Configuration
    storage_backend: str = 'sqlite'
    db_path: str = 'atm.db'

    # Provisioning
    default_pin: str = '1234'

    # Business Rules
    mini_statement_size: int = 5
    lock_timeout: float = 5.0  # seconds
    max_amount: int = 1_000_000_000_000  # 1T per deposit, withdrawal or transfer

    # Logging Configuration
    log_level: str = 'INFO'
    log_file: str = 'atm.log'  # empty string logs to the console

    @classmethod
    def load(cls) -> 'Settings':
        """Load settings from environment variables.

        Unset variables fall back to the defaults above.

        Returns:
            Settings: A Settings instance with values from environment variables.

        Raises:
            ValueError: If an environment variable holds an invalid value.
        """
        defaults = cls()

        storage_backend = os.getenv('ATM_STORAGE_BACKEND', defaults.storage_backend).lower()
        if storage_backend not in STORAGE_BACKENDS:
            raise ValueError(
                f"ATM_STORAGE_BACKEND must be one of {', '.join(STORAGE_BACKENDS)}"
            )

        default_pin = os.getenv('ATM_DEFAULT_PIN', defaults.default_pin)
        if len(default_pin) != 4 or not default_pin.isdigit():
            raise ValueError("ATM_DEFAULT_PIN must be exactly 4 digits")

        try:
            mini_statement_size = int(
                os.getenv('ATM_MINI_STATEMENT_SIZE', defaults.mini_statement_size)
            )
        except ValueError:
            raise ValueError("ATM_MINI_STATEMENT_SIZE must be an integer")
        if mini_statement_size < 0:
            raise ValueError("ATM_MINI_STATEMENT_SIZE must not be negative")

        try:
            lock_timeout = float(os.getenv('ATM_LOCK_TIMEOUT', defaults.lock_timeout))
        except ValueError:
            raise ValueError("ATM_LOCK_TIMEOUT must be a number")
        if lock_timeout <= 0:
            raise ValueError("ATM_LOCK_TIMEOUT must be positive")

        try:
            max_amount = int(os.getenv('ATM_MAX_AMOUNT', defaults.max_amount))
        except ValueError:
            raise ValueError("ATM_MAX_AMOUNT must be an integer")
        if max_amount <= 0:
            raise ValueError("ATM_MAX_AMOUNT must be positive")

        return cls(
            storage_backend=storage_backend,
            db_path=os.getenv('ATM_DB_PATH', defaults.db_path),
            default_pin=default_pin,
            mini_statement_size=mini_statement_size,
            lock_timeout=lock_timeout,
            max_amount=max_amount,
            log_level=os.getenv('ATM_LOG_LEVEL', defaults.log_level).upper(),
            log_file=os.getenv('ATM_LOG_FILE', defaults.log_file),
        )
