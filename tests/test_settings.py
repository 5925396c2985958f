"""Tests for configuration management."""
import pytest
from config.settings import Settings

ENV_VARS = (
    'ATM_STORAGE_BACKEND',
    'ATM_DB_PATH',
    'ATM_DEFAULT_PIN',
    'ATM_LOCK_TIMEOUT',
    'ATM_MINI_STATEMENT_SIZE',
    'ATM_MAX_AMOUNT',
    'ATM_LOG_LEVEL',
    'ATM_LOG_FILE',
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Start every test without ATM_* variables."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_settings_defaults():
    """Test that all default values are correctly set."""
    settings = Settings()

    # Storage defaults
    assert settings.storage_backend == 'sqlite'
    assert settings.db_path == 'atm.db'

    # Provisioning defaults
    assert settings.default_pin == '1234'

    # Business rules defaults
    assert settings.mini_statement_size == 5
    assert settings.lock_timeout == 5.0
    assert settings.max_amount == 1_000_000_000_000

    # Logging defaults
    assert settings.log_level == 'INFO'
    assert settings.log_file == 'atm.log'


def test_settings_load_without_env():
    """Loading with nothing set gives the defaults."""
    assert Settings.load() == Settings()


def test_settings_load(monkeypatch):
    """Test loading Settings from environment variables."""
    monkeypatch.setenv('ATM_STORAGE_BACKEND', 'Memory')
    monkeypatch.setenv('ATM_DB_PATH', '/tmp/ledger.db')
    monkeypatch.setenv('ATM_DEFAULT_PIN', '4321')
    monkeypatch.setenv('ATM_LOCK_TIMEOUT', '0.5')
    monkeypatch.setenv('ATM_MINI_STATEMENT_SIZE', '10')
    monkeypatch.setenv('ATM_MAX_AMOUNT', '5000')
    monkeypatch.setenv('ATM_LOG_LEVEL', 'debug')
    monkeypatch.setenv('ATM_LOG_FILE', '')

    settings = Settings.load()

    assert settings.storage_backend == 'memory'
    assert settings.db_path == '/tmp/ledger.db'
    assert settings.default_pin == '4321'
    assert settings.lock_timeout == 0.5
    assert settings.mini_statement_size == 10
    assert settings.max_amount == 5000
    assert settings.log_level == 'DEBUG'
    assert settings.log_file == ''


@pytest.mark.parametrize(
    'name, value, message',
    [
        ('ATM_STORAGE_BACKEND', 'postgres', 'ATM_STORAGE_BACKEND must be one of'),
        ('ATM_DEFAULT_PIN', '12345', 'ATM_DEFAULT_PIN must be exactly 4 digits'),
        ('ATM_DEFAULT_PIN', 'abcd', 'ATM_DEFAULT_PIN must be exactly 4 digits'),
        ('ATM_MINI_STATEMENT_SIZE', 'five', 'ATM_MINI_STATEMENT_SIZE must be an integer'),
        ('ATM_MINI_STATEMENT_SIZE', '-1', 'ATM_MINI_STATEMENT_SIZE must not be negative'),
        ('ATM_LOCK_TIMEOUT', 'soon', 'ATM_LOCK_TIMEOUT must be a number'),
        ('ATM_LOCK_TIMEOUT', '0', 'ATM_LOCK_TIMEOUT must be positive'),
        ('ATM_MAX_AMOUNT', 'lots', 'ATM_MAX_AMOUNT must be an integer'),
        ('ATM_MAX_AMOUNT', '0', 'ATM_MAX_AMOUNT must be positive'),
    ],
)
def test_settings_load_invalid(monkeypatch, name, value, message):
    """Test that loading fails on invalid values."""
    monkeypatch.setenv(name, value)

    with pytest.raises(ValueError, match=message):
        Settings.load()
