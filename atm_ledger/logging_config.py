"""Application logging setup."""

import logging

LOG_FORMAT = '%(asctime)s:%(levelname)s:%(name)s: %(message)s'


def setup_logging(level: str = 'INFO', log_file: str = '') -> logging.Logger:
    """
    Configure the atm_ledger logger.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: File to write to; empty logs to the console

    Returns:
        The configured 'atm_ledger' logger
    """
    logger = logging.getLogger('atm_ledger')
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
        handler.close()

    if log_file:
        handler = logging.FileHandler(filename=log_file, encoding='utf-8', mode='a')
    else:
        handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    return logger
