'''
Application logger. Everything logs through `log` ('TT-backend').
'''
import logging
import sys

from .config import settings

LOGGER_NAME = 'TT-backend'

# third-party loggers that are chatty at INFO
QUIET_LOGGERS = ('passlib', 'aiosqlite', 'multipart')


def setup_logger(level: str | None = None) -> logging.Logger:
    """
    Builds the 'TT-backend' logger writing to stdout.
    The level defaults to LOG_LEVEL from the settings.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel((level or settings.LOG_LEVEL).upper())
    # uvicorn configures the root logger; don't print every line twice
    logger.propagate = False

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(
            '%(asctime)s - %(module)s:%(lineno)d - %(levelname)s\n - %(message)s'
        ))
        logger.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    # passlib logs a traceback at ERROR while probing the bcrypt version
    logging.getLogger('passlib.handlers.bcrypt').setLevel(logging.CRITICAL)

    return logger

log = setup_logger()
