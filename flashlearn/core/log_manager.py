# core/log_manager.py

import logging
import sys
from flashlearn.config import LOG_LEVEL

LOGGER_NAME = 'flashlearn'
LOG_FORMAT = '%(asctime)s | %(levelname)-8s | %(module)s:%(lineno)d - %(message)s'

def _build_logger() -> logging.Logger:
    """
    Creates the application logger once.
    Handlers are only attached on first import so reloads don't duplicate output.
    """
    app_logger = logging.getLogger(LOGGER_NAME)

    if not app_logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        app_logger.addHandler(handler)

    app_logger.setLevel(LOG_LEVEL)
    app_logger.propagate = True
    return app_logger

logger = _build_logger()
