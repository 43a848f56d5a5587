import logging
from typing import Optional
from config import config

LOGGER_NAME = "fitness_coach"
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

# Verbosity per --mode value
MODE_LEVELS = {
    "debug": logging.INFO,
    "debug_no_save": logging.INFO,
    "non_debug": logging.WARNING,
}

def setup_logging(debug_mode: Optional[str] = None) -> logging.Logger:
    """
    Configure the console handler and the application logger level.
    Safe to call again after the CLI changed the mode.
    """
    level = MODE_LEVELS.get(debug_mode or config.debug_mode, logging.INFO)
    logging.basicConfig(level=level, format=LOG_FORMAT)

    app_logger = logging.getLogger(LOGGER_NAME)
    app_logger.setLevel(level)
    return app_logger

def get_logger(name: str) -> logging.Logger:
    """Child logger under the application logger, e.g. fitness_coach.session"""
    return logging.getLogger(f"{LOGGER_NAME}.{name}")

logger = setup_logging()
