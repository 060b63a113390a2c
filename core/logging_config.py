# core/logging_config.py
import logging
import os

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOGGER_NAME = "admg"


def setup_logger(level: str = None) -> logging.Logger:
    """
    Configure the root application logger once.

    Level comes from LOG_LEVEL (default INFO). Child loggers created with
    get_logger() propagate here, so handlers are attached only to the parent.
    """
    logger = logging.getLogger(LOGGER_NAME)

    # Reloads and test sessions import this module more than once
    if logger.handlers:
        return logger

    level_name = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    logger.setLevel(getattr(logging, level_name, logging.INFO))

    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(stream_handler)

    return logger


def get_logger(component: str) -> logging.Logger:
    """Child logger, e.g. get_logger("auth") -> 'admg.auth'."""
    return logging.getLogger(f"{LOGGER_NAME}.{component}")


logger = setup_logger()
