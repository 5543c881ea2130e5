"""Basic logging configuration."""

import logging
from logging.handlers import RotatingFileHandler

import config

FORMAT = '%(asctime)s %(levelname)s %(name)s: %(message)s'

_handlers = []


def configure_logging(log_path: str = None, level: str = None) -> logging.Logger:
    """Attach a rotating file handler and a stderr handler to the root logger.

    Calling it again replaces the handlers from the previous call.
    """
    log_level = getattr(logging, (level or config.LOG_LEVEL).upper(), logging.INFO)
    formatter = logging.Formatter(FORMAT)

    handler = RotatingFileHandler(log_path or config.LOG_PATH, maxBytes=5*1024*1024, backupCount=3)
    handler.setFormatter(formatter)
    handler.setLevel(log_level)

    console = logging.StreamHandler()
    console.setFormatter(formatter)
    console.setLevel(max(log_level, logging.WARNING))

    logger = logging.getLogger()
    while _handlers:
        old = _handlers.pop()
        logger.removeHandler(old)
        old.close()
    logger.setLevel(log_level)
    logger.addHandler(handler)
    logger.addHandler(console)
    _handlers.extend((handler, console))
    return logger
