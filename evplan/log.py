# evplan/log.py
# Named stdlib loggers with a single stream handler each.

import logging
import os

_FORMAT = "%(asctime)s %(levelname)s: %(message)s"


def get_logger(name: str) -> logging.Logger:
    logger = logging.getLogger(name)
    if not logger.handlers:
        h = logging.StreamHandler()
        h.setFormatter(logging.Formatter(_FORMAT))
        logger.addHandler(h)
    logger.setLevel(os.getenv("LOG_LEVEL", "INFO").upper())
    return logger
