import logging
import sys

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"


def configure_logging(level: int = logging.INFO) -> logging.Logger:
    """Attach one stdout handler to the package logger (front ends only)."""
    logger = logging.getLogger("gradients")
    logger.setLevel(level)
    logger.handlers.clear()

    sh = logging.StreamHandler(sys.stdout)
    sh.setLevel(level)
    sh.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(sh)
    return logger
