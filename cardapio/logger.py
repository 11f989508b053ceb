# cardapio/logger.py

# Colored console logging shared by every module of the service.
# One handler per named logger; propagation is off so uvicorn's root handler
# does not print the same record twice.

import logging
import sys

import colorlog

from cardapio.config import settings

LOG_FORMAT = "%(log_color)s%(asctime)s [%(levelname)s] %(name)s: %(message)s"

LOG_COLORS = {
    "DEBUG": "cyan",
    "INFO": "green",
    "WARNING": "yellow",
    "ERROR": "red",
    "CRITICAL": "bold_red,bg_white",
}


def setup_logger(name: str) -> logging.Logger:
    """Return a colorized logger, adding the handler only on first use."""
    logger = logging.getLogger(name)
    logger.setLevel(settings.LOG_LEVEL.upper())

    if logger.handlers:
        return logger

    handler = colorlog.StreamHandler(sys.stdout)
    handler.setFormatter(colorlog.ColoredFormatter(
        LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
        log_colors=LOG_COLORS,
    ))
    logger.addHandler(handler)
    logger.propagate = False
    return logger


def quiet_external_loggers() -> None:
    for name in ("sqlalchemy.engine", "httpx", "httpcore", "urllib3"):
        logging.getLogger(name).setLevel(logging.WARNING)
