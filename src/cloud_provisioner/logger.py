import logging
import sys
import traceback

from colorlog import ColoredFormatter

from cloud_provisioner import constants as CONSTANTS


def setup_logger(debug_mode: bool = False) -> logging.Logger:
    """
    Configure the package logger with a colored console handler.

    Every module logs through ``logging.getLogger(__name__)``, which
    propagates to this logger. Calling this again only adjusts the level.
    """
    logger = logging.getLogger(CONSTANTS.LOGGER_NAME)
    level = logging.DEBUG if debug_mode else logging.INFO
    logger.setLevel(level)

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        formatter = ColoredFormatter(
            "%(log_color)s[%(levelname)s] %(message)s",
            log_colors={
                "DEBUG":    "cyan",
                "INFO":     "green",
                "WARNING":  "yellow",
                "ERROR":    "red",
                "CRITICAL": "red,bg_white",
            }
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    for handler in logger.handlers:
        handler.setLevel(level)

    return logger


def get_debug_mode() -> bool:
    return logging.getLogger(CONSTANTS.LOGGER_NAME).isEnabledFor(logging.DEBUG)


def print_stack_trace() -> None:
    """Log the current stack trace, but only when debug mode is enabled."""
    if get_debug_mode():
        logging.getLogger(CONSTANTS.LOGGER_NAME).error(traceback.format_exc())


logger = setup_logger()
