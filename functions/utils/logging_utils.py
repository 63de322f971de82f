import logging
import os

DEFAULT_LOG_LEVEL = "INFO"


def get_logger(name):
    """
    Creates and returns a logger with the specified name.

    Every trigger module logs through this helper so that the level and the
    format are the same across all functions. The level is read from the
    LOG_LEVEL environment variable and falls back to INFO.

    Args:
        name: The name for the logger, typically __name__ from the calling module

    Returns:
        A configured logger instance
    """
    logger = logging.getLogger(name)

    # Only configure handlers if they haven't been added yet
    if not logger.handlers:
        level_name = os.environ.get("LOG_LEVEL", DEFAULT_LOG_LEVEL).upper()
        logger.setLevel(getattr(logging, level_name, logging.INFO))

        handler = logging.StreamHandler()
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    return logger
