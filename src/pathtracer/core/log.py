"""Logging helpers for the ray tracer."""

import logging

PACKAGE_LOGGER = "src.pathtracer"

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def get_logger(name: str = "pathtracer", level: int | None = None) -> logging.Logger:
    """Get a logger with a single stream handler attached.

    Repeated calls for the same name reuse the existing handler, so modules
    can call this at import time without duplicating output.

    Args:
        name: Logger name, typically the module's __name__.
        level: Optional level to set on the logger. If None, the level is
            left unchanged (inherits from the parent logger by default).

    Returns:
        The configured logger.
    """
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
        logger.propagate = False
    if level is not None:
        logger.setLevel(level)
    return logger


def set_log_level(level: int) -> None:
    """Set the level of every logger under the pathtracer namespace.

    Loggers created afterwards inherit the level from the package logger.
    """
    logging.getLogger(PACKAGE_LOGGER).setLevel(level)
    for name, logger in logging.Logger.manager.loggerDict.items():
        if isinstance(logger, logging.Logger) and (
            name == "pathtracer" or name.startswith(PACKAGE_LOGGER + ".")
        ):
            logger.setLevel(level)
