"""Logging setup for the filegate process."""

import logging
import sys

from filegate.config.schema import LoggingConfig

_HANDLER_NAME = "filegate-stderr"


def configure_logging(config: LoggingConfig | None = None) -> logging.Logger:
    """Attach a stderr handler to the ``filegate`` logger.

    stdout carries the stdio transport, so log output must never go there.
    Calling this more than once replaces the handler rather than adding another.

    Args:
        config: Logging configuration (defaults when omitted)

    Returns:
        The configured ``filegate`` logger
    """
    config = config or LoggingConfig()
    logger = logging.getLogger("filegate")

    for handler in list(logger.handlers):
        if handler.get_name() == _HANDLER_NAME:
            logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(logging.Formatter(config.format))
    logger.addHandler(handler)
    logger.setLevel(config.level)
    return logger
