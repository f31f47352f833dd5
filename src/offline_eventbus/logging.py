"""Logging configuration for offline_eventbus."""

import logging
import sys

from loguru import logger


class InterceptHandler(logging.Handler):
    """Intercept standard logging messages toward loguru."""

    def emit(self, record):
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Find caller from where the logged message originated
        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def setup_logging(log_level: str) -> int:
    """Configure loguru logging for the host application.

    The bus itself logs at DEBUG and TRACE only, so a level of DEBUG or
    lower is needed to see registration and replay activity.

    Args:
        log_level: Log level to use, usually ``get_settings().log_level``.

    Returns:
        The id of the added loguru sink
    """
    log_level = log_level.upper()

    logger.remove()
    sink_id = logger.add(sys.stderr, level=log_level, colorize=True)
    logger.debug(f"Log level set to: {log_level}")

    # Redirect all standard logging to loguru
    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)

    return sink_id
