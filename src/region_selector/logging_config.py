"""Console and file logging for the `region_selector` package."""

from __future__ import annotations

import logging
import sys

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")

_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
# Searches run on worker threads; at DEBUG show which thread logged.
_DEBUG_FORMAT = "%(asctime)s.%(msecs)03d [%(threadName)s] %(name)s - %(levelname)s - %(message)s"


def _formatter(level: int) -> logging.Formatter:
    if level <= logging.DEBUG:
        return logging.Formatter(_DEBUG_FORMAT, datefmt="%H:%M:%S")
    return logging.Formatter(_FORMAT, datefmt="%H:%M:%S")


def setup_logging(level: int | str = "WARNING", log_file: str | None = None) -> logging.Logger:
    """Route `region_selector` logs to stdout and, optionally, `log_file`.

    `level` is a name from `LOG_LEVELS` (as given to `--log-level`) or a
    `logging` constant. Calling again replaces the handlers installed before.
    """

    if isinstance(level, str):
        name = level.upper()
        if name not in LOG_LEVELS:
            raise ValueError(f"Unknown log level {level!r}; expected one of {LOG_LEVELS}")
        level = getattr(logging, name)

    logger = logging.getLogger("region_selector")
    logger.setLevel(level)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = _formatter(level)
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, mode="w", encoding="utf-8"))
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.debug("Logging at %s", logging.getLevelName(level))
    return logger
