from __future__ import annotations

import logging
import sys

LOGGER_NAME = "memos"
LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def setup_logging(level: str = "INFO", *, debug: bool = False) -> logging.Logger:
    """Attach a single stream handler to the ``memos`` logger.

    Safe to call repeatedly; later calls only adjust the level.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG if debug else level.upper())

    if not any(getattr(h, "_memos_handler", False) for h in logger.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._memos_handler = True  # type: ignore[attr-defined]
        logger.addHandler(handler)
        logger.propagate = False

    logger.debug("Logging initialized at %s", logging.getLevelName(logger.level))
    return logger
