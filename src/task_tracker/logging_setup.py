from __future__ import annotations

import logging
import sys

_FORMAT = "%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s"
_DATEFMT = "%Y-%m-%d %H:%M:%S"


# PUBLIC_INTERFACE
def setup_logging(level: str = "INFO") -> logging.Logger:
    """
    Attach a stderr handler to the 'task_tracker' logger.

    Safe to call more than once: the handler is installed only the first time,
    later calls just adjust the level. Records still propagate to the root
    logger so the ASGI server and pytest's caplog see them.
    """
    logger = logging.getLogger("task_tracker")
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    if not any(getattr(h, "_task_tracker", False) for h in logger.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(fmt=_FORMAT, datefmt=_DATEFMT))
        handler._task_tracker = True  # type: ignore[attr-defined]
        logger.addHandler(handler)

    return logger
