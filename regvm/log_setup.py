"""
Logging setup for regvm front ends (CLI, interactive session).

Library modules only do ``logging.getLogger(__name__)``; this module is the
one place that attaches handlers.  Console output goes through rich's
RichHandler, file output (optional) uses a plain pipe-separated format.
"""

from __future__ import annotations
import logging
from pathlib import Path
from typing import Optional, Union

from rich.console import Console
from rich.logging import RichHandler

ROOT_LOGGER = "regvm"

FILE_FORMAT = "%(asctime)s | %(levelname)-7s | %(name)s | %(funcName)s:%(lineno)d | %(message)s"
FILE_DATEFMT = "%Y-%m-%d %H:%M:%S"


def setup_logging(
    console_level: int = logging.WARNING,
    log_file: Optional[Union[str, Path]] = None,
    console: Optional[Console] = None,
) -> logging.Logger:
    """Configure and return the package logger.

    Console handler: RichHandler on stderr at `console_level`.
    File handler (if `log_file`): everything at DEBUG and above.

    Calling again replaces the handlers from the previous call.
    """
    logger = logging.getLogger(ROOT_LOGGER)
    for h in list(logger.handlers):
        logger.removeHandler(h)
        h.close()
    logger.setLevel(logging.DEBUG)
    logger.propagate = False

    ch = RichHandler(
        level=console_level,
        console=console or Console(stderr=True),
        show_time=False,
        show_path=False,
        markup=False,
        rich_tracebacks=True,
    )
    logger.addHandler(ch)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(str(log_path), encoding="utf-8")
        fh.setLevel(logging.DEBUG)
        fh.setFormatter(logging.Formatter(FILE_FORMAT, datefmt=FILE_DATEFMT))
        logger.addHandler(fh)
        logger.debug("Log file: %s", log_path)

    return logger
