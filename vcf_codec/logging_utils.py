"""Logging setup for the vcf_codec package.

Modules log through ``logging.getLogger(__name__)`` below the ``vcf_codec``
logger. Nothing is configured on import; applications call
:func:`configure_logging` once (calling it again replaces the handlers it
installed, so output is never duplicated).
"""

import logging
import os
from typing import Optional, Union

LOG_FORMAT = "%(asctime)s : %(levelname)s : %(name)s : %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

logger = logging.getLogger("vcf_codec")


def _normalize_level(level: Union[int, str]) -> int:
    """Return a numeric logging level for ``level``."""
    if isinstance(level, str):
        numeric = logging.getLevelName(level.upper())
        if not isinstance(numeric, int):
            raise ValueError(f"Unknown log level: {level}")
        return numeric
    return int(level)


def configure_logging(
    log_level: Union[int, str] = logging.INFO,
    enable_console: bool = True,
    log_file: Optional[Union[str, "os.PathLike[str]"]] = None,
) -> logging.Logger:
    """
    Attach console and/or file handlers to the ``vcf_codec`` logger.

    Args:
        log_level: Level name (``"debug"``) or number
        enable_console: Log to stderr
        log_file: Also log to this file when given

    Returns:
        The configured package logger
    """
    level = _normalize_level(log_level)
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)
    logger.setLevel(level)

    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)
    if enable_console:
        console = logging.StreamHandler()
        console.setFormatter(formatter)
        logger.addHandler(console)
    if log_file:
        file_handler = logging.FileHandler(os.fspath(log_file))
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)
    return logger
