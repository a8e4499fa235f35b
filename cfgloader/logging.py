#  -*- coding: utf-8 -*-
"""
Logging utilities for the generator.

The library only creates loggers under the ``cfgloader`` hierarchy; nothing is
configured at import. Applications and tools call ``configure_logging`` once.
"""

from __future__ import annotations

import logging

from pathlib import Path

from rich.logging import RichHandler


_LOGGER_NAME = "cfgloader"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a module-scoped logger under the cfgloader hierarchy."""
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


def configure_logging(*, verbose: bool = False, log_file: Path | None = None) -> logging.Logger:
    """
    Configure the cfgloader logger with a rich console sink and an optional
    file sink.

    Parameters
    ----------
    verbose : bool, default False
        Log debug messages (one per classified class) as well.
    log_file : Path, optional
        Also append plain-text records to this file.

    Returns
    -------
    logging.Logger
        The configured ``cfgloader`` logger.
    """
    level = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    # Reset handlers so repeated calls do not duplicate output
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console_handler = RichHandler(show_path=False, markup=False)
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(console_handler)

    if log_file is not None:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
        logger.addHandler(file_handler)

    return logger


__all__ = ["configure_logging", "get_logger"]
