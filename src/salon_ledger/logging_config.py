# Salon Ledger - Bookkeeping dashboard for beauty salons
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""Logging set-up for the Salon Ledger package logger."""

import logging
from typing import Union

LOGGER_NAME = "salon_ledger"

_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def configure_logging(level: Union[int, str] = logging.WARNING) -> logging.Logger:
    """
    Attach a single stream handler to the ``salon_ledger`` logger.

    Calling it again only changes the level; handlers are never stacked.

    Raises
    ------
    ValueError
        If `level` is not a known logging level name.
    """
    if isinstance(level, str):
        resolved = logging.getLevelName(level.strip().upper())
        if not isinstance(resolved, int):
            raise ValueError(f"Unknown log level: {level!r}")
        level = resolved

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    # Remove our previous handler to avoid duplicates
    for handler in list(logger.handlers):
        if getattr(handler, "_salon_ledger", False):
            logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(fmt=_FORMAT, datefmt=_DATE_FORMAT))
    handler._salon_ledger = True  # type: ignore[attr-defined]
    logger.addHandler(handler)

    return logger


def get_logger(name: str) -> logging.Logger:
    """Logger under the package namespace, e.g. get_logger('cli')."""
    return logging.getLogger(f"{LOGGER_NAME}.{name}")
