"""Attach a stderr handler to the package logger exactly once."""

from __future__ import annotations

import logging
import sys

PACKAGE_LOGGER = "campaign_map"
DEFAULT_FORMAT = "%(levelname)s %(name)s: %(message)s"


def ensure_console_logger(
    name: str = PACKAGE_LOGGER,
    *,
    level: int = logging.INFO,
    fmt: str = DEFAULT_FORMAT,
) -> logging.Logger:
    """Return logger *name* with a console handler installed.

    Repeated calls only adjust the level, so entry points may call this on
    every invocation without duplicating output.
    """

    logger = logging.getLogger(name)
    handler_name = f"{name}.console"
    existing = next((handler for handler in logger.handlers if handler.name == handler_name), None)
    if existing is None:
        existing = logging.StreamHandler(sys.stderr)
        existing.name = handler_name
        existing.setFormatter(logging.Formatter(fmt))
        logger.addHandler(existing)
    existing.setLevel(level)
    logger.setLevel(level)
    return logger


__all__ = ["ensure_console_logger"]
