"""Logging configuration for the P&L Lab backend."""

from __future__ import annotations

import logging
import sys


def configure_logging(level: int = logging.INFO) -> None:
    """Configure standard logging to stdout with a consistent format."""

    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )


__all__ = ["configure_logging"]
