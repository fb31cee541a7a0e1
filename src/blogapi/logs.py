# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import logging
import sys

ROOT_LOGGER = "blogapi"


def setup_logging(level: str = "INFO") -> logging.Logger:
    """Attach a stdout handler to the package logger (once)."""
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(str(level or "INFO").upper())

    if logger.handlers:
        return logger

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    logger.addHandler(handler)
    return logger
