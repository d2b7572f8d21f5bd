"""
Logging setup for the service process.
"""

from __future__ import annotations

import logging

from . import settings

LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"


def configure_logging(level: str | None = None) -> None:
    level_name = (level or settings.log_level()).upper()
    resolved = logging.getLevelName(level_name)
    if not isinstance(resolved, int):
        resolved = logging.INFO

    logging.basicConfig(level=resolved, format=LOG_FORMAT)
    logging.getLogger().setLevel(resolved)
