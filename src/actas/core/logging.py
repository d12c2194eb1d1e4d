"""Logging configuration."""

import logging
import sys
from typing import Optional

from actas.core.config import get_settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: Optional[str] = None) -> None:
    """Configure root logging for the CLI and the API server.

    Args:
        level: Log level name. Defaults to ``Settings.log_level``.
    """
    level_name = (level or get_settings().log_level).upper()

    root = logging.getLogger()
    root.setLevel(level_name)

    if not any(getattr(h, "_actas_handler", False) for h in root.handlers):
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._actas_handler = True  # type: ignore[attr-defined]
        root.addHandler(handler)

    # Quiet down noisy libraries
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Get a module logger."""
    return logging.getLogger(name)
