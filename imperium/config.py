"""
Configuration - Environment driven settings.

    IMPERIUM_ENV           development | production
    IMPERIUM_DATA_DIR      directory for saved games (default ~/.imperium/saves)
    IMPERIUM_STORAGE_KEY   name of the saved game document
    IMPERIUM_LOG_LEVEL     logging level name (default INFO)
    ALLOWED_ORIGINS        comma separated CORS origins for the API
"""

from __future__ import annotations
import logging
import os
from pathlib import Path

IMPERIUM_ENV = os.getenv("IMPERIUM_ENV", "development")
IMPERIUM_DATA_DIR = os.getenv("IMPERIUM_DATA_DIR", None)
IMPERIUM_STORAGE_KEY = os.getenv("IMPERIUM_STORAGE_KEY", "ti4-game-tracker-state")
IMPERIUM_LOG_LEVEL = os.getenv("IMPERIUM_LOG_LEVEL", "INFO")
ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "*").split(",")

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def default_data_dir() -> Path:
    if IMPERIUM_DATA_DIR:
        return Path(IMPERIUM_DATA_DIR)
    return Path.home() / ".imperium" / "saves"


def configure_logging(level: str | None = None):
    """Set up root logging once for the process."""
    logging.basicConfig(
        level=getattr(logging, (level or IMPERIUM_LOG_LEVEL).upper(), logging.INFO),
        format=LOG_FORMAT,
    )
