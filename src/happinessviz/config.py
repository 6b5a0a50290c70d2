"""
Configuration & Path Management
===============================
This module serves as the central registry for file paths and global constants.

Why is this file needed?
------------------------
1. Abstraction: It prevents hardcoded paths (e.g., "C:/Users/...") scattered
   throughout the code.
2. Deployment: It handles the logic required by PyInstaller (sys._MEIPASS) to
   find assets (sample data) when the app is frozen into an .exe.

Exports:
    ASSETS_PATH (str): Absolute path to the assets directory.
    DATA_DIR (str): Directory holding one ``<year>.csv`` file per survey year.
    YEAR_MIN, YEAR_MAX (int): Inclusive bounds of the year selector.
    DEFAULT_YEAR (int): Year loaded on startup.
    REFERENCE_YEAR (int): Year whose file supplies country -> region metadata.
"""
import logging
import os
import sys
from pathlib import Path

logger = logging.getLogger(__name__)


def get_resource_path(relative_path: str) -> str:
    """
    Get absolute path to resource, works for dev and for PyInstaller.
    """
    if hasattr(sys, '_MEIPASS'):
        # PyInstaller temp folder
        base_path: str = getattr(sys, '_MEIPASS')
        return os.path.join(base_path, relative_path)

    # Development mode: resolve relative to this file
    # config.py is in src/happinessviz/
    current_file_path: Path = Path(__file__)
    project_root: Path = current_file_path.parent.parent.parent
    return os.path.join(str(project_root), relative_path)


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning(f"Ignoring non-integer value {raw!r} for {name}, using {default}.")
        return default


# Global Constants
ASSETS_PATH: str = get_resource_path("assets")
DATA_DIR: str = os.environ.get("HAPPINESSVIZ_DATA_DIR") or os.path.join(ASSETS_PATH, "data")
LOG_LEVEL: str = os.environ.get("HAPPINESSVIZ_LOG_LEVEL", "INFO").upper()

YEAR_MIN: int = 2015
YEAR_MAX: int = 2019
DEFAULT_YEAR: int = _env_int("HAPPINESSVIZ_YEAR", 2019)
REFERENCE_YEAR: int = 2015

if not os.path.exists(DATA_DIR):
    logger.warning(f"Data directory not found at {DATA_DIR}")
