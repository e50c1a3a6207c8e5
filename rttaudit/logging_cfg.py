"""
Logging setup controlled by LOG_LEVEL and LOG_FILE.
Silent (0), Info (1), Debug (2). Ensures log directory exists.
"""

import logging
import os
from pathlib import Path

DEFAULT_LOG_FILE = "rttaudit.log"


def resolve_log_file() -> str:
    """Return LOG_FILE if it can be opened for append, else the default file in CWD."""
    path = os.getenv("LOG_FILE", DEFAULT_LOG_FILE)
    try:
        log_path = Path(path)
        # If LOG_FILE points to an existing directory, reject it and fall back
        if log_path.is_dir():
            raise ValueError("LOG_FILE points to a directory, not a file")
        log_path.parent.mkdir(parents=True, exist_ok=True)
        if not os.access(log_path.parent, os.W_OK):
            raise OSError("log directory is not writable")
        with open(log_path, "a", encoding="utf-8"):
            pass
    except (OSError, ValueError):
        return DEFAULT_LOG_FILE
    return path


def setup_logging() -> None:
    """Configure logging per environment; create parent dir if needed."""
    level_map = {
        "0": logging.CRITICAL + 1,  # Silent
        "1": logging.INFO,
        "2": logging.DEBUG,
    }
    lvl = level_map.get(os.getenv("LOG_LEVEL", "0"), logging.CRITICAL + 1)

    logging.basicConfig(
        filename=resolve_log_file(),
        level=lvl,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        force=True,
    )
