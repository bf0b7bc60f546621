"""Scan history — logs every completed code and what it triggered."""

import logging
import os
from datetime import datetime
from pathlib import Path

from scanboard import config

logger = logging.getLogger(__name__)

_HISTORY_DIR = Path(os.environ.get(
    "SCANBOARD_HISTORY_DIR",
    Path.home() / ".local" / "share" / "scanboard",
))
_HISTORY_FILE = _HISTORY_DIR / "history.log"


def log_scan(code: str, outcome: str):
    """Append a scan entry to the history log.

    Does nothing if config.HISTORY_ENABLED is False.
    """
    if not config.HISTORY_ENABLED:
        return

    try:
        _HISTORY_DIR.mkdir(parents=True, exist_ok=True)
        timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
        with open(_HISTORY_FILE, "a") as f:
            f.write(f"[{timestamp}] {code or '(empty)'} -> {outcome}\n")
    except OSError as e:
        logger.debug("Failed to write history: %s", e)


def show_history(n: int = 20):
    """Print the last N history entries to stdout."""
    if not _HISTORY_FILE.exists():
        print("No history yet.")
        return

    lines = _HISTORY_FILE.read_text().splitlines()
    for line in lines[-n:]:
        print(line)
