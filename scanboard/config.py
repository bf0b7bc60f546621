"""Configuration constants and config file loading for scanboard."""

import logging
import tomllib
from pathlib import Path

from scanboard.catalog import SoundCatalog

logger = logging.getLogger(__name__)

# --- Audio ---
SINK_QUEUE_SIZE = 32  # Max sounds waiting to play; further scans are dropped until it drains
SOUND_DTYPE = "float32"  # Sample format handed to sounddevice

# --- UX ---
VERBOSE = False
HISTORY_ENABLED = True  # Log scanned codes to ~/.local/share/scanboard/history.log


def load_config(path: str | Path) -> SoundCatalog:
    """Load the sound catalog from a TOML file.

    File format:
        sounds_path = "/usr/share/sounds/board"

        [inputs_to_filenames]
        "007" = "laugh.mp3"
        "42" = "answer.ogg"

    Raises OSError if the file can't be read, tomllib.TOMLDecodeError if it
    isn't valid TOML and ValueError if a required key is missing.
    """
    path = Path(path)
    with open(path, "rb") as f:
        data = tomllib.load(f)

    try:
        sounds_path = data["sounds_path"]
        inputs_to_filenames = data["inputs_to_filenames"]
    except KeyError as e:
        raise ValueError(f"Missing required key {e.args[0]!r} in {path}") from e

    if not isinstance(inputs_to_filenames, dict):
        raise ValueError(f"'inputs_to_filenames' in {path} must be a table")

    catalog = SoundCatalog(
        sounds_path=Path(str(sounds_path)).expanduser(),
        inputs_to_filenames=inputs_to_filenames,
    )
    logger.debug("Loaded %d sound mappings from %s", len(catalog), path)
    return catalog
