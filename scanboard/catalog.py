"""Sound catalog — maps scanned codes to sound files."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType


@dataclass(frozen=True)
class SoundCatalog:
    """Read-only code → filename mapping plus the directory sounds resolve against.

    Files are not checked for existence here; that happens at playback time.
    """

    sounds_path: Path
    inputs_to_filenames: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self):
        entries: dict[str, str] = {}
        for code, name in self.inputs_to_filenames.items():
            key = str(code).strip()
            if key in entries:
                raise ValueError(f"Duplicate code {key!r} in sound mappings")
            entries[key] = str(name)
        object.__setattr__(self, "sounds_path", Path(self.sounds_path))
        object.__setattr__(self, "inputs_to_filenames", MappingProxyType(entries))

    def filename_for(self, code: str) -> str | None:
        return self.inputs_to_filenames.get(code.strip())

    def resolve(self, code: str) -> Path | None:
        """Return the sound path for a code, or None if the code is unknown."""
        filename = self.filename_for(code)
        if filename is None:
            return None
        return self.sounds_path / filename

    def __contains__(self, code: object) -> bool:
        return isinstance(code, str) and code.strip() in self.inputs_to_filenames

    def __len__(self) -> int:
        return len(self.inputs_to_filenames)
