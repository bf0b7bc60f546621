"""Sound loading, lookup/dispatch and the queued audio output sink."""

import logging
import queue
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

import numpy as np
import soundfile as sf

from scanboard import config
from scanboard.catalog import SoundCatalog

logger = logging.getLogger(__name__)


class SoundLoadError(RuntimeError):
    """A sound file exists but could not be opened or decoded."""

    def __init__(self, path: Path, reason: object):
        super().__init__(f"Could not load sound file {path}: {reason}")
        self.path = Path(path)


@dataclass(frozen=True)
class Dispatch:
    """Outcome of a scanned code."""

    path: Path | None
    queued: bool = False


@dataclass(frozen=True)
class AudioSource:
    data: np.ndarray
    samplerate: int
    path: Path

    @property
    def duration(self) -> float:
        return len(self.data) / self.samplerate if self.samplerate else 0.0


def load_source(path: Path) -> AudioSource:
    """Decode a sound file into float32 PCM.

    Raises SoundLoadError if the file can't be opened or decoded.
    """
    try:
        data, samplerate = sf.read(str(path), dtype=config.SOUND_DTYPE)
    except (OSError, RuntimeError, TypeError, ValueError) as e:
        raise SoundLoadError(path, e) from e
    return AudioSource(data=data, samplerate=samplerate, path=Path(path))


def play_sound(catalog: SoundCatalog, code: str, sink: "AudioSink") -> Dispatch:
    """Look up a scanned code and queue its sound on the sink.

    The returned Dispatch carries the resolved path (None for an unknown
    code) and whether the sound was queued. An unknown code is a normal
    outcome and is not reported; a missing file is reported and skipped.
    Decode failures raise SoundLoadError.
    """
    path = catalog.resolve(code)
    if path is None:
        return Dispatch(path=None)

    if not path.exists():
        logger.warning("Sound file %s does not exist.", path)
        return Dispatch(path=path)

    source = load_source(path)
    sink.append(source)
    return Dispatch(path=path, queued=True)


def _play_blocking(source: AudioSource):
    """Play a source on the default output device until it finishes (requires PortAudio)."""
    import sounddevice as sd
    sd.play(source.data, samplerate=source.samplerate, blocking=True)


class AudioSink:
    """Persistent playback target: sources play back-to-back in append order.

    append() never waits for playback; a single daemon worker thread drains
    the queue and plays each source to completion.
    """

    def __init__(self, play: Callable[[AudioSource], None] | None = None, maxsize: int | None = None):
        self._play = play or _play_blocking
        self._queue: queue.Queue[AudioSource] = queue.Queue(
            maxsize=config.SINK_QUEUE_SIZE if maxsize is None else maxsize,
        )
        self._worker: threading.Thread | None = None

    def start(self):
        """Check for a default output device and start the playback worker."""
        if self._worker is not None:
            return
        if self._play is _play_blocking:
            import sounddevice as sd
            try:
                device = sd.query_devices(kind="output")
            except sd.PortAudioError as e:
                raise OSError(f"No default audio output device: {e}") from e
            logger.info("Audio output: %s", device["name"])
        self._worker = threading.Thread(target=self._run, name="audio-sink", daemon=True)
        self._worker.start()

    def append(self, source: AudioSource):
        """Queue a source for playback without blocking."""
        if self._worker is None:
            self.start()
        try:
            self._queue.put_nowait(source)
        except queue.Full:
            logger.warning("Playback queue full, dropping %s", source.path.name)
            return
        logger.debug("Queued %s (%.2fs)", source.path.name, source.duration)

    def wait_until_idle(self):
        """Block until every queued source has finished playing."""
        self._queue.join()

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    def _run(self):
        while True:
            source = self._queue.get()
            try:
                self._play(source)
            except Exception as e:
                logger.error("Playback of %s failed: %s", source.path, e)
            finally:
                self._queue.task_done()
