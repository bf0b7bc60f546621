"""Exclusive evdev input capture: turns scanner keystrokes into codes."""

import logging
from typing import Callable

from evdev import InputDevice, ecodes

logger = logging.getLogger(__name__)

KEY_DOWN = 1  # evdev key event values: 0 = up, 1 = down, 2 = hold (auto-repeat)

_DIGIT_KEYS = {
    ecodes.KEY_1: "1",
    ecodes.KEY_2: "2",
    ecodes.KEY_3: "3",
    ecodes.KEY_4: "4",
    ecodes.KEY_5: "5",
    ecodes.KEY_6: "6",
    ecodes.KEY_7: "7",
    ecodes.KEY_8: "8",
    ecodes.KEY_9: "9",
    ecodes.KEY_0: "0",
}


def get_char(keycode: int) -> str | None:
    """Map a physical key code to the digit it types, or None."""
    return _DIGIT_KEYS.get(keycode)


class DeviceGrabError(RuntimeError):
    """Exclusive access to the input device could not be obtained."""


class CodeBuffer:
    """Digits typed so far for the code being scanned."""

    def __init__(self):
        self._chars: list[str] = []

    def append(self, char: str):
        if len(char) != 1 or char not in "0123456789":
            raise ValueError(f"Not a digit: {char!r}")
        self._chars.append(char)

    def snapshot_and_clear(self) -> str:
        code = "".join(self._chars).strip()
        self._chars.clear()
        return code

    def __len__(self) -> int:
        return len(self._chars)

    def __str__(self) -> str:
        return "".join(self._chars)


class ScannerListener:
    """Reads key events from one input device and reports each completed code.

    Digits accumulate until Enter is pressed; the code is then passed to
    on_code in the calling thread. Only key-down events count, so a held key
    registers once regardless of auto-repeat.
    """

    def __init__(self, device_path: str, on_code: Callable[[str], None]):
        self._device_path = device_path
        self._on_code = on_code
        self._buffer = CodeBuffer()
        self._device: InputDevice | None = None

    @property
    def device(self) -> InputDevice | None:
        return self._device

    @property
    def buffer(self) -> CodeBuffer:
        return self._buffer

    def open(self) -> InputDevice:
        """Open the input device. Raises OSError if it can't be opened."""
        self._device = InputDevice(self._device_path)
        logger.debug("Opened %s (%s)", self._device_path, self._device.name)
        return self._device

    def grab(self):
        """Take exclusive access so no other process sees the scanner's keystrokes."""
        if self._device is None:
            self.open()
        try:
            self._device.grab()
        except OSError as e:
            raise DeviceGrabError(f"Could not get exclusive access to input device: {e}") from e
        logger.debug("Grabbed %s", self._device_path)

    def run(self):
        """Process events forever. I/O errors from the device propagate."""
        if self._device is None:
            self.open()
        for event in self._device.read_loop():
            self.handle_event(event)

    def handle_event(self, event):
        if event.type != ecodes.EV_KEY or event.value != KEY_DOWN:
            return

        if event.code == ecodes.KEY_ENTER:
            code = self._buffer.snapshot_and_clear()
            logger.debug("Code scanned: %r", code)
            self._on_code(code)
            return

        char = get_char(event.code)
        if char is not None:
            self._buffer.append(char)
