from __future__ import annotations

from dataclasses import dataclass, field

import pytest
from evdev import ecodes

from scanboard import config, history


@dataclass
class FakeEvent:
    type: int
    code: int
    value: int


def press(code: int) -> FakeEvent:
    return FakeEvent(ecodes.EV_KEY, code, 1)


def release(code: int) -> FakeEvent:
    return FakeEvent(ecodes.EV_KEY, code, 0)


def hold(code: int) -> FakeEvent:
    return FakeEvent(ecodes.EV_KEY, code, 2)


def keystrokes(*codes: int) -> list[FakeEvent]:
    """Press/release pairs followed by a sync event, like a real scanner sends."""
    events = []
    for code in codes:
        events += [press(code), FakeEvent(ecodes.EV_SYN, 0, 0), release(code)]
    return events


@dataclass
class FakeDevice:
    events: list = field(default_factory=list)
    name: str | None = "Fake Scanner"
    grab_error: OSError | None = None
    read_error: OSError | None = None
    grabbed: bool = False

    def grab(self):
        if self.grab_error is not None:
            raise self.grab_error
        self.grabbed = True

    def read_loop(self):
        yield from self.events
        if self.read_error is not None:
            raise self.read_error


class RecordingSink:
    def __init__(self):
        self.appended = []
        self.started = False

    def start(self):
        self.started = True

    def append(self, source):
        self.appended.append(source)


@pytest.fixture(autouse=True)
def isolated_history(tmp_path, monkeypatch):
    monkeypatch.setattr(history, "_HISTORY_DIR", tmp_path / "history")
    monkeypatch.setattr(history, "_HISTORY_FILE", tmp_path / "history" / "history.log")
    monkeypatch.setattr(config, "HISTORY_ENABLED", True)
    return tmp_path / "history" / "history.log"
