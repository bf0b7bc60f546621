from __future__ import annotations

import logging
from pathlib import Path

import pytest
from evdev import ecodes

from conftest import FakeDevice, RecordingSink, keystrokes
from scanboard import main as main_module
from scanboard import scanner, sounds
from scanboard.catalog import SoundCatalog
from scanboard.main import EXIT_ERROR, EXIT_GRAB_FAILED, Scanboard, main
from scanboard.sounds import AudioSource, SoundLoadError

LAUGH = [ecodes.KEY_0, ecodes.KEY_0, ecodes.KEY_7, ecodes.KEY_ENTER]


@pytest.fixture
def fake_loader(monkeypatch):
    def load(path):
        return AudioSource(data=[0.0] * 4, samplerate=8000, path=Path(path))

    monkeypatch.setattr(sounds, "load_source", load)


def make_app(tmp_path, monkeypatch, device: FakeDevice) -> tuple[Scanboard, RecordingSink]:
    monkeypatch.setattr(scanner, "InputDevice", lambda path: device)
    catalog = SoundCatalog(sounds_path=tmp_path, inputs_to_filenames={"007": "laugh.mp3"})
    sink = RecordingSink()
    return Scanboard(catalog, "/dev/input/event99", sink=sink), sink


def test_scan_plays_mapped_sound(tmp_path, monkeypatch, fake_loader, capsys, isolated_history):
    (tmp_path / "laugh.mp3").write_bytes(b"ID3")
    app, sink = make_app(tmp_path, monkeypatch, FakeDevice(events=keystrokes(*LAUGH)))

    app.run()

    assert sink.started
    assert [s.path for s in sink.appended] == [tmp_path / "laugh.mp3"]
    assert len(app.listener.buffer) == 0
    out = capsys.readouterr().out
    assert 'Opened input device "Fake Scanner"' in out
    assert "exclusive access" in out
    assert f"played {tmp_path / 'laugh.mp3'}" in isolated_history.read_text()


def test_scan_with_missing_file_keeps_running(tmp_path, monkeypatch, fake_loader, caplog, isolated_history):
    events = keystrokes(*LAUGH) + keystrokes(ecodes.KEY_1)
    app, sink = make_app(tmp_path, monkeypatch, FakeDevice(events=events))

    app.run()

    assert sink.appended == []
    assert "does not exist" in caplog.text
    assert str(app.listener.buffer) == "1"
    assert "missing" in isolated_history.read_text()


def test_enter_on_empty_buffer_is_harmless(tmp_path, monkeypatch, fake_loader, caplog, isolated_history):
    app, sink = make_app(tmp_path, monkeypatch, FakeDevice(events=keystrokes(ecodes.KEY_ENTER)))

    app.run()

    assert sink.appended == []
    assert "does not exist" not in caplog.text
    assert "(empty) -> unknown" in isolated_history.read_text()


def test_decode_error_propagates_from_run(tmp_path, monkeypatch, isolated_history):
    (tmp_path / "laugh.mp3").write_text("garbage", encoding="utf-8")
    app, sink = make_app(tmp_path, monkeypatch, FakeDevice(events=keystrokes(*LAUGH)))

    with pytest.raises(SoundLoadError):
        app.run()
    assert sink.appended == []
    assert len(app.listener.buffer) == 0
    assert "error" in isolated_history.read_text()


@pytest.fixture
def cli(tmp_path, monkeypatch):
    """Run main() against a fake device and sink; returns (run, device)."""
    config_path = tmp_path / "config.toml"
    config_path.write_text(
        f'sounds_path = "{tmp_path}"\n[inputs_to_filenames]\n"007" = "laugh.mp3"\n',
        encoding="utf-8",
    )
    device = FakeDevice()
    monkeypatch.setattr(scanner, "InputDevice", lambda path: device)
    monkeypatch.setattr(main_module, "AudioSink", RecordingSink)

    def run(*extra):
        with pytest.raises(SystemExit) as excinfo:
            main(["-c", str(config_path), "-i", "/dev/input/event99", "--no-history", *extra])
        return excinfo.value.code

    return run, device


def test_main_grab_failure_exits_with_distinct_status(cli, capsys):
    run, device = cli
    device.grab_error = OSError(16, "Device or resource busy")
    assert run() == EXIT_GRAB_FAILED
    assert "exclusive access" in capsys.readouterr().err


def test_main_read_error_exits_with_error(cli, capsys):
    run, device = cli
    device.read_error = OSError(19, "No such device")
    assert run() == EXIT_ERROR
    assert "No such device" in capsys.readouterr().err


def test_main_device_open_failure(cli, monkeypatch, capsys):
    run, _ = cli

    def missing(path):
        raise FileNotFoundError(2, "No such file or directory", path)

    monkeypatch.setattr(scanner, "InputDevice", missing)
    assert run() == EXIT_ERROR


def test_main_bad_config_exits_with_error(tmp_path, capsys):
    with pytest.raises(SystemExit) as excinfo:
        main(["-c", str(tmp_path / "missing.toml"), "-i", "/dev/input/event99"])
    assert excinfo.value.code == EXIT_ERROR
    assert "Could not load configuration" in capsys.readouterr().err


def test_main_requires_config_and_device():
    with pytest.raises(SystemExit) as excinfo:
        main(["-c", "config.toml"])
    assert excinfo.value.code == 2


def test_main_history_flag(isolated_history, capsys):
    main(["--history"])
    assert "No history yet." in capsys.readouterr().out


def test_main_undecodable_sound_exits_with_error(cli, tmp_path, capsys):
    run, device = cli
    (tmp_path / "laugh.mp3").write_text("garbage", encoding="utf-8")
    device.events = keystrokes(*LAUGH)
    assert run() == EXIT_ERROR
    assert "Could not load sound file" in capsys.readouterr().err


def test_main_verbose_enables_debug_logging(cli, monkeypatch):
    run, device = cli
    levels = []
    monkeypatch.setattr(main_module.logging, "basicConfig", lambda **kw: levels.append(kw["level"]))
    monkeypatch.setattr(main_module.config, "VERBOSE", False)
    device.read_error = OSError(19, "No such device")
    run("-v")
    assert levels == [logging.DEBUG]
