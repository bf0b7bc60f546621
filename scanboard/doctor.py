"""Startup health checks with actionable install instructions."""

import os
import shutil
import sys

_BOLD = "\033[1m"
_DIM = "\033[2m"
_RED = "\033[91m"
_GREEN = "\033[92m"
_RESET = "\033[0m"

_OK = f"  {_GREEN}✓{_RESET} "
_FAIL = f"  {_RED}✗{_RESET} "


def check_dependencies(device_path: str | None = None) -> bool:
    """Check system prerequisites and print diagnostic lines.

    Returns True if everything needed to scan and play sounds is available.
    """
    ok = True

    # --- PortAudio ---
    ok &= _check_portaudio()

    # --- libsndfile ---
    ok &= _check_libsndfile()

    # --- Input device ---
    if device_path:
        ok &= _check_device(device_path)

    print(file=sys.stderr)
    return ok


def _install_hint(apt: str, pacman: str) -> str:
    if shutil.which("pacman"):
        return f"sudo pacman -S {pacman}"
    return f"sudo apt install {apt}"


def _check_portaudio() -> bool:
    try:
        import sounddevice as sd
        sd.query_devices()
        print(f"{_OK}PortAudio found", file=sys.stderr)
        return True
    except OSError:
        hint = _install_hint("libportaudio2", "portaudio")
        print(
            f"{_FAIL}PortAudio not found {_DIM}— install with: {_BOLD}{hint}{_RESET}",
            file=sys.stderr,
        )
        return False
    except ImportError:
        print(
            f"{_FAIL}sounddevice not installed {_DIM}— run: {_BOLD}pip install scanboard{_RESET}",
            file=sys.stderr,
        )
        return False


def _check_libsndfile() -> bool:
    try:
        import soundfile as sf
        print(f"{_OK}libsndfile {sf.__libsndfile_version__} found", file=sys.stderr)
        return True
    except OSError:
        hint = _install_hint("libsndfile1", "libsndfile")
        print(
            f"{_FAIL}libsndfile not found {_DIM}— install with: {_BOLD}{hint}{_RESET}",
            file=sys.stderr,
        )
        return False
    except ImportError:
        print(
            f"{_FAIL}soundfile not installed {_DIM}— run: {_BOLD}pip install scanboard{_RESET}",
            file=sys.stderr,
        )
        return False


def _check_device(device_path: str) -> bool:
    if not os.path.exists(device_path):
        print(f"{_FAIL}Input device {device_path} not found", file=sys.stderr)
        return False
    if not os.access(device_path, os.R_OK):
        print(
            f"{_FAIL}No access to {device_path} {_DIM}— add yourself to the "
            f"{_BOLD}input{_RESET}{_DIM} group or run as root{_RESET}",
            file=sys.stderr,
        )
        return False
    print(f"{_OK}Input device {device_path} accessible", file=sys.stderr)
    return True
