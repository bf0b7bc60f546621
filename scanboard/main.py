"""scanboard — main entry point and scan loop."""

import argparse
import logging
import sys
from importlib.metadata import PackageNotFoundError, version

from scanboard import config
from scanboard.catalog import SoundCatalog
from scanboard.config import load_config
from scanboard.doctor import check_dependencies
from scanboard.history import log_scan, show_history
from scanboard.scanner import DeviceGrabError, ScannerListener
from scanboard.sounds import AudioSink, SoundLoadError, play_sound

logger = logging.getLogger("scanboard")

EXIT_ERROR = 1
EXIT_GRAB_FAILED = 2

# ANSI colors for terminal output
_DIM = "\033[2m"
_RED = "\033[91m"
_GREEN = "\033[92m"
_YELLOW = "\033[93m"
_RESET = "\033[0m"


class Scanboard:
    """Core application: wires scanner → catalog → audio sink."""

    def __init__(self, catalog: SoundCatalog, device_path: str, sink: AudioSink | None = None):
        self._catalog = catalog
        self._sink = sink or AudioSink()
        self._listener = ScannerListener(device_path, on_code=self._on_code)

    @property
    def listener(self) -> ScannerListener:
        return self._listener

    def _on_code(self, code: str):
        """Called with each completed code; decode errors propagate."""
        try:
            result = play_sound(self._catalog, code, self._sink)
        except SoundLoadError as e:
            log_scan(code, f"error {e.path}")
            raise

        if result.queued:
            _status("play", f"{code} → {result.path.name}")
            log_scan(code, f"played {result.path}")
        elif result.path is not None:
            log_scan(code, f"missing {result.path}")
        else:
            logger.debug("No sound mapped to code %r", code)
            log_scan(code, "unknown")

    def run(self):
        """Start the sink, take the device and scan until killed."""
        self._sink.start()

        device = self._listener.open()
        _status("info", f'Opened input device "{device.name or "unnamed device"}".')

        self._listener.grab()
        _status("info", "Successfully obtained exclusive access to input device.")

        _status("ready", f"Ready! {len(self._catalog)} sounds mapped.")
        self._listener.run()


def _status(kind: str, message: str):
    """Print a status line; warnings and errors go to stderr."""
    icons = {
        "play": f"  {_GREEN}♪{_RESET}  ",
        "ready": f"  {_GREEN}▶{_RESET}  ",
        "info": f"  {_DIM}ℹ{_RESET}  ",
        "warn": f"  {_YELLOW}⚠{_RESET}  ",
        "error": f"  {_RED}✗{_RESET}  ",
    }
    icon = icons.get(kind, "    ")
    stream = sys.stderr if kind in ("warn", "error") else sys.stdout
    print(f"{icon}{message}", file=stream, flush=True)


def _version() -> str:
    try:
        return version("scanboard")
    except PackageNotFoundError:
        return "unknown"


def main(argv: list[str] | None = None):
    parser = argparse.ArgumentParser(
        prog="scanboard",
        description="Play sounds for codes typed by a barcode scanner.",
    )
    parser.add_argument(
        "-c", "--config", dest="config_filename",
        help="Configuration filename (e.g. config.toml)",
    )
    parser.add_argument(
        "-i", "--input-device",
        help="Input device (e.g. /dev/input/event23)",
    )
    parser.add_argument(
        "--no-history", action="store_true", default=False,
        help="Disable scan history logging",
    )
    parser.add_argument(
        "--history", action="store_true", default=False,
        help="Show recent scan history and exit",
    )
    parser.add_argument(
        "--doctor", action="store_true", default=False,
        help="Check audio libraries and device access, then exit",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", default=config.VERBOSE,
        help="Enable verbose/debug logging",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {_version()}")

    args = parser.parse_args(argv)

    # Handle --history: show history and exit
    if args.history:
        show_history()
        return

    if args.doctor:
        sys.exit(0 if check_dependencies(args.input_device) else EXIT_ERROR)

    if not args.config_filename or not args.input_device:
        parser.error("the following arguments are required: -c/--config, -i/--input-device")

    config.HISTORY_ENABLED = not args.no_history
    config.VERBOSE = args.verbose

    # Set up logging
    level = logging.DEBUG if config.VERBOSE else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
    )

    try:
        catalog = load_config(args.config_filename)
    except (OSError, ValueError) as e:
        _status("error", f"Could not load configuration: {e}")
        sys.exit(EXIT_ERROR)

    app = Scanboard(catalog, args.input_device)
    try:
        app.run()
    except DeviceGrabError as e:
        _status("error", str(e))
        sys.exit(EXIT_GRAB_FAILED)
    except SoundLoadError as e:
        _status("error", str(e))
        sys.exit(EXIT_ERROR)
    except OSError as e:
        _status("error", f"Fatal I/O error: {e}")
        sys.exit(EXIT_ERROR)
    except KeyboardInterrupt:
        print()


if __name__ == "__main__":
    main()
