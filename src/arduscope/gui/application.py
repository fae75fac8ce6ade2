"""Qt application entry point for the arduscope desktop GUI.

This module wires up argument parsing and logging, builds the
:class:`~arduscope.core.session.ScopeSession` and the
:class:`~arduscope.gui.main_window.MainWindow`, and starts the Qt event loop.
``--list-ports`` and ``--snapshot`` run without opening a window.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from ..config.runtime import ScopeConfig, load_config
from ..core.demo import DemoSignalGenerator
from ..core.trigger import TriggerMode
from ..render import RenderConfig, render
from ..tools.debug import debug_enabled
from ..transport.serial_link import describe_ports
from ..wiring import build_session, serial_link_factory

logger = logging.getLogger(__name__)


def _build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="arduscope",
        description="Oscilloscope display for an Arduino streaming DATA/FREQ/VOLT lines",
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="YAML file overriding acquisition/trigger/display settings",
    )
    parser.add_argument(
        "--port",
        type=str,
        default=None,
        help="Serial port of the device (default: first Arduino-compatible port)",
    )
    parser.add_argument(
        "--list-ports",
        action="store_true",
        help="List serial ports and exit",
    )
    parser.add_argument(
        "--trigger",
        choices=[m.value for m in TriggerMode],
        default=None,
        help="Initial trigger mode (default: from config, else auto)",
    )
    parser.add_argument(
        "--snapshot",
        metavar="PNG",
        default=None,
        help="Render one demo frame to a PNG file and exit (no window)",
    )
    parser.add_argument(
        "--snapshot-size",
        metavar="WxH",
        default="800x600",
        help="Pixel size of the --snapshot image (default: 800x600)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def _parse_cli_args(argv: list[str]) -> tuple[argparse.Namespace, list[str]]:
    parser = _build_arg_parser()
    args, qt_args = parser.parse_known_args(argv[1:])
    qt_argv = [argv[0], *qt_args]
    return args, qt_argv


def _parse_size(text: str) -> tuple[int, int]:
    try:
        w, h = (int(part) for part in text.lower().split("x", 1))
    except ValueError:
        raise SystemExit(f"ERROR: invalid --snapshot-size {text!r}, expected WxH") from None
    if w <= 0 or h <= 0:
        raise SystemExit(f"ERROR: invalid --snapshot-size {text!r}")
    return w, h


def write_snapshot(config: ScopeConfig, path: str | Path, size: tuple[int, int]) -> Path:
    """Render the first demo frame headless and save it as PNG."""
    from ..render.mpl_export import export_png

    frame = DemoSignalGenerator(config.demo_config()).tick()
    width, height = size
    render_cfg = RenderConfig(
        width=float(width),
        height=float(height),
        voltage_scale=config.voltage_scale,
        grid_divisions=config.grid_divisions,
        sample_rate_hz=config.sample_rate_hz,
    )
    return export_png(render(frame, render_cfg), width, height, path)


def main(argv: list[str] | None = None) -> None:
    raw_argv = argv if argv is not None else sys.argv
    args, qt_argv = _parse_cli_args(raw_argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose or debug_enabled() else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.list_ports:
        ports = describe_ports()
        if not ports:
            print("No serial ports found.")
        for line in ports:
            print(line)
        return

    try:
        config = load_config(args.config).sanitized()
    except (OSError, ValueError) as exc:
        print(f"ERROR: could not load config: {exc}", file=sys.stderr)
        raise SystemExit(2) from exc
    if args.trigger:
        config.trigger_mode = args.trigger

    if args.snapshot:
        out = write_snapshot(config, args.snapshot, _parse_size(args.snapshot_size))
        print(f"Wrote PNG: {out}")
        return

    from PySide6.QtWidgets import QApplication

    from .main_window import MainWindow

    session = build_session(config, link_factory=serial_link_factory(config, args.port))
    app = QApplication.instance() or QApplication(qt_argv)
    win = MainWindow(session, config)
    win.resize(1100, 700)
    win.show()
    logger.info("arduscope started (trigger=%s)", config.trigger_mode)
    raise SystemExit(app.exec())


if __name__ == "__main__":
    main()
