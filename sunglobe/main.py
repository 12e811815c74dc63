"""Application entry point for the sunlit globe."""

from __future__ import annotations

import argparse
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Sequence

from sunglobe.models import GlobeOptions
from sunglobe.ui.constants import (
    DAYMAP_FALLBACK_COLOR,
    DEFAULT_DEBOUNCE_MS,
    DEFAULT_MARGIN_FACTOR,
    DEFAULT_ROTATION_RATE_DEG_PER_MS,
    DEFAULT_TERMINATOR_EDGES,
    EARTH_DAYMAP_FILE,
    EARTH_NIGHTMAP_FILE,
    NIGHTMAP_FALLBACK_COLOR,
)

logger = logging.getLogger(__name__)

LOG_FILE = Path(__file__).resolve().parents[1] / "application.log"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sunglobe",
        description="Rotating Earth globe lit by the real-time sun.",
    )
    parser.add_argument(
        "--rotation-rate",
        type=float,
        default=DEFAULT_ROTATION_RATE_DEG_PER_MS,
        help="Idle rotation in degrees per millisecond (negative reverses the spin)",
    )
    parser.add_argument(
        "--debounce-ms",
        type=float,
        default=DEFAULT_DEBOUNCE_MS,
        help="Pause after the last interaction before rotation resumes",
    )
    parser.add_argument(
        "--terminator-edges",
        type=float,
        nargs=2,
        metavar=("LO", "HI"),
        default=DEFAULT_TERMINATOR_EDGES,
        help="Smoothstep edges of the day/night blend",
    )
    parser.add_argument(
        "--margin-factor",
        type=float,
        default=DEFAULT_MARGIN_FACTOR,
        help="Orthographic half-extent is min(width, height) divided by this",
    )
    parser.add_argument(
        "--perspective",
        action="store_true",
        help="Use a perspective camera instead of the orthographic one",
    )
    parser.add_argument(
        "--no-meridians", action="store_true", help="Hide the time-zone meridians"
    )
    parser.add_argument(
        "--no-interaction", action="store_true", help="Disable mouse controls"
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
    )
    parser.add_argument(
        "--snapshot",
        type=Path,
        metavar="PATH",
        help="Render a single frame to an image file and exit",
    )
    parser.add_argument(
        "--snapshot-time",
        metavar="ISO8601",
        help="UTC instant for --snapshot (defaults to now)",
    )
    parser.add_argument("--snapshot-size", type=int, nargs=2, default=(800, 800))
    return parser


def options_from_args(args: argparse.Namespace) -> GlobeOptions:
    return GlobeOptions(
        rotation_rate_deg_per_ms=args.rotation_rate,
        debounce_ms=args.debounce_ms,
        terminator_edges=tuple(args.terminator_edges),
        margin_factor=args.margin_factor,
        projection="perspective" if args.perspective else "orthographic",
        show_meridians=not args.no_meridians,
        enable_interaction=not args.no_interaction,
    )


def parse_instant_ms(text: str | None) -> float:
    """Milliseconds since the epoch for an ISO 8601 string; naive means UTC."""
    if text is None:
        moment = datetime.now(timezone.utc)
    else:
        moment = datetime.fromisoformat(text.replace("Z", "+00:00"))
        if moment.tzinfo is None:
            moment = moment.replace(tzinfo=timezone.utc)
    return moment.timestamp() * 1000.0


def run_snapshot(args: argparse.Namespace, options: GlobeOptions) -> int:
    from sunglobe.services.assets import TextureAssets, load_texture
    from sunglobe.services.snapshot import render_snapshot, save_snapshot

    assets = TextureAssets(
        day=load_texture(EARTH_DAYMAP_FILE, DAYMAP_FALLBACK_COLOR),
        night=load_texture(EARTH_NIGHTMAP_FILE, NIGHTMAP_FALLBACK_COLOR),
    )
    width, height = args.snapshot_size
    image = render_snapshot(
        parse_instant_ms(args.snapshot_time), width, height, assets, options
    )
    save_snapshot(args.snapshot, image)
    return 0


def run_gui(options: GlobeOptions) -> int:
    from PySide6.QtGui import QFont
    from PySide6.QtWidgets import QApplication

    from sunglobe.services.assets import preload_globe_textures
    from sunglobe.ui.main_window import GlobeWindow
    from sunglobe.ui.splash import LoadingSplashScreen

    app = QApplication(sys.argv)
    app.setFont(QFont(app.font().family(), 12))

    splash = LoadingSplashScreen()
    splash.show()
    app.processEvents()

    def _report_progress(message: str, value: float) -> None:
        splash.update_status(message, value)
        app.processEvents()

    preload_globe_textures(progress_callback=_report_progress)

    window = GlobeWindow(options)
    window.resize(1000, 1000)
    window.show()
    splash.finish(window)

    return app.exec()


def main(argv: Sequence[str] | None = None) -> int:
    """Parse flags, then render a snapshot or start the Qt event loop."""

    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        filename=str(LOG_FILE),
        filemode="w",
    )
    try:
        options = options_from_args(args)
    except ValueError as exc:
        parser.error(str(exc))

    if args.snapshot is not None:
        try:
            return run_snapshot(args, options)
        except ValueError as exc:
            parser.error(str(exc))
    return run_gui(options)


if __name__ == "__main__":
    raise SystemExit(main())
