"""Command line entry point for batt-tui."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Any, Sequence

from rich.console import Console
from rich.markup import escape

from .app import run as run_app
from .config import DEFAULT_CONFIG_PATH, ConfigurationError, MonitorConfig, load_options, save_options

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="batt-tui",
        description="Live bar chart of battery voltages read from a growing telemetry file.",
        add_help=False,
        allow_abbrev=False,
    )
    parser.add_argument("source", nargs="?", type=Path, metavar="SOURCE", help="telemetry file to follow")
    parser.add_argument("--output-file", type=Path, metavar="FILE", help="append input file lines to this file")
    parser.add_argument("--screen-height", type=int, metavar="NUMBER", help="screen height, in lines")
    parser.add_argument("--bar-width", type=int, metavar="NUMBER", help="voltage value bar width, in columns")
    parser.add_argument(
        "--space-between-bars",
        type=int,
        metavar="NUMBER",
        help="space between voltage value bars, in columns",
    )
    parser.add_argument("--volts-min", type=int, metavar="NUMBER", help="min voltage value used on the screen, in volts")
    parser.add_argument("--volts-max", type=int, metavar="NUMBER", help="max voltage value used on the screen, in volts")
    parser.add_argument(
        "--max-line-length",
        type=int,
        metavar="NUMBER",
        help="max length of line that is read from the data file, in bytes",
    )
    parser.add_argument(
        "--frame-interval",
        type=int,
        metavar="NUMBER",
        help="time interval between displaying next frame, in milliseconds",
    )
    parser.add_argument(
        "--no-follow",
        dest="follow",
        action="store_const",
        const=False,
        default=None,
        help="stop at the end of the file instead of waiting for new lines",
    )
    parser.add_argument(
        "--poll-interval",
        type=float,
        metavar="SECONDS",
        help="pause before reopening a file that had no new lines",
    )
    parser.add_argument(
        "--config",
        type=Path,
        metavar="FILE",
        default=None,
        help=f"YAML file with option defaults (default: {DEFAULT_CONFIG_PATH})",
    )
    parser.add_argument("--save-config", action="store_true", help="write the resolved options to the config file")
    parser.add_argument("--log-file", type=Path, metavar="FILE", help="write diagnostic logs to this file")
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="log level used with --log-file",
    )
    parser.add_argument("--help", action="store_true", help="show this help message and exit")
    return parser


def options_from_args(args: argparse.Namespace) -> dict[str, Any]:
    """Return the option overrides given on the command line."""

    values = {
        "screen_height": args.screen_height,
        "bar_width": args.bar_width,
        "space_between_bars": args.space_between_bars,
        "volts_min": args.volts_min,
        "volts_max": args.volts_max,
        "max_line_length": args.max_line_length,
        "frame_interval": args.frame_interval,
        "output_file": args.output_file,
        "follow": args.follow,
        "poll_interval": args.poll_interval,
    }
    return {key: value for key, value in values.items() if value is not None}


def resolve_config(parser: argparse.ArgumentParser, args: argparse.Namespace) -> MonitorConfig:
    """Merge the YAML defaults with command line overrides; exits on bad values."""

    try:
        options = load_options(args.config)
        options.update(options_from_args(args))
        return MonitorConfig.from_options(args.source, options)
    except ConfigurationError as exc:
        parser.error(str(exc))
        raise  # pragma: no cover - parser.error exits


def configure_logging(log_file: Path | None, level: str) -> None:
    # Log lines must never reach the terminal the dashboard is drawing on.
    if log_file is None:
        logging.getLogger("batt_tui").addHandler(logging.NullHandler())
        return
    log_file.parent.mkdir(parents=True, exist_ok=True)
    logging.basicConfig(filename=str(log_file), level=getattr(logging, level), format=LOG_FORMAT)


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.help:
        parser.print_help()
        return 1
    if args.source is None:
        parser.error("the following arguments are required: SOURCE")

    config = resolve_config(parser, args)
    if args.save_config:
        try:
            save_options(config, args.config)
        except OSError as exc:
            Console(stderr=True).print(f"[red]error:[/red] cannot save config: {escape(str(exc))}")
            return 1
    configure_logging(args.log_file, args.log_level)

    try:
        app = run_app(config)
    except KeyboardInterrupt:
        return 0
    if app.failure:
        Console(stderr=True).print(f"[red]error:[/red] {escape(app.failure)}")
        return 1
    return app.return_code or 0


if __name__ == "__main__":
    raise SystemExit(main())
