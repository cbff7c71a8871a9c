"""Console entry point for the contact sheet generator."""
from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List

from loguru import logger
from pydantic import ValidationError

from .config import AppConfig, load_config
from .errors import ContactSheetError
from .io import FRAME_TYPES, missing_executables
from .models import Grid, MetadataPosition, TimestampPosition, parse_grid
from .pipeline import process_paths
from .selection import COLOUR_DISTANCE_MODES
from .utils import parse_interval

EXIT_FAILURE = 1
EXIT_MISSING_TOOLS = 2


def _configure_logging(verbose: bool, quiet: bool = False) -> None:
    logger.remove()
    level = "DEBUG" if verbose else ("WARNING" if quiet else "INFO")
    logger.add(sys.stderr, level=level)


def _load_config(path: Path) -> AppConfig:
    if not path.exists():
        logger.debug("Using default configuration; no {} found", path)
    return load_config(path)


def _grid(value: str) -> Grid:
    try:
        return parse_grid(value)
    except ContactSheetError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc


def _interval(value: str) -> float:
    try:
        return parse_interval(value)
    except ContactSheetError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc


def apply_overrides(config: AppConfig, args: argparse.Namespace) -> AppConfig:
    capture, grid, meta, ts, out = config.capture, config.grid, config.metadata, config.timestamp, config.output

    if args.interval is not None:
        capture.interval = args.interval
    if args.manual:
        capture.manual_timestamps = args.manual
    if args.num_samples is not None:
        capture.num_samples = args.num_samples
    if args.num_groups is not None:
        capture.num_groups = args.num_groups
    if args.fast:
        capture.fast = True
    if args.accurate:
        capture.accurate = True
    if args.accurate_delay_seconds is not None:
        capture.accurate_delay_seconds = args.accurate_delay_seconds
    if args.frame_type:
        capture.frame_type = args.frame_type
    if args.delay_percent is not None:
        capture.delay_percent = args.delay_percent
    if args.start_delay_percent is not None:
        capture.start_delay_percent = args.start_delay_percent
    if args.end_delay_percent is not None:
        capture.end_delay_percent = args.end_delay_percent
    if args.workers is not None:
        capture.workers = args.workers
    if args.colour_distance:
        capture.colour_distance = args.colour_distance

    if args.grid is not None:
        grid.grid = args.grid
    if args.width is not None:
        grid.width = args.width
    if args.actual_size:
        grid.actual_size = True
    if args.grid_spacing is not None:
        grid.spacing = args.grid_spacing
    if args.capture_alpha is not None:
        grid.capture_alpha = args.capture_alpha
    if args.background_colour:
        grid.background_colour = args.background_colour
    if args.no_shadow:
        grid.shadow = False

    if args.metadata_position:
        meta.position = args.metadata_position
    if args.metadata_font:
        meta.font = Path(args.metadata_font)
    if args.metadata_font_size is not None:
        meta.font_size = args.metadata_font_size
    if args.metadata_margin is not None:
        meta.margin = args.metadata_margin
    if args.metadata_template:
        meta.template = Path(args.metadata_template).read_text()

    if args.show_timestamp is not None:
        ts.show = args.show_timestamp
    if args.timestamp_position:
        ts.position = args.timestamp_position
    if args.timestamp_font:
        ts.font = Path(args.timestamp_font)
    if args.timestamp_font_size is not None:
        ts.font_size = args.timestamp_font_size
    if args.timestamp_format:
        ts.format = args.timestamp_format
    if args.timestamp_border_mode:
        ts.border_mode = True

    if args.output:
        out.path = Path(args.output)
    if args.image_format:
        out.image_format = args.image_format
    if args.quality is not None:
        out.quality = args.quality
    if args.thumbnail_output:
        out.thumbnails_dir = Path(args.thumbnail_output)
    if args.thumbnails_all:
        out.thumbnails_all = True
    if args.keep_thumbnails:
        out.keep_thumbnails = True
    if args.no_overwrite:
        out.no_overwrite = True
    if args.ignore_errors:
        out.ignore_errors = True
    if args.recursive:
        out.recursive = True
    if args.exclude_extensions:
        out.exclude_extensions = args.exclude_extensions
    return config


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="vcsheet", description="Create contact sheets (thumbnail grids) from videos")
    parser.add_argument("filenames", nargs="+", help="Video files or directories")
    parser.add_argument("--config", default="contact_sheet.yaml", help="Path to YAML configuration file")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument("--quiet", action="store_true", help="Only log warnings and hide progress bars")

    sampling = parser.add_argument_group("sampling")
    sampling.add_argument("-i", "--interval", type=_interval, help="Capture interval, e.g. 30s, 5m or 1:30")
    sampling.add_argument("-m", "--manual", action="append", metavar="TIMESTAMP", help="Capture at this timestamp (repeatable)")
    sampling.add_argument("-n", "--num-samples", type=int)
    sampling.add_argument("--num-groups", type=int)
    sampling.add_argument("--fast", action="store_true", help="Skip sharpness/colour scoring")
    sampling.add_argument("-a", "--accurate", action="store_true", help="Decode forward for exact frames")
    sampling.add_argument("-A", "--accurate-delay-seconds", type=float)
    sampling.add_argument("--frame-type", choices=FRAME_TYPES)
    sampling.add_argument("-d", "--delay-percent", type=float)
    sampling.add_argument("--start-delay-percent", type=float)
    sampling.add_argument("--end-delay-percent", type=float)
    sampling.add_argument("--workers", type=int)
    sampling.add_argument("--colour-distance", choices=COLOUR_DISTANCE_MODES)

    layout = parser.add_argument_group("layout")
    layout.add_argument("-g", "--grid", type=_grid, help="Columns x rows, e.g. 4x4; 0 deduces a dimension")
    layout.add_argument("-w", "--width", type=int)
    layout.add_argument("--actual-size", action="store_true")
    layout.add_argument("--grid-spacing", type=int)
    layout.add_argument("--capture-alpha", type=int)
    layout.add_argument("--background-colour")
    layout.add_argument("--no-shadow", action="store_true")
    layout.add_argument("--metadata-position", choices=[p.value for p in MetadataPosition])
    layout.add_argument("--metadata-font")
    layout.add_argument("--metadata-font-size", type=int)
    layout.add_argument("--metadata-margin", type=int)
    layout.add_argument("--metadata-template", help="File with header lines using {field} placeholders")
    layout.add_argument("-t", "--show-timestamp", dest="show_timestamp", action="store_const", const=True, default=None)
    layout.add_argument("--no-timestamp", dest="show_timestamp", action="store_const", const=False)
    layout.add_argument("--timestamp-position", choices=[p.value for p in TimestampPosition])
    layout.add_argument("--timestamp-font")
    layout.add_argument("--timestamp-font-size", type=int)
    layout.add_argument("--timestamp-format", help="Label template, e.g. '{TIME} / {DURATION}'")
    layout.add_argument("--timestamp-border-mode", action="store_true")

    output = parser.add_argument_group("output")
    output.add_argument("-o", "--output", help="Output file or directory")
    output.add_argument("-f", "--format", dest="image_format")
    output.add_argument("--quality", type=int)
    output.add_argument("-T", "--thumbnail-output", help="Copy the selected frames to this directory")
    output.add_argument("--thumbnails-all", action="store_true", help="Copy every captured frame")
    output.add_argument("--keep-thumbnails", action="store_true", help="Keep temporary frames")
    output.add_argument("--no-overwrite", action="store_true")
    output.add_argument("--ignore-errors", action="store_true")
    output.add_argument("-r", "--recursive", action="store_true")
    output.add_argument("--exclude-extensions", nargs="+", default=None)

    return parser


def main(argv: List[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose, args.quiet)

    missing = missing_executables()
    if missing:
        logger.error("Required executables not found on PATH: {}", ", ".join(missing))
        return EXIT_MISSING_TOOLS

    try:
        config = apply_overrides(_load_config(Path(args.config)), args)
        report = process_paths([Path(p) for p in args.filenames], config, progress=not args.quiet)
    except (ContactSheetError, OSError, ValidationError) as exc:
        logger.error("{}", exc)
        if exc.__cause__ is not None:
            logger.debug("Caused by: {!r}", exc.__cause__)
        return EXIT_FAILURE
    for path, reason in report.failed:
        logger.warning("Failed: {} ({})", path, reason)
    return EXIT_FAILURE if report.failed and not report.written else 0


if __name__ == "__main__":
    sys.exit(main())
