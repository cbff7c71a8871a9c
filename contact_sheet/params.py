"""Derive the per-file sheet parameters from the configuration and media."""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Tuple

from loguru import logger

from .config import DEFAULT_METADATA_MARGIN, DEFAULT_WIDTH, AppConfig
from .errors import ArgumentError
from .models import Grid, MediaAttributes
from .timestamps import Timestamp, deduce_grid, manual_timestamps, timestamp_generator, total_delay_seconds


@dataclass(frozen=True)
class SheetParameters:
    grid: Grid
    num_samples: int
    num_groups: int
    num_selected: int
    timestamps: Tuple[Timestamp, ...]
    vcs_width: int
    grid_horizontal_spacing: int
    grid_vertical_spacing: int
    metadata_horizontal_margin: int
    metadata_vertical_margin: int
    start_delay_percent: float
    end_delay_percent: float


def validate_options(config: AppConfig) -> None:
    """Reject option combinations that can never produce a sheet."""

    capture, grid = config.capture, config.grid
    if capture.interval is not None and capture.manual_timestamps:
        raise ArgumentError("Cannot use --interval and --manual at the same time.")
    if grid.actual_size and grid.width != DEFAULT_WIDTH:
        raise ArgumentError("Cannot use --width and --actual-size at the same time.")
    if (grid.grid.x == 0 or grid.grid.y == 0) and capture.interval is None and not capture.manual_timestamps:
        raise ArgumentError("Row or column of size zero is only supported with --interval or --manual.")
    start_pct, end_pct = capture.start_delay_percent, capture.end_delay_percent
    if capture.delay_percent is not None:
        start_pct = end_pct = capture.delay_percent
    if start_pct + end_pct >= 100:
        raise ArgumentError(
            f"Start and end delays ({start_pct}% + {end_pct}%) leave nothing of the video to capture."
        )


def resolve_parameters(config: AppConfig, media: MediaAttributes) -> SheetParameters:
    validate_options(config)
    capture, grid_cfg, meta = config.capture, config.grid, config.metadata

    start_pct, end_pct = capture.start_delay_percent, capture.end_delay_percent
    if capture.delay_percent is not None:
        start_pct = end_pct = capture.delay_percent

    h_margin, v_margin = meta.horizontal_margin, meta.vertical_margin
    if meta.margin != DEFAULT_METADATA_MARGIN:
        h_margin = v_margin = meta.margin

    h_spacing, v_spacing = grid_cfg.horizontal_spacing, grid_cfg.vertical_spacing
    if grid_cfg.spacing is not None:
        h_spacing = v_spacing = grid_cfg.spacing

    duration = media.duration_seconds
    grid = grid_cfg.grid
    manual: Tuple[Timestamp, ...] = ()

    if capture.interval is not None:
        # With no end delay and an exact division the last capture lands on the
        # final instant of the clip, where ffmpeg may have no frame to decode.
        usable = duration - total_delay_seconds(duration, start_pct, end_pct)
        num_samples = int(math.floor(usable / capture.interval))
        if num_samples <= 0:
            raise ArgumentError(
                f"Interval of {capture.interval}s leaves no captures in {media.filename} ({media.duration})."
            )
        num_groups = num_samples
        grid = deduce_grid(grid, num_samples)
        num_selected = grid.cells
    elif capture.manual_timestamps:
        manual = tuple(manual_timestamps(capture.manual_timestamps, duration))
        num_samples = num_groups = len(manual)
        grid = deduce_grid(grid, num_samples)
        num_selected = grid.cells
    else:
        num_selected = grid.cells
        num_samples = capture.num_samples if capture.num_samples is not None else num_selected
        num_groups = capture.num_groups if capture.num_groups is not None else num_selected
        num_groups = max(num_groups, num_selected)
        num_samples = max(num_samples, num_selected)
        if num_samples < num_groups:
            num_samples = num_groups = num_selected

    width = grid_cfg.width
    if grid_cfg.actual_size:
        width = grid.x * media.display_width + (grid.x - 1) * h_spacing

    if manual:
        timestamps = manual
    else:
        timestamps = tuple(timestamp_generator(duration, num_samples, start_pct, end_pct, capture.interval))

    params = SheetParameters(
        grid=grid,
        num_samples=num_samples,
        num_groups=num_groups,
        num_selected=num_selected,
        timestamps=timestamps,
        vcs_width=width,
        grid_horizontal_spacing=h_spacing,
        grid_vertical_spacing=v_spacing,
        metadata_horizontal_margin=h_margin,
        metadata_vertical_margin=v_margin,
        start_delay_percent=start_pct,
        end_delay_percent=end_pct,
    )
    logger.debug(
        "Sheet {} for {}: {} samples, {} groups, {} selected, width {}",
        params.grid,
        media.filename,
        num_samples,
        num_groups,
        num_selected,
        width,
    )
    return params
