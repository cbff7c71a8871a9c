"""Capture timestamp generation and grid deduction."""
from __future__ import annotations

import math
from typing import Iterable, List, Optional, Tuple

from .errors import TimestampError
from .models import DEFAULT_GRID, Grid
from .utils import pretty_duration, pretty_to_seconds

Timestamp = Tuple[float, str]


def start_delay_seconds(duration: float, start_delay_percent: float) -> float:
    return math.floor(duration * start_delay_percent / 100.0)


def total_delay_seconds(duration: float, start_delay_percent: float, end_delay_percent: float) -> float:
    """Seconds skipped at both ends of the video."""

    return start_delay_seconds(duration, start_delay_percent) + math.floor(duration * end_delay_percent / 100.0)


def capture_interval(
    duration: float,
    num_samples: int,
    start_delay_percent: float,
    end_delay_percent: float,
    interval: Optional[float] = None,
) -> float:
    if interval is not None:
        return interval
    usable = duration - total_delay_seconds(duration, start_delay_percent, end_delay_percent)
    return usable / (num_samples + 1)


def timestamp_generator(
    duration: float,
    num_samples: int,
    start_delay_percent: float,
    end_delay_percent: float,
    interval: Optional[float] = None,
) -> List[Timestamp]:
    """Return ``num_samples`` evenly spaced ``(seconds, "MM:SS.mmm")`` pairs.

    The first sample sits one interval after the start delay, so neither
    endpoint of the usable window is ever captured.
    """

    if num_samples <= 0:
        return []
    step = capture_interval(duration, num_samples, start_delay_percent, end_delay_percent, interval)
    time = start_delay_seconds(duration, start_delay_percent)
    stamps: List[Timestamp] = []
    for _ in range(num_samples):
        time += step
        stamps.append((time, pretty_duration(time, show_millis=True)))
    return stamps


def manual_timestamps(values: Iterable[str], duration: float) -> List[Timestamp]:
    """Parse user supplied timestamps, keeping unique values below ``duration``."""

    seen = set()
    stamps: List[Timestamp] = []
    for value in values:
        seconds = pretty_to_seconds(value)
        if seconds >= duration or seconds in seen:
            continue
        seen.add(seconds)
        stamps.append((seconds, pretty_duration(seconds, show_millis=True)))
    if not stamps:
        raise TimestampError("no manual timestamps less than input duration.")
    stamps.sort(key=lambda item: item[0])
    return stamps


def deduce_grid(grid: Grid, num_samples: int) -> Grid:
    """Fill in unset grid dimensions from a fixed sample count."""

    if grid == DEFAULT_GRID or (grid.x == 0 and grid.y == 0):
        side = max(1, math.ceil(math.sqrt(num_samples)))
        return Grid(side, side)
    if grid.x == 0:
        return Grid(max(1, num_samples // grid.y), grid.y)
    if grid.y == 0:
        return Grid(grid.x, max(1, num_samples // grid.x))
    return grid
