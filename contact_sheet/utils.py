"""Formatting and parsing helpers used across pipeline stages."""
from __future__ import annotations

import math
import re
from pathlib import Path
from typing import NamedTuple, Tuple

from loguru import logger

from .errors import ArgumentError, ColourError, TimestampError

Colour = Tuple[int, int, int, int]

_SIZE_UNITS = ["", "Ki", "Mi", "Gi", "Ti", "Pi", "Ei", "Zi"]
_INTERVAL_UNITS = {
    "h": 3600.0,
    "hour": 3600.0,
    "hours": 3600.0,
    "m": 60.0,
    "min": 60.0,
    "mins": 60.0,
    "minute": 60.0,
    "minutes": 60.0,
    "s": 1.0,
    "sec": 1.0,
    "secs": 1.0,
    "second": 1.0,
    "seconds": 1.0,
}
_INTERVAL_RE = re.compile(r"(\d+(?:\.\d+)?)\s*([a-z]+)")


class Duration(NamedTuple):
    hours: int
    minutes: int
    seconds: int
    centis: int
    millis: int


def parse_duration(seconds: float) -> Duration:
    """Split a number of seconds into clock components."""

    hours = int(seconds // 3600)
    remaining = seconds - 3600 * hours
    minutes = int(remaining // 60)
    remaining -= 60 * minutes
    whole = int(math.floor(remaining))
    fraction = remaining - whole
    centis = int(math.floor(round(fraction * 100, 6)))
    millis = int(math.floor(round(fraction * 1000, 6)))
    return Duration(hours=hours, minutes=minutes, seconds=whole, centis=centis, millis=millis)


def pretty_duration(seconds: float, show_centis: bool = False, show_millis: bool = False) -> str:
    """Format seconds as ``H:MM:SS.fff`` (hours omitted when zero).

    The fractional part is truncated, never rounded. ``show_millis`` takes
    precedence over ``show_centis``.
    """

    parts = parse_duration(seconds)
    text = f"{parts.hours}:" if parts.hours > 0 else ""
    text += f"{parts.minutes:02d}:{parts.seconds:02d}"
    if show_millis:
        text += f".{parts.millis:03d}"
    elif show_centis:
        text += f".{parts.centis:02d}"
    return text


def pretty_to_seconds(value: str) -> float:
    """Parse ``[[H:]MM:]SS[.fff]`` back into seconds."""

    text = value.strip()
    fields = text.split(":")
    if not text or len(fields) > 3:
        raise TimestampError(f"Invalid timestamp {value!r}")
    try:
        head = [int(field) for field in fields[:-1]]
        seconds = float(fields[-1])
    except ValueError as exc:
        raise TimestampError(f"Invalid timestamp {value!r}") from exc
    if seconds < 0 or any(field < 0 for field in head):
        raise TimestampError(f"Invalid timestamp {value!r}")
    total = seconds
    for multiplier, field in zip((60, 3600), reversed(head)):
        total += multiplier * field
    return total


def human_readable_size(num: float, suffix: str = "B") -> str:
    for unit in _SIZE_UNITS:
        if abs(num) < 1024.0:
            return "%3.1f %s%s" % (num, unit, suffix)
        num /= 1024.0
    return "%.1f %s%s" % (num, "Yi", suffix)


def decode_hex(value: str) -> Colour:
    """Decode ``rrggbb`` or ``rrggbbaa`` into an RGBA tuple."""

    text = value.strip().lstrip("#")
    if len(text) % 2 != 0:
        raise ColourError(f"Colour {value!r} has an odd number of hex digits")
    if len(text) not in (6, 8):
        raise ColourError(f"Colour {value!r} must have 6 or 8 hex digits")
    try:
        channels = [int(text[i : i + 2], 16) for i in range(0, len(text), 2)]
    except ValueError as exc:
        raise ColourError(f"Colour {value!r} is not hexadecimal") from exc
    if len(channels) == 3:
        channels.append(255)
    return (channels[0], channels[1], channels[2], channels[3])


def parse_interval(value: str) -> float:
    """Parse ``90``, ``1:30``, ``30s``, ``5m`` or ``1h30m`` into seconds."""

    text = value.strip().lower()
    if not text:
        raise ArgumentError("Empty interval")
    try:
        seconds = float(text)
    except ValueError:
        if ":" in text:
            try:
                seconds = pretty_to_seconds(text)
            except TimestampError as exc:
                raise ArgumentError(f"Invalid interval {value!r}") from exc
        else:
            matches = list(_INTERVAL_RE.finditer(text))
            consumed = "".join(m.group(0) for m in matches)
            if not matches or consumed.replace(" ", "") != text.replace(" ", ""):
                raise ArgumentError(f"Invalid interval {value!r}")
            seconds = 0.0
            for match in matches:
                unit = _INTERVAL_UNITS.get(match.group(2))
                if unit is None:
                    raise ArgumentError(f"Unknown interval unit {match.group(2)!r} in {value!r}")
                seconds += float(match.group(1)) * unit
    if seconds <= 0:
        raise ArgumentError(f"Interval must be positive, got {value!r}")
    return seconds


def safe_remove(path: Path) -> None:
    try:
        path.unlink()
    except FileNotFoundError:
        return
    except OSError as exc:
        logger.warning("Failed to remove {}: {}", path, exc)
