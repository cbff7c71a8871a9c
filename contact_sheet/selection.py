"""Frame selection: temporal buckets, then sharpness with colour variety."""
from __future__ import annotations

from typing import List, Sequence

from loguru import logger

from .models import Frame

COLOUR_DISTANCE_MODES = ("legacy", "absolute")
MIN_COLOUR_DISTANCE_RATIO = 0.05


def bucket_frames(frames: Sequence[Frame], num_groups: int) -> List[Frame]:
    """Keep the last frame of each equal-size temporal chunk."""

    ordered = sorted(frames, key=lambda f: f.timestamp)
    if num_groups <= 1 or not ordered:
        return ordered
    group_size = max(1, len(ordered) // num_groups)
    return [ordered[min(start + group_size, len(ordered)) - 1] for start in range(0, len(ordered), group_size)]


def _legacy_distance(candidate: Frame, remaining: Sequence[Frame]) -> float:
    distance = 0.0
    for other in remaining:
        distance = min(distance, candidate.avg_colour - other.avg_colour)
    return distance


def _absolute_distance(candidate: Frame, accepted: Sequence[Frame]) -> float:
    if not accepted:
        return float("inf")
    return min(abs(candidate.avg_colour - other.avg_colour) for other in accepted)


def select_colour_variety(frames: Sequence[Frame], num_selected: int, mode: str = "legacy") -> List[Frame]:
    """Pick ``num_selected`` sharp frames, preferring distinct average colours.

    ``legacy`` compares each candidate against the frames not yet visited
    using the signed difference; ``absolute`` compares against the frames
    already accepted.
    """

    if mode not in COLOUR_DISTANCE_MODES:
        raise ValueError(f"mode must be one of {COLOUR_DISTANCE_MODES}, got {mode!r}")
    if not frames or num_selected <= 0:
        return []

    colours = [f.avg_colour for f in frames]
    min_colour_distance = (max(colours) - min(colours)) * MIN_COLOUR_DISTANCE_RATIO

    # Blurriest first so that pop() yields the sharpest remaining frame.
    pending = sorted(frames, key=lambda f: f.blurriness, reverse=True)
    selected: List[Frame] = []
    unselected: List[Frame] = []
    while pending:
        candidate = pending.pop()
        if not selected:
            selected.append(candidate)
            continue
        if mode == "legacy":
            distance = _legacy_distance(candidate, pending)
        else:
            distance = _absolute_distance(candidate, selected)
        if distance < min_colour_distance:
            unselected.append(candidate)
        else:
            selected.append(candidate)

    selected = selected[:num_selected]
    missing = num_selected - len(selected)
    if missing > 0:
        unselected.sort(key=lambda f: f.blurriness)
        selected.extend(unselected[:missing])
    logger.debug(
        "Selected {} of {} frames (colour threshold {:.3f}, {} backfilled)",
        len(selected),
        len(frames),
        min_colour_distance,
        max(0, missing),
    )
    return selected


def select_frames(frames: Sequence[Frame], num_groups: int, num_selected: int, mode: str = "legacy") -> List[Frame]:
    candidates = bucket_frames(frames, num_groups)
    return select_colour_variety(candidates, num_selected, mode)
