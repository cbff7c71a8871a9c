"""Parallel frame capture and scoring."""
from __future__ import annotations

import concurrent.futures
import os
import random
import string
import tempfile
from pathlib import Path
from typing import List, Optional, Sequence

from loguru import logger
from tqdm import tqdm

from .errors import CaptureError
from .io import FrameExtractor
from .models import CaptureResult, Frame, Grid
from .params import SheetParameters
from .scoring import compute_avg_colour, compute_blurriness
from .selection import select_frames
from .timestamps import Timestamp
from .utils import pretty_to_seconds, safe_remove

_ALPHABET = string.ascii_letters + string.digits


def default_workers() -> int:
    return 2 * (os.cpu_count() or 1)


def temporary_capture_path(suffix: str, directory: Optional[Path] = None) -> Path:
    """Return an unused ``tmpXXXXXXX<suffix>`` path in ``directory``."""

    base = Path(directory) if directory is not None else Path(tempfile.gettempdir())
    while True:
        name = "tmp" + "".join(random.choices(_ALPHABET, k=7)) + suffix
        candidate = base / name
        if not candidate.exists():
            return candidate


def capture_frame(
    extractor: FrameExtractor,
    timestamp: Timestamp,
    size: Grid,
    *,
    fast: bool = False,
    directory: Optional[Path] = None,
) -> Frame:
    seconds, pretty = timestamp
    suffix = ".jpg" if fast else ".png"
    out_path = temporary_capture_path(suffix, directory)
    try:
        extractor.capture(seconds, size.x, size.y, out_path)
        frame = Frame(filename=out_path, timestamp=pretty_to_seconds(pretty))
        if not fast:
            frame.blurriness = compute_blurriness(out_path)
            frame.avg_colour = compute_avg_colour(out_path)
    except Exception:
        # ffmpeg may leave an empty or partial file behind on failure.
        safe_remove(out_path)
        raise
    return frame


def capture_frames(
    extractor: FrameExtractor,
    timestamps: Sequence[Timestamp],
    size: Grid,
    *,
    fast: bool = False,
    workers: Optional[int] = None,
    directory: Optional[Path] = None,
    progress: bool = True,
) -> List[Frame]:
    """Capture and score every timestamp, sorted by time.

    The first failure cancels outstanding captures, removes the frames
    already written and raises :class:`CaptureError`.
    """

    if not timestamps:
        return []
    max_workers = workers or default_workers()
    frames: List[Frame] = []
    with concurrent.futures.ThreadPoolExecutor(max_workers=max_workers) as executor:
        future_map = {
            executor.submit(capture_frame, extractor, ts, size, fast=fast, directory=directory): ts
            for ts in timestamps
        }
        failure: Optional[CaptureError] = None
        for future in tqdm(
            concurrent.futures.as_completed(future_map),
            total=len(future_map),
            desc="captures",
            unit="frame",
            leave=False,
            disable=not progress,
        ):
            seconds, pretty = future_map[future]
            try:
                frames.append(future.result())
            except Exception as exc:
                logger.error("Capture at {} failed: {}", pretty, exc)
                failure = CaptureError(seconds, exc, pretty=pretty)
                for pending in future_map:
                    pending.cancel()
                break
    if failure is not None:
        # Workers that were already running have finished by now.
        for future in future_map:
            if future.done() and not future.cancelled() and future.exception() is None:
                safe_remove(future.result().filename)
        raise failure from failure.cause
    frames.sort(key=lambda f: f.timestamp)
    return frames


def sample_frames(
    extractor: FrameExtractor,
    params: SheetParameters,
    size: Grid,
    *,
    fast: bool = False,
    workers: Optional[int] = None,
    colour_distance: str = "legacy",
    directory: Optional[Path] = None,
    progress: bool = True,
) -> CaptureResult:
    """Capture every planned timestamp and pick the frames for the grid."""

    captured = capture_frames(
        extractor,
        params.timestamps,
        size,
        fast=fast,
        workers=workers,
        directory=directory,
        progress=progress,
    )
    selected = select_frames(captured, params.num_groups, params.num_selected, colour_distance)
    selected.sort(key=lambda f: f.timestamp)
    logger.info("Captured {} frames, selected {}", len(captured), len(selected))
    return CaptureResult(selected=selected, captured=captured)
