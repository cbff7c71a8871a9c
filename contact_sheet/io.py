"""ffmpeg/ffprobe process helpers and the single-frame extractor."""
from __future__ import annotations

import json
import shutil
import subprocess
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from loguru import logger

from .errors import FFmpegError

FRAME_TYPES = ("I", "P", "B", "key")


def run_command(cmd: Sequence[str], *, check: bool = True) -> subprocess.CompletedProcess:
    """Run a subprocess command logging the invocation."""

    logger.debug("Running command: {}", " ".join(cmd))
    try:
        result = subprocess.run(cmd, capture_output=True, text=True)
    except FileNotFoundError as exc:
        raise FFmpegError(f"Executable not found: {cmd[0]}") from exc
    if check and result.returncode != 0:
        raise FFmpegError(f"Command failed with code {result.returncode}: {' '.join(cmd)}\n{result.stderr}")
    if result.stderr:
        logger.debug(result.stderr.strip())
    return result


def ffprobe_json(path: Path) -> Dict[str, Any]:
    cmd = [
        "ffprobe",
        "-v",
        "error",
        "-print_format",
        "json",
        "-show_format",
        "-show_streams",
        "--",
        str(path),
    ]
    result = run_command(cmd)
    if result.stdout:
        try:
            return json.loads(result.stdout)
        except json.JSONDecodeError as exc:
            raise FFmpegError(f"ffprobe returned invalid JSON for {path}") from exc
    raise FFmpegError(f"ffprobe produced no output for {path}")


def missing_executables(names: Sequence[str] = ("ffmpeg", "ffprobe")) -> List[str]:
    return [name for name in names if shutil.which(name) is None]


def ensure_dir(path: Path) -> None:
    path.mkdir(parents=True, exist_ok=True)


def _seconds(value: float) -> str:
    return f"{max(0.0, value):.3f}"


class FrameExtractor:
    """Grabs one scaled frame at a time from a video with ffmpeg.

    Instances hold only read-only settings and may be shared between
    worker threads.
    """

    def __init__(
        self,
        path: Path,
        *,
        accurate: bool = False,
        accurate_delay_seconds: float = 1.0,
        frame_type: Optional[str] = None,
    ) -> None:
        if frame_type is not None and frame_type not in FRAME_TYPES:
            raise ValueError(f"frame_type must be one of {FRAME_TYPES}, got {frame_type!r}")
        self.path = Path(path)
        self.accurate = accurate
        self.accurate_delay_seconds = accurate_delay_seconds
        self.frame_type = frame_type

    def _seek_args(self, timestamp: float) -> List[str]:
        if not self.accurate:
            return ["-ss", _seconds(timestamp), "-i", str(self.path)]
        skip_to = timestamp - self.accurate_delay_seconds
        if skip_to < 0:
            # Too close to the start for a pre-roll: decode from zero instead.
            return ["-i", str(self.path), "-ss", _seconds(timestamp)]
        return ["-ss", _seconds(skip_to), "-i", str(self.path), "-ss", _seconds(self.accurate_delay_seconds)]

    def _filter_args(self) -> List[str]:
        if self.frame_type is None:
            return []
        if self.frame_type == "key":
            return ["-vf", "select=key"]
        return ["-vf", f"select=eq(pict_type\\,{self.frame_type})"]

    def build_command(self, timestamp: float, width: int, height: int, out_path: Path) -> List[str]:
        return [
            "ffmpeg",
            "-hide_banner",
            "-loglevel",
            "error",
            *self._seek_args(timestamp),
            "-vframes",
            "1",
            "-s",
            f"{width}x{height}",
            *self._filter_args(),
            "-y",
            str(out_path),
        ]

    def capture(self, timestamp: float, width: int, height: int, out_path: Path) -> Path:
        """Write the frame at ``timestamp`` scaled to ``width``x``height``."""

        out_path = Path(out_path)
        run_command(self.build_command(timestamp, width, height, out_path))
        if not out_path.exists() or out_path.stat().st_size == 0:
            raise FFmpegError(f"ffmpeg wrote no frame at {timestamp:.3f}s for {self.path}")
        return out_path
