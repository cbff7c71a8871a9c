"""Value objects passed between the pipeline stages."""
from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, NamedTuple, Optional

from .errors import GridShapeError

_GRID_RE = re.compile(r"^\s*(\d+)\s*[xX]\s*(\d+)\s*$")


class Grid(NamedTuple):
    """Columns (``x``) by rows (``y``); a zero dimension is deduced later."""

    x: int
    y: int

    def __str__(self) -> str:
        return f"{self.x}x{self.y}"

    @property
    def cells(self) -> int:
        return self.x * self.y


DEFAULT_GRID = Grid(4, 4)


def parse_grid(value: str) -> Grid:
    match = _GRID_RE.match(value)
    if match is None:
        raise GridShapeError(value)
    return Grid(int(match.group(1)), int(match.group(2)))


class TimestampPosition(str, Enum):
    NORTH = "north"
    SOUTH = "south"
    EAST = "east"
    WEST = "west"
    NE = "ne"
    NW = "nw"
    SE = "se"
    SW = "sw"
    CENTER = "center"


class MetadataPosition(str, Enum):
    TOP = "top"
    BOTTOM = "bottom"
    HIDDEN = "hidden"


@dataclass(frozen=True)
class Dimensions:
    sample_width: int
    sample_height: int
    display_width: int
    display_height: int

    def desired_size(self, width: int) -> Grid:
        """Scale the display dimensions to ``width`` keeping the aspect ratio."""

        return Grid(width, int(math.floor(self.display_height * width / self.display_width)))


@dataclass(frozen=True)
class MediaAttributes:
    path: Path
    filename: str
    duration_seconds: float
    duration: str
    size_bytes: int
    size: str
    dimensions: Dimensions
    video_codec: str = ""
    video_codec_long: str = ""
    frame_rate: Optional[float] = None
    sample_aspect_ratio: str = ""
    display_aspect_ratio: str = ""
    bit_rate: Optional[int] = None
    audio_codec: str = ""
    audio_codec_long: str = ""
    audio_sample_rate: Optional[int] = None
    audio_bit_rate: Optional[int] = None

    @property
    def display_width(self) -> int:
        return self.dimensions.display_width

    @property
    def display_height(self) -> int:
        return self.dimensions.display_height

    def desired_size(self, width: int) -> Grid:
        return self.dimensions.desired_size(width)

    def template_fields(self) -> Dict[str, Any]:
        """Values available to the metadata header template."""

        return {
            "filename": self.filename,
            "path": str(self.path),
            "size": self.size,
            "size_bytes": self.size_bytes,
            "duration": self.duration,
            "duration_seconds": self.duration_seconds,
            "sample_width": self.dimensions.sample_width,
            "sample_height": self.dimensions.sample_height,
            "display_width": self.dimensions.display_width,
            "display_height": self.dimensions.display_height,
            "video_codec": self.video_codec,
            "video_codec_long": self.video_codec_long,
            "frame_rate": self.frame_rate if self.frame_rate is not None else "",
            "sample_aspect_ratio": self.sample_aspect_ratio,
            "display_aspect_ratio": self.display_aspect_ratio,
            "bit_rate": self.bit_rate if self.bit_rate is not None else "",
            "audio_codec": self.audio_codec,
            "audio_codec_long": self.audio_codec_long,
            "audio_sample_rate": self.audio_sample_rate if self.audio_sample_rate is not None else "",
            "audio_bit_rate": self.audio_bit_rate if self.audio_bit_rate is not None else "",
        }


@dataclass
class Frame:
    filename: Path
    timestamp: float
    blurriness: float = 1.0
    avg_colour: float = 0.0


@dataclass(frozen=True)
class CaptureResult:
    selected: List[Frame] = field(default_factory=list)
    captured: List[Frame] = field(default_factory=list)
