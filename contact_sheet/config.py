"""Configuration models and loader for the contact sheet generator."""
from __future__ import annotations

from pathlib import Path
from typing import Any, List, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

from .io import FRAME_TYPES
from .models import DEFAULT_GRID, Grid, MetadataPosition, TimestampPosition, parse_grid
from .selection import COLOUR_DISTANCE_MODES
from .utils import decode_hex, parse_interval

DEFAULT_WIDTH = 1500
DEFAULT_METADATA_MARGIN = 10
IMAGE_FORMATS = ("jpg", "jpeg", "png", "webp", "bmp", "tiff")


class _Section(BaseModel):
    model_config = ConfigDict(validate_assignment=True)


def _check_colour(value: str) -> str:
    decode_hex(value)
    return value.lstrip("#").lower()


class CaptureConfig(_Section):
    start_delay_percent: float = Field(7.0, ge=0.0, lt=100.0, description="Percentage of the video skipped at the start.")
    end_delay_percent: float = Field(7.0, ge=0.0, lt=100.0, description="Percentage of the video skipped at the end.")
    delay_percent: Optional[float] = Field(None, ge=0.0, lt=50.0, description="Overrides both start and end delays.")
    interval: Optional[float] = Field(None, description="Seconds between captures; the grid is deduced from it.")
    manual_timestamps: List[str] = Field(default_factory=list, description="Explicit capture times, e.g. '1:30.5'.")
    num_samples: Optional[int] = Field(None, ge=1, description="Frames captured before selection.")
    num_groups: Optional[int] = Field(None, ge=1, description="Temporal buckets used by the selector.")
    fast: bool = Field(False, description="Skip scoring and capture JPEG frames.")
    accurate: bool = Field(False, description="Decode forward from a pre-roll for exact frames.")
    accurate_delay_seconds: float = Field(1.0, ge=0.0, description="Pre-roll length in accurate mode.")
    frame_type: Optional[str] = Field(None, description="Only capture I, P, B or key frames.")
    workers: Optional[int] = Field(None, ge=1, description="Parallel captures; defaults to twice the CPU count.")
    colour_distance: str = Field("legacy", description="Colour variety rule: 'legacy' or 'absolute'.")

    @field_validator("interval", mode="before")
    @classmethod
    def validate_interval(cls, value: Any) -> Any:
        if value is None or isinstance(value, (int, float)):
            return value
        return parse_interval(str(value))

    @field_validator("interval")
    @classmethod
    def validate_interval_positive(cls, value: Optional[float]) -> Optional[float]:
        if value is not None and value <= 0:
            raise ValueError("interval must be positive")
        return value

    @field_validator("manual_timestamps", mode="before")
    @classmethod
    def validate_manual(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, (str, int, float)):
            value = [value]
        return [str(v) for v in value]

    @field_validator("frame_type")
    @classmethod
    def validate_frame_type(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and value not in FRAME_TYPES:
            raise ValueError(f"frame_type must be one of {FRAME_TYPES}")
        return value

    @field_validator("colour_distance")
    @classmethod
    def validate_colour_distance(cls, value: str) -> str:
        if value not in COLOUR_DISTANCE_MODES:
            raise ValueError(f"colour_distance must be one of {COLOUR_DISTANCE_MODES}")
        return value


class GridConfig(_Section):
    grid: Grid = Field(DEFAULT_GRID, description="Columns x rows; 0 deduces a dimension.")
    width: int = Field(DEFAULT_WIDTH, ge=1, description="Output image width in pixels.")
    actual_size: bool = Field(False, description="Use the native frame width for every cell.")
    spacing: Optional[int] = Field(None, ge=0, description="Overrides both grid spacings.")
    horizontal_spacing: int = Field(5, ge=0)
    vertical_spacing: int = Field(5, ge=0)
    capture_alpha: int = Field(255, ge=0, le=255, description="Opacity applied to every frame.")
    background_colour: str = Field("000000")
    shadow: bool = Field(True, description="Draw a blurred drop shadow under each frame.")

    @field_validator("grid", mode="before")
    @classmethod
    def validate_grid(cls, value: Any) -> Any:
        if isinstance(value, str):
            return parse_grid(value)
        return value

    @field_validator("background_colour")
    @classmethod
    def validate_colour(cls, value: str) -> str:
        return _check_colour(value)


class MetadataConfig(_Section):
    position: MetadataPosition = Field(MetadataPosition.TOP)
    font: Optional[Path] = Field(None, description="TrueType font for the header.")
    font_size: int = Field(16, ge=1)
    font_colour: str = Field("ffffff")
    background_colour: str = Field("1f1f1f")
    margin: int = Field(DEFAULT_METADATA_MARGIN, ge=0, description="Overrides both header margins when changed.")
    horizontal_margin: int = Field(DEFAULT_METADATA_MARGIN, ge=0)
    vertical_margin: int = Field(DEFAULT_METADATA_MARGIN, ge=0)
    template: Optional[str] = Field(None, description="Header lines with {field} placeholders.")

    @field_validator("font_colour", "background_colour")
    @classmethod
    def validate_colour(cls, value: str) -> str:
        return _check_colour(value)


class TimestampConfig(_Section):
    show: bool = Field(True)
    font: Optional[Path] = Field(None)
    font_size: int = Field(12, ge=1)
    font_colour: str = Field("ffffff")
    background_colour: str = Field("000000aa")
    border_colour: str = Field("000000")
    border_mode: bool = Field(False, description="Outline the text instead of drawing a badge.")
    border_size: int = Field(1, ge=0)
    border_radius: float = Field(3.0, ge=0.0)
    position: TimestampPosition = Field(TimestampPosition.SE)
    horizontal_margin: int = Field(5, ge=0)
    vertical_margin: int = Field(5, ge=0)
    horizontal_padding: int = Field(3, ge=0)
    vertical_padding: int = Field(1, ge=0)
    format: str = Field("{TIME}", description="Label template, e.g. '{TIME} / {DURATION}'.")

    @field_validator("font_colour", "background_colour", "border_colour")
    @classmethod
    def validate_colour(cls, value: str) -> str:
        return _check_colour(value)


class OutputConfig(_Section):
    path: Optional[Path] = Field(None, description="Output file or directory.")
    image_format: str = Field("jpg")
    quality: int = Field(100, ge=1, le=100)
    thumbnails_dir: Optional[Path] = Field(None, description="Copy frames here when set.")
    thumbnails_all: bool = Field(False, description="Copy every captured frame, not only the selected ones.")
    keep_thumbnails: bool = Field(False, description="Leave temporary frames on disk.")
    no_overwrite: bool = Field(False)
    ignore_errors: bool = Field(False)
    recursive: bool = Field(False)
    exclude_extensions: List[str] = Field(default_factory=list)

    @field_validator("image_format")
    @classmethod
    def validate_format(cls, value: str) -> str:
        value = value.lower().lstrip(".")
        if value not in IMAGE_FORMATS:
            raise ValueError(f"image_format must be one of {IMAGE_FORMATS}")
        return value

    @field_validator("exclude_extensions", mode="before")
    @classmethod
    def validate_extensions(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, str):
            value = value.split(",")
        return [str(v).strip().lower().lstrip(".") for v in value if str(v).strip()]


class AppConfig(_Section):
    capture: CaptureConfig = Field(default_factory=CaptureConfig)
    grid: GridConfig = Field(default_factory=GridConfig)
    metadata: MetadataConfig = Field(default_factory=MetadataConfig)
    timestamp: TimestampConfig = Field(default_factory=TimestampConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)


def load_config(path: Path | str) -> AppConfig:
    """Load configuration from YAML, falling back to defaults when missing."""

    cfg_path = Path(path)
    if not cfg_path.exists():
        return AppConfig()
    data = yaml.safe_load(cfg_path.read_text()) or {}
    return AppConfig.model_validate(data)
