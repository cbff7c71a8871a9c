"""Media attribute extraction from ffprobe output."""
from __future__ import annotations

from dataclasses import dataclass
from fractions import Fraction
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from loguru import logger

from .errors import FFmpegError, MediaError, VideoStreamError
from .io import ffprobe_json
from .models import Dimensions, MediaAttributes
from .utils import human_readable_size, pretty_duration


@dataclass(frozen=True)
class VideoStream:
    index: int
    codec_name: str
    codec_long_name: str
    width: int
    height: int
    sample_aspect_ratio: str = ""
    display_aspect_ratio: str = ""
    avg_frame_rate: str = ""
    duration: Optional[float] = None
    bit_rate: Optional[int] = None
    rotation: int = 0
    codec_type: str = "video"


@dataclass(frozen=True)
class AudioStream:
    index: int
    codec_name: str
    codec_long_name: str
    sample_rate: Optional[int] = None
    channels: Optional[int] = None
    bit_rate: Optional[int] = None
    duration: Optional[float] = None
    codec_type: str = "audio"


Stream = Union[VideoStream, AudioStream]


def _opt_int(value: Any) -> Optional[int]:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _opt_float(value: Any) -> Optional[float]:
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _parse_fraction(value: str) -> Fraction:
    num, _, den = value.partition("/")
    if den:
        return Fraction(int(num), int(den))
    return Fraction(float(value)).limit_denominator()


def _stream_rotation(data: Dict[str, Any]) -> int:
    rotate = _opt_int((data.get("tags") or {}).get("rotate"))
    if rotate is not None:
        return rotate
    for side_data in data.get("side_data_list") or []:
        rotation = _opt_int(side_data.get("rotation"))
        if rotation is not None:
            return rotation
    return 0


def parse_stream(data: Dict[str, Any]) -> Optional[Stream]:
    """Build the typed stream for one ffprobe entry; unknown kinds give ``None``."""

    kind = data.get("codec_type")
    index = _opt_int(data.get("index")) or 0
    codec_name = data.get("codec_name", "")
    codec_long_name = data.get("codec_long_name", "")
    if kind == "video":
        width = _opt_int(data.get("width"))
        height = _opt_int(data.get("height"))
        if not width or not height:
            raise MediaError(f"Video stream {index} has no frame size")
        return VideoStream(
            index=index,
            codec_name=codec_name,
            codec_long_name=codec_long_name,
            width=width,
            height=height,
            sample_aspect_ratio=data.get("sample_aspect_ratio", ""),
            display_aspect_ratio=data.get("display_aspect_ratio", ""),
            avg_frame_rate=data.get("avg_frame_rate", ""),
            duration=_opt_float(data.get("duration")),
            bit_rate=_opt_int(data.get("bit_rate")),
            rotation=_stream_rotation(data),
        )
    if kind == "audio":
        return AudioStream(
            index=index,
            codec_name=codec_name,
            codec_long_name=codec_long_name,
            sample_rate=_opt_int(data.get("sample_rate")),
            channels=_opt_int(data.get("channels")),
            bit_rate=_opt_int(data.get("bit_rate")),
            duration=_opt_float(data.get("duration")),
        )
    return None


def parse_streams(probe: Dict[str, Any]) -> List[Stream]:
    streams = []
    for entry in probe.get("streams", []):
        stream = parse_stream(entry)
        if stream is not None:
            streams.append(stream)
    return streams


def compute_dimensions(stream: VideoStream) -> Dimensions:
    """Apply rotation then sample aspect ratio to get the display size."""

    sample_width, sample_height = stream.width, stream.height
    if abs(stream.rotation) % 180 == 90:
        sample_width, sample_height = sample_height, sample_width

    display_width, display_height = sample_width, sample_height
    sar = stream.sample_aspect_ratio
    if sar and sar not in ("1:1", "0:1", "N/A"):
        num, _, den = sar.partition(":")
        try:
            sar_width, sar_height = int(num), int(den)
        except ValueError:
            sar_width = sar_height = 0
        if sar_width > 0 and sar_height > 0:
            display_width = sample_width * sar_width // sar_height
    if display_width <= 0:
        display_width = sample_width
    if display_height <= 0:
        display_height = sample_height
    return Dimensions(
        sample_width=sample_width,
        sample_height=sample_height,
        display_width=display_width,
        display_height=display_height,
    )


def _frame_rate(stream: VideoStream) -> Optional[float]:
    try:
        rate = _parse_fraction(stream.avg_frame_rate)
    except (ValueError, ZeroDivisionError):
        return None
    return float(rate) if rate > 0 else None


def media_attributes_from_probe(path: Path, probe: Dict[str, Any], size_bytes: Optional[int] = None) -> MediaAttributes:
    streams = parse_streams(probe)
    video = next((s for s in streams if isinstance(s, VideoStream)), None)
    if video is None:
        raise VideoStreamError()
    audio = next((s for s in streams if isinstance(s, AudioStream)), None)

    fmt = probe.get("format") or {}
    duration = video.duration if video.duration else _opt_float(fmt.get("duration"))
    if duration is None or duration <= 0:
        raise MediaError(f"Could not determine the duration of {path}")
    if size_bytes is None:
        size_bytes = _opt_int(fmt.get("size")) or 0

    return MediaAttributes(
        path=path,
        filename=path.name,
        duration_seconds=duration,
        duration=pretty_duration(duration, show_millis=True),
        size_bytes=size_bytes,
        size=human_readable_size(size_bytes),
        dimensions=compute_dimensions(video),
        video_codec=video.codec_name,
        video_codec_long=video.codec_long_name,
        frame_rate=_frame_rate(video),
        sample_aspect_ratio=video.sample_aspect_ratio,
        display_aspect_ratio=video.display_aspect_ratio,
        bit_rate=_opt_int(fmt.get("bit_rate")) or video.bit_rate,
        audio_codec=audio.codec_name if audio else "",
        audio_codec_long=audio.codec_long_name if audio else "",
        audio_sample_rate=audio.sample_rate if audio else None,
        audio_bit_rate=audio.bit_rate if audio else None,
    )


def probe_media(path: Path) -> MediaAttributes:
    """Probe ``path`` and return its media attributes."""

    path = Path(path)
    try:
        probe = ffprobe_json(path)
    except FFmpegError as exc:
        raise MediaError(f"Could not probe {path}: {exc}") from exc
    media = media_attributes_from_probe(path, probe, size_bytes=path.stat().st_size)
    logger.debug(
        "Probed {}: {} {}x{} ({})",
        media.filename,
        media.duration,
        media.display_width,
        media.display_height,
        media.video_codec,
    )
    return media
