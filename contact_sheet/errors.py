"""Exception hierarchy shared by every contact sheet stage."""
from __future__ import annotations

from typing import Optional


class ContactSheetError(Exception):
    """Base class for all errors raised by the contact sheet pipeline."""


class ArgumentError(ContactSheetError):
    """Mutually exclusive or malformed option combination."""


class GridShapeError(ContactSheetError):
    def __init__(self, value: str = "") -> None:
        message = "Grid must be of the form mxn, where m is the number of columns and n is the number of rows."
        if value:
            message = f"{message} Got {value!r}."
        super().__init__(message)
        self.value = value


class ColourError(ContactSheetError):
    """Malformed hexadecimal colour string."""


class MediaError(ContactSheetError):
    """The input could not be probed or lacks required attributes."""


class VideoStreamError(MediaError):
    def __init__(self, message: str = "The file does not contain a video stream.") -> None:
        super().__init__(message)


class TimestampError(ContactSheetError):
    """Malformed or out-of-range manual timestamps."""


class FontError(ContactSheetError):
    """A font file could not be loaded."""


class FFmpegError(ContactSheetError, RuntimeError):
    """An ffmpeg/ffprobe invocation failed."""


class CaptureError(ContactSheetError):
    """A single frame capture failed; the whole capture run is aborted."""

    def __init__(self, timestamp: float, cause: Optional[BaseException] = None, pretty: str = "") -> None:
        label = pretty or f"{timestamp:.3f}s"
        message = f"Capture at {label} failed"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)
        self.timestamp = timestamp
        self.cause = cause
