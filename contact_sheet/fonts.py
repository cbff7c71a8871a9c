"""Font loading and text measurement on top of Pillow."""
from __future__ import annotations

from pathlib import Path
from typing import Optional, Sequence, Tuple, Union

from loguru import logger
from PIL import ImageFont

from .errors import FontError

Font = Union[ImageFont.FreeTypeFont, ImageFont.ImageFont]

DEFAULT_FONT_CANDIDATES: Sequence[str] = (
    "DejaVuSans.ttf",
    "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
    "/usr/share/fonts/TTF/DejaVuSans.ttf",
    "/Library/Fonts/Arial.ttf",
    "C:/Windows/Fonts/arial.ttf",
)


def load_font(path: Optional[Path], size: int) -> Font:
    """Load ``path`` at ``size`` points, or the first available default font."""

    if path is not None:
        try:
            return ImageFont.truetype(str(path), size)
        except OSError as exc:
            raise FontError(f"Unable to load font {path}: {exc}") from exc
    for candidate in DEFAULT_FONT_CANDIDATES:
        try:
            return ImageFont.truetype(candidate, size)
        except OSError:
            continue
    logger.debug("No TrueType font found; using Pillow's built-in font")
    return ImageFont.load_default(size=size)


def text_length(font: Font, text: str) -> float:
    """Advance width of ``text`` in pixels."""

    return font.getlength(text)


def text_size(font: Font, text: str) -> Tuple[int, int]:
    """Width of the ink box and full line height (ascent + descent)."""

    left, top, right, bottom = font.getbbox(text)
    width = int(right - left)
    if hasattr(font, "getmetrics"):
        ascent, descent = font.getmetrics()
        return width, int(ascent + descent)
    return width, int(bottom - top)
