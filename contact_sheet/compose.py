"""Render the contact sheet image with Pillow."""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List, Sequence

from loguru import logger
from PIL import Image, ImageDraw, ImageFilter

from .config import AppConfig
from .fonts import Font, load_font, text_length, text_size
from .layout import (
    Point,
    Size,
    canvas_size,
    cell_origins,
    check_rounded_rect,
    compute_timestamp_position,
    grid_desired_size,
    header_height,
    line_height,
    prepare_metadata_text_lines,
    render_timestamp,
)
from .models import Frame, Grid, MediaAttributes, MetadataPosition
from .params import SheetParameters
from .utils import Colour, decode_hex

SHADOW_OFFSET = 5
SHADOW_BLUR = 3
TEXT_SHADOW_OFFSET = 2
BORDER_DIRECTIONS = ((-1, -1), (0, -1), (1, -1), (1, 0), (1, 1), (0, 1), (-1, 1), (-1, 0))
_BLACK = (0, 0, 0, 255)


@dataclass
class Fonts:
    metadata: Font
    timestamp: Font


def load_fonts(config: AppConfig) -> Fonts:
    return Fonts(
        metadata=load_font(config.metadata.font, config.metadata.font_size),
        timestamp=load_font(config.timestamp.font, config.timestamp.font_size),
    )


def draw_filled_rounded_rect(draw: ImageDraw.ImageDraw, origin: Point, size: Size, colour: Colour, radius: float) -> None:
    """Fill a rectangle whose corners are rounded by ``radius`` pixels."""

    check_rounded_rect(size, radius)
    if size[0] <= 0 or size[1] <= 0:
        return
    x, y = origin
    box = (x, y, x + size[0] - 1, y + size[1] - 1)
    if radius <= 0:
        draw.rectangle(box, fill=colour)
    else:
        draw.rounded_rectangle(box, radius=radius, fill=colour)


def draw_bordered_text(
    draw: ImageDraw.ImageDraw,
    origin: Point,
    text: str,
    font: Font,
    fill: Colour,
    border: Colour,
    border_size: int,
) -> None:
    """Stamp ``text`` in ``border`` around its eight neighbours, then in ``fill``."""

    x, y = origin
    for step in range(1, border_size + 1):
        for dx, dy in BORDER_DIRECTIONS:
            draw.text((x + dx * step, y + dy * step), text, font=font, fill=border)
    draw.text((x, y), text, font=font, fill=fill)


def draw_metadata(
    lines: Sequence[str],
    font: Font,
    size: Size,
    horizontal_margin: int,
    vertical_margin: int,
    font_size: int,
    font_colour: Colour,
    background: Colour,
) -> Image.Image:
    """Header strip with one blurred drop shadow per text line."""

    header = Image.new("RGBA", size, background)
    draw = ImageDraw.Draw(header)
    y = vertical_margin
    for line in lines:
        width, height = text_size(font, line)
        if width > 0 and height > 0:
            shadow = Image.new("RGBA", (width, height), background)
            ImageDraw.Draw(shadow).text((0, 0), line, font=font, fill=_BLACK)
            shadow = shadow.filter(ImageFilter.GaussianBlur(1))
            header.paste(shadow, (horizontal_margin + TEXT_SHADOW_OFFSET, y + TEXT_SHADOW_OFFSET))
        draw.text((horizontal_margin, y), line, font=font, fill=font_colour)
        y += line_height(font_size)
    return header


def _frame_shadow(cell: Grid) -> Image.Image:
    shadow = Image.new("RGBA", (cell.x + 2 * SHADOW_OFFSET, cell.y + 2 * SHADOW_OFFSET), (0, 0, 0, 0))
    ImageDraw.Draw(shadow).rectangle(
        (SHADOW_OFFSET, SHADOW_OFFSET, SHADOW_OFFSET + cell.x - 1, SHADOW_OFFSET + cell.y - 1),
        fill=_BLACK,
    )
    return shadow.filter(ImageFilter.GaussianBlur(SHADOW_BLUR))


def _load_frame(path: Path, cell: Grid, alpha: int) -> Image.Image:
    with Image.open(path) as source:
        image = source.convert("RGBA")
    if image.size != (cell.x, cell.y):
        image = image.resize((cell.x, cell.y), Image.LANCZOS)
    image.putalpha(alpha)
    return image


def _draw_timestamp(
    layer: ImageDraw.ImageDraw,
    label: str,
    origin: Point,
    cell: Grid,
    config: AppConfig,
    font: Font,
) -> None:
    ts = config.timestamp
    label_size = text_size(font, label)
    (x, y), badge = compute_timestamp_position(
        ts.position,
        origin,
        label_size,
        cell,
        ts.horizontal_margin,
        ts.vertical_margin,
        ts.horizontal_padding,
        ts.vertical_padding,
    )
    text_origin = (x + ts.horizontal_padding, y + ts.vertical_padding)
    if ts.border_mode:
        draw_bordered_text(
            layer,
            text_origin,
            label,
            font,
            decode_hex(ts.font_colour),
            decode_hex(ts.border_colour),
            ts.border_size,
        )
    else:
        draw_filled_rounded_rect(layer, (x, y), badge, decode_hex(ts.background_colour), ts.border_radius)
        layer.text(text_origin, label, font=font, fill=decode_hex(ts.font_colour))


def compose_contact_sheet(
    media: MediaAttributes,
    frames: Sequence[Frame],
    params: SheetParameters,
    config: AppConfig,
    fonts: Fonts,
) -> Image.Image:
    """Lay out ``frames`` on a grid under (or over) the metadata header."""

    hsp, vsp = params.grid_horizontal_spacing, params.grid_vertical_spacing
    cell = grid_desired_size(params.grid, media.dimensions, params.vcs_width, hsp)
    width, grid_height = canvas_size(params.grid, cell, hsp, vsp)

    position = config.metadata.position
    lines: List[str] = []
    if position != MetadataPosition.HIDDEN:
        lines = prepare_metadata_text_lines(
            media,
            lambda text: text_length(fonts.metadata, text),
            params.metadata_horizontal_margin,
            width,
            config.metadata.template,
        )
    head = header_height(len(lines), config.metadata.font_size, params.metadata_vertical_margin, position)

    image = Image.new("RGBA", (width, grid_height + head), decode_hex(config.grid.background_colour))
    header = None
    if head:
        header = draw_metadata(
            lines,
            fonts.metadata,
            (width, head),
            params.metadata_horizontal_margin,
            params.metadata_vertical_margin,
            config.metadata.font_size,
            decode_hex(config.metadata.font_colour),
            decode_hex(config.metadata.background_colour),
        )

    ordered = sorted(frames, key=lambda f: f.timestamp)
    top = head if position == MetadataPosition.TOP else 0
    origins = cell_origins(len(ordered), params.grid, cell, hsp, vsp, top)
    if len(ordered) > len(origins):
        logger.warning("Dropping {} frames that do not fit a {} grid", len(ordered) - len(origins), params.grid)

    shadow = _frame_shadow(cell) if config.grid.shadow else None
    stamps = Image.new("RGBA", image.size, (0, 0, 0, 0))
    stamp_draw = ImageDraw.Draw(stamps)
    for number, (frame, origin) in enumerate(zip(ordered, origins), start=1):
        if shadow is not None:
            image.alpha_composite(shadow, dest=origin)
        image.alpha_composite(_load_frame(frame.filename, cell, config.grid.capture_alpha), dest=origin)
        if config.timestamp.show:
            label = render_timestamp(config.timestamp.format, frame.timestamp, media.duration_seconds, number)
            _draw_timestamp(stamp_draw, label, origin, cell, config, fonts.timestamp)
    image.alpha_composite(stamps)
    # Pasted last so frame shadows never spill onto the header.
    if header is not None:
        image.paste(header, (0, 0 if position == MetadataPosition.TOP else grid_height))
    return image


def save_image(image: Image.Image, path: Path, image_format: str = "jpg", quality: int = 100) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    if image_format in ("jpg", "jpeg", "bmp"):
        image = image.convert("RGB")
    fmt = "JPEG" if image_format in ("jpg", "jpeg") else image_format.upper()
    image.save(path, format=fmt, quality=quality, optimize=True)
    logger.info("Wrote {} ({}x{})", path, image.width, image.height)
    return path
