"""Pure layout geometry for the contact sheet."""
from __future__ import annotations

import textwrap
from typing import Callable, List, Optional, Tuple

from .errors import ArgumentError
from .models import Dimensions, Grid, MediaAttributes, MetadataPosition, TimestampPosition
from .utils import parse_duration, pretty_duration

Point = Tuple[int, int]
Size = Tuple[int, int]

DEFAULT_METADATA_TEMPLATE = "\n".join(
    [
        "{filename}",
        "File size: {size}",
        "Duration: {duration}",
        "Dimensions: {display_width}x{display_height}",
    ]
)
LINE_SPACING = 1.2


def grid_desired_size(grid: Grid, dimensions: Dimensions, width: int = 1500, horizontal_spacing: int = 5) -> Grid:
    """Size of a single cell so that ``grid.x`` cells and their gaps span ``width``."""

    return dimensions.desired_size((width - (grid.x - 1) * horizontal_spacing) // grid.x)


def canvas_size(grid: Grid, cell: Grid, horizontal_spacing: int, vertical_spacing: int) -> Size:
    width = grid.x * (cell.x + horizontal_spacing) + horizontal_spacing
    height = grid.y * (cell.y + vertical_spacing) + vertical_spacing
    return width, height


def header_height(num_lines: int, font_size: int, vertical_margin: int, position: MetadataPosition) -> int:
    if position == MetadataPosition.HIDDEN:
        return 0
    return 2 * vertical_margin + num_lines * line_height(font_size)


def line_height(font_size: int) -> int:
    return int(font_size * LINE_SPACING)


def cell_origins(
    count: int,
    grid: Grid,
    cell: Grid,
    horizontal_spacing: int,
    vertical_spacing: int,
    top: int = 0,
) -> List[Point]:
    """Upper-left corner of each of the first ``count`` cells, row-major."""

    origins = []
    for index in range(min(count, grid.cells)):
        row, col = divmod(index, grid.x)
        x = horizontal_spacing + col * (cell.x + horizontal_spacing)
        y = top + vertical_spacing + row * (cell.y + vertical_spacing)
        origins.append((x, y))
    return origins


def compute_timestamp_position(
    position: TimestampPosition,
    origin: Point,
    text_size: Size,
    cell: Grid,
    horizontal_margin: int,
    vertical_margin: int,
    horizontal_padding: int,
    vertical_padding: int,
) -> Tuple[Point, Size]:
    """Badge upper-left corner and size for a timestamp inside one cell."""

    text_width, text_height = text_size
    x, y = origin
    if position in (TimestampPosition.WEST, TimestampPosition.NW, TimestampPosition.SW):
        x_offset = horizontal_margin
    elif position in (TimestampPosition.NORTH, TimestampPosition.CENTER, TimestampPosition.SOUTH):
        x_offset = cell.x // 2 - text_width // 2 - horizontal_padding
    else:
        x_offset = cell.x - text_width - horizontal_margin - 2 * horizontal_padding

    if position in (TimestampPosition.NORTH, TimestampPosition.NE, TimestampPosition.NW):
        y_offset = vertical_margin
    elif position in (TimestampPosition.WEST, TimestampPosition.CENTER, TimestampPosition.EAST):
        y_offset = cell.y // 2 - text_height // 2 - vertical_padding
    else:
        y_offset = cell.y - text_height - vertical_margin - 2 * vertical_padding

    size = (text_width + 2 * horizontal_padding, text_height + 2 * vertical_padding)
    return (x + x_offset, y + y_offset), size


def max_line_length(text: str, measure: Callable[[str], float], margin: int, width: int) -> int:
    """Longest prefix of ``text`` (in characters) that fits ``width - 2*margin``.

    Always at least 1 so that wrapping makes progress.
    """

    max_width = width - 2 * margin
    if measure(text) <= max_width:
        return max(1, len(text))
    lo, hi = 1, len(text)
    while lo < hi:
        mid = (lo + hi + 1) // 2
        if measure(text[:mid]) <= max_width:
            lo = mid
        else:
            hi = mid - 1
    return lo


def wrap_line(text: str, measure: Callable[[str], float], margin: int, width: int) -> List[str]:
    remaining = text.strip()
    lines: List[str] = []
    while remaining:
        length = max_line_length(remaining, measure, margin, width)
        wrapped = textwrap.wrap(remaining, length)
        if not wrapped:
            break
        lines.append(wrapped[0])
        remaining = remaining[len(wrapped[0]) :].strip()
    return lines


def render_template(template: str, media: MediaAttributes) -> List[str]:
    try:
        rendered = template.format_map(media.template_fields())
    except (KeyError, IndexError, ValueError) as exc:
        raise ArgumentError(f"Invalid metadata template: {exc}") from exc
    return rendered.splitlines()


def prepare_metadata_text_lines(
    media: MediaAttributes,
    measure: Callable[[str], float],
    margin: int,
    width: int,
    template: Optional[str] = None,
) -> List[str]:
    """Header lines rendered from ``template`` and wrapped to the sheet width."""

    lines: List[str] = []
    for line in render_template(template or DEFAULT_METADATA_TEMPLATE, media):
        lines.extend(wrap_line(line, measure, margin, width))
    return lines


def check_rounded_rect(size: Size, radius: float) -> None:
    if 2 * radius > min(size):
        raise ArgumentError(
            f"Border radius {radius} is too large for a {size[0]}x{size[1]} timestamp badge."
        )


def timestamp_fields(seconds: float, duration: float, number: int) -> dict:
    """Values available to the timestamp label template."""

    parts = parse_duration(seconds)
    total = parse_duration(duration)
    return {
        "TIME": pretty_duration(seconds, show_centis=True),
        "DURATION": pretty_duration(duration, show_centis=True),
        "THUMBNAIL_NUMBER": number,
        "H": parts.hours,
        "M": f"{parts.minutes:02d}",
        "S": f"{parts.seconds:02d}",
        "c": f"{parts.centis:02d}",
        "m": f"{parts.millis:03d}",
        "dH": total.hours,
        "dM": f"{total.minutes:02d}",
        "dS": f"{total.seconds:02d}",
        "dc": f"{total.centis:02d}",
        "dm": f"{total.millis:03d}",
    }


def render_timestamp(template: str, seconds: float, duration: float, number: int) -> str:
    try:
        return template.format_map(timestamp_fields(seconds, duration, number))
    except (KeyError, IndexError, ValueError) as exc:
        raise ArgumentError(f"Invalid timestamp format {template!r}: {exc}") from exc
