"""Tests for contact_sheet.layout."""
from __future__ import annotations

import pytest

from contact_sheet.errors import ArgumentError
from contact_sheet.layout import (
    canvas_size,
    cell_origins,
    check_rounded_rect,
    compute_timestamp_position,
    grid_desired_size,
    header_height,
    max_line_length,
    prepare_metadata_text_lines,
    render_timestamp,
    wrap_line,
)
from contact_sheet.models import Dimensions, Grid, MetadataPosition, TimestampPosition

HD = Dimensions(1920, 1080, 1920, 1080)


def _mono(text: str) -> float:
    """Every character is 10 px wide."""
    return 10.0 * len(text)


# --- grid geometry --------------------------------------------------------

class TestGridDesiredSize:
    def test_default_sheet(self):
        assert grid_desired_size(Grid(4, 4), HD, 1500, 5) == Grid(371, 208)

    def test_wide_spacing(self):
        cell = grid_desired_size(Grid(4, 4), HD, 1500, 15)
        assert cell.x == 363
        assert cell.y == 204

    def test_portrait(self):
        cell = grid_desired_size(Grid(2, 1), Dimensions(1080, 1920, 1080, 1920), 500, 0)
        assert cell == Grid(250, 444)


class TestCanvasSize:
    def test_spacing_on_every_edge(self):
        assert canvas_size(Grid(4, 4), Grid(371, 208), 5, 5) == (4 * 376 + 5, 4 * 213 + 5)


class TestHeaderHeight:
    def test_lines(self):
        assert header_height(4, 16, 10, MetadataPosition.TOP) == 2 * 10 + 4 * 19

    def test_hidden(self):
        assert header_height(4, 16, 10, MetadataPosition.HIDDEN) == 0


class TestCellOrigins:
    def test_row_major(self):
        origins = cell_origins(5, Grid(2, 3), Grid(100, 50), 5, 5, top=40)
        assert origins[:3] == [(5, 45), (110, 45), (5, 100)]
        assert len(origins) == 5

    def test_capped_at_grid(self):
        assert len(cell_origins(10, Grid(2, 2), Grid(10, 10), 1, 1)) == 4


# --- timestamp placement --------------------------------------------------

class TestTimestampPosition:
    ARGS = dict(text_size=(40, 12), cell=Grid(200, 100), horizontal_margin=5, vertical_margin=5,
                horizontal_padding=3, vertical_padding=1)

    @pytest.mark.parametrize(
        "position, expected",
        [
            (TimestampPosition.NW, (5, 5)),
            (TimestampPosition.NORTH, (77, 5)),
            (TimestampPosition.NE, (149, 5)),
            (TimestampPosition.WEST, (5, 43)),
            (TimestampPosition.CENTER, (77, 43)),
            (TimestampPosition.EAST, (149, 43)),
            (TimestampPosition.SW, (5, 81)),
            (TimestampPosition.SOUTH, (77, 81)),
            (TimestampPosition.SE, (149, 81)),
        ],
    )
    def test_nine_positions(self, position, expected):
        corner, size = compute_timestamp_position(position, (0, 0), **self.ARGS)
        assert corner == expected
        assert size == (46, 14)

    def test_offset_by_cell_origin(self):
        corner, _ = compute_timestamp_position(TimestampPosition.NW, (100, 30), **self.ARGS)
        assert corner == (105, 35)

    def test_badge_stays_inside_cell(self):
        for position in TimestampPosition:
            (x, y), (w, h) = compute_timestamp_position(position, (0, 0), **self.ARGS)
            assert 0 <= x and x + w <= 200
            assert 0 <= y and y + h <= 100


# --- text wrapping --------------------------------------------------------

class TestMaxLineLength:
    def test_fits(self):
        assert max_line_length("short", _mono, 10, 200) == 5

    def test_truncates_to_width(self):
        # 200 - 2*10 = 180 px -> 18 characters
        assert max_line_length("x" * 40, _mono, 10, 200) == 18

    def test_at_least_one(self):
        assert max_line_length("abc", _mono, 10, 20) == 1


class TestWrapLine:
    def test_wraps_on_words(self):
        lines = wrap_line("alpha beta gamma delta", _mono, 0, 110)
        assert lines == ["alpha beta", "gamma delta"]
        assert all(_mono(line) <= 110 for line in lines)

    def test_long_word_is_broken(self):
        assert wrap_line("abcdefghij", _mono, 0, 40) == ["abcd", "efgh", "ij"]


class TestPrepareMetadataTextLines:
    def test_default_template(self, sample_media):
        lines = prepare_metadata_text_lines(sample_media, _mono, 10, 2000)
        assert lines == [
            "clip.mp4",
            "File size: 10.0 MiB",
            "Duration: 02:00.000",
            "Dimensions: 1920x1080",
        ]

    def test_custom_template(self, sample_media):
        lines = prepare_metadata_text_lines(sample_media, _mono, 10, 2000, "{video_codec} @ {frame_rate} fps")
        assert lines == ["h264 @ 25.0 fps"]

    def test_unknown_field(self, sample_media):
        with pytest.raises(ArgumentError):
            prepare_metadata_text_lines(sample_media, _mono, 10, 2000, "{nope}")

    def test_narrow_sheet_wraps(self, sample_media):
        lines = prepare_metadata_text_lines(sample_media, _mono, 10, 150)
        assert all(_mono(line) <= 130 for line in lines)
        assert len(lines) > 4


# --- misc -----------------------------------------------------------------

class TestRoundedRect:
    def test_radius_too_large(self):
        with pytest.raises(ArgumentError):
            check_rounded_rect((20, 10), 6)

    def test_radius_ok(self):
        check_rounded_rect((20, 10), 5)


class TestRenderTimestamp:
    def test_default(self):
        assert render_timestamp("{TIME}", 75.5, 120.0, 1) == "01:15.50"

    def test_fields(self):
        assert render_timestamp("#{THUMBNAIL_NUMBER} {H}:{M}:{S} / {DURATION}", 75.5, 120.0, 3) == "#3 0:01:15 / 02:00.00"

    def test_unknown_field(self):
        with pytest.raises(ArgumentError):
            render_timestamp("{WHEN}", 1.0, 2.0, 1)
