"""Tests for contact_sheet.config."""
from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from contact_sheet.config import AppConfig, CaptureConfig, GridConfig, OutputConfig, TimestampConfig, load_config
from contact_sheet.errors import ArgumentError, ColourError, GridShapeError
from contact_sheet.models import Grid, MetadataPosition, TimestampPosition


class TestDefaults:
    def test_sections(self, default_config):
        assert default_config.grid.grid == Grid(4, 4)
        assert default_config.grid.width == 1500
        assert default_config.capture.start_delay_percent == 7.0
        assert default_config.metadata.position == MetadataPosition.TOP
        assert default_config.timestamp.position == TimestampPosition.SE
        assert default_config.timestamp.background_colour == "000000aa"
        assert default_config.output.image_format == "jpg"


class TestLoadConfig:
    def test_missing_file_gives_defaults(self, tmp_path: Path):
        assert load_config(tmp_path / "nope.yaml") == AppConfig()

    def test_yaml_values(self, sample_yaml: Path):
        config = load_config(sample_yaml)
        assert config.capture.start_delay_percent == 10
        assert config.capture.interval == pytest.approx(30.0)
        assert config.grid.grid == Grid(3, 2)
        assert config.grid.width == 900
        assert config.timestamp.position == TimestampPosition.NW
        assert config.output.image_format == "png"

    def test_empty_file(self, tmp_path: Path):
        cfg = tmp_path / "empty.yaml"
        cfg.write_text("")
        assert load_config(cfg) == AppConfig()


class TestValidators:
    def test_bad_colour(self):
        with pytest.raises(ColourError):
            GridConfig(background_colour="12345")

    def test_colour_normalised(self):
        assert TimestampConfig(font_colour="#FFAA00").font_colour == "ffaa00"

    def test_bad_grid(self):
        with pytest.raises(GridShapeError):
            GridConfig(grid="four by four")

    def test_grid_from_list(self):
        assert GridConfig(grid=[2, 5]).grid == Grid(2, 5)

    def test_bad_interval(self):
        with pytest.raises(ArgumentError):
            CaptureConfig(interval="soon")

    def test_frame_type(self):
        with pytest.raises(ValidationError):
            CaptureConfig(frame_type="Z")

    def test_colour_distance(self):
        with pytest.raises(ValidationError):
            CaptureConfig(colour_distance="nearest")

    def test_manual_single_value(self):
        assert CaptureConfig(manual_timestamps="01:30").manual_timestamps == ["01:30"]

    def test_image_format(self):
        assert OutputConfig(image_format=".PNG").image_format == "png"
        with pytest.raises(ValidationError):
            OutputConfig(image_format="gif")

    def test_exclude_extensions_from_string(self):
        assert OutputConfig(exclude_extensions="srt, .TXT").exclude_extensions == ["srt", "txt"]

    def test_capture_alpha_range(self):
        with pytest.raises(ValidationError):
            GridConfig(capture_alpha=300)

    def test_assignment_is_validated(self, default_config):
        default_config.grid.grid = "5x1"
        assert default_config.grid.grid == Grid(5, 1)
        with pytest.raises(ValidationError):
            default_config.grid.width = 0


class TestPackageExports:
    def test_lazy_attributes(self):
        import contact_sheet

        assert contact_sheet.load_config is load_config
        assert contact_sheet.AppConfig is AppConfig
        with pytest.raises(AttributeError):
            contact_sheet.render
