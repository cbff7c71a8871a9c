"""Shared fixtures for the contact sheet test suite."""
from __future__ import annotations

from pathlib import Path
from typing import Callable, List

import numpy as np
import pytest
from PIL import Image

from contact_sheet.config import AppConfig
from contact_sheet.models import Dimensions, Frame, MediaAttributes


@pytest.fixture
def default_config() -> AppConfig:
    """Return a default AppConfig with no file."""
    return AppConfig()


@pytest.fixture
def sample_media() -> MediaAttributes:
    """A two minute 1080p clip."""
    return MediaAttributes(
        path=Path("clip.mp4"),
        filename="clip.mp4",
        duration_seconds=120.0,
        duration="02:00.000",
        size_bytes=10 * 1024 * 1024,
        size="10.0 MiB",
        dimensions=Dimensions(1920, 1080, 1920, 1080),
        video_codec="h264",
        frame_rate=25.0,
    )


@pytest.fixture
def sample_yaml(tmp_path: Path) -> Path:
    """Write a minimal config YAML and return its path."""
    cfg = tmp_path / "contact_sheet.yaml"
    cfg.write_text(
        "capture:\n"
        "  start_delay_percent: 10\n"
        "  interval: 30s\n"
        "grid:\n"
        "  grid: 3x2\n"
        "  width: 900\n"
        "timestamp:\n"
        "  position: nw\n"
        "  background_colour: '112233cc'\n"
        "output:\n"
        "  image_format: png\n"
    )
    return cfg


def write_image(path: Path, size=(64, 36), colour=(128, 128, 128), noise: bool = False, seed: int = 0) -> Path:
    if noise:
        rng = np.random.default_rng(seed)
        pixels = rng.integers(0, 256, size=(size[1], size[0], 3), dtype=np.uint8)
    else:
        pixels = np.zeros((size[1], size[0], 3), dtype=np.uint8)
        pixels[:, :] = colour
    Image.fromarray(pixels, "RGB").save(path)
    return path


@pytest.fixture
def make_frames(tmp_path: Path) -> Callable[..., List[Frame]]:
    """Factory writing ``count`` flat-colour PNG frames one second apart."""

    def _make(count: int, size=(64, 36)) -> List[Frame]:
        frames = []
        for i in range(count):
            shade = (40 + 20 * i) % 256
            path = write_image(tmp_path / f"frame{i:03d}.png", size=size, colour=(shade, 255 - shade, 90))
            frames.append(Frame(filename=path, timestamp=float(i + 1), blurriness=1.0 / (i + 1), avg_colour=float(shade)))
        return frames

    return _make


class FakeExtractor:
    """Writes a synthetic PNG instead of calling ffmpeg."""

    def __init__(self, fail_at: float | None = None, noise: bool = True) -> None:
        self.fail_at = fail_at
        self.noise = noise
        self.calls: List[float] = []

    def capture(self, timestamp: float, width: int, height: int, out_path: Path) -> Path:
        self.calls.append(timestamp)
        if self.fail_at is not None and abs(timestamp - self.fail_at) < 1e-6:
            raise RuntimeError("decoder exploded")
        return write_image(Path(out_path), size=(width, height), noise=self.noise, seed=int(timestamp * 1000))


@pytest.fixture
def fake_extractor() -> FakeExtractor:
    return FakeExtractor()


@pytest.fixture
def extractor_factory() -> Callable[..., FakeExtractor]:
    return FakeExtractor


@pytest.fixture
def image_writer() -> Callable[..., Path]:
    """Return a helper writing flat or noisy RGB images."""
    return write_image
