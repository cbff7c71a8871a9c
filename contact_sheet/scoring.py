"""Per-frame sharpness and colour scores."""
from __future__ import annotations

import math
from pathlib import Path
from typing import Sequence

import cv2
import numpy as np

DEFAULT_PERCENTAGE = 0.05


def avg9x(values: Sequence[float], percentage: float = DEFAULT_PERCENTAGE) -> float:
    """Central value of the leading ``percentage`` slice of ``values``.

    An even slice gives the mean of its two middle elements, an odd slice
    gives its middle element halved.
    """

    length = int(math.floor(percentage * len(values)))
    if length == 0:
        return 0.0
    subset = values[:length]
    half = length // 2
    if length % 2 == 0:
        return (float(subset[half - 1]) + float(subset[half])) / 2.0
    return float(subset[half]) / 2.0


def _read(path: Path, flags: int) -> np.ndarray:
    image = cv2.imread(str(path), flags)
    if image is None:
        raise OSError(f"Unable to read image {path}")
    return image


def blurriness_from_gray(gray: np.ndarray) -> float:
    spectrum = np.abs(np.fft.fft2(gray.astype(np.float64)))
    magnitudes = np.unique(spectrum.ravel())[::-1]
    energy = avg9x(magnitudes)
    if energy <= 0:
        return 1.0
    return 1.0 / energy


def compute_blurriness(path: Path) -> float:
    """Inverse high-percentile spectral energy; lower means sharper."""

    return blurriness_from_gray(_read(path, cv2.IMREAD_GRAYSCALE))


def compute_avg_colour(path: Path) -> float:
    """Mean of the per-channel means, 0-255."""

    image = _read(path, cv2.IMREAD_COLOR)
    return float(image.reshape(-1, 3).mean(axis=0).mean())
