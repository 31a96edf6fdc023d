"""
Pytest configuration and shared fixtures for negative_viewer tests.
"""

import numpy as np
import pytest

from negative_viewer.core.buffer import PixelBuffer
from negative_viewer.core.params import BaseColor, GlobalTone, Parameters


@pytest.fixture
def neutral_params():
    """
    Parameters under which the pipeline is a pure inversion:
    base channels below the divisor threshold, unit exposure/brightness/contrast.
    """
    return Parameters(
        base_color=BaseColor(5, 5, 5),
        exposure=1.0,
        global_tone=GlobalTone(brightness=1.0, contrast=1.0),
    )


@pytest.fixture
def random_buffer():
    """64 x 48 RGBA buffer with random colors and alpha."""
    rng = np.random.default_rng(1234)
    arr = rng.integers(0, 256, size=(48, 64, 4), dtype=np.uint8)
    return PixelBuffer(arr)


@pytest.fixture
def base_buffer():
    """10 x 10 gray buffer with the film-base color at (5, 5)."""
    arr = np.full((10, 10, 4), 100, dtype=np.uint8)
    arr[..., 3] = 255
    arr[5, 5] = (240, 170, 140, 255)
    return PixelBuffer(arr)


@pytest.fixture
def make_solid():
    """Factory for single-color RGBA buffers."""

    def _make(width, height, rgba):
        arr = np.empty((height, width, 4), dtype=np.uint8)
        arr[...] = rgba
        return PixelBuffer(arr)

    return _make
