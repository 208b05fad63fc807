"""
Pytest configuration and fixtures for vectorizer tests
"""
import pytest
import sys
from pathlib import Path

import numpy as np

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))


def rgba(rgb: np.ndarray, alpha: int = 255) -> np.ndarray:
    """Append a constant alpha channel to an (H, W, 3) array"""
    height, width, _ = rgb.shape
    out = np.empty((height, width, 4), dtype=np.uint8)
    out[:, :, :3] = rgb
    out[:, :, 3] = alpha
    return out


@pytest.fixture
def make_buffer():
    """Factory turning (H, W, C) arrays into PixelBuffers; RGB gets opaque alpha"""
    from src.vectorization.buffers import PixelBuffer

    def _make(array):
        array = np.asarray(array, dtype=np.uint8)
        if array.ndim == 3 and array.shape[2] == 3:
            array = rgba(array)
        return PixelBuffer.from_array(array)
    return _make


@pytest.fixture
def line_image(make_buffer):
    """10x10 black image with a white 1px vertical line at x=5"""
    rgb = np.zeros((10, 10, 3), dtype=np.uint8)
    rgb[:, 5] = 255
    return make_buffer(rgba(rgb))


@pytest.fixture
def solid_image(make_buffer):
    """10x10 uniform gray image"""
    rgb = np.full((10, 10, 3), 120, dtype=np.uint8)
    return make_buffer(rgba(rgb))


@pytest.fixture
def noisy_image(make_buffer):
    """Random 24x32 RGBA image with varying alpha"""
    rng = np.random.default_rng(1234)
    return make_buffer(rng.integers(0, 256, size=(24, 32, 4), dtype=np.uint8))


@pytest.fixture
def square_image(make_buffer):
    """40x40 white image with a red filled square"""
    rgb = np.full((40, 40, 3), 255, dtype=np.uint8)
    rgb[10:30, 10:30] = (200, 0, 0)
    return make_buffer(rgba(rgb))


@pytest.fixture
def write_png(tmp_path):
    """Write a buffer to a PNG file and return its path"""
    from PIL import Image

    def _write(buffer, name="image.png"):
        path = tmp_path / name
        Image.fromarray(buffer.data.copy()).save(path)
        return path
    return _write


@pytest.fixture
def output_dir(tmp_path):
    """Temporary output directory for tests"""
    output = tmp_path / "output"
    output.mkdir()
    return output
