import numpy as np
import pytest

from pixel_segmentation import PixelBuffer

BLOB_CENTERS = np.array([[20, 20, 20], [128, 200, 60], [230, 40, 220]])
BLOB_WIDTH = 10


@pytest.fixture
def rng() -> np.random.Generator:
    return np.random.default_rng(12345)


@pytest.fixture
def two_tone_pixels() -> PixelBuffer:
    """2x2 image: two dark pixels on top, two light pixels below."""
    return PixelBuffer.from_rgb(2, 2, [(10, 10, 10), (10, 10, 10), (240, 240, 240), (240, 240, 240)])


@pytest.fixture
def blob_colors() -> np.ndarray:
    """Three well separated color blobs, one image row per blob, +/-5 noise per channel."""
    noise_rng = np.random.default_rng(7)
    rows = [center + noise_rng.integers(-5, 6, size=(BLOB_WIDTH, 3)) for center in BLOB_CENTERS]
    return np.vstack(rows)


@pytest.fixture
def blob_pixels(blob_colors: np.ndarray) -> PixelBuffer:
    return PixelBuffer.from_rgb(BLOB_WIDTH, len(BLOB_CENTERS), blob_colors)
