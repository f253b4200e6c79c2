"""Color helpers: HSL conversion, synthetic palettes and gray projection."""

import colorsys

import numpy as np

# ITU-R BT.601 luma weights
LUMA_WEIGHTS = np.array([0.299, 0.587, 0.114])


def _to_byte(value: float) -> int:
    # Round half up, matching canvas conventions
    return int(np.floor(value * 255 + 0.5))


def hsl_to_rgb(hue: float, saturation: float, lightness: float) -> tuple[int, int, int]:
    """
    Convert an HSL color to 8-bit RGB.

    Args:
        hue: Hue as a fraction of the full circle, in [0, 1)
        saturation: Saturation in [0, 1]
        lightness: Lightness in [0, 1]

    Returns:
        (red, green, blue) with each channel in [0, 255]

    """
    r, g, b = colorsys.hls_to_rgb(hue % 1.0, lightness, saturation)
    return _to_byte(r), _to_byte(g), _to_byte(b)


def hue_palette(n_colors: int, saturation: float, lightness: float) -> np.ndarray:
    """
    Evenly spaced colors around the hue circle.

    Color i has hue i / n_colors, so neighbouring cluster indices stay visually distinct.

    Returns:
        uint8 array of shape (n_colors, 3)

    """
    palette = np.zeros((n_colors, 3), dtype=np.uint8)
    for i in range(n_colors):
        palette[i] = hsl_to_rgb(i / n_colors, saturation, lightness)
    return palette


def centroid_palette(centroids: np.ndarray) -> np.ndarray:
    """Round real-valued centroids to displayable uint8 colors."""
    rounded = np.floor(np.asarray(centroids, dtype=np.float64) + 0.5)
    return np.clip(rounded, 0, 255).astype(np.uint8)


def rgb_to_luma(rgb: np.ndarray) -> np.ndarray:
    """Project (..., 3) RGB values onto luma."""
    return np.asarray(rgb, dtype=np.float64) @ LUMA_WEIGHTS
