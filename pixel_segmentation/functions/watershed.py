"""
Marker-controlled watershed over the luma gradient of an image.

1. Project RGB onto luma and take the finite-difference gradient magnitude
2. Connected low-gradient areas (gradient < sigma * WATERSHED_THRESHOLD_PER_SIGMA) become seed basins
3. Basins are flooded in order of ascending gradient until they meet at the ridges
"""

import logging
import numbers

import numpy as np
from scipy.ndimage import generate_binary_structure, label
from skimage.segmentation import watershed

from ..config import WATERSHED_THRESHOLD_PER_SIGMA
from ..exceptions import EmptyInputError, InvalidParameterError
from .color import rgb_to_luma

log = logging.getLogger(__name__)

MIN_AXIS_LENGTH = 2  # np.gradient needs two samples along an axis


def gradient_magnitude(gray: np.ndarray) -> np.ndarray:
    """
    Finite-difference gradient magnitude of a 2D image.

    Central differences inside the image, one-sided differences at the borders.
    An axis with a single sample contributes no gradient.
    """
    gray = np.asarray(gray, dtype=np.float64)
    components = []
    for axis in range(gray.ndim):
        if gray.shape[axis] < MIN_AXIS_LENGTH:
            components.append(np.zeros_like(gray))
        else:
            components.append(np.gradient(gray, axis=axis))
    return np.sqrt(sum(component**2 for component in components))


def find_seed_basins(gradient: np.ndarray, threshold: float) -> tuple[np.ndarray, int]:
    """
    Label connected regions whose gradient lies below the threshold.

    Falls back to the single lowest-gradient pixel when no pixel qualifies.

    Returns:
        markers: int array, 0 = unlabeled, 1..n_markers = seed basins
        n_markers: Number of seed basins

    """
    struct = generate_binary_structure(2, 2)  # 8-connectivity
    markers, n_markers = label(gradient < threshold, structure=struct)

    if n_markers == 0:
        markers = np.zeros(gradient.shape, dtype=np.int32)
        markers[np.unravel_index(np.argmin(gradient), gradient.shape)] = 1
        n_markers = 1

    return markers, n_markers


def watershed_clustering(
    points: np.ndarray, width: int, height: int, sigma: float
) -> tuple[np.ndarray, np.ndarray, int]:
    """
    Segment an image into gradient basins.

    Args:
        points: float64 array of shape (width * height, 3), row-major
        width: Image width in pixels
        height: Image height in pixels
        sigma: Scales the gradient threshold that marks seed basins, > 0

    Returns:
        labels: int64 array of shape (n,) with values in [0, n_regions)
        centroids: Mean color of each region, shape (n_regions, 3)
        n_regions: Number of regions

    """
    n_points = points.shape[0]
    if n_points == 0 or width == 0 or height == 0:
        msg = "Cannot segment an image without pixels"
        raise EmptyInputError(msg)
    if width < 0 or height < 0 or width * height != n_points:
        msg = f"Image size {width}x{height} does not match {n_points} pixels"
        raise InvalidParameterError(msg)
    if isinstance(sigma, bool) or not isinstance(sigma, numbers.Real):
        msg = f"Sigma must be a real number, got {sigma!r}"
        raise InvalidParameterError(msg)
    if not np.isfinite(sigma) or sigma <= 0:
        msg = f"Sigma must be a positive real number, got {sigma!r}"
        raise InvalidParameterError(msg)

    points = np.asarray(points, dtype=np.float64)
    gray = rgb_to_luma(points).reshape(height, width)
    gradient = gradient_magnitude(gray)

    threshold = sigma * WATERSHED_THRESHOLD_PER_SIGMA
    markers, n_markers = find_seed_basins(gradient, threshold)
    log.debug(f"Watershed: {n_markers} seed basins below gradient {threshold:.2f}")

    regions = watershed(gradient, markers)
    labels = regions.reshape(-1).astype(np.int64) - 1

    counts = np.bincount(labels, minlength=n_markers)
    sums = np.zeros((n_markers, 3), dtype=np.float64)
    np.add.at(sums, labels, points)
    centroids = sums / counts[:, np.newaxis]

    return labels, centroids, n_markers
