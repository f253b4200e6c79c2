"""
Distance primitives in RGB color space.

All functions take colors as float arrays of shape (n, 3).
"""

import numpy as np
from numba import jit


def euclidean_distance(p: np.ndarray, q: np.ndarray) -> float:
    """Euclidean distance between two color vectors."""
    diff = np.asarray(p, dtype=np.float64) - np.asarray(q, dtype=np.float64)
    return float(np.sqrt(np.dot(diff, diff)))


def squared_distances(points: np.ndarray, centers: np.ndarray) -> np.ndarray:
    """
    Squared Euclidean distance from every point to every center.

    Args:
        points: Array of shape (n, d)
        centers: Array of shape (k, d)

    Returns:
        Array of shape (n, k)

    """
    diff = points[:, np.newaxis, :] - centers[np.newaxis, :, :]
    return np.einsum("nkd,nkd->nk", diff, diff)


@jit(nopython=True, cache=True)
def assign_to_nearest(points: np.ndarray, centers: np.ndarray) -> np.ndarray:
    """
    Label each point with the index of its nearest center.

    Ties go to the lowest center index (strict comparison, first center wins).

    Args:
        points: float64 array of shape (n, d)
        centers: float64 array of shape (k, d)

    Returns:
        int64 array of shape (n,)

    """
    n_points = points.shape[0]
    n_centers = centers.shape[0]
    n_dims = points.shape[1]
    labels = np.empty(n_points, dtype=np.int64)

    for i in range(n_points):
        best_label = 0
        best_dist = np.inf
        for j in range(n_centers):
            dist = 0.0
            for c in range(n_dims):
                diff = points[i, c] - centers[j, c]
                dist += diff * diff
            if dist < best_dist:
                best_dist = dist
                best_label = j
        labels[i] = best_label

    return labels


def nearest_squared_distance(points: np.ndarray, centers: np.ndarray) -> np.ndarray:
    """Squared distance from every point to its nearest center."""
    return squared_distances(points, centers).min(axis=1)
