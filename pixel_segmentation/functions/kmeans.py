"""
K-means clustering of pixel colors (Lloyd's algorithm).

Seeding:
1. kmeans++: first centroid uniform over pixels, later ones sampled with probability
   proportional to the squared distance to the nearest chosen centroid
2. random: centroids drawn uniformly from the RGB cube

Stopping:
1. converge: stop once no label changes, at most KMEANS_MAX_ITERATIONS passes
2. fixed: exactly KMEANS_FIXED_ITERATIONS passes, no early stop

A cluster left empty after an assignment pass takes the color of a centroid picked
uniformly at random from the current centroid set.
"""

import logging
from collections.abc import Callable

import numpy as np

from ..config import KMEANS_FIXED_ITERATIONS, KMEANS_INIT_METHODS, KMEANS_MAX_ITERATIONS, KMEANS_STOPPING_RULES
from ..exceptions import EmptyInputError, InvalidParameterError, SegmentationCancelled
from .distance import assign_to_nearest, squared_distances

log = logging.getLogger(__name__)


def kmeans_plus_plus_seeds(points: np.ndarray, n_clusters: int, rng: np.random.Generator) -> np.ndarray:
    """
    Pick initial centroids with k-means++ seeding.

    Args:
        points: float64 array of shape (n, 3)
        n_clusters: Number of centroids to pick
        rng: Random source

    Returns:
        centroids: float64 array of shape (n_clusters, 3), each one a copy of a pixel color

    """
    n_points = points.shape[0]
    centroids = np.empty((n_clusters, points.shape[1]), dtype=np.float64)
    centroids[0] = points[rng.integers(n_points)]

    # Squared distance to the nearest chosen centroid, updated with each new pick
    dist_sq = np.full(n_points, np.inf)
    for i in range(1, n_clusters):
        np.minimum(dist_sq, squared_distances(points, centroids[i - 1 : i])[:, 0], out=dist_sq)
        total = dist_sq.sum()

        if total <= 0:
            # Every pixel already coincides with a centroid
            chosen = rng.integers(n_points)
        else:
            # Cumulative-sum threshold sampling against a uniform draw scaled by the total
            threshold = rng.random() * total
            chosen = int(np.searchsorted(np.cumsum(dist_sq), threshold, side="right"))
            chosen = min(chosen, n_points - 1)

        centroids[i] = points[chosen]

    return centroids


def random_seeds(n_clusters: int, rng: np.random.Generator) -> np.ndarray:
    """Draw centroids uniformly from the RGB cube [0, 255]^3."""
    return rng.random((n_clusters, 3)) * 255


def update_centroids(
    points: np.ndarray, labels: np.ndarray, centroids: np.ndarray, rng: np.random.Generator
) -> tuple[np.ndarray, np.ndarray]:
    """
    Move each centroid to the mean of its members.

    Args:
        points: float64 array of shape (n, 3)
        labels: int64 array of shape (n,)
        centroids: Current centroids, shape (k, 3)
        rng: Random source for reseeding empty clusters

    Returns:
        new_centroids: float64 array of shape (k, 3)
        empty_clusters: Indices of clusters that received no pixels

    """
    n_clusters = centroids.shape[0]
    counts = np.bincount(labels, minlength=n_clusters)
    sums = np.zeros_like(centroids, dtype=np.float64)
    np.add.at(sums, labels, points)

    new_centroids = centroids.astype(np.float64, copy=True)
    filled = counts > 0
    new_centroids[filled] = sums[filled] / counts[filled, np.newaxis]

    empty_clusters = np.flatnonzero(~filled)
    for cluster_idx in empty_clusters:
        new_centroids[cluster_idx] = new_centroids[rng.integers(n_clusters)]

    return new_centroids, empty_clusters


def kmeans_clustering(
    points: np.ndarray,
    n_clusters: int,
    rng: np.random.Generator,
    *,
    init: str = "kmeans++",
    stopping: str = "converge",
    should_cancel: Callable[[], bool] | None = None,
) -> tuple[np.ndarray, np.ndarray, int]:
    """
    Partition pixel colors into n_clusters groups.

    Args:
        points: float64 array of shape (n, 3)
        n_clusters: Number of clusters, 1 <= n_clusters <= n
        rng: Random source (seeding and empty-cluster reseeding)
        init: 'kmeans++' or 'random'
        stopping: 'converge' or 'fixed'
        should_cancel: Polled before every pass; returning True aborts the run

    Returns:
        labels: int64 array of shape (n,) with values in [0, n_clusters)
        centroids: float64 array of shape (n_clusters, 3)
        n_iter: Number of assignment passes performed

    """
    n_points = points.shape[0]
    if n_points == 0:
        msg = "Cannot cluster an image without pixels"
        raise EmptyInputError(msg)
    if isinstance(n_clusters, bool) or not isinstance(n_clusters, (int, np.integer)) or n_clusters < 1:
        msg = f"Number of clusters must be a positive integer, got {n_clusters!r}"
        raise InvalidParameterError(msg)
    if n_clusters > n_points:
        msg = f"Number of clusters ({n_clusters}) exceeds number of pixels ({n_points})"
        raise InvalidParameterError(msg)
    if init not in KMEANS_INIT_METHODS:
        msg = f"Unknown init: {init}. Choose from {KMEANS_INIT_METHODS}"
        raise InvalidParameterError(msg)
    if stopping not in KMEANS_STOPPING_RULES:
        msg = f"Unknown stopping rule: {stopping}. Choose from {KMEANS_STOPPING_RULES}"
        raise InvalidParameterError(msg)

    points = np.ascontiguousarray(points, dtype=np.float64)
    n_clusters = int(n_clusters)

    if init == "kmeans++":
        centroids = kmeans_plus_plus_seeds(points, n_clusters, rng)
    else:
        centroids = random_seeds(n_clusters, rng)

    max_iter = KMEANS_MAX_ITERATIONS if stopping == "converge" else KMEANS_FIXED_ITERATIONS
    labels = np.full(n_points, -1, dtype=np.int64)
    n_iter = 0

    for iteration in range(max_iter):
        if should_cancel is not None and should_cancel():
            msg = f"K-means cancelled after {iteration} passes"
            raise SegmentationCancelled(msg)

        new_labels = assign_to_nearest(points, centroids)
        n_iter = iteration + 1

        if stopping == "converge" and np.array_equal(new_labels, labels):
            log.debug(f"K-means converged after {n_iter} passes")
            break

        labels = new_labels
        centroids, empty_clusters = update_centroids(points, labels, centroids, rng)
        if len(empty_clusters) > 0:
            log.debug(f"Pass {n_iter}: reseeded empty clusters {empty_clusters.tolist()}")
    else:
        if stopping == "converge":
            log.info(f"K-means stopped at the {max_iter}-pass limit without converging")

    return labels, centroids, n_iter
