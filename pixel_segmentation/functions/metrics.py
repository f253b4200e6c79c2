"""
Internal cluster validity metrics for a completed pixel partition.

- silhouette_score: separation of each pixel's cluster from the next nearest cluster, in [-1, 1]
- davies_bouldin_index: mean worst-case scatter/separation ratio, >= 0, lower is better
- calinski_harabasz_index: between/within dispersion ratio, higher is better

All distances are Euclidean in RGB space.
"""

import logging

import numpy as np
from numba import jit, prange

from ..exceptions import EmptyInputError, InsufficientClustersError, InvalidParameterError
from .distance import euclidean_distance

log = logging.getLogger(__name__)


@jit(nopython=True, parallel=True, cache=True)
def cluster_distance_sums(points: np.ndarray, labels: np.ndarray, n_clusters: int) -> np.ndarray:
    """
    Sum of distances from every point to all points of each cluster.

    Args:
        points: float64 array of shape (n, d)
        labels: int64 array of shape (n,), values in [0, n_clusters)
        n_clusters: Number of clusters

    Returns:
        float64 array of shape (n, n_clusters)

    """
    n_points = points.shape[0]
    n_dims = points.shape[1]
    sums = np.zeros((n_points, n_clusters))

    for i in prange(n_points):
        for j in range(n_points):
            dist = 0.0
            for c in range(n_dims):
                diff = points[i, c] - points[j, c]
                dist += diff * diff
            sums[i, labels[j]] += np.sqrt(dist)

    return sums


def _check_partition(points: np.ndarray, labels: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    points = np.asarray(points, dtype=np.float64)
    labels = np.asarray(labels, dtype=np.int64).reshape(-1)
    if points.shape[0] == 0:
        msg = "Cannot score a partition without pixels"
        raise EmptyInputError(msg)
    if points.shape[0] != labels.shape[0]:
        msg = f"Got {points.shape[0]} pixels but {labels.shape[0]} labels"
        raise InvalidParameterError(msg)
    return points, labels


def _check_label_range(labels: np.ndarray, n_clusters: int) -> None:
    if labels.size and (labels.min() < 0 or labels.max() >= n_clusters):
        msg = f"Labels must lie in [0, {n_clusters}), got [{labels.min()}, {labels.max()}]"
        raise InvalidParameterError(msg)


def silhouette_samples(points: np.ndarray, labels: np.ndarray) -> np.ndarray:
    """
    Per-pixel silhouette coefficients over the full given population.

    a = mean distance to the other members of the pixel's cluster
    b = smallest mean distance to the members of another cluster
    s = (b - a) / max(a, b); 0 for singleton clusters and when a and b are both 0
    """
    points, labels = _check_partition(points, labels)
    cluster_ids, dense_labels = np.unique(labels, return_inverse=True)
    dense_labels = dense_labels.reshape(-1).astype(np.int64)
    n_clusters = len(cluster_ids)
    if n_clusters < 2:
        return np.zeros(points.shape[0])

    sizes = np.bincount(dense_labels, minlength=n_clusters).astype(np.float64)
    sums = cluster_distance_sums(np.ascontiguousarray(points), dense_labels, n_clusters)

    rows = np.arange(points.shape[0])
    own_sizes = sizes[dense_labels]
    with np.errstate(divide="ignore", invalid="ignore"):
        a = np.where(own_sizes > 1, sums[rows, dense_labels] / (own_sizes - 1), 0.0)

    mean_to_clusters = sums / sizes[np.newaxis, :]
    mean_to_clusters[rows, dense_labels] = np.inf
    b = mean_to_clusters.min(axis=1)

    denom = np.maximum(a, b)
    scores = np.zeros(points.shape[0])
    scored = (own_sizes > 1) & (denom > 0)
    scores[scored] = (b[scored] - a[scored]) / denom[scored]
    return scores


def silhouette_score(
    points: np.ndarray,
    labels: np.ndarray,
    *,
    sample_size: int | None = None,
    rng: np.random.Generator | None = None,
) -> float:
    """
    Mean silhouette coefficient of a partition.

    The computation is quadratic in pixel count. With sample_size set and smaller than
    the population, the score is computed on a uniform sample drawn without replacement;
    the sampled score tends to the full-population score as sample_size grows.

    Args:
        points: Pixel colors, shape (n, 3)
        labels: Cluster label per pixel, shape (n,)
        sample_size: Optional cap on the number of pixels scored
        rng: Random source for sampling

    Returns:
        Mean coefficient; 0.0 when fewer than two clusters are present

    """
    points, labels = _check_partition(points, labels)
    n_points = points.shape[0]

    if sample_size is not None:
        if sample_size < 1:
            msg = f"sample_size must be positive, got {sample_size}"
            raise InvalidParameterError(msg)
        if sample_size < n_points:
            rng = rng if rng is not None else np.random.default_rng()
            picked = np.sort(rng.choice(n_points, sample_size, replace=False))
            log.debug(f"Silhouette computed on {sample_size} of {n_points} pixels")
            points = points[picked]
            labels = labels[picked]

    return float(np.mean(silhouette_samples(points, labels)))


def partition_by_label(points: np.ndarray, labels: np.ndarray, n_clusters: int) -> list[np.ndarray]:
    """Split pixels into per-cluster member arrays, index i holding the members of label i."""
    points, labels = _check_partition(points, labels)
    _check_label_range(labels, n_clusters)
    return [points[labels == cluster_idx] for cluster_idx in range(n_clusters)]


def cluster_scatter(members: np.ndarray, centroid: np.ndarray) -> float:
    """Mean distance from the members of a cluster to its centroid; 0 for an empty cluster."""
    if len(members) == 0:
        return 0.0
    return float(np.mean(np.linalg.norm(members - centroid, axis=1)))


def davies_bouldin_index(points: np.ndarray, labels: np.ndarray, centroids: np.ndarray) -> float:
    """
    Davies-Bouldin index of a partition.

    For clusters i and j the ratio is (scatter(i) + scatter(j)) / distance(centroid_i, centroid_j).
    Coincident centroids give a ratio of 0 when both scatters are 0 and infinity otherwise.

    Args:
        points: Pixel colors, shape (n, 3)
        labels: Cluster label per pixel, values in [0, k)
        centroids: Centroid per cluster, shape (k, 3)

    Returns:
        Mean over clusters of the largest ratio

    """
    centroids = np.asarray(centroids, dtype=np.float64)
    n_clusters = centroids.shape[0]
    if n_clusters < 2:
        msg = f"Davies-Bouldin index needs at least 2 clusters, got {n_clusters}"
        raise InsufficientClustersError(msg)

    clusters = partition_by_label(points, labels, n_clusters)
    scatters = [cluster_scatter(members, centroid) for members, centroid in zip(clusters, centroids, strict=True)]

    db_index = 0.0
    for i in range(n_clusters):
        max_ratio = 0.0
        for j in range(n_clusters):
            if i == j:
                continue
            spread = scatters[i] + scatters[j]
            separation = euclidean_distance(centroids[i], centroids[j])
            if separation > 0:
                ratio = spread / separation
            else:
                ratio = 0.0 if spread == 0 else np.inf
            max_ratio = max(max_ratio, ratio)
        db_index += max_ratio

    return db_index / n_clusters


def calinski_harabasz_index(points: np.ndarray, labels: np.ndarray, centroids: np.ndarray) -> float:
    """
    Calinski-Harabasz index: (between_ss / (k - 1)) / (within_ss / (n - k)).

    Returns infinity for a partition with no within-cluster dispersion (0 if there is no
    between-cluster dispersion either).

    Raises:
        InsufficientClustersError: k == 1 or k == n

    """
    points, labels = _check_partition(points, labels)
    centroids = np.asarray(centroids, dtype=np.float64)
    n_clusters = centroids.shape[0]
    n_points = points.shape[0]
    if n_clusters <= 1 or n_clusters >= n_points:
        msg = f"Calinski-Harabasz index needs 1 < k < n, got k={n_clusters}, n={n_points}"
        raise InsufficientClustersError(msg)
    _check_label_range(labels, n_clusters)

    overall_centroid = points.mean(axis=0)
    sizes = np.bincount(labels, minlength=n_clusters)
    between_ss = float(np.sum(sizes * np.sum((centroids - overall_centroid) ** 2, axis=1)))
    within_ss = float(np.sum((points - centroids[labels]) ** 2))

    if within_ss == 0:
        return np.inf if between_ss > 0 else 0.0
    return (between_ss / (n_clusters - 1)) / (within_ss / (n_points - n_clusters))
