"""
Mean-shift clustering of pixel colors with a flat kernel.

Works on the set of unique colors weighted by their pixel counts, so the cost scales
with palette size rather than image size. Seeds are the centers of a bandwidth-sized
grid over the occupied colors; each seed climbs to the weighted mean of the colors
inside its window until it moves less than a small fraction of the bandwidth.
Converged modes closer than the bandwidth are merged, keeping the better supported one.
"""

import logging
import numbers
from collections.abc import Callable

import numpy as np
from sklearn.neighbors import NearestNeighbors

from ..config import MEAN_SHIFT_MAX_ITERATIONS, MEAN_SHIFT_MAX_SEEDS, MEAN_SHIFT_STOP_FRACTION
from ..exceptions import EmptyInputError, InvalidParameterError, SegmentationCancelled
from .distance import assign_to_nearest

log = logging.getLogger(__name__)


def bin_seeds(colors: np.ndarray, bandwidth: float) -> np.ndarray:
    """Centers of the bandwidth-sized grid cells that hold at least one color."""
    occupied = np.unique(np.round(colors / bandwidth), axis=0)
    return occupied * bandwidth


def shift_to_mode(
    seed: np.ndarray,
    colors: np.ndarray,
    weights: np.ndarray,
    neighbors: NearestNeighbors,
    bandwidth: float,
    max_iter: int = MEAN_SHIFT_MAX_ITERATIONS,
) -> tuple[np.ndarray, float]:
    """
    Climb from a seed to the nearest density mode.

    Returns:
        mode: Converged position, shape (3,)
        support: Total pixel weight inside the window at the mode (0 if the window is empty)

    """
    stop_threshold = MEAN_SHIFT_STOP_FRACTION * bandwidth
    mean = np.asarray(seed, dtype=np.float64)
    support = 0.0

    for _ in range(max_iter):
        members = neighbors.radius_neighbors(mean[np.newaxis, :], bandwidth, return_distance=False)[0]
        if len(members) == 0:
            break

        member_weights = weights[members]
        support = float(member_weights.sum())
        new_mean = member_weights @ colors[members] / support
        shift = np.linalg.norm(new_mean - mean)
        mean = new_mean
        if shift <= stop_threshold:
            break

    return mean, support


def merge_modes(modes: np.ndarray, supports: np.ndarray, bandwidth: float) -> np.ndarray:
    """
    Keep modes in order of decreasing support, dropping any within bandwidth of a kept one.

    Ties in support keep the earlier mode.
    """
    order = np.argsort(-supports, kind="stable")
    kept: list[np.ndarray] = []
    for idx in order:
        candidate = modes[idx]
        if all(np.linalg.norm(candidate - other) >= bandwidth for other in kept):
            kept.append(candidate)
    return np.array(kept, dtype=np.float64)


def mean_shift_clustering(
    points: np.ndarray,
    bandwidth: float,
    rng: np.random.Generator,
    *,
    max_seeds: int = MEAN_SHIFT_MAX_SEEDS,
    should_cancel: Callable[[], bool] | None = None,
) -> tuple[np.ndarray, np.ndarray, int]:
    """
    Partition pixel colors into a data-determined number of clusters.

    Args:
        points: float64 array of shape (n, 3)
        bandwidth: Kernel radius in RGB units, > 0
        rng: Random source, used only when the seed grid exceeds max_seeds
        max_seeds: Upper bound on the number of seeds that are shifted
        should_cancel: Polled before every seed; returning True aborts the run

    Returns:
        labels: int64 array of shape (n,) with values in [0, n_clusters)
        centroids: Mean color of each cluster, shape (n_clusters, 3)
        n_modes: Number of modes before merging

    """
    if points.shape[0] == 0:
        msg = "Cannot cluster an image without pixels"
        raise EmptyInputError(msg)
    if isinstance(bandwidth, bool) or not isinstance(bandwidth, numbers.Real):
        msg = f"Bandwidth must be a real number, got {bandwidth!r}"
        raise InvalidParameterError(msg)
    if not np.isfinite(bandwidth) or bandwidth <= 0:
        msg = f"Bandwidth must be a positive real number, got {bandwidth!r}"
        raise InvalidParameterError(msg)
    if max_seeds < 1:
        msg = f"max_seeds must be at least 1, got {max_seeds}"
        raise InvalidParameterError(msg)

    points = np.ascontiguousarray(points, dtype=np.float64)
    colors, inverse, counts = np.unique(points, axis=0, return_inverse=True, return_counts=True)
    inverse = inverse.reshape(-1)
    weights = counts.astype(np.float64)

    seeds = bin_seeds(colors, bandwidth)
    if len(seeds) > max_seeds:
        log.info(f"Sampling {max_seeds} of {len(seeds)} mean-shift seeds")
        seeds = seeds[np.sort(rng.choice(len(seeds), max_seeds, replace=False))]

    neighbors = NearestNeighbors(radius=bandwidth).fit(colors)

    modes = []
    supports = []
    for seed_idx, seed in enumerate(seeds):
        if should_cancel is not None and should_cancel():
            msg = f"Mean shift cancelled after {seed_idx} of {len(seeds)} seeds"
            raise SegmentationCancelled(msg)

        mode, support = shift_to_mode(seed, colors, weights, neighbors, bandwidth)
        if support > 0:
            modes.append(mode)
            supports.append(support)

    merged = merge_modes(np.array(modes), np.array(supports), bandwidth)
    log.debug(f"Mean shift: {len(seeds)} seeds, {len(modes)} modes, {len(merged)} after merging")

    color_labels = assign_to_nearest(colors, merged)
    # Merged modes that attracted no color are dropped so labels stay contiguous
    used, color_labels = np.unique(color_labels, return_inverse=True)
    color_labels = color_labels.reshape(-1)
    n_clusters = len(used)

    sums = np.zeros((n_clusters, 3), dtype=np.float64)
    np.add.at(sums, color_labels, colors * weights[:, np.newaxis])
    cluster_weights = np.bincount(color_labels, weights=weights, minlength=n_clusters)
    centroids = sums / cluster_weights[:, np.newaxis]

    labels = color_labels[inverse].astype(np.int64)
    return labels, centroids, len(modes)
