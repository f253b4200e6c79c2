"""Run one segmentation end to end: cluster, recolor, score."""

import logging
from collections.abc import Callable

import numpy as np

from .classes import ClusteringResult, ClusterMetrics, MetricsRecord, PixelBuffer, PixelSegmenter
from .config import (
    ALGORITHMS,
    DEFAULT_COLORING,
    DEFAULT_KMEANS_INIT,
    DEFAULT_KMEANS_STOPPING,
    DEFAULT_PARAMETERS,
    SILHOUETTE_SAMPLE_SIZE,
)
from .exceptions import InvalidParameterError

log = logging.getLogger(__name__)


def build_segmenter(
    algorithm: str,
    parameters: dict | None = None,
    *,
    coloring: str = DEFAULT_COLORING,
    init: str = DEFAULT_KMEANS_INIT,
    stopping: str = DEFAULT_KMEANS_STOPPING,
    seed: int | np.random.Generator | None = None,
) -> PixelSegmenter:
    """
    Create the segmenter for an algorithm from the caller's parameter surface.

    Args:
        algorithm: 'kmeans', 'meanshift' or 'watershed'
        parameters: Any of {clusters, bandwidth, sigma}; missing keys take the defaults
        coloring: 'centroid' or 'hue'
        init: k-means seeding, 'kmeans++' or 'random'
        stopping: k-means stopping rule, 'converge' or 'fixed'
        seed: Random source

    Returns:
        PixelSegmenter instance
    """
    if algorithm not in ALGORITHMS:
        msg = f"Unknown algorithm: {algorithm}. Choose from {ALGORITHMS}"
        raise InvalidParameterError(msg)

    params = dict(DEFAULT_PARAMETERS)
    if parameters:
        unknown = sorted(set(parameters) - set(params))
        if unknown:
            msg = f"Unknown parameters: {unknown}. Choose from {sorted(params)}"
            raise InvalidParameterError(msg)
        params.update(parameters)

    if algorithm == "kmeans":
        return PixelSegmenter.kmeans(
            n_clusters=params["clusters"], init=init, stopping=stopping, coloring=coloring, seed=seed
        )
    if algorithm == "meanshift":
        return PixelSegmenter.mean_shift(bandwidth=params["bandwidth"], coloring=coloring, seed=seed)
    return PixelSegmenter.watershed(sigma=params["sigma"], coloring=coloring)


def run_segmentation(
    pixels: PixelBuffer,
    algorithm: str = "kmeans",
    parameters: dict | None = None,
    *,
    coloring: str = DEFAULT_COLORING,
    init: str = DEFAULT_KMEANS_INIT,
    stopping: str = DEFAULT_KMEANS_STOPPING,
    seed: int | np.random.Generator | None = None,
    evaluate: bool = True,
    silhouette_sample_size: int | None = SILHOUETTE_SAMPLE_SIZE,
    should_cancel: Callable[[], bool] | None = None,
) -> tuple[ClusteringResult, MetricsRecord | None]:
    """
    Segment an image and score the partition.

    Args:
        pixels: Input image
        algorithm: 'kmeans', 'meanshift' or 'watershed'
        parameters: Any of {clusters, bandwidth, sigma}
        coloring: 'centroid' or 'hue'
        init: k-means seeding, 'kmeans++' or 'random'
        stopping: k-means stopping rule, 'converge' or 'fixed'
        seed: Random source for seeding and silhouette sampling
        evaluate: If False, skip the metrics
        silhouette_sample_size: Cap on pixels scored by silhouette (None = all)
        should_cancel: Optional callback polled between outer iterations

    Returns:
        result: ClusteringResult
        record: MetricsRecord, or None when evaluate is False
    """
    segmenter = build_segmenter(algorithm, parameters, coloring=coloring, init=init, stopping=stopping, seed=seed)
    log.info(f"Segmenting {pixels.width}x{pixels.height} image with {algorithm} {segmenter.parameters}")
    result = segmenter.cluster(pixels, should_cancel=should_cancel)

    if not evaluate:
        return result, None

    record = ClusterMetrics(silhouette_sample_size=silhouette_sample_size, seed=seed).fit(pixels, result).record
    return result, record
