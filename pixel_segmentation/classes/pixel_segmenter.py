"""
Unsupervised pixel clustering for image segmentation.

This module provides a class-based interface over the clustering kernels in
pixel_segmentation.functions.

Methods available:
1. kmeans: k-means with k-means++ or random seeding (caller chooses k)
2. meanshift: flat-kernel mean shift in color space (data-determined cluster count)
3. watershed: marker-controlled watershed over the luma gradient (data-determined region count)
"""

import logging
from collections.abc import Callable
from typing import ClassVar

import numpy as np

from ..config import (
    COLORING_POLICIES,
    DEFAULT_COLORING,
    DEFAULT_KMEANS_INIT,
    DEFAULT_KMEANS_STOPPING,
    DEFAULT_PARAMETERS,
    HUE_PALETTE,
    KMEANS_INIT_METHODS,
    KMEANS_STOPPING_RULES,
    MEAN_SHIFT_MAX_SEEDS,
)
from ..exceptions import InvalidParameterError
from ..functions.color import centroid_palette, hue_palette
from ..functions.kmeans import kmeans_clustering
from ..functions.mean_shift import mean_shift_clustering
from ..functions.recolor import recolor_pixels
from ..functions.watershed import watershed_clustering
from .clustering_result import ClusteringResult
from .pixel_buffer import PixelBuffer

log = logging.getLogger(__name__)


class PixelSegmenter:
    """
    Partition the pixels of an image into groups of similar color.

    Attributes:
        method: Clustering method ('kmeans', 'meanshift', 'watershed')
        n_clusters: Number of clusters (kmeans)
        init: Seeding strategy (kmeans): 'kmeans++' or 'random'
        stopping: Stopping rule (kmeans): 'converge' (<= 100 passes) or 'fixed' (15 passes)
        bandwidth: Kernel radius in RGB units (meanshift)
        sigma: Seed basin threshold scale (watershed)
        coloring: Output colors, 'centroid' (mean cluster color) or 'hue' (synthetic hue circle)
        seed: Random source; an int or None gives every fit() a fresh generator,
            a numpy Generator is used as is

    Example:
        >>> segmenter = PixelSegmenter.kmeans(n_clusters=4, seed=7)
        >>> result = segmenter.cluster(pixels)

        >>> segmenter = PixelSegmenter.mean_shift(bandwidth=30.0)
        >>> segmenter.fit(pixels).result.n_clusters

        >>> segmenter = PixelSegmenter.watershed(sigma=0.5, coloring="hue")
        >>> segmenter.fit(pixels).get_results()
    """

    METHODS: ClassVar[list[str]] = ["kmeans", "meanshift", "watershed"]

    def __init__(
        self,
        method: str,
        *,
        n_clusters: int = DEFAULT_PARAMETERS["clusters"],
        init: str = DEFAULT_KMEANS_INIT,
        stopping: str = DEFAULT_KMEANS_STOPPING,
        bandwidth: float = DEFAULT_PARAMETERS["bandwidth"],
        max_seeds: int = MEAN_SHIFT_MAX_SEEDS,
        sigma: float = DEFAULT_PARAMETERS["sigma"],
        coloring: str = DEFAULT_COLORING,
        seed: int | np.random.Generator | None = None,
    ) -> None:
        """
        Initialize the PixelSegmenter.

        Prefer using factory methods for clarity:
            - PixelSegmenter.kmeans(...)
            - PixelSegmenter.mean_shift(...)
            - PixelSegmenter.watershed(...)
        """
        if method not in self.METHODS:
            msg = f"Unknown method: {method}. Choose from {self.METHODS}"
            raise InvalidParameterError(msg)
        if coloring not in COLORING_POLICIES:
            msg = f"Unknown coloring: {coloring}. Choose from {COLORING_POLICIES}"
            raise InvalidParameterError(msg)
        if init not in KMEANS_INIT_METHODS:
            msg = f"Unknown init: {init}. Choose from {KMEANS_INIT_METHODS}"
            raise InvalidParameterError(msg)
        if stopping not in KMEANS_STOPPING_RULES:
            msg = f"Unknown stopping rule: {stopping}. Choose from {KMEANS_STOPPING_RULES}"
            raise InvalidParameterError(msg)

        self.method = method
        self.coloring = coloring
        self.seed = seed

        # Method-specific parameters
        self.n_clusters = n_clusters  # kmeans
        self.init = init  # kmeans
        self.stopping = stopping  # kmeans
        self.bandwidth = bandwidth  # meanshift
        self.max_seeds = max_seeds  # meanshift
        self.sigma = sigma  # watershed

        # Results (populated after fit)
        self.result: ClusteringResult | None = None

    @classmethod
    def kmeans(
        cls,
        n_clusters: int = DEFAULT_PARAMETERS["clusters"],
        *,
        init: str = DEFAULT_KMEANS_INIT,
        stopping: str = DEFAULT_KMEANS_STOPPING,
        coloring: str = DEFAULT_COLORING,
        seed: int | np.random.Generator | None = None,
    ) -> "PixelSegmenter":
        """
        Create a PixelSegmenter using k-means.

        Args:
            n_clusters: Number of clusters, 1 <= n_clusters <= number of pixels
            init: 'kmeans++' (spread-out seeding) or 'random' (uniform in the RGB cube)
            stopping: 'converge' (until labels settle, at most 100 passes) or 'fixed' (exactly 15 passes)
            coloring: 'centroid' or 'hue'
            seed: Random source for seeding and empty-cluster reseeding

        Returns:
            PixelSegmenter instance
        """
        return cls(method="kmeans", n_clusters=n_clusters, init=init, stopping=stopping, coloring=coloring, seed=seed)

    @classmethod
    def mean_shift(
        cls,
        bandwidth: float = DEFAULT_PARAMETERS["bandwidth"],
        *,
        max_seeds: int = MEAN_SHIFT_MAX_SEEDS,
        coloring: str = DEFAULT_COLORING,
        seed: int | np.random.Generator | None = None,
    ) -> "PixelSegmenter":
        """
        Create a PixelSegmenter using mean shift.

        Args:
            bandwidth: Kernel radius in RGB units; modes closer than this are merged
            max_seeds: Cap on seeds shifted (larger seed grids are sampled)
            coloring: 'centroid' or 'hue'
            seed: Random source for seed sampling

        Returns:
            PixelSegmenter instance
        """
        return cls(method="meanshift", bandwidth=bandwidth, max_seeds=max_seeds, coloring=coloring, seed=seed)

    @classmethod
    def watershed(
        cls, sigma: float = DEFAULT_PARAMETERS["sigma"], *, coloring: str = DEFAULT_COLORING
    ) -> "PixelSegmenter":
        """
        Create a PixelSegmenter using watershed segmentation.

        Args:
            sigma: Seed basins are areas with luma gradient below sigma * 15 (larger = fewer, bigger regions)
            coloring: 'centroid' or 'hue'

        Returns:
            PixelSegmenter instance
        """
        return cls(method="watershed", sigma=sigma, coloring=coloring)

    def _make_rng(self) -> np.random.Generator:
        if isinstance(self.seed, np.random.Generator):
            return self.seed
        return np.random.default_rng(self.seed)

    def fit(self, pixels: PixelBuffer, should_cancel: Callable[[], bool] | None = None) -> "PixelSegmenter":
        """
        Cluster the pixels of an image.

        Args:
            pixels: Input image; only read
            should_cancel: Optional callback polled between outer iterations;
                returning True raises SegmentationCancelled

        Returns:
            self (for method chaining)
        """
        points = pixels.rgb

        if self.method == "kmeans":
            labels, centroids, n_iter = kmeans_clustering(
                points,
                self.n_clusters,
                self._make_rng(),
                init=self.init,
                stopping=self.stopping,
                should_cancel=should_cancel,
            )
        elif self.method == "meanshift":
            labels, centroids, n_iter = mean_shift_clustering(
                points, self.bandwidth, self._make_rng(), max_seeds=self.max_seeds, should_cancel=should_cancel
            )
        else:
            labels, centroids, n_iter = watershed_clustering(points, pixels.width, pixels.height, self.sigma)

        output = PixelBuffer(pixels.width, pixels.height, recolor_pixels(labels, self._palette(centroids)))
        self.result = ClusteringResult(output, labels, centroids, self.method, n_iter)

        log.info(f"{self.method}: {pixels.n_pixels} pixels -> {self.result.n_clusters} clusters")
        return self

    def cluster(self, pixels: PixelBuffer, should_cancel: Callable[[], bool] | None = None) -> ClusteringResult:
        """Run fit() and return the ClusteringResult."""
        return self.fit(pixels, should_cancel=should_cancel).result

    def _palette(self, centroids: np.ndarray) -> np.ndarray:
        if self.coloring == "centroid":
            return centroid_palette(centroids)
        saturation, lightness = HUE_PALETTE[self.method]
        return hue_palette(len(centroids), saturation, lightness)

    def get_results(self) -> dict:
        """
        Get the last result and the parameters that produced it.

        Returns:
            dict with the ClusteringResult fields plus method, coloring and parameters
        """
        if self.result is None:
            msg = "No results available. Call fit() first."
            raise RuntimeError(msg)

        return {
            **self.result.get_results(),
            "method": self.method,
            "coloring": self.coloring,
            "parameters": self.parameters,
        }

    @property
    def parameters(self) -> dict:
        """Parameters relevant to the selected method."""
        if self.method == "kmeans":
            return {"clusters": self.n_clusters, "init": self.init, "stopping": self.stopping}
        if self.method == "meanshift":
            return {"bandwidth": self.bandwidth, "max_seeds": self.max_seeds}
        return {"sigma": self.sigma}


# Convenience functions mirroring the per-algorithm contracts
def kmeans_segmentation(pixels: PixelBuffer, k: int, **kwargs: object) -> ClusteringResult:
    """cluster(pixels, k) with k-means."""
    return PixelSegmenter.kmeans(n_clusters=k, **kwargs).cluster(pixels)


def mean_shift_segmentation(pixels: PixelBuffer, bandwidth: float, **kwargs: object) -> ClusteringResult:
    """cluster(pixels, bandwidth) with mean shift."""
    return PixelSegmenter.mean_shift(bandwidth=bandwidth, **kwargs).cluster(pixels)


def watershed_segmentation(
    pixels: PixelBuffer, width: int, height: int, sigma: float, **kwargs: object
) -> ClusteringResult:
    """
    cluster(pixels, width, height, sigma) with watershed.

    width and height must agree with the buffer's own dimensions.
    """
    if (width, height) != (pixels.width, pixels.height):
        msg = f"Image size {width}x{height} does not match buffer size {pixels.width}x{pixels.height}"
        raise InvalidParameterError(msg)
    return PixelSegmenter.watershed(sigma=sigma, **kwargs).cluster(pixels)
