"""
Cluster validity analysis for segmentation results.

Scores a completed partition with silhouette, Davies-Bouldin and Calinski-Harabasz,
plus the segment count and average segment size.
"""

import logging

import numpy as np

from ..config import SILHOUETTE_SAMPLE_SIZE
from ..exceptions import InsufficientClustersError, InvalidParameterError
from ..functions.metrics import calinski_harabasz_index, davies_bouldin_index, silhouette_score
from .clustering_result import ClusteringResult
from .pixel_buffer import PixelBuffer

log = logging.getLogger(__name__)


class MetricsRecord:
    """
    Quality scores of one partition.

    A score that is undefined for the partition (fewer than two clusters, or as many
    clusters as pixels for Calinski-Harabasz) is stored as None.
    """

    def __init__(
        self,
        silhouette: float,
        davies_bouldin: float | None,
        calinski_harabasz: float | None,
        num_segments: int,
        average_size: int,
    ) -> None:
        self.silhouette = silhouette
        self.davies_bouldin = davies_bouldin
        self.calinski_harabasz = calinski_harabasz
        self.num_segments = num_segments
        self.average_size = average_size

    def as_dict(self) -> dict:
        return {
            "silhouette": self.silhouette,
            "davies_bouldin": self.davies_bouldin,
            "calinski_harabasz": self.calinski_harabasz,
            "num_segments": self.num_segments,
            "average_size": self.average_size,
        }

    def __repr__(self) -> str:
        fields = ", ".join(f"{key}={value!r}" for key, value in self.as_dict().items())
        return f"MetricsRecord({fields})"


class ClusterMetrics:
    """
    Compute validity metrics for a ClusteringResult.

    Silhouette is quadratic in pixel count, so populations larger than
    silhouette_sample_size are scored on a uniform random sample of that size.
    Pass silhouette_sample_size=None to always use every pixel.

    Example:
        >>> metrics = ClusterMetrics(silhouette_sample_size=2000, seed=0)
        >>> record = metrics.fit(pixels, result).record
        >>> record.davies_bouldin
    """

    def __init__(
        self, silhouette_sample_size: int | None = SILHOUETTE_SAMPLE_SIZE, seed: int | np.random.Generator | None = None
    ) -> None:
        if silhouette_sample_size is not None and silhouette_sample_size < 1:
            msg = f"silhouette_sample_size must be positive or None, got {silhouette_sample_size}"
            raise InvalidParameterError(msg)

        self.silhouette_sample_size = silhouette_sample_size
        self.seed = seed

        # Results (populated after fit)
        self.record: MetricsRecord | None = None

    def fit(self, pixels: PixelBuffer, result: ClusteringResult) -> "ClusterMetrics":
        """
        Score a partition of the given pixels.

        Args:
            pixels: The input buffer the result was computed from
            result: Output of a clustering run

        Returns:
            self (for method chaining)
        """
        if pixels.n_pixels != result.labels.shape[0]:
            msg = f"Result has {result.labels.shape[0]} labels for {pixels.n_pixels} pixels"
            raise InvalidParameterError(msg)

        points = pixels.rgb
        labels = result.labels
        rng = self.seed if isinstance(self.seed, np.random.Generator) else np.random.default_rng(self.seed)

        silhouette = silhouette_score(points, labels, sample_size=self.silhouette_sample_size, rng=rng)

        try:
            davies_bouldin = davies_bouldin_index(points, labels, result.centroids)
        except InsufficientClustersError as e:
            log.warning(f"Davies-Bouldin index undefined: {e}")
            davies_bouldin = None

        try:
            calinski_harabasz = calinski_harabasz_index(points, labels, result.centroids)
        except InsufficientClustersError as e:
            log.warning(f"Calinski-Harabasz index undefined: {e}")
            calinski_harabasz = None

        num_segments = len(np.unique(labels))
        self.record = MetricsRecord(
            silhouette=silhouette,
            davies_bouldin=davies_bouldin,
            calinski_harabasz=calinski_harabasz,
            num_segments=num_segments,
            average_size=pixels.n_pixels // num_segments,
        )
        return self

    def get_results(self) -> dict:
        """
        Get the metrics as a dictionary.

        Returns:
            dict with silhouette, davies_bouldin, calinski_harabasz, num_segments, average_size
        """
        if self.record is None:
            msg = "No results available. Call fit() first."
            raise RuntimeError(msg)
        return self.record.as_dict()
