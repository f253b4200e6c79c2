"""Outcome of a single clustering run."""

import numpy as np

from ..functions.recolor import cluster_sizes, summarize_clusters
from .pixel_buffer import PixelBuffer


class ClusteringResult:
    """
    Recolored image, per-pixel labels and cluster centroids of one clustering run.

    Built once at the end of a run; the arrays are frozen so the result can be shared
    between the rendering and the metrics side without copies.

    Attributes:
        output: Recolored PixelBuffer with the input's dimensions
        labels: int64 array, one label in [0, n_clusters) per pixel, row-major
        centroids: float64 array of shape (n_clusters, 3), row i is the mean color of label i
        algorithm: Name of the algorithm that produced the result
        n_iter: Iterations (k-means passes, mean-shift modes or watershed basins) spent

    """

    def __init__(
        self,
        output: PixelBuffer,
        labels: np.ndarray,
        centroids: np.ndarray,
        algorithm: str,
        n_iter: int = 0,
    ) -> None:
        self.output = output
        self.labels = np.array(labels, dtype=np.int64)
        self.centroids = np.array(centroids, dtype=np.float64).reshape(-1, 3)
        self.algorithm = algorithm
        self.n_iter = int(n_iter)

        self.labels.setflags(write=False)
        self.centroids.setflags(write=False)

    @property
    def n_clusters(self) -> int:
        return self.centroids.shape[0]

    @property
    def output_buffer(self) -> np.ndarray:
        """Flat RGBA bytes of the recolored image."""
        return self.output.data

    def cluster_sizes(self) -> np.ndarray:
        return cluster_sizes(self.labels, self.n_clusters)

    def summarize(self, pixels: PixelBuffer, *, include_images: bool = True) -> list[dict]:
        """
        Per-cluster summaries against the original image.

        Args:
            pixels: The input buffer the result was computed from
            include_images: Attach an isolation buffer per cluster

        Returns:
            list of dicts with keys id, size, color, centroid and optionally image

        """
        return summarize_clusters(pixels.data, self.labels, self.centroids, include_images=include_images)

    def get_results(self) -> dict:
        """
        Get the result as a dictionary.

        Returns:
            dict with output_buffer, labels, centroids, algorithm, n_clusters, n_iter
        """
        return {
            "output_buffer": self.output_buffer,
            "labels": self.labels,
            "centroids": self.centroids,
            "algorithm": self.algorithm,
            "n_clusters": self.n_clusters,
            "n_iter": self.n_iter,
        }

    def __repr__(self) -> str:
        return (
            f"ClusteringResult(algorithm={self.algorithm!r}, n_clusters={self.n_clusters}, "
            f"n_pixels={self.labels.shape[0]})"
        )
