from .cluster_metrics import ClusterMetrics, MetricsRecord
from .clustering_result import ClusteringResult
from .pixel_buffer import PixelBuffer
from .pixel_segmenter import PixelSegmenter, kmeans_segmentation, mean_shift_segmentation, watershed_segmentation

__all__ = [
    "ClusterMetrics",
    "ClusteringResult",
    "MetricsRecord",
    "PixelBuffer",
    "PixelSegmenter",
    "kmeans_segmentation",
    "mean_shift_segmentation",
    "watershed_segmentation",
]
