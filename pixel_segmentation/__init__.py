"""Unsupervised pixel clustering for image segmentation, with cluster validity metrics."""

from .classes import ClusteringResult, ClusterMetrics, MetricsRecord, PixelBuffer, PixelSegmenter
from .exceptions import (
    EmptyInputError,
    InsufficientClustersError,
    InvalidParameterError,
    SegmentationCancelled,
    SegmentationError,
)
from .pipeline import run_segmentation

__version__ = "0.1.0"

__all__ = [
    "ClusterMetrics",
    "ClusteringResult",
    "EmptyInputError",
    "InsufficientClustersError",
    "InvalidParameterError",
    "MetricsRecord",
    "PixelBuffer",
    "PixelSegmenter",
    "SegmentationCancelled",
    "SegmentationError",
    "run_segmentation",
]
