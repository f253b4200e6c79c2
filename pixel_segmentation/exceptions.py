"""Typed failures raised by the segmentation core."""


class SegmentationError(ValueError):
    """Base class for every failure surfaced by pixel_segmentation."""


class InvalidParameterError(SegmentationError):
    """A caller-supplied parameter is out of range or unknown."""


class InsufficientClustersError(SegmentationError):
    """A validity metric is undefined for the number of clusters in the partition."""


class EmptyInputError(SegmentationError):
    """The image holds no pixels."""


class SegmentationCancelled(SegmentationError):
    """The caller asked the running computation to stop."""
