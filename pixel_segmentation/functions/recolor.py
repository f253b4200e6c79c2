"""Label-to-color mapping and per-cluster views of a segmented image."""

import numpy as np

from ..config import HUE_PALETTE, ISOLATION_BACKGROUND_ALPHA
from .color import hsl_to_rgb

OPAQUE = 255


def recolor_pixels(labels: np.ndarray, palette: np.ndarray) -> np.ndarray:
    """
    Paint every pixel with the palette color of its label.

    Args:
        labels: int array of shape (n,)
        palette: uint8 array of shape (k, 3)

    Returns:
        Flat RGBA uint8 array of length 4 * n, fully opaque

    """
    labels = np.asarray(labels, dtype=np.int64)
    rgba = np.empty((labels.shape[0], 4), dtype=np.uint8)
    rgba[:, :3] = np.asarray(palette, dtype=np.uint8)[labels]
    rgba[:, 3] = OPAQUE
    return rgba.reshape(-1)


def cluster_sizes(labels: np.ndarray, n_clusters: int) -> np.ndarray:
    """Pixel count of every cluster, including empty ones."""
    return np.bincount(np.asarray(labels, dtype=np.int64), minlength=n_clusters)


def isolate_cluster(rgba: np.ndarray, labels: np.ndarray, cluster_id: int) -> np.ndarray:
    """
    Keep only the pixels of one cluster.

    Members keep their original color at full opacity; every other pixel becomes
    black with alpha ISOLATION_BACKGROUND_ALPHA.

    Args:
        rgba: Original flat RGBA uint8 buffer
        labels: Cluster label per pixel
        cluster_id: Cluster to isolate

    Returns:
        New flat RGBA uint8 buffer of the same length

    """
    source = np.asarray(rgba, dtype=np.uint8).reshape(-1, 4)
    members = np.asarray(labels) == cluster_id

    isolated = np.zeros_like(source)
    isolated[:, 3] = ISOLATION_BACKGROUND_ALPHA
    isolated[members, :3] = source[members, :3]
    isolated[members, 3] = OPAQUE
    return isolated.reshape(-1)


def summarize_clusters(
    rgba: np.ndarray, labels: np.ndarray, centroids: np.ndarray, *, include_images: bool = True
) -> list[dict]:
    """
    Describe every cluster that owns at least one pixel.

    Cluster i is displayed at hue i / (number of clusters present), so labels left with
    gaps by empty clusters can wrap around the hue circle and share a display color.
    Isolation images take one full buffer per cluster; skip them with include_images=False.

    Returns:
        list of dicts with keys id, size, color, centroid and, if requested, image

    """
    labels = np.asarray(labels, dtype=np.int64)
    present = np.unique(labels)
    saturation, lightness = HUE_PALETTE["summary"]
    sizes = cluster_sizes(labels, len(centroids))

    summaries = []
    for cluster_id in present:
        summary = {
            "id": int(cluster_id),
            "size": int(sizes[cluster_id]),
            "color": hsl_to_rgb(cluster_id / len(present), saturation, lightness),
            "centroid": tuple(float(channel) for channel in centroids[cluster_id]),
        }
        if include_images:
            summary["image"] = isolate_cluster(rgba, labels, cluster_id)
        summaries.append(summary)
    return summaries
