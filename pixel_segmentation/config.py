"""Default parameters and tuning constants for pixel segmentation."""

from __future__ import annotations

from pathlib import Path

import yaml

from .exceptions import InvalidParameterError

# Parameter surface shared with the caller: {clusters, bandwidth, sigma}
DEFAULT_PARAMETERS: dict[str, float] = {
    "clusters": 5,
    "bandwidth": 40.0,  # RGB distance units
    "sigma": 1.0,
}

ALGORITHMS: list[str] = ["kmeans", "meanshift", "watershed"]
DEFAULT_ALGORITHM = "kmeans"

# K-means
KMEANS_INIT_METHODS: list[str] = ["kmeans++", "random"]
KMEANS_STOPPING_RULES: list[str] = ["converge", "fixed"]
DEFAULT_KMEANS_INIT = "kmeans++"
DEFAULT_KMEANS_STOPPING = "converge"
KMEANS_MAX_ITERATIONS = 100  # upper bound for the "converge" rule
KMEANS_FIXED_ITERATIONS = 15  # exact pass count for the "fixed" rule

# Mean shift
MEAN_SHIFT_MAX_ITERATIONS = 300  # per seed
MEAN_SHIFT_MAX_SEEDS = 1000
MEAN_SHIFT_STOP_FRACTION = 1e-3  # of the bandwidth

# Watershed: luma gradient below sigma * 15 marks a seed basin
WATERSHED_THRESHOLD_PER_SIGMA = 15.0

# Silhouette is quadratic in pixel count; larger populations are sampled
SILHOUETTE_SAMPLE_SIZE = 4000

# Output coloring
COLORING_POLICIES: list[str] = ["centroid", "hue"]
DEFAULT_COLORING = "centroid"

# (saturation, lightness) of the synthetic hue palette per algorithm
HUE_PALETTE: dict[str, tuple[float, float]] = {
    "kmeans": (0.8, 0.7),
    "meanshift": (0.9, 0.6),
    "watershed": (0.85, 0.65),
    "summary": (0.7, 0.6),
}

# Isolation buffers: alpha of pixels outside the isolated cluster
ISOLATION_BACKGROUND_ALPHA = 50


def default_config() -> dict:
    """Return a fresh copy of the run configuration defaults."""
    return {
        "algorithm": DEFAULT_ALGORITHM,
        "coloring": DEFAULT_COLORING,
        "init": DEFAULT_KMEANS_INIT,
        "stopping": DEFAULT_KMEANS_STOPPING,
        "seed": None,
        "silhouette_sample_size": SILHOUETTE_SAMPLE_SIZE,
        **DEFAULT_PARAMETERS,
    }


def load_config(config_path: str | Path | None = None) -> dict:
    """
    Load a run configuration, starting from the defaults.

    Args:
        config_path: Optional YAML file; missing files leave the defaults untouched

    Returns:
        dict with keys algorithm, coloring, init, stopping, seed, silhouette_sample_size, clusters, bandwidth, sigma

    """
    config = default_config()
    if config_path is None or not Path(config_path).exists():
        return config

    with open(config_path) as f:
        overrides = yaml.safe_load(f) or {}

    if not isinstance(overrides, dict):
        msg = f"Configuration file {config_path} must contain a mapping"
        raise InvalidParameterError(msg)

    unknown = sorted(set(overrides) - set(config))
    if unknown:
        msg = f"Unknown configuration keys: {unknown}. Choose from {sorted(config)}"
        raise InvalidParameterError(msg)

    config.update(overrides)
    return config
