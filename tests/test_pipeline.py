import numpy as np
import pytest

from pixel_segmentation import (
    InvalidParameterError,
    PixelSegmenter,
    SegmentationCancelled,
    SegmentationError,
    run_segmentation,
)
from pixel_segmentation.config import DEFAULT_PARAMETERS, KMEANS_FIXED_ITERATIONS, default_config, load_config
from pixel_segmentation.pipeline import build_segmenter


def test_kmeans_end_to_end(two_tone_pixels):
    result, record = run_segmentation(two_tone_pixels, "kmeans", {"clusters": 2}, seed=0)
    assert result.algorithm == "kmeans"
    assert result.n_clusters == 2
    assert record.num_segments == 2
    assert record.silhouette == pytest.approx(1.0)
    assert record.davies_bouldin == 0.0


def test_mean_shift_end_to_end(blob_pixels):
    result, record = run_segmentation(blob_pixels, "meanshift", {"bandwidth": 40.0}, seed=0)
    assert result.n_clusters == record.num_segments == 3
    assert record.average_size == 10


def test_watershed_end_to_end(blob_pixels):
    result, record = run_segmentation(blob_pixels, "watershed", {"sigma": 100.0}, evaluate=True)
    assert result.n_clusters == 1
    assert record.davies_bouldin is None
    assert record.calinski_harabasz is None


def test_skipping_metrics(two_tone_pixels):
    _, record = run_segmentation(two_tone_pixels, parameters={"clusters": 2}, evaluate=False)
    assert record is None


def test_default_cluster_count_needs_enough_pixels(two_tone_pixels):
    # 5 clusters requested for 4 pixels
    with pytest.raises(InvalidParameterError):
        run_segmentation(two_tone_pixels)


def test_unknown_algorithm_is_rejected(two_tone_pixels):
    with pytest.raises(InvalidParameterError, match="Unknown algorithm"):
        run_segmentation(two_tone_pixels, "spectral")


def test_unknown_parameter_is_rejected():
    with pytest.raises(InvalidParameterError, match="Unknown parameters"):
        build_segmenter("kmeans", {"k": 3})


def test_missing_parameters_take_defaults():
    assert build_segmenter("kmeans").n_clusters == DEFAULT_PARAMETERS["clusters"]
    assert build_segmenter("meanshift", {"clusters": 2}).bandwidth == DEFAULT_PARAMETERS["bandwidth"]
    assert build_segmenter("watershed", coloring="hue").parameters == {"sigma": DEFAULT_PARAMETERS["sigma"]}


def test_cancellation_propagates(blob_pixels):
    with pytest.raises(SegmentationCancelled):
        run_segmentation(blob_pixels, "kmeans", {"clusters": 3}, should_cancel=lambda: True)


def test_shared_generator_is_consumed(blob_pixels):
    generator = np.random.default_rng(11)
    segmenter = build_segmenter("kmeans", {"clusters": 3}, seed=generator)
    first = segmenter.cluster(blob_pixels).centroids
    assert segmenter.seed is generator
    assert first.shape == (3, 3)


def test_segmenter_results(two_tone_pixels):
    segmenter = PixelSegmenter.kmeans(n_clusters=2, seed=1)
    with pytest.raises(RuntimeError):
        segmenter.get_results()

    results = segmenter.fit(two_tone_pixels).get_results()
    assert results["method"] == "kmeans"
    assert results["coloring"] == "centroid"
    assert results["parameters"] == {"clusters": 2, "init": "kmeans++", "stopping": "converge"}
    assert results["n_clusters"] == 2
    assert len(results["output_buffer"]) == 16


def test_unknown_coloring_is_rejected():
    with pytest.raises(InvalidParameterError):
        PixelSegmenter.kmeans(3, coloring="rainbow")


def test_errors_are_value_errors():
    assert issubclass(SegmentationError, ValueError)
    assert issubclass(InvalidParameterError, SegmentationError)


# ---- configuration ----


def test_load_config_without_file(tmp_path):
    assert load_config() == default_config()
    assert load_config(tmp_path / "missing.yaml") == default_config()


def test_load_config_overrides_defaults(tmp_path):
    config_path = tmp_path / "segment.yaml"
    config_path.write_text("algorithm: meanshift\nbandwidth: 25.0\nseed: 3\n")

    config = load_config(config_path)
    assert config["algorithm"] == "meanshift"
    assert config["bandwidth"] == 25.0
    assert config["seed"] == 3
    assert config["clusters"] == DEFAULT_PARAMETERS["clusters"]


def test_load_config_empty_file(tmp_path):
    config_path = tmp_path / "segment.yaml"
    config_path.write_text("")
    assert load_config(config_path) == default_config()


@pytest.mark.parametrize("content", ["- kmeans\n- meanshift\n", "clusterz: 4\n"])
def test_load_config_rejects_bad_files(tmp_path, content):
    config_path = tmp_path / "segment.yaml"
    config_path.write_text(content)
    with pytest.raises(InvalidParameterError):
        load_config(config_path)


def test_default_config_is_a_fresh_copy():
    config = default_config()
    config["clusters"] = 99
    assert default_config()["clusters"] == DEFAULT_PARAMETERS["clusters"]


def test_kmeans_policies_pass_through(blob_pixels):
    result, _ = run_segmentation(
        blob_pixels, "kmeans", {"clusters": 3}, init="random", stopping="fixed", seed=0, evaluate=False
    )
    assert result.n_iter == KMEANS_FIXED_ITERATIONS

    segmenter = build_segmenter("kmeans", {"clusters": 3}, init="random", stopping="fixed")
    assert segmenter.parameters == {"clusters": 3, "init": "random", "stopping": "fixed"}


def test_unknown_kmeans_policy_is_rejected(two_tone_pixels):
    with pytest.raises(InvalidParameterError):
        run_segmentation(two_tone_pixels, "kmeans", {"clusters": 2}, stopping="forever")


def test_load_config_kmeans_policies(tmp_path):
    assert default_config()["init"] == "kmeans++"
    assert default_config()["stopping"] == "converge"

    config_path = tmp_path / "segment.yaml"
    config_path.write_text("init: random\nstopping: fixed\n")
    config = load_config(config_path)
    assert (config["init"], config["stopping"]) == ("random", "fixed")
