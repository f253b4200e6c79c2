import numpy as np
import pytest

from pixel_segmentation import EmptyInputError, InvalidParameterError, PixelBuffer, PixelSegmenter
from pixel_segmentation.classes import watershed_segmentation
from pixel_segmentation.functions.watershed import find_seed_basins, gradient_magnitude, watershed_clustering


def split_image(width: int = 8, height: int = 4) -> PixelBuffer:
    """Left half black, right half white."""
    colors = []
    for _ in range(height):
        colors += [(0, 0, 0)] * (width // 2) + [(255, 255, 255)] * (width // 2)
    return PixelBuffer.from_rgb(width, height, colors)


def test_gradient_of_flat_image_is_zero():
    np.testing.assert_array_equal(gradient_magnitude(np.full((3, 4), 9.0)), np.zeros((3, 4)))


def test_gradient_of_single_row_image():
    gradient = gradient_magnitude(np.array([[0.0, 10.0, 20.0]]))
    np.testing.assert_allclose(gradient, [[10.0, 10.0, 10.0]])


def test_gradient_of_single_pixel_image():
    np.testing.assert_array_equal(gradient_magnitude(np.array([[42.0]])), [[0.0]])


def test_seed_basins_fall_back_to_minimum():
    gradient = np.array([[5.0, 3.0], [9.0, 7.0]])
    markers, n_markers = find_seed_basins(gradient, threshold=1.0)
    assert n_markers == 1
    assert markers.tolist() == [[0, 1], [0, 0]]


def test_split_image_gives_two_regions():
    pixels = split_image()
    result = watershed_segmentation(pixels, 8, 4, 1.0)

    assert result.n_clusters == 2
    regions = result.labels.reshape(4, 8)
    assert (regions[:, :4] == 0).all()
    assert (regions[:, 4:] == 1).all()
    np.testing.assert_allclose(result.centroids, [[0, 0, 0], [255, 255, 255]])


def test_large_sigma_merges_everything():
    pixels = split_image()
    result = PixelSegmenter.watershed(sigma=100.0).cluster(pixels)
    assert result.n_clusters == 1
    np.testing.assert_allclose(result.centroids[0], pixels.rgb.mean(axis=0))


def test_no_low_gradient_pixel_gives_single_region():
    pixels = PixelBuffer.from_rgb(2, 2, [(0, 0, 0), (255, 255, 255), (255, 255, 255), (0, 0, 0)])
    result = watershed_segmentation(pixels, 2, 2, 1.0)
    assert result.n_clusters == 1
    assert result.labels.tolist() == [0, 0, 0, 0]


def test_single_row_image(blob_colors):
    pixels = PixelBuffer.from_rgb(30, 1, blob_colors)
    result = watershed_segmentation(pixels, 30, 1, 1.0)
    assert result.labels.shape == (30,)
    assert result.labels.max() < result.n_clusters


def test_every_region_is_labelled(blob_pixels):
    result = PixelSegmenter.watershed(sigma=0.5).cluster(blob_pixels)
    assert sorted(set(result.labels.tolist())) == list(range(result.n_clusters))


@pytest.mark.parametrize("sigma", [0.0, -1.0, float("nan"), "1", None, True])
def test_invalid_sigma(sigma):
    with pytest.raises(InvalidParameterError):
        watershed_segmentation(split_image(), 8, 4, sigma)


def test_size_mismatch_raises():
    with pytest.raises(InvalidParameterError):
        watershed_segmentation(split_image(), 4, 8, 1.0)
    with pytest.raises(InvalidParameterError):
        watershed_clustering(np.zeros((4, 3)), 3, 3, 1.0)


def test_empty_points_raise():
    with pytest.raises(EmptyInputError):
        watershed_clustering(np.empty((0, 3)), 0, 0, 1.0)
