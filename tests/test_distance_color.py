import numpy as np
import pytest

from pixel_segmentation.functions.color import centroid_palette, hsl_to_rgb, hue_palette, rgb_to_luma
from pixel_segmentation.functions.distance import (
    assign_to_nearest,
    euclidean_distance,
    nearest_squared_distance,
    squared_distances,
)


def test_euclidean_distance():
    assert euclidean_distance([0, 0, 0], [3, 4, 0]) == pytest.approx(5.0)
    assert euclidean_distance([1, 1, 1], [1, 1, 1]) == 0.0


def test_squared_distances_matrix():
    points = np.array([[0.0, 0.0, 0.0], [1.0, 2.0, 2.0]])
    centers = np.array([[0.0, 0.0, 0.0], [1.0, 0.0, 0.0]])
    np.testing.assert_allclose(squared_distances(points, centers), [[0.0, 1.0], [9.0, 8.0]])
    np.testing.assert_allclose(nearest_squared_distance(points, centers), [0.0, 8.0])


def test_assign_to_nearest():
    points = np.array([[0.0, 0.0, 0.0], [250.0, 250.0, 250.0], [90.0, 100.0, 110.0]])
    centers = np.array([[255.0, 255.0, 255.0], [0.0, 0.0, 0.0], [100.0, 100.0, 100.0]])
    assert assign_to_nearest(points, centers).tolist() == [1, 0, 2]


def test_assign_to_nearest_breaks_ties_by_lowest_index():
    points = np.array([[5.0, 0.0, 0.0]])
    centers = np.array([[10.0, 0.0, 0.0], [0.0, 0.0, 0.0], [10.0, 0.0, 0.0]])
    assert assign_to_nearest(points, centers).tolist() == [0]


def test_hsl_primaries():
    assert hsl_to_rgb(0.0, 1.0, 0.5) == (255, 0, 0)
    assert hsl_to_rgb(1 / 3, 1.0, 0.5) == (0, 255, 0)
    assert hsl_to_rgb(2 / 3, 1.0, 0.5) == (0, 0, 255)


def test_hsl_zero_saturation_is_gray():
    assert hsl_to_rgb(0.25, 0.0, 0.5) == (128, 128, 128)


def test_hue_palette_spaces_hues_evenly():
    palette = hue_palette(4, 0.8, 0.7)
    assert palette.shape == (4, 3)
    assert palette.dtype == np.uint8
    assert tuple(palette[0]) == hsl_to_rgb(0.0, 0.8, 0.7)
    assert tuple(palette[2]) == hsl_to_rgb(0.5, 0.8, 0.7)
    assert len({tuple(row) for row in palette}) == 4


def test_centroid_palette_rounds_and_clips():
    palette = centroid_palette([[10.5, 254.6, -3.0], [0.4, 300.0, 127.49]])
    assert palette.tolist() == [[11, 255, 0], [0, 255, 127]]


def test_luma_of_white_and_black():
    luma = rgb_to_luma(np.array([[255.0, 255.0, 255.0], [0.0, 0.0, 0.0]]))
    np.testing.assert_allclose(luma, [255.0, 0.0])
