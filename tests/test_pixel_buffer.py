import numpy as np
import pytest

from pixel_segmentation import EmptyInputError, InvalidParameterError, PixelBuffer


def test_from_rgb_sets_opaque_alpha():
    buffer = PixelBuffer.from_rgb(2, 1, [(1, 2, 3), (4, 5, 6)])
    assert buffer.data.tolist() == [1, 2, 3, 255, 4, 5, 6, 255]
    assert buffer.n_pixels == len(buffer) == 2


def test_rgb_drops_alpha():
    buffer = PixelBuffer(1, 2, [9, 8, 7, 0, 1, 2, 3, 100])
    np.testing.assert_array_equal(buffer.rgb, [[9, 8, 7], [1, 2, 3]])
    assert buffer.rgb.dtype == np.float64


def test_accepts_raw_bytes():
    buffer = PixelBuffer(1, 1, bytes([10, 20, 30, 255]))
    assert buffer.rgb.tolist() == [[10.0, 20.0, 30.0]]


def test_buffer_is_read_only():
    buffer = PixelBuffer.from_rgb(1, 1, [(1, 2, 3)])
    with pytest.raises(ValueError):
        buffer.data[0] = 99


def test_copies_caller_data():
    source = np.array([1, 2, 3, 255], dtype=np.uint8)
    buffer = PixelBuffer(1, 1, source)
    source[0] = 200
    assert buffer.data[0] == 1


def test_wrong_length_raises():
    with pytest.raises(InvalidParameterError):
        PixelBuffer(2, 2, [0] * 12)


def test_zero_pixels_raises():
    with pytest.raises(EmptyInputError):
        PixelBuffer(0, 3, [])


def test_negative_dimension_raises():
    with pytest.raises(InvalidParameterError):
        PixelBuffer(-1, 2, [])


def test_out_of_range_channel_raises():
    with pytest.raises(InvalidParameterError):
        PixelBuffer(1, 1, [0, 0, 256, 255])


@pytest.mark.parametrize("data", [[10.7, 0.0, 0.0, 255.0], np.array([1.0, 2.0, 3.0, 255.0]), [True, False, True, True]])
def test_non_integer_channels_raise(data):
    with pytest.raises(InvalidParameterError):
        PixelBuffer(1, 1, data)


def test_from_rgb_rejects_float_colors():
    with pytest.raises(InvalidParameterError):
        PixelBuffer.from_rgb(1, 1, [(10.7, 20.0, 30.0)])


def test_from_array_gray_rgb_and_rgba():
    gray = np.array([[0, 128]], dtype=np.uint8)
    assert PixelBuffer.from_array(gray).data.tolist() == [0, 0, 0, 255, 128, 128, 128, 255]

    rgb = np.zeros((2, 3, 3), dtype=np.uint8)
    buffer = PixelBuffer.from_array(rgb)
    assert (buffer.width, buffer.height) == (3, 2)
    assert buffer.to_image().shape == (2, 3, 4)

    rgba = np.full((1, 1, 4), 7, dtype=np.uint8)
    assert PixelBuffer.from_array(rgba).data.tolist() == [7, 7, 7, 7]


def test_from_array_rejects_non_uint8():
    with pytest.raises(InvalidParameterError):
        PixelBuffer.from_array(np.zeros((2, 2, 3), dtype=np.uint16))


def test_from_array_rejects_bad_shape():
    with pytest.raises(InvalidParameterError):
        PixelBuffer.from_array(np.zeros((2, 2, 5), dtype=np.uint8))


def test_equality():
    a = PixelBuffer.from_rgb(1, 1, [(1, 2, 3)])
    b = PixelBuffer(1, 1, [1, 2, 3, 255])
    assert a == b
    assert hash(a) == hash(b)
