"""
Read-only RGBA pixel buffer.

The buffer is the hand-off format between the segmentation core and whatever decodes
or renders images: width, height and a flat row-major RGBA byte sequence.
"""

import numpy as np

from ..exceptions import EmptyInputError, InvalidParameterError

CHANNELS = 4
NDIM_GRAY = 2
NDIM_COLOR = 3


class PixelBuffer:
    """
    Decoded image as width, height and flat RGBA bytes.

    The bytes are copied on construction and frozen, so neither the caller nor the
    core can change a buffer after it was handed over.

    Example:
        >>> buffer = PixelBuffer(2, 1, [10, 10, 10, 255, 240, 240, 240, 255])
        >>> buffer.rgb
        array([[ 10.,  10.,  10.],
               [240., 240., 240.]])
    """

    def __init__(self, width: int, height: int, data: bytes | np.ndarray | list[int]) -> None:
        if width < 0 or height < 0:
            msg = f"Image dimensions must be non-negative, got {width}x{height}"
            raise InvalidParameterError(msg)
        if width == 0 or height == 0:
            msg = f"Image {width}x{height} has no pixels"
            raise EmptyInputError(msg)

        if isinstance(data, (bytes, bytearray, memoryview)):
            rgba = np.frombuffer(data, dtype=np.uint8).copy()
        else:
            values = np.asarray(data)
            if values.size and not np.issubdtype(values.dtype, np.integer):
                msg = f"RGBA channel values must be integers, got {values.dtype}"
                raise InvalidParameterError(msg)
            if values.size and (values.min() < 0 or values.max() > 255):
                msg = "RGBA channel values must lie in [0, 255]"
                raise InvalidParameterError(msg)
            rgba = values.astype(np.uint8).reshape(-1)

        expected = width * height * CHANNELS
        if rgba.size != expected:
            msg = f"Buffer holds {rgba.size} bytes, expected {expected} for a {width}x{height} RGBA image"
            raise InvalidParameterError(msg)

        rgba.setflags(write=False)
        self.width = int(width)
        self.height = int(height)
        self.data = rgba

    @classmethod
    def from_array(cls, image: np.ndarray) -> "PixelBuffer":
        """
        Build a buffer from a decoded image array.

        Args:
            image: uint8 array of shape (H, W), (H, W, 3) or (H, W, 4)

        Returns:
            PixelBuffer; gray images are expanded to RGB, missing alpha is set opaque

        """
        image = np.asarray(image)
        if image.ndim == NDIM_GRAY:
            image = np.repeat(image[:, :, np.newaxis], 3, axis=2)
        if image.ndim != NDIM_COLOR or image.shape[2] not in (3, 4):
            msg = f"Expected an (H, W), (H, W, 3) or (H, W, 4) image, got shape {image.shape}"
            raise InvalidParameterError(msg)
        if image.dtype != np.uint8:
            msg = f"Expected 8-bit channels, got {image.dtype}"
            raise InvalidParameterError(msg)

        height, width = image.shape[:2]
        rgba = np.full((height, width, CHANNELS), 255, dtype=np.uint8)
        rgba[:, :, : image.shape[2]] = image
        return cls(width, height, rgba)

    @classmethod
    def from_rgb(cls, width: int, height: int, colors: np.ndarray | list) -> "PixelBuffer":
        """Build an opaque buffer from a row-major sequence of (r, g, b) triples."""
        colors = np.asarray(colors)
        if colors.ndim != NDIM_GRAY or colors.shape[1] != 3:
            msg = f"Expected (n, 3) colors, got shape {colors.shape}"
            raise InvalidParameterError(msg)
        if colors.size and not np.issubdtype(colors.dtype, np.integer):
            msg = f"Colors must be integers, got {colors.dtype}"
            raise InvalidParameterError(msg)
        rgba = np.full((colors.shape[0], CHANNELS), 255, dtype=np.int64)
        rgba[:, :3] = colors
        return cls(width, height, rgba)

    @property
    def n_pixels(self) -> int:
        return self.width * self.height

    @property
    def rgb(self) -> np.ndarray:
        """Pixel colors as a float64 array of shape (n, 3); alpha is dropped."""
        return self.data.reshape(-1, CHANNELS)[:, :3].astype(np.float64)

    def to_image(self) -> np.ndarray:
        """Return an (H, W, 4) uint8 copy for encoders."""
        return self.data.reshape(self.height, self.width, CHANNELS).copy()

    def __len__(self) -> int:
        return self.n_pixels

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PixelBuffer):
            return NotImplemented
        return self.width == other.width and self.height == other.height and np.array_equal(self.data, other.data)

    def __hash__(self) -> int:
        return hash((self.width, self.height, self.data.tobytes()))

    def __repr__(self) -> str:
        return f"PixelBuffer(width={self.width}, height={self.height})"
