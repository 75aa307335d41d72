"""
Linear float image container for PyFastSample.

LinearImage owns a C-contiguous float32 buffer of shape (height, width,
channels). Samples are linear (no gamma); pixel (x, y) channel c lives at flat
index (y * width + x) * channels + c, which is the layout the MAD programs
address.

Author: B.G.
"""

import numpy as np

from .. import constants as cte


class LinearImage:
    """
    Owning row-major float image.

    Args:
        width: Number of columns (>= 1)
        height: Number of rows (>= 1)
        channels: Samples per pixel (>= 1)
        data: Optional initial content, anything reshapeable to
              (height, width, channels). Copied.

    Author: B.G.
    """

    def __init__(self, width, height, channels, data=None):
        width, height, channels = int(width), int(height), int(channels)
        if width < 1 or height < 1:
            raise ValueError(f"Image dimensions must be >= 1, got ({width}, {height})")
        if channels < 1:
            raise ValueError(f"Channel count must be >= 1, got {channels}")

        self._width = width
        self._height = height
        self._channels = channels

        if data is None:
            self._data = np.zeros((height, width, channels), dtype=cte.FLOAT_TYPE_NP)
        else:
            arr = np.asarray(data, dtype=cte.FLOAT_TYPE_NP)
            if arr.size != width * height * channels:
                raise ValueError(
                    f"data has {arr.size} samples, expected {width * height * channels}"
                )
            self._data = np.ascontiguousarray(arr.reshape(height, width, channels)).copy()

    @classmethod
    def from_numpy(cls, array):
        """
        Build an image from a (height, width) or (height, width, channels) array.
        """
        arr = np.asarray(array)
        if arr.ndim == 2:
            h, w = arr.shape
            c = 1
        elif arr.ndim == 3:
            h, w, c = arr.shape
        else:
            raise ValueError("Input numpy array must be 2D or 3D")
        return cls(w, h, c, arr)

    @property
    def width(self):
        return self._width

    @property
    def height(self):
        return self._height

    @property
    def channels(self):
        return self._channels

    @property
    def shape(self):
        return self._data.shape

    @property
    def data(self):
        """View of the samples, shape (height, width, channels)."""
        return self._data

    def flat(self):
        """Flat view of the samples in MAD program index order."""
        return self._data.reshape(-1)

    def to_numpy(self, squeeze=True):
        """
        Copy of the samples. Single-channel images come back 2D unless
        squeeze is False.
        """
        out = self._data.copy()
        if squeeze and self._channels == 1:
            out = out[:, :, 0]
        return out

    def pixel(self, x, y):
        return self._data[y, x].copy()

    def __eq__(self, other):
        if not isinstance(other, LinearImage):
            return NotImplemented
        return self.shape == other.shape and np.array_equal(self._data, other._data)

    def __repr__(self):
        return f"LinearImage(width={self._width}, height={self._height}, channels={self._channels})"


def transpose(image):
    """
    Swap the rows and columns of an image.

    Returns a new image of size (height, width) whose pixel (x, y) is the
    source pixel (y, x). Channels stay contiguous per pixel.
    """
    data = np.ascontiguousarray(np.transpose(image.data, (1, 0, 2)))
    return LinearImage(image.height, image.width, image.channels, data)
