"""
Image container and file helpers for PyFastSample.

- LinearImage: owning float32 buffer (height, width, channels)
- transpose: swap rows and columns, returning a new image
- load_image / save_image: .npy and Pillow-backed file I/O

Author: B.G.
"""

from .linear_image import LinearImage, transpose
from .io import load_image, save_image

__all__ = ["LinearImage", "transpose", "load_image", "save_image"]
