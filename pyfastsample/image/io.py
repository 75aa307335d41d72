"""
Image file I/O for PyFastSample.

Reads and writes LinearImage objects from disk. NumPy `.npy` files are the
lossless path (float samples in, float samples out). Every other extension
goes through Pillow: 8-bit images are mapped to [0, 1], 16-bit grayscale to
[0, 1] over 65535, and writing clips to [0, 1] and quantizes back.

Author: B.G.
"""

import numpy as np
from PIL import Image

from .. import constants as cte
from .linear_image import LinearImage


def _is_npy(path):
    return str(path).lower().endswith(".npy")


def load_image(path):
    """
    Load an image file into a LinearImage.

    Args:
        path: .npy array of shape (h, w) or (h, w, c), or any image Pillow reads

    Returns:
        LinearImage

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the content cannot be interpreted as an image
    """
    if _is_npy(path):
        arr = np.load(path)
        return LinearImage.from_numpy(arr.astype(cte.FLOAT_TYPE_NP))

    with Image.open(path) as img:
        if img.mode in ("I;16", "I;16B", "I;16L", "I"):
            arr = np.asarray(img, dtype=np.float64) / 65535.0
        elif img.mode == "F":
            arr = np.asarray(img, dtype=np.float64)
        else:
            if img.mode not in ("L", "LA", "RGB", "RGBA"):
                img = img.convert("RGBA" if "A" in img.getbands() else "RGB")
            arr = np.asarray(img, dtype=np.float64) / 255.0

    return LinearImage.from_numpy(arr.astype(cte.FLOAT_TYPE_NP))


def save_image(image, path, bits=8):
    """
    Save a LinearImage.

    Args:
        image: LinearImage to write
        path: .npy for raw floats, any Pillow-supported extension otherwise
        bits: 8 or 16. 16-bit output is only available for 1-channel images.

    Raises:
        ValueError: For unsupported channel counts or bit depths
        OSError: If the file cannot be written
    """
    if _is_npy(path):
        np.save(path, image.to_numpy())
        return

    if bits not in (8, 16):
        raise ValueError(f"bits must be 8 or 16, got {bits}")
    if image.channels not in (1, 2, 3, 4):
        raise ValueError(f"Cannot save a {image.channels}-channel image with Pillow")

    arr = np.clip(image.to_numpy(), 0.0, 1.0)
    if bits == 16:
        if image.channels != 1:
            raise ValueError("16-bit output requires a single-channel image")
        img = Image.fromarray((arr * 65535.0 + 0.5).astype(np.uint16))
    else:
        img = Image.fromarray((arr * 255.0 + 0.5).astype(np.uint8))

    img.save(path)
