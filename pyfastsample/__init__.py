"""
PyFastSample: GPU-accelerated separable image resampling with Taichi.

Resizes and filters linear float images with a choice of reconstruction
kernels (box, nearest, gaussian, hermite, mitchell, lanczos), a minimum
reduction mode for conservative depth downsampling and a renormalizing mode
for normal maps. Each axis pass compiles the kernel into a multiply-add
program once and replays it on every row in parallel.

Submodules:
- sampler: filter kernels, MAD programs, execution and the resampling driver
- image: LinearImage container, transpose and file I/O
- pool: reusable Taichi field pool
- constants: numeric types and thresholds
- cli: command line tools (pfs-resample, pfs-sample)

Usage:
    import pyfastsample as ps

    ps.init("cpu")
    img = ps.image.load_image("input.png")
    out = ps.resample_image(img, 512, 512, "mitchell")
    ps.image.save_image(out, "output.png")

Author: B.G.
"""

import taichi as ti

from . import constants, image, pool, sampler
from .image import LinearImage
from .sampler import ImageSampler, PreconditionError, Region, resample_image, sample_at

__version__ = "0.0.1"


def init(arch="cpu", **kwargs):
    """
    Initialize Taichi and forget fields pooled under a previous runtime.

    Args:
        arch: 'cpu', 'gpu' or a Taichi arch object
        **kwargs: Forwarded to ti.init
    """
    if isinstance(arch, str):
        archs = {"cpu": ti.cpu, "gpu": ti.gpu}
        if arch not in archs:
            raise ValueError("arch must be 'cpu' or 'gpu'")
        arch = archs[arch]
    ti.init(arch=arch, **kwargs)
    pool.taipool.clear()


__all__ = [
    "__version__",
    "init",
    "constants",
    "image",
    "pool",
    "sampler",
    "LinearImage",
    "ImageSampler",
    "PreconditionError",
    "Region",
    "resample_image",
    "sample_at",
]
